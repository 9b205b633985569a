# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Bucket key derivation for VMs and reservations."""

from typing import Any, Optional, Union

from ..models.records import CommitmentRecord, GroupKey, ResourceRecord


class NormalizationError(Exception):
    """Raised when a record cannot be mapped to a bucket key."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


def normalize_size_class(value: Any) -> str:
    """Strip surrounding whitespace from a VM size; empty when unusable."""
    if not isinstance(value, str):
        return ""
    return value.strip()


def normalize_location(value: Any) -> str:
    """
    Canonical region name.

    The compute API reports "eastus" while some reservation payloads use
    the display form "East US"; both map to "eastus".
    """
    if not isinstance(value, str):
        return ""
    return "".join(value.split()).lower()


def _record_id(record: Union[ResourceRecord, CommitmentRecord]) -> Optional[str]:
    if isinstance(record, CommitmentRecord):
        return record.reservation_id
    return record.resource_id


def key_of(record: Union[ResourceRecord, CommitmentRecord]) -> GroupKey:
    """
    Derive the (size_class, location) bucket of a record.

    For reservations the size is the purchased SKU name, never the
    reserved resource type, so both sides share one vocabulary.

    Raises:
        NormalizationError: If the size or location is missing or blank
    """
    record_id = _record_id(record)
    kind = "reservation" if isinstance(record, CommitmentRecord) else "virtual machine"

    size_class = normalize_size_class(record.size_class)
    if not size_class:
        raise NormalizationError(
            f"{kind} {record_id or '<unknown>'} has no size class", record_id=record_id
        )

    location = normalize_location(record.location)
    if not location:
        raise NormalizationError(
            f"{kind} {record_id or '<unknown>'} has no location", record_id=record_id
        )

    return GroupKey(size_class=size_class, location=location)
