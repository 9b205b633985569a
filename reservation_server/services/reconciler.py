# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Reconciliation of VM counts against reserved quantities."""

import logging
from typing import Mapping

from ..models.analysis import AnalysisRow
from ..models.enums import ReservationStatus
from ..models.records import GroupKey

logger = logging.getLogger(__name__)


def coverage_percent(actual: int, reserved: int) -> int:
    """
    Reserved quantity as a percentage of running VMs.

    Rounds half up, computed on integers so 12.5% becomes 13 exactly.
    With no running VMs the coverage is 100 if anything is reserved, else 0.
    """
    if actual > 0:
        return (200 * reserved + actual) // (2 * actual)
    return 100 if reserved > 0 else 0


def classify(actual: int, reserved: int, gap: int) -> ReservationStatus:
    """
    Classify a bucket from its counts.

    Rules are applied in order and the first match wins:
    1. nothing running but something reserved -> Over-reserved
    2. gap == 0 with VMs running -> Perfect Match
    3. gap > 0 -> Under-reserved
    4. gap < 0 -> Over-reserved
    5. nothing running, nothing reserved -> Needs Investigation
    """
    if actual == 0 and reserved > 0:
        return ReservationStatus.OVER_RESERVED
    if gap == 0 and actual > 0:
        return ReservationStatus.PERFECT_MATCH
    if gap > 0:
        return ReservationStatus.UNDER_RESERVED
    if gap < 0:
        return ReservationStatus.OVER_RESERVED
    return ReservationStatus.NEEDS_INVESTIGATION


def analyse_bucket(key: GroupKey, actual: int, reserved: int) -> AnalysisRow:
    """Build the analysis row for one bucket."""
    gap = actual - reserved
    return AnalysisRow(
        size_class=key[0],
        location=key[1],
        actual=actual,
        reserved=reserved,
        gap=gap,
        coverage_percent=coverage_percent(actual, reserved),
        status=classify(actual, reserved, gap),
    )


def reconcile(
    actual_map: Mapping[GroupKey, int],
    reserved_map: Mapping[GroupKey, int],
) -> list[AnalysisRow]:
    """
    Merge VM and reservation totals into one row per bucket.

    Every key of either mapping appears exactly once. Keys of actual_map
    come first in their iteration order, followed by reservation-only keys.
    A key whose actual and reserved counts are both zero has no source
    contribution and is not materialised.
    """
    keys = list(dict.fromkeys([*actual_map, *reserved_map]))

    rows = []
    for key in keys:
        actual = actual_map.get(key, 0)
        reserved = reserved_map.get(key, 0)
        if actual == 0 and reserved == 0:
            logger.debug(f"Skipping empty bucket {key}")
            continue
        rows.append(analyse_bucket(key, actual, reserved))

    return rows
