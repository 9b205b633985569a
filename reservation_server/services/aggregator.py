# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Folding of VM and reservation records into per-bucket totals.

Aggregation is a plain sum per key, so the result does not depend on the
order in which pages or records arrive. Records that cannot be keyed are
counted and skipped rather than aborting the fold.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Callable, Iterable, Optional

from ..models.analysis import FeedDiagnostics
from ..models.records import CommitmentRecord, GroupKey, ResourceRecord
from .key_normalizer import NormalizationError, key_of

logger = logging.getLogger(__name__)


def resource_quantity(record: ResourceRecord) -> int:
    """Each running VM counts once."""
    return 1


def commitment_quantity(record: CommitmentRecord) -> Optional[int]:
    """A reservation counts for its purchased quantity."""
    return record.quantity


@dataclass
class Aggregation:
    """Per-bucket totals for one feed plus bookkeeping counts."""

    totals: dict[GroupKey, int] = field(default_factory=dict)
    records_seen: int = 0
    records_aggregated: int = 0
    normalization_failures: int = 0

    def add(self, record: Any, quantity: Any) -> None:
        """Fold one record into the totals."""
        self.records_seen += 1
        try:
            key = key_of(record)
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise NormalizationError(
                    f"invalid quantity {quantity!r} for {key.size_class} in {key.location}"
                )
        except NormalizationError as e:
            self.normalization_failures += 1
            logger.warning(f"Excluding record from aggregation: {e}")
            return

        self.totals[key] = self.totals.get(key, 0) + quantity
        self.records_aggregated += 1

    def diagnostics(self, exclusions: Optional[dict[str, int]] = None) -> FeedDiagnostics:
        """Summarise this fold, merged with any feed-level exclusion counts."""
        return FeedDiagnostics(
            records_seen=self.records_seen,
            records_aggregated=self.records_aggregated,
            normalization_failures=self.normalization_failures,
            **(exclusions or {}),
        )


def aggregate(weighted_records: Iterable[tuple[Any, Any]]) -> Aggregation:
    """
    Sum quantities per bucket.

    Args:
        weighted_records: (record, quantity) pairs

    Returns:
        Aggregation with totals keyed by GroupKey
    """
    result = Aggregation()
    for record, quantity in weighted_records:
        result.add(record, quantity)
    return result


async def aggregate_stream(
    records: AsyncIterable[Any],
    quantity_of: Callable[[Any], Any],
) -> Aggregation:
    """
    Sum quantities per bucket over an async record stream.

    Records are folded as they arrive; the result is only returned once the
    stream is exhausted, so a failure mid-stream never yields a partial
    Aggregation.
    """
    result = Aggregation()
    async for record in records:
        result.add(record, quantity_of(record))
    return result
