# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Reservation coverage analysis service."""

import asyncio
import logging
from typing import Any, Callable

from ..clients.azure_client import SourceUnavailable
from ..models.analysis import ReservationAnalysisResult
from .aggregator import Aggregation, aggregate_stream, commitment_quantity, resource_quantity
from .reconciler import reconcile
from .report_assembler import assemble_report

logger = logging.getLogger(__name__)


class ReservationAnalysisService:
    """
    Runs one reconciliation pass for a subscription.

    Both feeds are drained concurrently into their own Aggregation. The
    reconciler only runs once both are complete; if either feed fails or
    times out the whole pass fails and no rows are produced.
    """

    def __init__(
        self,
        inventory_feed: Any,
        commitment_feed: Any,
        feed_timeout_seconds: float = 120.0,
        sort_report: bool = True,
    ):
        """
        Initialize analysis service.

        Args:
            inventory_feed: Feed yielding ResourceRecord (``records()``)
            commitment_feed: Feed yielding eligible CommitmentRecord
            feed_timeout_seconds: Deadline for draining each feed
            sort_report: Sort rows by location and VM size
        """
        self.inventory_feed = inventory_feed
        self.commitment_feed = commitment_feed
        self.feed_timeout_seconds = feed_timeout_seconds
        self.sort_report = sort_report

    async def run(self, subscription_id: str) -> ReservationAnalysisResult:
        """
        Reconcile running VMs against eligible reservations.

        Args:
            subscription_id: Subscription under analysis

        Returns:
            ReservationAnalysisResult with one row per bucket

        Raises:
            SourceUnavailable: If either feed cannot be drained
        """
        logger.info(f"Starting reservation analysis for subscription {subscription_id}")

        tasks = [
            asyncio.ensure_future(self._drain(self.inventory_feed, resource_quantity)),
            asyncio.ensure_future(self._drain(self.commitment_feed, commitment_quantity)),
        ]
        try:
            inventory, commitments = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let the sibling feed unwind before the caller closes the client
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info(
            f"Aggregated {inventory.records_aggregated} VMs into {len(inventory.totals)} buckets "
            f"and {commitments.records_aggregated} reservations into "
            f"{len(commitments.totals)} buckets"
        )
        excluded = inventory.normalization_failures + commitments.normalization_failures
        if excluded:
            logger.warning(f"{excluded} records could not be assigned to a bucket")

        rows = assemble_report(
            reconcile(inventory.totals, commitments.totals),
            sort=self.sort_report,
        )

        return ReservationAnalysisResult(
            subscription_id=subscription_id,
            rows=rows,
            inventory=inventory.diagnostics(dict(getattr(self.inventory_feed, "exclusions", {}))),
            commitments=commitments.diagnostics(dict(getattr(self.commitment_feed, "exclusions", {}))),
        )

    async def _drain(self, feed: Any, quantity_of: Callable[[Any], Any]) -> Aggregation:
        """Fold a whole feed, converting a timeout into SourceUnavailable."""
        try:
            return await asyncio.wait_for(
                aggregate_stream(feed.records(), quantity_of),
                timeout=self.feed_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Timed out after {self.feed_timeout_seconds}s reading the {feed.source} feed"
            )
            raise SourceUnavailable(
                f"Timed out after {self.feed_timeout_seconds}s reading the {feed.source} feed",
                source=feed.source,
            ) from e
