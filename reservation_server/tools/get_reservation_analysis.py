# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Entry point for computing a subscription's reservation coverage."""

import logging
from typing import Optional, Union

from ..clients.azure_client import AzureClient, SourceUnavailable
from ..clients.feeds import CommitmentFeed, InventoryFeed
from ..config import ConfigurationError, Settings, settings
from ..models.analysis import AnalysisFailure, ReservationAnalysisResult
from ..services.analysis_service import ReservationAnalysisService
from ..utils.error_sanitization import redact_sensitive_info, sanitize_cause

logger = logging.getLogger(__name__)

CONFIGURATION_ERROR = "configuration_error"
SOURCE_UNAVAILABLE = "source_unavailable"


async def get_reservation_analysis(
    app_settings: Optional[Settings] = None,
    subscription_id: Optional[str] = None,
    azure_client: Optional[AzureClient] = None,
) -> Union[ReservationAnalysisResult, AnalysisFailure]:
    """
    Reconcile a subscription's running VMs against its reservations.

    Configuration is checked before any Azure client is created. Every
    failure is returned as an AnalysisFailure; a partial row list is never
    returned.

    Args:
        app_settings: Settings to use; defaults to the global settings
        subscription_id: Overrides AZURE_SUBSCRIPTION_ID when given
        azure_client: Pre-built client; when omitted one is created from
                      settings and closed afterwards. It must be bound to
                      the analysed subscription.

    Returns:
        ReservationAnalysisResult on success, AnalysisFailure otherwise

    Example:
        >>> result = await get_reservation_analysis()
        >>> for row in result.rows:
        ...     print(row.size_class, row.location, row.status)
    """
    try:
        app_settings = app_settings or settings()
        if subscription_id is not None:
            app_settings = app_settings.model_copy(
                update={"azure_subscription_id": subscription_id}
            )
        subscription = app_settings.require_subscription_id()
        owns_client = azure_client is None
        if owns_client:
            azure_client = AzureClient.from_settings(app_settings, subscription)
        elif azure_client.subscription_id.lower() != subscription.lower():
            raise ConfigurationError(
                f"Subscription {subscription} does not match the client's "
                f"subscription {azure_client.subscription_id}."
            )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        message = redact_sensitive_info(str(e))
        return AnalysisFailure(
            error=CONFIGURATION_ERROR,
            message=message,
            details={"cause": message, "source": "configuration"},
        )

    service = ReservationAnalysisService(
        inventory_feed=InventoryFeed(azure_client),
        commitment_feed=CommitmentFeed(
            azure_client,
            subscription_id=subscription,
            reserved_resource_types=app_settings.reserved_resource_types,
        ),
        feed_timeout_seconds=app_settings.feed_timeout_seconds,
        sort_report=app_settings.sort_report,
    )

    try:
        result = await service.run(subscription)
    except SourceUnavailable as e:
        logger.error(f"Reservation analysis aborted, {e.source} feed unavailable: {e}")
        return AnalysisFailure(
            error=SOURCE_UNAVAILABLE,
            message=f"Error processing request: the {e.source} source could not be read.",
            details={"cause": sanitize_cause(e), "source": e.source},
        )
    finally:
        if owns_client:
            await azure_client.close()

    logger.info(
        f"Reservation analysis for {subscription} produced {len(result.rows)} rows"
    )
    return result
