# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Azure client wrapper for the compute and reservation APIs."""

import logging
from typing import Any, AsyncIterator, Callable, Optional

from azure.core.exceptions import AzureError
from azure.identity.aio import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.compute.aio import ComputeManagementClient
from azure.mgmt.reservations.aio import AzureReservationAPI

from ..config import ConfigurationError, Settings

logger = logging.getLogger(__name__)

INVENTORY_SOURCE = "inventory"
COMMITMENT_SOURCE = "commitments"


class SourceUnavailable(Exception):
    """Raised when an inventory source cannot be read to completion."""

    def __init__(self, message: str, source: str):
        super().__init__(message)
        self.source = source


class AzureClient:
    """
    Wrapper around the async Azure management clients.

    Every listing is exposed as an async iterator that walks all pages of
    the underlying pager. SDK and transport failures surface as
    SourceUnavailable tagged with the feed they belong to. Throttling and
    transient network errors are retried by the azure-core retry policy
    before they reach this layer.
    """

    def __init__(
        self,
        subscription_id: str,
        credential: Any,
        max_retries: int = 3,
        compute_client: Optional[Any] = None,
        reservation_client: Optional[Any] = None,
    ):
        """
        Initialize Azure clients.

        Args:
            subscription_id: Subscription whose VMs are listed
            credential: Async azure-identity credential
            max_retries: Retry budget for the SDK pipeline
            compute_client: Pre-built compute client (tests)
            reservation_client: Pre-built reservation client (tests)
        """
        self.subscription_id = subscription_id
        self._credential = credential
        self.compute = compute_client or ComputeManagementClient(
            credential=credential,
            subscription_id=subscription_id,
            retry_total=max_retries,
        )
        # Reservation orders are tenant-level, no subscription needed
        self.reservations = reservation_client or AzureReservationAPI(
            credential=credential,
            retry_total=max_retries,
        )

    @classmethod
    def from_settings(cls, app_settings: Settings, subscription_id: str) -> "AzureClient":
        """
        Build a client from application settings.

        Uses ClientSecretCredential when a full service principal is
        configured, otherwise DefaultAzureCredential (managed identity,
        Azure CLI login, environment variables).

        Raises:
            ConfigurationError: If the service principal settings are rejected
        """
        try:
            if app_settings.uses_client_secret:
                credential = ClientSecretCredential(
                    tenant_id=app_settings.azure_tenant_id,
                    client_id=app_settings.azure_client_id,
                    client_secret=app_settings.azure_client_secret,
                )
                logger.info("Using service principal credential for Azure")
            else:
                credential = DefaultAzureCredential()
                logger.info("Using DefaultAzureCredential for Azure")
        except ValueError as e:
            raise ConfigurationError(f"Invalid Azure credential settings: {e}") from e

        return cls(
            subscription_id=subscription_id,
            credential=credential,
            max_retries=app_settings.azure_max_retries,
        )

    async def _iterate(
        self,
        source: str,
        description: str,
        make_pager: Callable[[], Any],
    ) -> AsyncIterator[Any]:
        """
        Yield every item of an SDK pager, wrapping failures.

        Args:
            source: Feed name reported on failure
            description: What is being listed, for messages
            make_pager: Zero-argument callable returning an async pager
        """
        try:
            async for item in make_pager():
                yield item
        except AzureError as e:
            logger.error(f"Azure API error while listing {description}: {e}")
            raise SourceUnavailable(
                f"Azure API error while listing {description}: {e}", source=source
            ) from e
        except Exception as e:
            logger.error(f"Failed to list {description}: {e}")
            raise SourceUnavailable(
                f"Failed to list {description}: {e}", source=source
            ) from e

    def list_virtual_machines(self) -> AsyncIterator[Any]:
        """Iterate every virtual machine in the subscription."""
        return self._iterate(
            INVENTORY_SOURCE,
            "virtual machines",
            lambda: self.compute.virtual_machines.list_all(),
        )

    def list_reservation_orders(self) -> AsyncIterator[Any]:
        """Iterate every reservation order visible to the credential."""
        return self._iterate(
            COMMITMENT_SOURCE,
            "reservation orders",
            lambda: self.reservations.reservation_order.list(),
        )

    def list_reservations(self, order_id: str) -> AsyncIterator[Any]:
        """Iterate the reservations contained in one order."""
        return self._iterate(
            COMMITMENT_SOURCE,
            f"reservations of order {order_id}",
            lambda: self.reservations.reservation.list(reservation_order_id=order_id),
        )

    async def close(self) -> None:
        """Close SDK clients and the credential."""
        await self.compute.close()
        await self.reservations.close()
        if self._credential is not None and hasattr(self._credential, "close"):
            await self._credential.close()

    async def __aenter__(self) -> "AzureClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
