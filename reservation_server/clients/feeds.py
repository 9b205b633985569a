# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Inventory and reservation feeds.

Turns raw Azure SDK objects into ResourceRecord and CommitmentRecord
instances. The reservation feed flattens the order -> reservation
hierarchy and applies the eligibility filter, so downstream code only ever
sees reservations that count against the analysed subscription.
"""

import logging
from collections import Counter
from typing import Any, AsyncIterator, Iterable, Optional

from ..models.enums import SUCCEEDED_STATE, ScopeKind
from ..models.records import CommitmentRecord, ResourceRecord
from .azure_client import (
    COMMITMENT_SOURCE,
    INVENTORY_SOURCE,
    AzureClient,
    SourceUnavailable,
)

logger = logging.getLogger(__name__)

EXCLUDED_BY_STATE = "excluded_by_state"
EXCLUDED_BY_SCOPE = "excluded_by_scope"
EXCLUDED_BY_RESOURCE_TYPE = "excluded_by_resource_type"


def _text(value: Any) -> Optional[str]:
    """Return an SDK enum or string as plain text."""
    if value is None:
        return None
    return str(getattr(value, "value", value))


def _count(value: Any) -> Optional[int]:
    """Return an integer quantity, or None when the value is not one."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def resource_record_from_vm(vm: Any) -> ResourceRecord:
    """Build a ResourceRecord from an SDK VirtualMachine."""
    hardware_profile = getattr(vm, "hardware_profile", None)
    return ResourceRecord(
        resource_id=_text(getattr(vm, "id", None)),
        name=_text(getattr(vm, "name", None)),
        size_class=_text(getattr(hardware_profile, "vm_size", None)),
        location=_text(getattr(vm, "location", None)),
    )


def commitment_record_from_reservation(reservation: Any, order_id: str) -> CommitmentRecord:
    """
    Build a CommitmentRecord from an SDK ReservationResponse.

    The bucket size comes from the purchased SKU name, which uses the same
    vocabulary as a VM's hardwareProfile.vmSize. reserved_resource_type is
    kept only for filtering.
    """
    properties = getattr(reservation, "properties", None)
    sku = getattr(reservation, "sku", None)

    targets = [str(scope) for scope in getattr(properties, "applied_scopes", None) or []]
    scope_properties = getattr(properties, "applied_scope_properties", None)
    if scope_properties is not None:
        for attribute in ("subscription_id", "resource_group_id"):
            scope = getattr(scope_properties, attribute, None)
            if scope and str(scope) not in targets:
                targets.append(str(scope))

    return CommitmentRecord(
        reservation_id=_text(getattr(reservation, "id", None)),
        order_id=order_id,
        display_name=_text(getattr(properties, "display_name", None)),
        size_class=_text(getattr(sku, "name", None)),
        location=_text(getattr(reservation, "location", None)),
        quantity=_count(getattr(properties, "quantity", None)),
        scope_kind=_text(getattr(properties, "applied_scope_type", None)),
        target_scopes=targets,
        state=_text(getattr(properties, "provisioning_state", None)),
        reserved_resource_type=_text(getattr(properties, "reserved_resource_type", None)),
    )


def order_id_of(order: Any) -> str:
    """
    Extract the reservation order id.

    Prefers the order's name; falls back to the last segment of an id of
    the form /providers/Microsoft.Capacity/reservationOrders/{orderId}.
    """
    name = getattr(order, "name", None)
    if name:
        return name
    parts = (getattr(order, "id", None) or "").split("/")
    if len(parts) > 4 and parts[4]:
        return parts[4]
    raise SourceUnavailable(
        f"Reservation order without an identifier: {order!r}", source=COMMITMENT_SOURCE
    )


def _subscription_of(scope: str) -> str:
    """Return the subscription id named by a scope string or bare id."""
    parts = [part for part in scope.strip().split("/") if part]
    for index, part in enumerate(parts[:-1]):
        if part.lower() == "subscriptions":
            return parts[index + 1].lower()
    if len(parts) == 1:
        return parts[0].lower()
    return ""


def applies_to_subscription(target_scopes: Iterable[str], subscription_id: str) -> bool:
    """Whether any explicit target scope lies within the subscription."""
    wanted = subscription_id.strip().lower()
    return any(_subscription_of(scope) == wanted for scope in target_scopes if scope)


def exclusion_reason(
    record: CommitmentRecord,
    subscription_id: str,
    reserved_resource_types: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Decide whether a reservation counts for the subscription.

    Args:
        record: Reservation to check
        subscription_id: Subscription under analysis
        reserved_resource_types: Accepted resource types; None accepts all

    Returns:
        None when eligible, otherwise the diagnostics counter name
    """
    if (record.state or "").lower() != SUCCEEDED_STATE.lower():
        return EXCLUDED_BY_STATE

    single = (record.scope_kind or "").lower() == ScopeKind.SINGLE.value.lower()
    if not single and not applies_to_subscription(record.target_scopes, subscription_id):
        return EXCLUDED_BY_SCOPE

    if reserved_resource_types is not None and record.reserved_resource_type:
        accepted = {value.lower() for value in reserved_resource_types}
        if record.reserved_resource_type.lower() not in accepted:
            return EXCLUDED_BY_RESOURCE_TYPE

    return None


def is_eligible(
    record: CommitmentRecord,
    subscription_id: str,
    reserved_resource_types: Optional[Iterable[str]] = None,
) -> bool:
    """Whether a reservation counts toward the subscription's coverage."""
    return exclusion_reason(record, subscription_id, reserved_resource_types) is None


class InventoryFeed:
    """Running virtual machines of the analysed subscription."""

    source = INVENTORY_SOURCE

    def __init__(self, azure_client: AzureClient):
        self.azure_client = azure_client

    async def records(self) -> AsyncIterator[ResourceRecord]:
        async for vm in self.azure_client.list_virtual_machines():
            yield resource_record_from_vm(vm)


class CommitmentFeed:
    """
    Eligible reservations for the analysed subscription.

    Walks every reservation order, then every reservation in each order,
    and yields only the records that pass exclusion_reason(). Counts of
    excluded records are kept in ``exclusions`` for diagnostics.
    """

    source = COMMITMENT_SOURCE

    def __init__(
        self,
        azure_client: AzureClient,
        subscription_id: str,
        reserved_resource_types: Optional[Iterable[str]] = ("VirtualMachines",),
    ):
        self.azure_client = azure_client
        self.subscription_id = subscription_id
        self.reserved_resource_types = (
            list(reserved_resource_types) if reserved_resource_types is not None else None
        )
        self.exclusions: Counter = Counter()

    async def records(self) -> AsyncIterator[CommitmentRecord]:
        self.exclusions = Counter()
        orders = 0
        async for order in self.azure_client.list_reservation_orders():
            orders += 1
            order_id = order_id_of(order)
            async for reservation in self.azure_client.list_reservations(order_id):
                record = commitment_record_from_reservation(reservation, order_id)
                reason = exclusion_reason(
                    record, self.subscription_id, self.reserved_resource_types
                )
                if reason:
                    self.exclusions[reason] += 1
                    logger.debug(
                        f"Skipping reservation {record.reservation_id}: {reason}"
                    )
                    continue
                yield record

        logger.info(
            f"Read {orders} reservation orders; exclusions: {dict(self.exclusions)}"
        )
