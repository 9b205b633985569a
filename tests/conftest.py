"""Pytest configuration and shared fixtures."""

from types import SimpleNamespace

import pytest

from reservation_server.clients.azure_client import AzureClient
from reservation_server.config import Settings


SUBSCRIPTION_ID = "11111111-2222-3333-4444-555555555555"
OTHER_SUBSCRIPTION_ID = "99999999-8888-7777-6666-555555555555"


class AsyncIter:
    """Minimal stand-in for an azure-core AsyncItemPaged."""

    def __init__(self, items, error=None):
        self.items = list(items)
        self.error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.items:
            return self.items.pop(0)
        if self.error is not None:
            error, self.error = self.error, None
            raise error
        raise StopAsyncIteration


@pytest.fixture
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


# =============================================================================
# Environment and Configuration Fixtures
# =============================================================================

@pytest.fixture
def test_env(monkeypatch):
    """Set up test environment variables."""
    test_vars = {
        "AZURE_SUBSCRIPTION_ID": SUBSCRIPTION_ID,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
    }
    for key, value in test_vars.items():
        monkeypatch.setenv(key, value)
    return test_vars


@pytest.fixture
def app_settings():
    """Settings pointing at the test subscription, ignoring any .env file."""
    return Settings(
        _env_file=None,
        AZURE_SUBSCRIPTION_ID=SUBSCRIPTION_ID,
        FEED_TIMEOUT_SECONDS=5,
    )


# =============================================================================
# Azure SDK Fakes
# =============================================================================

@pytest.fixture
def make_vm():
    """Factory for SDK-shaped VirtualMachine objects."""
    counter = {"n": 0}

    def _make(vm_size="Standard_D2s_v3", location="eastus", name=None):
        counter["n"] += 1
        vm_name = name or f"vm-{counter['n']}"
        return SimpleNamespace(
            id=f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg/providers/"
               f"Microsoft.Compute/virtualMachines/{vm_name}",
            name=vm_name,
            location=location,
            hardware_profile=SimpleNamespace(vm_size=vm_size),
        )

    return _make


@pytest.fixture
def make_reservation():
    """Factory for SDK-shaped ReservationResponse objects."""
    counter = {"n": 0}

    def _make(
        sku="Standard_D2s_v3",
        location="eastus",
        quantity=1,
        scope_type="Single",
        applied_scopes=None,
        state="Succeeded",
        resource_type="VirtualMachines",
        scope_properties=None,
    ):
        counter["n"] += 1
        if applied_scopes is None and scope_type == "Single":
            applied_scopes = [f"/subscriptions/{SUBSCRIPTION_ID}"]
        return SimpleNamespace(
            id=f"/providers/Microsoft.Capacity/reservationOrders/order/reservations/r-{counter['n']}",
            location=location,
            sku=SimpleNamespace(name=sku),
            properties=SimpleNamespace(
                display_name=f"reservation-{counter['n']}",
                quantity=quantity,
                applied_scope_type=scope_type,
                applied_scopes=applied_scopes,
                applied_scope_properties=scope_properties,
                provisioning_state=state,
                reserved_resource_type=resource_type,
            ),
        )

    return _make


@pytest.fixture
def build_azure_client():
    """
    Factory for an AzureClient backed by fake SDK clients.

    Args (of the returned callable):
        vms: VirtualMachine objects returned by list_all()
        orders: mapping of order id -> reservations in that order
        vm_error: exception raised after the last VM
        order_error: exception raised after the last order
        subscription_id: subscription the client is bound to
    """

    def _build(vms=(), orders=None, vm_error=None, order_error=None,
               subscription_id=SUBSCRIPTION_ID):
        orders = orders or {}
        compute = SimpleNamespace(
            virtual_machines=SimpleNamespace(
                list_all=lambda: AsyncIter(vms, error=vm_error)
            )
        )
        order_objects = [
            SimpleNamespace(
                id=f"/providers/Microsoft.Capacity/reservationOrders/{order_id}",
                name=order_id,
            )
            for order_id in orders
        ]
        reservations = SimpleNamespace(
            reservation_order=SimpleNamespace(
                list=lambda: AsyncIter(order_objects, error=order_error)
            ),
            reservation=SimpleNamespace(
                list=lambda reservation_order_id: AsyncIter(orders[reservation_order_id])
            ),
        )
        return AzureClient(
            subscription_id=subscription_id,
            credential=None,
            compute_client=compute,
            reservation_client=reservations,
        )

    return _build


# =============================================================================
# Pytest Hooks
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)


@pytest.fixture
def subscription_id():
    """Subscription under analysis in every test."""
    return SUBSCRIPTION_ID


@pytest.fixture
def other_subscription_id():
    """A subscription the analysis must not attribute reservations to."""
    return OTHER_SUBSCRIPTION_ID
