"""Unit tests for the get_reservation_analysis entry point."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from azure.core.exceptions import ClientAuthenticationError

from reservation_server.config import Settings
from reservation_server.models.analysis import AnalysisFailure, ReservationAnalysisResult
from reservation_server.models.enums import ReservationStatus
from reservation_server.tools.get_reservation_analysis import get_reservation_analysis


@pytest.mark.asyncio
async def test_missing_subscription_fails_before_any_client_is_built():
    app_settings = Settings(_env_file=None, AZURE_SUBSCRIPTION_ID="")

    with patch(
        "reservation_server.tools.get_reservation_analysis.AzureClient"
    ) as client_cls:
        result = await get_reservation_analysis(app_settings)

    client_cls.from_settings.assert_not_called()
    assert isinstance(result, AnalysisFailure)
    assert result.error == "configuration_error"
    assert "AZURE_SUBSCRIPTION_ID" in result.message
    assert result.details["source"] == "configuration"


@pytest.mark.asyncio
async def test_success_returns_rows(
    app_settings, build_azure_client, make_vm, make_reservation, subscription_id
):
    client = build_azure_client(
        vms=[make_vm() for _ in range(10)],
        orders={"order-1": [make_reservation(quantity=9)]},
    )

    result = await get_reservation_analysis(app_settings, azure_client=client)

    assert isinstance(result, ReservationAnalysisResult)
    assert result.subscription_id == subscription_id
    assert len(result.rows) == 1
    row = result.rows[0]
    assert (row.actual, row.reserved, row.gap, row.coverage_percent) == (10, 9, 1, 90)
    assert row.status == ReservationStatus.UNDER_RESERVED


@pytest.mark.asyncio
async def test_subscription_argument_overrides_settings(
    app_settings, build_azure_client, make_reservation, other_subscription_id
):
    client = build_azure_client(
        orders={
            "order-1": [
                make_reservation(
                    scope_type="Shared",
                    applied_scopes=[f"/subscriptions/{other_subscription_id}"],
                )
            ]
        },
        subscription_id=other_subscription_id,
    )

    result = await get_reservation_analysis(
        app_settings, subscription_id=other_subscription_id, azure_client=client
    )

    assert result.subscription_id == other_subscription_id
    assert result.rows[0].reserved == 1


@pytest.mark.asyncio
async def test_subscription_argument_must_match_injected_client(
    app_settings, build_azure_client, other_subscription_id
):
    client = build_azure_client()
    client.list_virtual_machines = MagicMock(side_effect=AssertionError("feed was read"))

    result = await get_reservation_analysis(
        app_settings, subscription_id=other_subscription_id, azure_client=client
    )

    assert isinstance(result, AnalysisFailure)
    assert result.error == "configuration_error"
    assert other_subscription_id in result.message
    client.list_virtual_machines.assert_not_called()


@pytest.mark.asyncio
async def test_unparseable_settings_become_configuration_error(monkeypatch, subscription_id):
    monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", subscription_id)
    monkeypatch.setenv("FEED_TIMEOUT_SECONDS", "two minutes")
    monkeypatch.setattr("reservation_server.config._settings", None)

    with patch(
        "reservation_server.tools.get_reservation_analysis.AzureClient"
    ) as client_cls:
        result = await get_reservation_analysis()

    client_cls.from_settings.assert_not_called()
    assert isinstance(result, AnalysisFailure)
    assert result.error == "configuration_error"
    assert "FEED_TIMEOUT_SECONDS" in result.message


@pytest.mark.asyncio
async def test_source_failure_returns_structured_error(
    app_settings, build_azure_client, make_vm
):
    client = build_azure_client(
        vms=[make_vm()],
        vm_error=ClientAuthenticationError(
            message="token rejected: Bearer eyJhbGciOiJSUzI1NiJ9.secret"
        ),
    )

    result = await get_reservation_analysis(app_settings, azure_client=client)

    assert isinstance(result, AnalysisFailure)
    assert result.error == "source_unavailable"
    assert result.details["source"] == "inventory"
    assert result.details["cause"].startswith("ClientAuthenticationError")
    assert "eyJhbGciOiJSUzI1NiJ9" not in result.details["cause"]
    assert not hasattr(result, "rows")


@pytest.mark.asyncio
async def test_owned_client_is_closed(app_settings):
    client = MagicMock()
    client.close = AsyncMock()
    client.list_virtual_machines.side_effect = RuntimeError("unexpected")
    client.list_reservation_orders.side_effect = RuntimeError("unexpected")

    with patch(
        "reservation_server.tools.get_reservation_analysis.AzureClient.from_settings",
        return_value=client,
    ):
        with pytest.raises(RuntimeError):
            await get_reservation_analysis(app_settings)

    client.close.assert_awaited_once()
