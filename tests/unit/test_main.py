"""Unit tests for the HTTP endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from reservation_server import __version__
from reservation_server.config import Settings
from reservation_server.main import app
from reservation_server.models.analysis import AnalysisFailure, ReservationAnalysisResult
from reservation_server.models.records import GroupKey
from reservation_server.services.reconciler import analyse_bucket


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def success(subscription_id):
    return ReservationAnalysisResult(
        subscription_id=subscription_id,
        rows=[analyse_bucket(GroupKey("Standard_D2s_v3", "eastus"), 10, 11)],
    )


def patch_analysis(result):
    return patch(
        "reservation_server.main.get_reservation_analysis",
        new=AsyncMock(return_value=result),
    )


class TestHealthCheckEndpoint:
    """Tests for the /health endpoint."""

    def test_healthy_when_subscription_configured(self, client, subscription_id):
        configured = Settings(_env_file=None, AZURE_SUBSCRIPTION_ID=subscription_id)
        with patch("reservation_server.main.settings", return_value=configured):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__
        assert data["cloud_providers"] == ["azure"]
        assert data["subscription_configured"] is True

    def test_degraded_without_subscription(self, client):
        unconfigured = Settings(_env_file=None, AZURE_SUBSCRIPTION_ID="")
        with patch("reservation_server.main.settings", return_value=unconfigured):
            data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["subscription_configured"] is False

    def test_degraded_with_unparseable_settings(self, client, monkeypatch):
        monkeypatch.setenv("FEED_TIMEOUT_SECONDS", "two minutes")
        monkeypatch.setattr("reservation_server.config._settings", None)

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"


class TestReservationAnalysisEndpoints:
    """Tests for the analysis endpoints."""

    def test_bare_array_response(self, client, success):
        with patch_analysis(success):
            response = client.get("/api/get-reservation-analysis")

        assert response.status_code == 200
        assert response.json() == [
            {
                "vmSize": "Standard_D2s_v3",
                "location": "eastus",
                "actual": 10,
                "reserved": 11,
                "gap": -1,
                "coverage": 110,
                "status": "Over-reserved",
            }
        ]

    def test_bare_array_failure(self, client):
        failure = AnalysisFailure(
            error="source_unavailable",
            message="Error processing request: the inventory source could not be read.",
            details={"cause": "HttpResponseError: throttled", "source": "inventory"},
        )
        with patch_analysis(failure):
            response = client.get("/api/get-reservation-analysis")

        assert response.status_code == 500
        body = response.json()
        assert body["message"].startswith("Error processing request")
        assert body["details"]["source"] == "inventory"

    def test_v1_includes_diagnostics(self, client, success):
        with patch_analysis(success):
            response = client.get("/api/v1/reservation-analysis")

        assert response.status_code == 200
        body = response.json()
        assert body["rows"][0]["vmSize"] == "Standard_D2s_v3"
        assert body["commitments"]["excluded_by_scope"] == 0
        assert "analysis_timestamp" in body

    @pytest.mark.parametrize(
        "error,status_code",
        [("configuration_error", 500), ("source_unavailable", 502)],
    )
    def test_v1_failure_status(self, client, error, status_code):
        failure = AnalysisFailure(error=error, message="failed", details={})
        with patch_analysis(failure):
            response = client.get("/api/v1/reservation-analysis")

        assert response.status_code == status_code
        assert response.json()["error"] == error

    def test_v1_unparseable_settings_are_configuration_error(
        self, client, monkeypatch, subscription_id
    ):
        monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", subscription_id)
        monkeypatch.setenv("FEED_TIMEOUT_SECONDS", "two minutes")
        monkeypatch.setattr("reservation_server.config._settings", None)

        response = client.get("/api/v1/reservation-analysis")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "configuration_error"
        assert body["details"]["source"] == "configuration"


def test_root_lists_endpoints(client):
    data = client.get("/").json()
    assert data["version"] == __version__
    assert data["endpoints"]["analysis"] == "/api/get-reservation-analysis"
