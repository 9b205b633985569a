# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Data models for reservation coverage analysis."""

from datetime import datetime, UTC
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ReservationStatus


class AnalysisRow(BaseModel):
    """
    Coverage of one (vmSize, location) bucket.

    Serialised with the dashboard's field names:
    vmSize, location, actual, reserved, gap, coverage, status.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "vmSize": "Standard_D2s_v3",
                "location": "eastus",
                "actual": 10,
                "reserved": 9,
                "gap": 1,
                "coverage": 90,
                "status": "Under-reserved",
            }
        },
    )

    size_class: str = Field(..., alias="vmSize", description="VM size")
    location: str = Field(..., description="Azure region")
    actual: int = Field(..., ge=0, description="Running VMs in the bucket")
    reserved: int = Field(..., ge=0, description="Eligible reserved quantity")
    gap: int = Field(..., description="actual - reserved; negative means excess")
    coverage_percent: int = Field(
        ..., alias="coverage", ge=0, description="reserved / actual as a rounded percentage"
    )
    status: ReservationStatus = Field(..., description="Bucket classification")


class FeedDiagnostics(BaseModel):
    """Counts describing how one feed's records were consumed."""

    records_seen: int = Field(0, ge=0, description="Records read from the feed")
    records_aggregated: int = Field(0, ge=0, description="Records folded into a bucket")
    normalization_failures: int = Field(
        0, ge=0, description="Records excluded because no bucket key could be derived"
    )
    excluded_by_state: int = Field(
        0, ge=0, description="Reservations not in the Succeeded state"
    )
    excluded_by_scope: int = Field(
        0, ge=0, description="Reservations not applied to the analysed subscription"
    )
    excluded_by_resource_type: int = Field(
        0, ge=0, description="Reservations for non-VM resource types"
    )


class ReservationAnalysisResult(BaseModel):
    """Successful outcome of one reconciliation pass."""

    subscription_id: str = Field(..., description="Analysed subscription")
    rows: list[AnalysisRow] = Field(
        default_factory=list, description="One row per bucket"
    )
    inventory: FeedDiagnostics = Field(
        default_factory=FeedDiagnostics, description="VM feed diagnostics"
    )
    commitments: FeedDiagnostics = Field(
        default_factory=FeedDiagnostics, description="Reservation feed diagnostics"
    )
    analysis_timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When this analysis was performed"
    )


class AnalysisFailure(BaseModel):
    """Structured failure returned instead of a partial report."""

    error: str = Field(
        ..., description="Machine-readable code (configuration_error, source_unavailable)"
    )
    message: str = Field(..., description="Human-readable summary")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Cause and originating source"
    )
