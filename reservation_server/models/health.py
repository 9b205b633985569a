# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Health check data models."""

from datetime import datetime, timezone
from pydantic import BaseModel, Field


class HealthStatus(BaseModel):
    """Health status response for the analysis server."""

    status: str = Field(
        ...,
        description="Overall health status: 'healthy' or 'degraded'",
        examples=["healthy"]
    )
    version: str = Field(
        ...,
        description="Version of the analysis server",
        examples=["0.1.0"]
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp when health check was performed"
    )
    cloud_providers: list[str] = Field(
        default=["azure"],
        description="List of supported cloud providers"
    )
    subscription_configured: bool = Field(
        ...,
        description="Whether AZURE_SUBSCRIPTION_ID is set"
    )
