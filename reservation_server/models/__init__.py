"""Data models for the Reservation Coverage Analyzer."""

from .enums import ScopeKind, ReservationStatus, SUCCEEDED_STATE
from .records import GroupKey, ResourceRecord, CommitmentRecord
from .analysis import (
    AnalysisRow,
    AnalysisFailure,
    FeedDiagnostics,
    ReservationAnalysisResult,
)
from .health import HealthStatus

__all__ = [
    "ScopeKind",
    "ReservationStatus",
    "SUCCEEDED_STATE",
    "GroupKey",
    "ResourceRecord",
    "CommitmentRecord",
    "AnalysisRow",
    "AnalysisFailure",
    "FeedDiagnostics",
    "ReservationAnalysisResult",
    "HealthStatus",
]
