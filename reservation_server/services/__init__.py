"""Service layer for the Reservation Coverage Analyzer."""

from .key_normalizer import NormalizationError, key_of
from .aggregator import Aggregation, aggregate, aggregate_stream
from .reconciler import classify, coverage_percent, reconcile
from .report_assembler import assemble_report
from .analysis_service import ReservationAnalysisService

__all__ = [
    "NormalizationError",
    "key_of",
    "Aggregation",
    "aggregate",
    "aggregate_stream",
    "classify",
    "coverage_percent",
    "reconcile",
    "assemble_report",
    "ReservationAnalysisService",
]
