"""Utility modules for the Reservation Coverage Analyzer."""

from .error_sanitization import redact_sensitive_info, sanitize_cause

__all__ = ["redact_sensitive_info", "sanitize_cause"]
