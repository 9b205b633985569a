"""Analysis entry points."""

from .get_reservation_analysis import get_reservation_analysis

__all__ = ["get_reservation_analysis"]
