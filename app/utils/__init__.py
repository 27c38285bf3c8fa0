"""Utility functions for the backend."""

from app.utils.normalizers import (
    is_all_categories,
    is_closed_status,
    normalize_opening_hours,
    parse_category,
    parse_place_id,
    parse_visited,
)

__all__ = [
    "is_all_categories",
    "is_closed_status",
    "normalize_opening_hours",
    "parse_category",
    "parse_place_id",
    "parse_visited",
]
