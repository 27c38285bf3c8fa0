"""
Data normalizers to ensure consistent data structure across the application.
These normalizers turn provider-shaped data and free-text request fields into
the canonical Place representation.
"""

from typing import Dict, Iterable, List, Optional, Union
from uuid import UUID

from app.errors import InvalidArgumentError
from app.models.places import (
    WEEKDAY_NAMES,
    OpeningHoursPeriod,
    PlaceCategory,
    ProviderPeriod,
)

CLOSED_STATUS_MARKER = "CLOSED"
ALL_CATEGORIES = "ALL"


def normalize_opening_hours(
    periods: Iterable[ProviderPeriod],
) -> Dict[str, List[OpeningHoursPeriod]]:
    """
    Convert a provider weekly schedule into per-weekday opening periods.

    Periods keep their input order within a weekday, so split shifts come out
    as several entries. Weekdays without periods get no key at all. A period
    with no close time is kept with closing hour/minute left at 0.

    Raises:
        ValueError: If a period names a day outside 0 (Sunday) .. 6 (Saturday).
    """
    hours: Dict[str, List[OpeningHoursPeriod]] = {}

    for period in periods:
        day = period.open.day
        if not 0 <= day < len(WEEKDAY_NAMES):
            raise ValueError(f"Invalid weekday index in opening hours: {day}")

        normalized = OpeningHoursPeriod(
            open_hour=period.open.hour,
            open_minute=period.open.minute,
        )
        if period.close is not None:
            normalized.close_hour = period.close.hour
            normalized.close_minute = period.close.minute

        hours.setdefault(WEEKDAY_NAMES[day], []).append(normalized)

    return hours


def is_closed_status(business_status: Optional[str]) -> Optional[bool]:
    """
    Derive permanent closure from the provider business status.

    Returns None when the provider did not report a status.
    """
    if business_status is None:
        return None
    return CLOSED_STATUS_MARKER in business_status


def parse_place_id(raw: Union[str, UUID]) -> UUID:
    """Parse a place id, raising InvalidArgumentError when malformed."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw).strip())
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid place id: {raw}") from exc


def parse_category(raw: Optional[str]) -> Optional[PlaceCategory]:
    """
    Parse a category name (exact, case-sensitive match on enum names).

    Blank input means "no category".
    """
    if raw is None or not raw.strip():
        return None
    try:
        return PlaceCategory[raw.strip()]
    except KeyError as exc:
        raise InvalidArgumentError(f"Invalid place type: {raw}") from exc


def parse_visited(raw: Optional[Union[bool, str]]) -> Optional[bool]:
    """Parse a tri-state visited flag; blank or missing means unset."""
    if raw is None or isinstance(raw, bool):
        return raw
    text = raw.strip().lower()
    if not text:
        return None
    if text == "true":
        return True
    if text == "false":
        return False
    raise InvalidArgumentError(f"Invalid visited flag: {raw}")


def is_all_categories(raw: str) -> bool:
    return raw.strip().upper() == ALL_CATEGORIES
