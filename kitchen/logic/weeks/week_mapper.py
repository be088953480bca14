"""Calendar math for the rotation: ISO weeks, week spans and rotation-week folding.

Day-of-week values follow the 0=Sunday .. 6=Saturday convention used by the
rotation grid, while weeks themselves run Monday to Sunday (ISO-8601).
"""
from __future__ import annotations
from datetime import date, timedelta
from typing import Tuple

from kitchen.domain.errors import ValidationError
from kitchen.utilities.constants import MEAL_ALIASES

__all__ = [
    "iso_week", "week_date_range", "normalize_iso_week", "date_for_day_of_week",
    "rotation_week_nr", "map_meal_name", "current_season",
]


def iso_week(d: date) -> int:
    """ISO-8601 week number (the week holding the date's Thursday)."""
    return d.isocalendar()[1]


def week_date_range(year: int, week: int) -> Tuple[date, date]:
    """Monday and Sunday of ISO week `week` in `year`.

    Anchored on January 4th (always in week 1); week numbers past the last
    week of the year roll into the following year instead of failing.
    """
    if week < 1:
        raise ValidationError(f"ISO week must be positive, got {week}")
    jan4 = date(year, 1, 4)
    monday = jan4 - timedelta(days=jan4.isoweekday() - 1) + timedelta(weeks=week - 1)
    return monday, monday + timedelta(days=6)


def normalize_iso_week(year: int, week: int) -> Tuple[int, int]:
    """ISO (year, week) actually covered by `week_date_range(year, week)`.

    2025 has 52 weeks, so (2025, 53) is (2026, 1).
    """
    monday, _sunday = week_date_range(year, week)
    iso = monday.isocalendar()
    return iso[0], iso[1]


def date_for_day_of_week(monday: date, day_of_week: int) -> date:
    """Resolve a 0=Sunday day index to a date in the week starting at `monday`."""
    if not 0 <= day_of_week <= 6:
        raise ValidationError(f"day_of_week must be in 0..6, got {day_of_week}")
    offset = 6 if day_of_week == 0 else day_of_week - 1
    return monday + timedelta(days=offset)


def rotation_week_nr(calendar_week: int, cycle_length: int) -> int:
    """Fold an absolute calendar week onto a 1-based rotation week."""
    if cycle_length < 1:
        raise ValidationError(f"cycle length must be positive, got {cycle_length}")
    if calendar_week < 1:
        raise ValidationError(f"calendar week must be positive, got {calendar_week}")
    return ((calendar_week - 1) % cycle_length) + 1


def map_meal_name(meal: str) -> str:
    """Translate alternate meal codes (mittag/abend); unknown codes pass through."""
    return MEAL_ALIASES.get(meal, meal)


def current_season(d: date) -> str:
    if 3 <= d.month <= 5:
        return "spring"
    if 6 <= d.month <= 8:
        return "summer"
    if 9 <= d.month <= 11:
        return "autumn"
    return "winter"
