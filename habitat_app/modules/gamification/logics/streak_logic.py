"""
Streak Logic - Pure functions for streak calculation.

This module contains ONLY pure Python logic.
NO database, NO Flask, NO model dependencies allowed.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set, Union

DateLike = Union[date, datetime, str, None]


def calculate_streak_from_dates(
    activity_dates: List[DateLike],
    today: date = None
) -> int:
    """
    Count consecutive active days ending today (or yesterday).

    Args:
        activity_dates: date objects, datetime objects or ISO date strings.
        today: Reference day (default: date.today()).

    Returns:
        Current streak length in days.

    Examples:
        >>> from datetime import date
        >>> dates = [date(2024, 1, 3), date(2024, 1, 2), date(2024, 1, 1)]
        >>> calculate_streak_from_dates(dates, today=date(2024, 1, 3))
        3

        >>> # Gap in dates
        >>> dates = [date(2024, 1, 3), date(2024, 1, 1)]  # Missing Jan 2
        >>> calculate_streak_from_dates(dates, today=date(2024, 1, 3))
        1
    """
    learned_dates = _to_date_set(activity_dates)
    if not learned_dates:
        return 0

    if today is None:
        today = date.today()

    yesterday = today - timedelta(days=1)

    # Not active today yet still keeps yesterday's streak alive
    if today in learned_dates:
        current_check = today
    elif yesterday in learned_dates:
        current_check = yesterday
    else:
        return 0

    streak = 0
    while current_check in learned_dates:
        streak += 1
        current_check -= timedelta(days=1)

    return streak


def calculate_longest_streak(activity_dates: List[DateLike]) -> int:
    """Longest run of consecutive active days anywhere in the history."""
    learned_dates = sorted(_to_date_set(activity_dates))
    if not learned_dates:
        return 0

    longest = current = 1
    for previous, day in zip(learned_dates, learned_dates[1:]):
        if day - previous == timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def _to_date_set(values: Iterable[DateLike]) -> Set[date]:
    learned_dates: Set[date] = set()
    for val in values or []:
        normalized = _normalize_to_date(val)
        if normalized:
            learned_dates.add(normalized)
    return learned_dates


def _normalize_to_date(val: DateLike) -> Optional[date]:
    """
    Normalize various date representations to a date object.

    Returns:
        date object or None if conversion fails.
    """
    if val is None:
        return None

    if isinstance(val, datetime):
        return val.date()

    if isinstance(val, date):
        return val

    if isinstance(val, str):
        try:
            return datetime.fromisoformat(val).date()
        except ValueError:
            try:
                return datetime.strptime(val, '%Y-%m-%d').date()
            except ValueError:
                return None

    return None
