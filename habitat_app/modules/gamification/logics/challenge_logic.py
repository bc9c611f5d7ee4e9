"""
Challenge Logic - which environmental challenges a completed unit feeds.

NO database, NO Flask, NO model dependencies allowed.
"""
from datetime import date
from typing import Iterable, Optional, Sequence, Union


def as_region_list(value: Union[str, Sequence[str], None]) -> list:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def challenge_matches_unit(
    target_ecosystem: str,
    affected_regions: Iterable[str],
    unit_ecosystem: Optional[str],
    unit_regions: Union[str, Sequence[str], None],
) -> bool:
    """A challenge is fed by units of its ecosystem from one of its regions."""
    if not unit_ecosystem or target_ecosystem != unit_ecosystem:
        return False
    regions = set(as_region_list(unit_regions))
    return any(region in regions for region in as_region_list(affected_regions))


def completion_percentage(total_contributions: int, units_required: int) -> int:
    if not units_required or units_required <= 0:
        return 0
    return round(total_contributions / units_required * 100)


def challenge_status(total_contributions: int, units_required: int) -> str:
    return 'completed' if completion_percentage(total_contributions, units_required) >= 100 else 'active'


def days_remaining(end_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Days left until ``end_date`` (never negative), None for open-ended challenges."""
    if end_date is None:
        return None
    today = today or date.today()
    return max(0, (end_date - today).days)
