"""
Classifier Logic - maps a numeric metric onto a labelled level.

Used for the Green Scale, ecosystem badges and assessment tiers. A table is
a list of (minimum, label) thresholds; the label of the highest threshold
whose minimum is <= metric wins, otherwise the table default.

NO database, NO Flask, NO model dependencies allowed.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence, Tuple

from habitat_app.core.exceptions import InvalidConfigurationError

from ..config import (
    ASSESSMENT_TIER_EXPLORER,
    ASSESSMENT_TIER_PREMIUM,
    ASSESSMENT_TIER_PRO,
    ECOSYSTEM_BADGE_THRESHOLDS,
    ECOSYSTEM_BADGES,
    GREEN_SCALE_LEVELS,
)


@dataclass(frozen=True)
class Threshold:
    minimum: float
    label: Any


class ThresholdTable:
    """Immutable, validated threshold table sorted by ascending minimum."""

    def __init__(self, thresholds: Iterable[Threshold], default: Any = None, name: str = 'table'):
        ordered = tuple(sorted(thresholds, key=lambda t: t.minimum))
        if not ordered:
            raise InvalidConfigurationError(f"{name} has no thresholds", field=name)

        minimums = [t.minimum for t in ordered]
        if any(m < 0 for m in minimums):
            raise InvalidConfigurationError(f"{name} has a negative threshold", field=name)
        if len(set(minimums)) != len(minimums):
            raise InvalidConfigurationError(f"{name} has duplicated thresholds", field=name)

        self.name = name
        self.thresholds: Tuple[Threshold, ...] = ordered
        self.default = default

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[float, Any]], default: Any = None, name: str = 'table'):
        return cls((Threshold(minimum, label) for minimum, label in pairs), default=default, name=name)

    def __iter__(self):
        return iter(self.thresholds)

    def __len__(self):
        return len(self.thresholds)


def rank(metric: float, table: ThresholdTable) -> int:
    """Index of the matched threshold, -1 when the metric is below all of them."""
    for index in range(len(table.thresholds) - 1, -1, -1):
        if table.thresholds[index].minimum <= metric:
            return index
    return -1


def matched_threshold(metric: float, table: ThresholdTable) -> Optional[Threshold]:
    index = rank(metric, table)
    return table.thresholds[index] if index >= 0 else None


def classify(metric: float, table: ThresholdTable) -> Any:
    """Label of the highest threshold reached, or the table default."""
    threshold = matched_threshold(metric, table)
    return threshold.label if threshold else table.default


def next_threshold(metric: float, table: ThresholdTable) -> Optional[Threshold]:
    """The next level to reach, None at the top."""
    index = rank(metric, table)
    if index + 1 < len(table.thresholds):
        return table.thresholds[index + 1]
    return None


def progress_to_next(metric: float, table: ThresholdTable) -> int:
    """Percentage of the way from the current level to the next (100 at the top)."""
    upcoming = next_threshold(metric, table)
    if upcoming is None:
        return 100
    current = matched_threshold(metric, table)
    base = current.minimum if current else 0
    span = upcoming.minimum - base
    if span <= 0:
        return 100
    return max(0, min(100, int((metric - base) / span * 100)))


def xp_level(total_xp: int, xp_per_level: int = 100) -> int:
    """Level from cumulative XP: one level per ``xp_per_level`` points."""
    if xp_per_level <= 0:
        raise InvalidConfigurationError("xp_per_level must be > 0", field='xp_per_level')
    return max(0, total_xp) // xp_per_level


# --- Table builders ---

def green_scale_table() -> ThresholdTable:
    return ThresholdTable.from_pairs(
        [(level['min'], level['name']) for level in GREEN_SCALE_LEVELS],
        name='green_scale',
    )


def green_scale_badge(level_name: str) -> Optional[str]:
    for level in GREEN_SCALE_LEVELS:
        if level['name'] == level_name:
            return level['badge']
    return None


def ecosystem_badge_table(ecosystem: str) -> ThresholdTable:
    labels = ECOSYSTEM_BADGES.get(ecosystem)
    if labels is None:
        raise InvalidConfigurationError(f"Unknown ecosystem '{ecosystem}'", field='ecosystem')
    if len(labels) != len(ECOSYSTEM_BADGE_THRESHOLDS):
        raise InvalidConfigurationError(
            f"Ecosystem '{ecosystem}' needs {len(ECOSYSTEM_BADGE_THRESHOLDS)} badge labels",
            field='ecosystem',
        )
    return ThresholdTable.from_pairs(
        list(zip(ECOSYSTEM_BADGE_THRESHOLDS, labels)),
        default=None,
        name=f'ecosystem_badges.{ecosystem}',
    )


def assessment_tier_table(pro_min: float = 65, premium_min: float = 80) -> ThresholdTable:
    if not 0 < pro_min < premium_min <= 100:
        raise InvalidConfigurationError(
            f"Assessment tiers need 0 < pro ({pro_min}) < premium ({premium_min}) <= 100",
            field='assessment_tiers',
        )
    return ThresholdTable.from_pairs(
        [
            (0, ASSESSMENT_TIER_EXPLORER),
            (pro_min, ASSESSMENT_TIER_PRO),
            (premium_min, ASSESSMENT_TIER_PREMIUM),
        ],
        name='assessment_tiers',
    )
