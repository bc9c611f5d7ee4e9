"""
Value objects of the scoring engine.

Everything here is immutable: units are fixed for the duration of an attempt,
attempts are never mutated after submission and results are recomputed
rather than edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Tuple, Union

from habitat_app.core.exceptions import InvalidConfigurationError


class UnitKind(Enum):
    """Shapes of scoreable exercise units."""
    SINGLE_GAP = "single_gap"
    MULTI_GAP = "multi_gap"
    MULTIPLE_CHOICE_CHALLENGE = "multiple_choice_challenge"
    ASSESSMENT_READING = "assessment_reading"


class AggregationPolicy(Enum):
    """How per-item verdicts decide whether a unit counts as answered correctly."""
    ALL_OR_NOTHING = "all_or_nothing"
    PARTIAL_CREDIT = "partial_credit"


@dataclass(frozen=True)
class AnswerItem:
    """One scoreable question. ``correct_answer`` may be a set of accepted answers."""
    id: str
    correct_answer: Union[str, FrozenSet[str]]
    options: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.correct_answer, (set, list, tuple)):
            object.__setattr__(self, 'correct_answer', frozenset(self.correct_answer))
        object.__setattr__(self, 'options', tuple(self.options))


@dataclass(frozen=True)
class ExerciseUnit:
    id: str
    kind: UnitKind
    items: Tuple[AnswerItem, ...] = ()
    pass_threshold_percent: float = 60

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))
        if not 0 <= self.pass_threshold_percent <= 100:
            raise InvalidConfigurationError(
                f"pass_threshold_percent must be within 0..100, got {self.pass_threshold_percent}",
                field='pass_threshold_percent',
            )
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise InvalidConfigurationError(
                f"Unit {self.id} has duplicated item ids", field='items'
            )


@dataclass(frozen=True)
class SubmissionAttempt:
    unit_id: str
    answers: Mapping[str, Any] = field(default_factory=dict)
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        object.__setattr__(self, 'answers', MappingProxyType(dict(self.answers)))

    def answer_for(self, item_id: str) -> Optional[Any]:
        return self.answers.get(item_id)


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of aggregating one attempt."""
    correct_count: int
    total_count: int
    is_perfect: bool
    passed: bool
    # Policy-dependent verdict shown to the learner as "correct".
    successful: bool

    @property
    def percent(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.correct_count / self.total_count * 100

    def to_dict(self) -> dict:
        return {
            'correct_count': self.correct_count,
            'total_count': self.total_count,
            'is_perfect': self.is_perfect,
            'passed': self.passed,
            'successful': self.successful,
            'percent': round(self.percent, 2),
        }


@dataclass(frozen=True)
class RewardOutcome:
    xp_awarded: int
    bonus_applied: bool = False

    def to_dict(self) -> dict:
        return {'xp_awarded': self.xp_awarded, 'bonus_applied': self.bonus_applied}


def _require_non_negative(value, name: str) -> None:
    if value is None or value < 0:
        raise InvalidConfigurationError(f"{name} must be >= 0, got {value}", field=name)


@dataclass(frozen=True)
class ScalingRewardPolicy:
    """XP per correct item plus a bonus for a perfect score."""
    xp_per_correct: int
    perfect_bonus: int = 0

    def __post_init__(self):
        _require_non_negative(self.xp_per_correct, 'xp_per_correct')
        _require_non_negative(self.perfect_bonus, 'perfect_bonus')


@dataclass(frozen=True)
class FlatRewardPolicy:
    """Fixed XP when the unit is passed, nothing otherwise."""
    flat_xp: int

    def __post_init__(self):
        _require_non_negative(self.flat_xp, 'flat_xp')


@dataclass(frozen=True)
class ExternallyGradedPolicy:
    """XP decided by an external grader (AI writing, speech, conversation)."""
    default_xp: int = 10

    def __post_init__(self):
        _require_non_negative(self.default_xp, 'default_xp')


RewardPolicy = Union[ScalingRewardPolicy, FlatRewardPolicy, ExternallyGradedPolicy]


@dataclass(frozen=True)
class CompletionDecision:
    unit_id: str
    learner_id: Any
    just_completed: bool


@dataclass(frozen=True)
class StepScore:
    """Score and reward for one step, as shown to the learner.

    ``result`` is None for externally graded steps; ``passed`` then comes
    from the grader.
    """
    step_id: str
    step_type: str
    result: Optional[ScoreResult]
    reward: RewardOutcome
    passed: bool

    def to_dict(self) -> dict:
        return {
            'step_id': self.step_id,
            'step_type': self.step_type,
            'score': self.result.to_dict() if self.result else None,
            'reward': self.reward.to_dict(),
            'passed': self.passed,
        }
