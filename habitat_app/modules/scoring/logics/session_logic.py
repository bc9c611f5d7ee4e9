"""
Session Logic - per-lesson scoring state as an explicit value object.

A ScoringSession is never mutated: every recorded step returns a new
session. XP for a step is counted the first time the step is completed
within the session; checking the same step again refreshes its feedback
but leaves the XP total alone.

NO database, NO Flask, NO model dependencies allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

from habitat_app.core.exceptions import InvalidConfigurationError

from ..schemas import RewardOutcome, ScoreResult


@dataclass(frozen=True)
class StepRecord:
    step_key: str
    result: Optional[ScoreResult]
    reward: RewardOutcome
    counted: bool


@dataclass(frozen=True)
class ScoringSession:
    lesson_id: str
    total_steps: int
    completed_steps: FrozenSet[str] = field(default_factory=frozenset)
    xp_earned: int = 0
    records: Tuple[StepRecord, ...] = ()

    def __post_init__(self):
        if self.total_steps < 0:
            raise InvalidConfigurationError("total_steps must be >= 0", field='total_steps')

    def is_step_completed(self, step_key: str) -> bool:
        return step_key in self.completed_steps

    def latest_record(self, step_key: str) -> Optional[StepRecord]:
        for record in reversed(self.records):
            if record.step_key == step_key:
                return record
        return None


def start_session(lesson_id: str, total_steps: int) -> ScoringSession:
    return ScoringSession(lesson_id=lesson_id, total_steps=total_steps)


def record_step(
    session: ScoringSession,
    step_key: str,
    reward: RewardOutcome,
    result: Optional[ScoreResult] = None,
) -> ScoringSession:
    """Return a new session with the step recorded.

    ``result`` is None for externally graded steps.
    """
    counted = step_key not in session.completed_steps
    record = StepRecord(step_key=step_key, result=result, reward=reward, counted=counted)

    if not counted:
        return replace(session, records=session.records + (record,))

    return replace(
        session,
        completed_steps=session.completed_steps | {step_key},
        xp_earned=session.xp_earned + reward.xp_awarded,
        records=session.records + (record,),
    )


def completion_percent(session: ScoringSession) -> int:
    """Rounded share of steps completed, 0 for a lesson without steps."""
    if session.total_steps == 0:
        return 0
    return round(min(len(session.completed_steps), session.total_steps) / session.total_steps * 100)
