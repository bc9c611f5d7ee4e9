from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional


class CompletionRecordStatus(Enum):
    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class ProgressDelta:
    """Increments applied to a learner's cumulative progress."""
    units_completed: int = 0
    xp: int = 0
    ecosystem: Optional[str] = None
    unit_id: Optional[str] = None
    reason: str = 'Unit completed'
    source_type: str = 'lesson'


@dataclass
class ProgressState:
    user_id: int
    total_units_completed: int
    total_xp: int
    current_streak: int
    longest_streak: int
    last_activity_at: Optional[datetime]
    per_ecosystem_units_completed: Dict[str, int] = field(default_factory=dict)
    completed_unit_ids: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'total_units_completed': self.total_units_completed,
            'total_xp': self.total_xp,
            'current_streak': self.current_streak,
            'longest_streak': self.longest_streak,
            'last_activity_at': self.last_activity_at.isoformat() if self.last_activity_at else None,
            'per_ecosystem_units_completed': dict(self.per_ecosystem_units_completed),
            'completed_unit_ids': sorted(self.completed_unit_ids),
        }


@dataclass
class StreakDTO:
    user_id: int
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[str]


@dataclass
class AttemptOutcome:
    """What the learner gets back after submitting a unit."""
    unit_id: str
    step_score: Any
    just_completed: bool
    already_completed: bool
    progress: Optional[ProgressState]
    challenges: List[Dict[str, Any]] = field(default_factory=list)
    species_unlocked: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.step_score.to_dict()
        return {
            'unit_id': self.unit_id,
            'score': data['score'],
            'reward': data['reward'],
            'passed': data['passed'],
            'just_completed': self.just_completed,
            'already_completed': self.already_completed,
            'progress': self.progress.to_dict() if self.progress else None,
            'challenges': list(self.challenges),
            'species_unlocked': list(self.species_unlocked),
        }
