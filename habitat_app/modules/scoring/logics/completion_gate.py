"""
Completion Gate - the one-way not-completed -> completed transition.

A unit counts as completed for a learner on the first passing attempt only.
Recording the completion and moving the counters is the caller's job; this
function only decides.
"""
from typing import Any, Union

from ..schemas import CompletionDecision, ScoreResult, StepScore


def try_complete(
    unit_id: str,
    learner_id: Any,
    result: Union[ScoreResult, StepScore],
    already_completed: bool,
) -> CompletionDecision:
    """
    Only ``result.passed`` is read, so a grader-decided StepScore works too.

    >>> r = ScoreResult(3, 5, False, True, True)
    >>> try_complete('u1', 7, r, already_completed=False).just_completed
    True
    >>> try_complete('u1', 7, r, already_completed=True).just_completed
    False
    """
    return CompletionDecision(
        unit_id=unit_id,
        learner_id=learner_id,
        just_completed=bool(result.passed and not already_completed),
    )
