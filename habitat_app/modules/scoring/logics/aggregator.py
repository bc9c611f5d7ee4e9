"""
Aggregator - rolls per-item verdicts up into a unit-level ScoreResult.

NO database, NO Flask, NO model dependencies allowed.
"""
from habitat_app.core.exceptions import ScoringError

from ..schemas import AggregationPolicy, ExerciseUnit, ScoreResult, SubmissionAttempt
from .answer_matcher import match


def is_passing(correct_count: int, total_count: int, pass_threshold_percent: float) -> bool:
    """Threshold check with an empty unit defined as not passed."""
    if total_count <= 0:
        return False
    return correct_count / total_count * 100 >= pass_threshold_percent


def aggregate(
    unit: ExerciseUnit,
    attempt: SubmissionAttempt,
    policy: AggregationPolicy = AggregationPolicy.PARTIAL_CREDIT,
) -> ScoreResult:
    """
    Score one attempt against its unit.

    Answers keyed by item ids the unit does not own are ignored. Under
    ALL_OR_NOTHING the unit is successful only when every item matches; under
    PARTIAL_CREDIT success follows the pass threshold. ``passed`` itself is
    always threshold based. An empty unit is vacuously perfect but never
    passes.

    Raises:
        ScoringError: the attempt belongs to another unit.
    """
    if attempt.unit_id != unit.id:
        raise ScoringError(
            f"Attempt for unit {attempt.unit_id} cannot be scored against unit {unit.id}",
            unit_id=unit.id,
        )

    total_count = len(unit.items)
    correct_count = sum(1 for item in unit.items if match(item, attempt.answer_for(item.id)))

    is_perfect = correct_count == total_count
    passed = is_passing(correct_count, total_count, unit.pass_threshold_percent)

    if policy is AggregationPolicy.ALL_OR_NOTHING:
        successful = is_perfect
    else:
        successful = passed

    return ScoreResult(
        correct_count=correct_count,
        total_count=total_count,
        is_perfect=is_perfect,
        passed=passed,
        successful=successful,
    )
