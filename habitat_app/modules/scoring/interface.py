# modules/scoring/interface.py
from typing import Any, Mapping, Optional, Tuple

from .logics.aggregator import aggregate
from .logics.reward_calculator import compute_external_reward, compute_reward
from .logics.step_dispatch import AnswerScoringPlan, ExternalGradingPlan, build_plan
from .schemas import (
    AggregationPolicy,
    ExerciseUnit,
    RewardOutcome,
    RewardPolicy,
    ScoreResult,
    StepScore,
    SubmissionAttempt,
)
from .services.scoring_config_service import ScoringConfigService


class ScoringInterface:
    """
    Single entry point of the Scoring module for other modules.
    Nothing here touches the database.
    """

    @staticmethod
    def score_attempt(
        unit: ExerciseUnit,
        attempt: SubmissionAttempt,
        reward_policy: RewardPolicy,
        aggregation: AggregationPolicy = AggregationPolicy.PARTIAL_CREDIT,
    ) -> Tuple[ScoreResult, RewardOutcome]:
        """Aggregate an attempt and price it."""
        result = aggregate(unit, attempt, aggregation)
        return result, compute_reward(result, reward_policy)

    @staticmethod
    def score_step(
        step_id: str,
        step_type: str,
        payload: Mapping[str, Any],
        answers: Optional[Mapping[str, Any]] = None,
        grade: Optional[Mapping[str, Any]] = None,
        pass_threshold_percent: Optional[float] = None,
    ) -> StepScore:
        """
        Score a lesson step.

        Answer-scored steps read ``answers`` (item id -> value). Externally
        graded steps read ``grade`` ({"xp": int, "passed": bool}) instead.
        """
        if pass_threshold_percent is None:
            pass_threshold_percent = ScoringConfigService.get_config('PASS_THRESHOLD_PERCENT')

        plan = build_plan(
            step_id,
            step_type,
            payload,
            pass_threshold_percent=pass_threshold_percent,
            policies=ScoringConfigService.get_policy_set(),
        )

        if isinstance(plan, AnswerScoringPlan):
            attempt = SubmissionAttempt(unit_id=plan.unit.id, answers=answers or {})
            result, reward = ScoringInterface.score_attempt(
                plan.unit, attempt, plan.reward_policy, plan.aggregation
            )
            return StepScore(
                step_id=step_id,
                step_type=plan.step_type.value,
                result=result,
                reward=reward,
                passed=result.passed,
            )

        return ScoringInterface.grade_external(step_id, plan, grade)

    @staticmethod
    def grade_external(
        step_id: str,
        plan: ExternalGradingPlan,
        grade: Optional[Mapping[str, Any]],
    ) -> StepScore:
        """
        Apply the external grader's verdict.

        Only an explicit ``"passed": true`` passes; no grade means not passed
        and no XP.
        """
        grade = grade or {}
        passed = grade.get('passed') is True
        reward = compute_external_reward(grade.get('xp'), plan.policy, passed=passed)
        return StepScore(
            step_id=step_id,
            step_type=plan.step_type.value,
            result=None,
            reward=reward,
            passed=passed,
        )
