"""
Reward Calculator - converts a ScoreResult into XP.

Pure and deterministic: the same result and policy always give the same
outcome. Whether the XP reaches the learner's cumulative total is decided by
the completion gate and the progress service, not here.
"""
from typing import Optional

from habitat_app.core.exceptions import InvalidConfigurationError

from ..schemas import (
    ExternallyGradedPolicy,
    FlatRewardPolicy,
    RewardOutcome,
    RewardPolicy,
    ScalingRewardPolicy,
    ScoreResult,
)


def compute_reward(result: ScoreResult, policy: RewardPolicy) -> RewardOutcome:
    """
    Calculate XP for an aggregated result.

    Scaling policies pay per correct item plus a bonus on a perfect score.
    Flat policies pay all-or-nothing on ``passed``. Externally graded steps
    never reach the aggregator, so passing one here is a configuration error.
    """
    if isinstance(policy, ScalingRewardPolicy):
        bonus_applied = result.is_perfect and policy.perfect_bonus > 0
        xp = result.correct_count * policy.xp_per_correct
        if result.is_perfect:
            xp += policy.perfect_bonus
        return RewardOutcome(xp_awarded=xp, bonus_applied=bonus_applied)

    if isinstance(policy, FlatRewardPolicy):
        return RewardOutcome(xp_awarded=policy.flat_xp if result.passed else 0)

    if isinstance(policy, ExternallyGradedPolicy):
        raise InvalidConfigurationError(
            "Externally graded steps take their XP from the grader; use compute_external_reward",
            field='policy',
        )

    raise InvalidConfigurationError(f"Unknown reward policy {policy!r}", field='policy')


def compute_external_reward(
    xp_from_grader: Optional[int],
    policy: ExternallyGradedPolicy,
    passed: bool = True,
) -> RewardOutcome:
    """
    Pass through the XP an external grader awarded.

    A missing value falls back to the policy's default; a negative value is
    refused rather than clamped.
    """
    if not passed:
        return RewardOutcome(xp_awarded=0)
    xp = policy.default_xp if xp_from_grader is None else xp_from_grader
    if isinstance(xp, bool) or not isinstance(xp, int) or xp < 0:
        raise InvalidConfigurationError(f"Grader XP must be a non-negative integer, got {xp!r}", field='xp')
    return RewardOutcome(xp_awarded=xp)
