# modules/scoring/services/scoring_config_service.py
from typing import Any

from flask import current_app, has_app_context

from ..config import ScoringDefaultConfig
from ..logics.step_dispatch import PolicySet
from ..schemas import ExternallyGradedPolicy, FlatRewardPolicy, ScalingRewardPolicy


class ScoringConfigService:
    """
    Resolves scoring configuration.
    Fallback chain: Flask app config -> ScoringDefaultConfig.
    """

    @staticmethod
    def get_config(key: str) -> Any:
        """Get a single config value."""
        if has_app_context():
            value = current_app.config.get(key)
            if value is not None:
                return value
        return getattr(ScoringDefaultConfig, key, 0)

    @staticmethod
    def get_policy_set() -> PolicySet:
        """
        Reward policies built from the effective configuration.
        Negative values surface as InvalidConfigurationError from the policy classes.
        """
        get = ScoringConfigService.get_config
        bonus = int(get('PERFECT_SCORE_BONUS'))
        return PolicySet(
            gap_fill=ScalingRewardPolicy(int(get('GAP_FILL_XP_PER_CORRECT')), bonus),
            challenge=ScalingRewardPolicy(int(get('CHALLENGE_XP_PER_CORRECT')), bonus),
            single_answer=FlatRewardPolicy(int(get('SINGLE_ANSWER_XP'))),
            external=ExternallyGradedPolicy(int(get('EXTERNAL_GRADED_DEFAULT_XP'))),
        )
