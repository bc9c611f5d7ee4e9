"""
Public API of the gamification module.
Other modules and the routes go through these functions, never the services.
"""
from typing import Any, Dict, List, Mapping, Optional

from flask import current_app, has_app_context

from habitat_app.modules.scoring.services.scoring_config_service import ScoringConfigService

from .config import ECOSYSTEMS, GamificationDefaultConfig
from .logics.activity_logic import days_since_activity, is_at_risk
from .logics.assessment_logic import normalize_assessment
from .logics.classifier import (
    assessment_tier_table,
    classify,
    ecosystem_badge_table,
    green_scale_badge,
    green_scale_table,
    next_threshold,
    progress_to_next,
    xp_level,
)
from .schemas import AttemptOutcome, ProgressState, StreakDTO
from .services.challenge_service import ChallengeService
from .services.completion_service import CompletionService
from .services.leaderboard_service import LeaderboardService
from .services.progress_service import ProgressService
from .services.species_service import SpeciesService


def get_config(key: str) -> Any:
    """Flask app config first, then GamificationDefaultConfig."""
    if has_app_context():
        value = current_app.config.get(key)
        if value is not None:
            return value
    return getattr(GamificationDefaultConfig, key)


def submit_attempt(
    user_id: int,
    unit_id: str,
    answers: Optional[Mapping[str, Any]] = None,
    grade: Optional[Mapping[str, Any]] = None,
) -> AttemptOutcome:
    return CompletionService.submit_attempt(user_id, unit_id, answers=answers, grade=grade)


def is_unit_completed(user_id: int, unit_id: str) -> bool:
    CompletionService.get_unit(unit_id)
    return ProgressService.get_completion_status(user_id, unit_id)


def get_progress(user_id: int) -> ProgressState:
    return ProgressService.get_progress(user_id)


def get_streak(user_id: int) -> StreakDTO:
    progress = ProgressService.get_progress(user_id)
    return StreakDTO(
        user_id,
        progress.current_streak,
        progress.longest_streak,
        progress.last_activity_at.date().isoformat() if progress.last_activity_at else None,
    )


def green_scale_summary(total_units_completed: int) -> Dict[str, Any]:
    table = green_scale_table()
    name = classify(total_units_completed, table)
    upcoming = next_threshold(total_units_completed, table)
    return {
        'level': name,
        'badge': green_scale_badge(name),
        'next_level': upcoming.label if upcoming else None,
        'units_to_next': upcoming.minimum - total_units_completed if upcoming else 0,
        'progress_to_next': progress_to_next(total_units_completed, table),
    }


def ecosystem_badges(ecosystems: Mapping[str, int]) -> List[Dict[str, Any]]:
    """Badge and progress for every known ecosystem, earned or not."""
    badges = []
    for ecosystem in ECOSYSTEMS:
        units = ecosystems.get(ecosystem, 0)
        table = ecosystem_badge_table(ecosystem)
        upcoming = next_threshold(units, table)
        badges.append({
            'ecosystem': ecosystem,
            'units_completed': units,
            'badge': classify(units, table),
            'next_badge': upcoming.label if upcoming else None,
            'progress_to_next': progress_to_next(units, table),
        })
    return badges


def get_dashboard(user_id: int) -> Dict[str, Any]:
    """Progress plus every derived view the learner dashboard shows."""
    progress = ProgressService.get_progress(user_id)
    at_risk_days = int(get_config('AT_RISK_AFTER_DAYS'))
    xp_per_level = int(ScoringConfigService.get_config('XP_PER_LEVEL'))

    return {
        'progress': progress.to_dict(),
        'green_scale': green_scale_summary(progress.total_units_completed),
        'ecosystem_badges': ecosystem_badges(progress.per_ecosystem_units_completed),
        'level': xp_level(progress.total_xp, xp_per_level),
        'days_since_activity': days_since_activity(progress.last_activity_at),
        'is_at_risk': (
            progress.last_activity_at is not None
            and is_at_risk(progress.last_activity_at, after_days=at_risk_days)
        ),
    }


def assess_tier(raw_assessment: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Normalize a speech-assessment response and classify its tier."""
    tiers = assessment_tier_table(
        int(get_config('ASSESSMENT_PRO_MIN')),
        int(get_config('ASSESSMENT_PREMIUM_MIN')),
    )
    assessment = normalize_assessment(raw_assessment, tiers)
    return {
        'assessment': assessment,
        'score_tier': classify(assessment['overall_score'], tiers),
        'recommended_tier': assessment['recommended_tier'],
    }


def get_active_challenges(user_id: Optional[int] = None) -> List[Dict[str, Any]]:
    return ChallengeService.get_active_challenges(user_id)


def get_adopted_species(user_id: int) -> List[Dict[str, Any]]:
    return SpeciesService.get_adopted_species(user_id)


def get_leaderboard(timeframe: str = 'all_time', limit: Optional[int] = None) -> List[Dict[str, Any]]:
    if limit is None:
        limit = int(get_config('LEADERBOARD_DEFAULT_LIMIT'))
    limit = max(1, min(int(limit), int(get_config('LEADERBOARD_MAX_LIMIT'))))
    return LeaderboardService.get_leaderboard(timeframe, limit)
