"""
Assessment Logic - normalizes the speech-assessment service's response.

The service's JSON is untrusted: scores are clamped, unknown tiers fall back
to explorer, and the recommended tier never exceeds the tier earned by the
overall score.

NO database, NO Flask, NO model dependencies allowed.
"""
from numbers import Number
from typing import Any, Dict, Mapping, Optional

from ..config import ASSESSMENT_TIER_EXPLORER, ASSESSMENT_TIERS
from .classifier import ThresholdTable, assessment_tier_table, classify

MIN_SCORE = 30
MAX_SCORE = 100
DEFAULT_SCORE = 60

DEFAULT_STRENGTHS = ['Good effort']
DEFAULT_IMPROVEMENTS = ['Keep practicing']
DEFAULT_CEFR_LEVEL = 'A2-B1'
DEFAULT_ENCOURAGEMENT = 'Great job! Keep learning!'
DEFAULT_REASONING = 'Assessment completed'


def clamp_score(value: Any) -> float:
    """Missing, zero or non-numeric scores count as the default score."""
    if isinstance(value, bool) or not isinstance(value, Number) or not value:
        value = DEFAULT_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, value))


def _first(source: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if source.get(key) is not None:
            return source[key]
    return None


def normalize_assessment(
    raw: Optional[Mapping[str, Any]],
    tiers: Optional[ThresholdTable] = None,
) -> Dict[str, Any]:
    """
    Validate an assessment response.

    Accepts both the flat shape (overall_score, recommended_tier, strengths)
    and the nested one ({recommendedTier, scores: {...}, feedback: {...}}).
    """
    raw = raw or {}
    tiers = tiers or assessment_tier_table()
    scores = raw.get('scores') if isinstance(raw.get('scores'), Mapping) else {}
    feedback = raw.get('feedback') if isinstance(raw.get('feedback'), Mapping) else {}

    overall = clamp_score(_first(raw, 'overall_score') or scores.get('overall'))
    pronunciation = clamp_score(_first(raw, 'pronunciation_score') or scores.get('pronunciation'))
    fluency = clamp_score(_first(raw, 'fluency_score') or scores.get('fluency'))

    tier = _first(raw, 'recommended_tier', 'recommendedTier')
    if tier not in ASSESSMENT_TIERS:
        tier = ASSESSMENT_TIER_EXPLORER

    earned_tier = classify(overall, tiers)
    if ASSESSMENT_TIERS.index(tier) > ASSESSMENT_TIERS.index(earned_tier):
        tier = earned_tier

    strengths = _first(raw, 'strengths')
    if strengths is None:
        strengths = feedback.get('strengths')
    improvements = _first(raw, 'improvements')
    if improvements is None:
        improvements = feedback.get('improvements')

    return {
        'overall_score': overall,
        'pronunciation_score': pronunciation,
        'fluency_score': fluency,
        'recommended_tier': tier,
        'cefr_level': raw.get('cefr_level') or DEFAULT_CEFR_LEVEL,
        'strengths': list(strengths) if isinstance(strengths, list) else list(DEFAULT_STRENGTHS),
        'improvements': list(improvements) if isinstance(improvements, list) else list(DEFAULT_IMPROVEMENTS),
        'encouragement': raw.get('encouragement') or DEFAULT_ENCOURAGEMENT,
        'reasoning': raw.get('reasoning') or DEFAULT_REASONING,
    }
