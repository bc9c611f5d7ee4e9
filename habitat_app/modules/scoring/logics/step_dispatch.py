"""
Step Dispatch - maps lesson-player step types onto scoring plans.

Every step type the lesson player knows is listed in StepType. Scoreable
types become an AnswerScoringPlan (unit + aggregation policy + reward policy),
AI-graded types become an ExternalGradingPlan that bypasses the matcher and
aggregator, and content-only types are refused.

The payload shapes are the ones the lesson player renders:
    gaps[]                -> items "gap-<i>"
    scenarios[].gaps[]    -> items "<scenario>-<gap>"
    challenges[]          -> items "challenge-<i>"
    questions[]           -> items "question-<i>"
    correct_answer        -> item  "answer"
    correct_answers[]     -> item  "answer" accepting any listed value

NO database, NO Flask, NO model dependencies allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from habitat_app.core.exceptions import InvalidConfigurationError, UnscoreableStepError

from ..config import ScoringDefaultConfig
from ..schemas import (
    AggregationPolicy,
    AnswerItem,
    ExerciseUnit,
    ExternallyGradedPolicy,
    FlatRewardPolicy,
    RewardPolicy,
    ScalingRewardPolicy,
    UnitKind,
)

SINGLE_ANSWER_ID = 'answer'


class StepType(Enum):
    """Lesson step tags."""
    # Scoreable by answer matching
    GAP_FILL = "gap_fill"
    GAP_FILL_ADVANCED = "gap_fill_advanced"
    SITUATIONAL = "situational"
    SITUATIONAL_CHALLENGES = "situational_challenges"
    MULTIPLE_CHOICE = "multiple_choice"
    ASSESSMENT_READING = "assessment_reading"
    # Graded by an external AI collaborator
    AI_WRITING = "ai_writing"
    AI_CONVERSATION = "ai_conversation"
    AI_SPEECH_PRACTICE = "ai_speech_practice"
    AI_GAP_FILL = "ai_gap_fill"
    AI_LISTENING_CHALLENGE = "ai_listening_challenge"
    # Content only
    VOCABULARY = "vocabulary"
    DIALOGUE = "dialogue"
    DIALOGUE_IMMERSION = "dialogue_immersion"
    VIDEO = "video"
    SCENARIO = "scenario"
    MEMORY_MATCH = "memory_match"
    WORD_SNAKE = "word_snake"
    CONVERSATION_VOTE = "conversation_vote"
    UNIT_REFERENCE = "unit_reference"
    CHALLENGE_REFERENCE = "challenge_reference"
    INTERACTIVE_GAME = "interactive_game"
    PRONUNCIATION_DRILL = "pronunciation_drill"
    COMPLETION = "completion"


ANSWER_SCORED_TYPES = frozenset({
    StepType.GAP_FILL,
    StepType.GAP_FILL_ADVANCED,
    StepType.SITUATIONAL,
    StepType.SITUATIONAL_CHALLENGES,
    StepType.MULTIPLE_CHOICE,
    StepType.ASSESSMENT_READING,
})

EXTERNALLY_GRADED_TYPES = frozenset({
    StepType.AI_WRITING,
    StepType.AI_CONVERSATION,
    StepType.AI_SPEECH_PRACTICE,
    StepType.AI_GAP_FILL,
    StepType.AI_LISTENING_CHALLENGE,
})


@dataclass(frozen=True)
class PolicySet:
    """The reward policies a dispatcher hands out, one per reward family."""
    gap_fill: ScalingRewardPolicy
    challenge: ScalingRewardPolicy
    single_answer: FlatRewardPolicy
    external: ExternallyGradedPolicy

    @classmethod
    def from_defaults(cls) -> 'PolicySet':
        cfg = ScoringDefaultConfig
        return cls(
            gap_fill=ScalingRewardPolicy(cfg.GAP_FILL_XP_PER_CORRECT, cfg.PERFECT_SCORE_BONUS),
            challenge=ScalingRewardPolicy(cfg.CHALLENGE_XP_PER_CORRECT, cfg.PERFECT_SCORE_BONUS),
            single_answer=FlatRewardPolicy(cfg.SINGLE_ANSWER_XP),
            external=ExternallyGradedPolicy(cfg.EXTERNAL_GRADED_DEFAULT_XP),
        )


@dataclass(frozen=True)
class AnswerScoringPlan:
    step_type: StepType
    unit: ExerciseUnit
    aggregation: AggregationPolicy
    reward_policy: RewardPolicy


@dataclass(frozen=True)
class ExternalGradingPlan:
    step_type: StepType
    step_id: str
    policy: ExternallyGradedPolicy


ScoringPlan = Union[AnswerScoringPlan, ExternalGradingPlan]


def parse_step_type(value: Union[str, StepType]) -> StepType:
    if isinstance(value, StepType):
        return value
    try:
        return StepType(value)
    except ValueError:
        raise UnscoreableStepError(str(value)) from None


def is_scoreable(step_type: Union[str, StepType]) -> bool:
    try:
        parsed = parse_step_type(step_type)
    except UnscoreableStepError:
        return False
    return parsed in ANSWER_SCORED_TYPES or parsed in EXTERNALLY_GRADED_TYPES


def build_plan(
    step_id: str,
    step_type: Union[str, StepType],
    payload: Mapping[str, Any],
    pass_threshold_percent: float = ScoringDefaultConfig.PASS_THRESHOLD_PERCENT,
    policies: Optional[PolicySet] = None,
) -> ScoringPlan:
    """
    Build the scoring plan for one lesson step.

    Raises:
        UnscoreableStepError: content-only or unknown step type.
        InvalidConfigurationError: a scoreable step without answer keys.
    """
    step_type = parse_step_type(step_type)
    policies = policies or PolicySet.from_defaults()
    payload = payload or {}
    if not isinstance(payload, Mapping):
        raise InvalidConfigurationError(f"Step {step_id} payload must be an object", field='payload')

    if step_type in EXTERNALLY_GRADED_TYPES:
        return ExternalGradingPlan(step_type=step_type, step_id=step_id, policy=policies.external)

    if step_type not in ANSWER_SCORED_TYPES:
        raise UnscoreableStepError(step_type.value)

    if step_type in (StepType.GAP_FILL, StepType.GAP_FILL_ADVANCED):
        kind, items = _gap_fill_items(step_id, payload)
        aggregation = AggregationPolicy.PARTIAL_CREDIT
        reward_policy = policies.gap_fill

    elif step_type in (StepType.SITUATIONAL, StepType.SITUATIONAL_CHALLENGES):
        aggregation = AggregationPolicy.ALL_OR_NOTHING
        kind = UnitKind.MULTIPLE_CHOICE_CHALLENGE
        if payload.get('challenges'):
            items = [
                _item(f"challenge-{index}", challenge, step_id)
                for index, challenge in enumerate(_entries(payload, 'challenges', step_id))
            ]
            reward_policy = policies.challenge
        else:
            items = [_item(SINGLE_ANSWER_ID, payload, step_id)]
            reward_policy = policies.single_answer

    elif step_type is StepType.MULTIPLE_CHOICE:
        kind = UnitKind.MULTIPLE_CHOICE_CHALLENGE
        items = [_item(SINGLE_ANSWER_ID, payload, step_id)]
        aggregation = AggregationPolicy.ALL_OR_NOTHING
        reward_policy = policies.single_answer

    else:  # ASSESSMENT_READING
        kind = UnitKind.ASSESSMENT_READING
        items = [
            _item(f"question-{index}", question, step_id)
            for index, question in enumerate(_entries(payload, 'questions', step_id))
        ]
        aggregation = AggregationPolicy.PARTIAL_CREDIT
        reward_policy = policies.single_answer

    unit = ExerciseUnit(
        id=step_id,
        kind=kind,
        items=tuple(items),
        pass_threshold_percent=pass_threshold_percent,
    )
    return AnswerScoringPlan(
        step_type=step_type,
        unit=unit,
        aggregation=aggregation,
        reward_policy=reward_policy,
    )


def _gap_fill_items(step_id: str, payload: Mapping[str, Any]):
    if payload.get('scenarios'):
        items: List[AnswerItem] = []
        for s_index, scenario in enumerate(_entries(payload, 'scenarios', step_id)):
            if not isinstance(scenario, Mapping):
                raise InvalidConfigurationError(
                    f"Step {step_id} scenario {s_index} must be an object", field='scenarios'
                )
            for g_index, gap in enumerate(_entries(scenario, 'gaps', step_id)):
                items.append(_item(f"{s_index}-{g_index}", gap, step_id))
        return UnitKind.MULTI_GAP, items

    if payload.get('gaps'):
        items = [
            _item(f"gap-{index}", gap, step_id)
            for index, gap in enumerate(_entries(payload, 'gaps', step_id))
        ]
        kind = UnitKind.SINGLE_GAP if len(items) == 1 else UnitKind.MULTI_GAP
        return kind, items

    # Old single-gap structure: a list of accepted answers.
    return UnitKind.SINGLE_GAP, [_item(SINGLE_ANSWER_ID, payload, step_id)]


def _entries(source: Mapping[str, Any], key: str, step_id: str) -> list:
    value = source.get(key) or []
    if not isinstance(value, (list, tuple)):
        raise InvalidConfigurationError(f"Step {step_id} field {key} must be a list", field=key)
    return list(value)


def _item(item_id: str, source: Mapping[str, Any], step_id: str) -> AnswerItem:
    if not isinstance(source, Mapping):
        raise InvalidConfigurationError(f"Step {step_id} item {item_id} must be an object", field=item_id)
    accepted = []
    for key in ('correct_answer', 'correctAnswer'):
        value = source.get(key)
        if value is not None and value not in accepted:
            accepted.append(value)
    for key in ('correct_answers', 'correctAnswers'):
        for value in _entries(source, key, step_id):
            if value not in accepted:
                accepted.append(value)

    if not accepted:
        raise InvalidConfigurationError(
            f"Step {step_id} item {item_id} has no correct answer", field=item_id
        )

    if len(accepted) == 1:
        correct = accepted[0]
    else:
        try:
            correct = frozenset(accepted)
        except TypeError:
            raise InvalidConfigurationError(
                f"Step {step_id} item {item_id} has an unhashable answer", field=item_id
            ) from None
    return AnswerItem(id=item_id, correct_answer=correct, options=tuple(_entries(source, 'options', step_id)))
