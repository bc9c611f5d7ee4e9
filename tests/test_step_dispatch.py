"""
Tests for step dispatch, the scoring interface and per-lesson sessions.
"""

import pytest

from habitat_app.core.exceptions import InvalidConfigurationError, UnscoreableStepError
from habitat_app.modules.scoring.interface import ScoringInterface
from habitat_app.modules.scoring.logics.session_logic import (
    completion_percent,
    record_step,
    start_session,
)
from habitat_app.modules.scoring.logics.step_dispatch import (
    AnswerScoringPlan,
    ExternalGradingPlan,
    StepType,
    build_plan,
    is_scoreable,
)
from habitat_app.modules.scoring.schemas import (
    AggregationPolicy,
    FlatRewardPolicy,
    RewardOutcome,
    ScalingRewardPolicy,
    UnitKind,
)


class TestBuildPlan:
    """Payload shapes map onto units and policies."""

    def test_gap_fill_with_gaps(self):
        plan = build_plan('s1', 'gap_fill', {'gaps': [{'correct_answer': 'a'}, {'correct_answer': 'b'}]})

        assert isinstance(plan, AnswerScoringPlan)
        assert plan.unit.kind is UnitKind.MULTI_GAP
        assert [item.id for item in plan.unit.items] == ['gap-0', 'gap-1']
        assert plan.aggregation is AggregationPolicy.PARTIAL_CREDIT
        assert plan.reward_policy == ScalingRewardPolicy(10, 20)

    def test_single_gap(self):
        plan = build_plan('s1', 'gap_fill', {'gaps': [{'correctAnswer': 'a'}]})
        assert plan.unit.kind is UnitKind.SINGLE_GAP

    def test_scenarios(self):
        payload = {'scenarios': [
            {'gaps': [{'correct_answer': 'a'}, {'correct_answer': 'b'}]},
            {'gaps': [{'correct_answer': 'c'}]},
        ]}
        plan = build_plan('s1', 'gap_fill_advanced', payload)
        assert [item.id for item in plan.unit.items] == ['0-0', '0-1', '1-0']

    def test_legacy_answer_list_is_set_valued(self):
        plan = build_plan('s1', 'gap_fill', {'correct_answers': ['sea', 'ocean']})
        (item,) = plan.unit.items
        assert item.id == 'answer'
        assert item.correct_answer == frozenset({'sea', 'ocean'})

    def test_situational_challenges(self):
        payload = {'challenges': [{'correct_answer': 'a'}, {'correct_answer': 'b'}]}
        plan = build_plan('s1', 'situational', payload)

        assert [item.id for item in plan.unit.items] == ['challenge-0', 'challenge-1']
        assert plan.aggregation is AggregationPolicy.ALL_OR_NOTHING
        assert plan.reward_policy == ScalingRewardPolicy(15, 20)

    def test_single_situational_question(self):
        plan = build_plan('s1', 'situational', {'correct_answer': 'a', 'options': ['a', 'b']})
        assert plan.reward_policy == FlatRewardPolicy(20)
        assert plan.unit.items[0].options == ('a', 'b')

    def test_assessment_reading(self):
        payload = {'questions': [{'correct_answer': 'a'}, {'correct_answer': 'b'}]}
        plan = build_plan('s1', StepType.ASSESSMENT_READING, payload)
        assert plan.unit.kind is UnitKind.ASSESSMENT_READING
        assert plan.aggregation is AggregationPolicy.PARTIAL_CREDIT

    def test_ai_steps_are_externally_graded(self):
        plan = build_plan('s1', 'ai_writing', {})
        assert isinstance(plan, ExternalGradingPlan)
        assert plan.policy.default_xp == 10

    @pytest.mark.parametrize('step_type', ['video', 'dialogue', 'completion', 'unknown_step'])
    def test_non_scoreable_steps_are_refused(self, step_type):
        with pytest.raises(UnscoreableStepError):
            build_plan('s1', step_type, {})
        assert is_scoreable(step_type) is False

    def test_item_without_answer_is_invalid(self):
        with pytest.raises(InvalidConfigurationError):
            build_plan('s1', 'gap_fill', {'gaps': [{'hint': 'no answer'}]})

    @pytest.mark.parametrize('step_type, payload', [
        ('gap_fill', {'gaps': ['coral']}),
        ('gap_fill', {'gaps': 'coral'}),
        ('gap_fill_advanced', {'scenarios': ['reef']}),
        ('gap_fill_advanced', {'scenarios': [{'gaps': 5}]}),
        ('situational', {'challenges': [None, 3]}),
        ('assessment_reading', {'questions': {'correct_answer': 'a'}}),
        ('gap_fill', {'correct_answers': 'sea'}),
        ('multiple_choice', ['a']),
    ])
    def test_malformed_payload_is_invalid(self, step_type, payload):
        with pytest.raises(InvalidConfigurationError):
            build_plan('s1', step_type, payload)


class TestScoringInterface:
    """score_step end to end, without the database."""

    def test_gap_fill_score(self):
        payload = {'gaps': [{'correct_answer': w} for w in ('a', 'b', 'c', 'd', 'e')]}
        answers = {f'gap-{i}': w for i, w in enumerate('abcde')}
        score = ScoringInterface.score_step('s1', 'gap_fill', payload, answers=answers)

        assert score.passed is True
        assert score.reward.xp_awarded == 70
        assert score.to_dict()['score']['is_perfect'] is True

    def test_external_grade(self):
        score = ScoringInterface.score_step('s1', 'ai_conversation', {}, grade={'xp': 25, 'passed': True})
        assert score.result is None
        assert score.reward.xp_awarded == 25
        assert score.passed is True

    @pytest.mark.parametrize('grade', [None, {}, {'xp': 25}, {'passed': 'yes'}])
    def test_external_step_without_explicit_pass_fails(self, grade):
        score = ScoringInterface.score_step('s1', 'ai_writing', {}, grade=grade)
        assert score.passed is False
        assert score.reward.xp_awarded == 0

    def test_app_config_overrides_defaults(self, app):
        app.config['GAP_FILL_XP_PER_CORRECT'] = 5
        payload = {'gaps': [{'correct_answer': 'a'}, {'correct_answer': 'b'}]}
        score = ScoringInterface.score_step('s1', 'gap_fill', payload, answers={'gap-0': 'a'})

        assert score.reward.xp_awarded == 5
        assert score.passed is False


class TestScoringSession:
    """XP counted once per step within a lesson."""

    def test_rechecking_a_step_does_not_add_xp(self):
        session = start_session('lesson-1', total_steps=4)
        session = record_step(session, 'step-1', RewardOutcome(20))
        session = record_step(session, 'step-1', RewardOutcome(20))

        assert session.xp_earned == 20
        assert len(session.records) == 2
        assert session.latest_record('step-1').counted is False

    def test_completion_percent(self):
        session = start_session('lesson-1', total_steps=3)
        session = record_step(session, 'step-1', RewardOutcome(10))
        assert completion_percent(session) == 33
        assert completion_percent(start_session('empty', 0)) == 0

    def test_previous_session_is_unchanged(self):
        session = start_session('lesson-1', total_steps=2)
        record_step(session, 'step-1', RewardOutcome(10))
        assert session.xp_earned == 0
        assert session.is_step_completed('step-1') is False

    def test_negative_step_count(self):
        with pytest.raises(InvalidConfigurationError):
            start_session('lesson-1', total_steps=-1)
