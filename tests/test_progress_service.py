"""
Tests for completion recording and cumulative progress.

Tests cover:
- At-most-once completion recording, including a lost race
- Counter updates and the XP log
- Challenge contributions fired by a first completion
- Species adoption unlocked by ecosystem progress
- Leaderboards
"""

import pytest

from habitat_app import db
from habitat_app.core.exceptions import NotFoundError, ValidationError
from habitat_app.models import (
    AdoptableSpecies,
    ChallengeProgress,
    EcosystemProgress,
    EnvironmentalChallenge,
    SpeciesAdoption,
    UnitCompletion,
    User,
    XpLog,
)
from habitat_app.modules.gamification.schemas import CompletionRecordStatus, ProgressDelta
from habitat_app.modules.gamification.services import (
    ChallengeService,
    CompletionService,
    LeaderboardService,
    ProgressService,
    SpeciesService,
)

ALL_GAPS_CORRECT = {
    'gap-0': 'coral',
    'gap-1': 'reef',
    'gap-2': 'tide',
    'gap-3': 'kelp',
    'gap-4': 'whale',
}

TWO_GAPS_CORRECT = {'gap-0': 'coral', 'gap-1': 'reef'}


class TestProgressService:
    """Persistence collaborator."""

    def test_record_completion_once(self, app, learner, make_unit):
        make_unit()
        first = ProgressService.record_completion(learner.user_id, 'marine-01', 70)
        second = ProgressService.record_completion(learner.user_id, 'marine-01', 70)
        db.session.commit()

        assert first is CompletionRecordStatus.SUCCESS
        assert second is CompletionRecordStatus.ALREADY_EXISTS
        assert UnitCompletion.query.filter_by(user_id=learner.user_id).count() == 1

    def test_lost_race_reports_already_exists(self, app, learner, make_unit, monkeypatch):
        make_unit()
        db.session.add(UnitCompletion(user_id=learner.user_id, unit_id='marine-01', xp_earned=70))
        db.session.commit()

        # The other request inserted between our check and our insert.
        checks = iter([False, True])
        monkeypatch.setattr(
            ProgressService, 'get_completion_status', staticmethod(lambda *_: next(checks))
        )
        status = ProgressService.record_completion(learner.user_id, 'marine-01', 70)
        db.session.commit()

        assert status is CompletionRecordStatus.ALREADY_EXISTS
        assert UnitCompletion.query.count() == 1

    def test_update_progress_increments(self, app, learner):
        state = ProgressService.update_progress(
            learner.user_id, ProgressDelta(units_completed=1, xp=70, ecosystem='marine', unit_id='marine-01')
        )
        state = ProgressService.update_progress(
            learner.user_id, ProgressDelta(units_completed=1, xp=20, ecosystem='forest')
        )
        db.session.commit()

        assert state.total_units_completed == 2
        assert state.total_xp == 90
        assert state.per_ecosystem_units_completed == {'marine': 1, 'forest': 1}
        assert state.current_streak == 1
        assert db.session.get(User, learner.user_id).total_xp == 90
        assert XpLog.query.filter_by(user_id=learner.user_id).count() == 2

    def test_progress_never_decreases(self, app, learner):
        with pytest.raises(ValidationError):
            ProgressService.update_progress(learner.user_id, ProgressDelta(xp=-10))

    def test_ecosystem_bucket_rows(self, app, learner):
        ProgressService.update_progress(learner.user_id, ProgressDelta(units_completed=1, xp=10, ecosystem='polar'))
        db.session.commit()
        bucket = EcosystemProgress.query.filter_by(user_id=learner.user_id, ecosystem='polar').one()
        assert bucket.units_completed == 1

    def test_empty_progress(self, app, learner):
        state = ProgressService.get_progress(learner.user_id)
        assert state.total_units_completed == 0
        assert state.last_activity_at is None
        assert state.completed_unit_ids == frozenset()
        assert state.to_dict()['completed_unit_ids'] == []


class TestCompletionService:
    """Submit flow: score, gate, record, count."""

    def test_first_pass_completes_once(self, app, learner, make_unit):
        make_unit()
        first = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)
        second = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)

        assert first.just_completed is True
        assert first.step_score.reward.xp_awarded == 70
        assert second.just_completed is False
        assert second.already_completed is True
        assert second.step_score.reward.xp_awarded == 70

        progress = ProgressService.get_progress(learner.user_id)
        assert progress.total_units_completed == 1
        assert progress.total_xp == 70
        assert progress.per_ecosystem_units_completed == {'marine': 1}
        assert progress.completed_unit_ids == frozenset({'marine-01'})

    def test_failed_attempt_changes_nothing(self, app, learner, make_unit):
        make_unit()
        outcome = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=TWO_GAPS_CORRECT)

        assert outcome.step_score.passed is False
        assert outcome.step_score.reward.xp_awarded == 20
        assert outcome.just_completed is False
        assert ProgressService.get_completion_status(learner.user_id, 'marine-01') is False
        assert ProgressService.get_progress(learner.user_id).total_xp == 0

    def test_unit_threshold_override(self, app, learner, make_unit):
        make_unit(pass_threshold_percent=40)
        outcome = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=TWO_GAPS_CORRECT)
        assert outcome.just_completed is True

    def test_externally_graded_unit(self, app, learner, make_unit):
        make_unit(unit_id='forest-ai', step_type='ai_writing', content={}, primary_ecosystem='forest')
        outcome = CompletionService.submit_attempt(
            learner.user_id, 'forest-ai', grade={'xp': 40, 'passed': True}
        )
        assert outcome.just_completed is True
        assert outcome.progress.total_xp == 40

    def test_unknown_unit(self, app, learner):
        with pytest.raises(NotFoundError):
            CompletionService.submit_attempt(learner.user_id, 'missing', answers={})

    def test_inactive_unit(self, app, learner, make_unit):
        make_unit(is_active=False)
        with pytest.raises(NotFoundError):
            CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)


@pytest.fixture
def reef_challenge(app):
    challenge = EnvironmentalChallenge(
        name='Reef Rescue',
        target_ecosystem='marine',
        affected_regions=['AU-QLD'],
        units_required=4,
    )
    db.session.add(challenge)
    db.session.commit()
    return challenge


class TestChallengeContributions:
    """First completions feed matching challenges."""

    def test_completion_contributes(self, app, learner, make_unit, reef_challenge):
        make_unit()
        CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)
        CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)

        progress = ChallengeProgress.query.filter_by(user_id=learner.user_id).one()
        assert progress.units_contributed == 1
        assert db.session.get(EnvironmentalChallenge, reef_challenge.challenge_id).total_contributions == 1

    def test_other_region_does_not_contribute(self, app, learner, make_unit, reef_challenge):
        make_unit(region_codes=['NZ'])
        CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)
        assert ChallengeProgress.query.count() == 0

    def test_active_challenges_listing(self, app, learner, make_unit, reef_challenge):
        make_unit()
        CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)

        (listed,) = ChallengeService.get_active_challenges(learner.user_id)
        assert listed['completion_percentage'] == 25
        assert listed['participants_count'] == 1
        assert listed['user_contribution'] == 1
        assert listed['status'] == 'active'
        assert listed['days_remaining'] is None


@pytest.fixture
def marine_species(app):
    species = [
        AdoptableSpecies(name='Clownfish', emoji='🐠', ecosystem='marine', units_required=1),
        AdoptableSpecies(name='Sea Turtle', emoji='🐢', ecosystem='marine', units_required=2),
        AdoptableSpecies(name='Red Panda', emoji='🐼', ecosystem='forest', units_required=1),
        AdoptableSpecies(name='Dugong', ecosystem='marine', units_required=1, is_active=False),
    ]
    db.session.add_all(species)
    db.session.commit()
    return species


class TestSpeciesAdoption:
    """First completions unlock species of the unit's ecosystem."""

    def test_first_completion_adopts_unlocked_species(self, app, learner, make_unit, marine_species):
        make_unit()
        outcome = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)

        assert [s['name'] for s in outcome.species_unlocked] == ['Clownfish']
        assert outcome.to_dict()['species_unlocked'][0]['emoji'] == '🐠'
        assert SpeciesAdoption.query.filter_by(user_id=learner.user_id).count() == 1

    def test_threshold_and_no_repeat(self, app, learner, make_unit, marine_species):
        make_unit()
        make_unit(unit_id='marine-02')
        CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)
        again = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)
        second = CompletionService.submit_attempt(learner.user_id, 'marine-02', answers=ALL_GAPS_CORRECT)

        assert again.species_unlocked == []
        assert [s['name'] for s in second.species_unlocked] == ['Sea Turtle']
        adopted = SpeciesService.get_adopted_species(learner.user_id)
        assert [s['name'] for s in adopted] == ['Clownfish', 'Sea Turtle']

    def test_adoption_records_contributing_challenge(
        self, app, learner, make_unit, marine_species, reef_challenge
    ):
        make_unit()
        outcome = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=ALL_GAPS_CORRECT)

        assert outcome.challenges[0]['challenge_name'] == 'Reef Rescue'
        adoption = SpeciesAdoption.query.filter_by(user_id=learner.user_id).one()
        assert adoption.challenge_id == reef_challenge.challenge_id

    def test_failed_attempt_adopts_nothing(self, app, learner, make_unit, marine_species):
        make_unit()
        outcome = CompletionService.submit_attempt(learner.user_id, 'marine-01', answers=TWO_GAPS_CORRECT)
        assert outcome.species_unlocked == []
        assert SpeciesAdoption.query.count() == 0

    def test_no_progress_no_species(self, app, learner, marine_species):
        assert SpeciesService.unlock_for_ecosystem(learner.user_id, 'marine') == []
        assert SpeciesService.unlock_for_ecosystem(learner.user_id, None) == []


class TestLeaderboard:
    """Ranking by XP."""

    def _add_user(self, name, xp):
        user = User(username=name, email=f'{name}@example.com')
        db.session.add(user)
        db.session.commit()
        if xp:
            ProgressService.update_progress(user.user_id, ProgressDelta(units_completed=1, xp=xp))
            db.session.commit()
        return user

    def test_all_time_order(self, app):
        self._add_user('ana', 50)
        self._add_user('ben', 120)
        self._add_user('cat', 0)

        board = LeaderboardService.get_leaderboard('all_time', limit=10)
        assert [row['username'] for row in board] == ['ben', 'ana']
        assert board[0]['rank'] == 1

    def test_weekly_from_log(self, app):
        self._add_user('ana', 50)
        board = LeaderboardService.get_leaderboard('week', limit=10)
        assert board == [{'rank': 1, 'user_id': board[0]['user_id'], 'username': 'ana', 'xp': 50}]

    def test_unknown_timeframe(self, app):
        with pytest.raises(ValidationError):
            LeaderboardService.get_leaderboard('decade')


class TestInterface:
    """Module entry points used by the routes."""

    def test_streak_dto(self, app, learner):
        from habitat_app.modules.gamification import interface

        ProgressService.update_progress(learner.user_id, ProgressDelta(units_completed=1, xp=10))
        db.session.commit()

        streak = interface.get_streak(learner.user_id)
        assert streak.current_streak == 1
        assert streak.longest_streak == 1
        assert streak.last_activity_date is not None

    def test_leaderboard_limit_is_clamped(self, app):
        from habitat_app.modules.gamification import interface

        for name, xp in (('ana', 50), ('ben', 120)):
            user = User(username=name, email=f'{name}@example.com')
            db.session.add(user)
            db.session.commit()
            ProgressService.update_progress(user.user_id, ProgressDelta(units_completed=1, xp=xp))
            db.session.commit()

        board = interface.get_leaderboard('all_time', limit=0)
        assert [row['username'] for row in board] == ['ben']
        assert len(interface.get_leaderboard('all_time', limit=500)) == 2

    def test_password_check(self, app, learner):
        assert learner.check_password('password123') is True
        assert learner.check_password('wrong') is False
