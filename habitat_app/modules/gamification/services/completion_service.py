"""
Completion Service
Scores a unit submission and, on the first pass, records the completion and
moves the learner's counters.
"""
from flask import current_app

from habitat_app.core.exceptions import HabitatError, NotFoundError
from habitat_app.core.signals import unit_completed
from habitat_app.extensions import db
from habitat_app.models import LessonUnit
from habitat_app.modules.scoring.interface import ScoringInterface
from habitat_app.modules.scoring.logics.completion_gate import try_complete

from ..schemas import AttemptOutcome, CompletionRecordStatus, ProgressDelta
from .progress_service import ProgressService


class CompletionService:

    @staticmethod
    def get_unit(unit_id) -> LessonUnit:
        unit = db.session.get(LessonUnit, unit_id)
        if unit is None or not unit.is_active:
            raise NotFoundError(f'Unit {unit_id} not found', resource='unit')
        return unit

    @staticmethod
    def submit_attempt(user_id, unit_id, answers=None, grade=None) -> AttemptOutcome:
        """
        Score an attempt and apply the completion transition.

        Re-submitting an already completed unit returns fresh score and reward
        for feedback; counters and cumulative XP are left untouched.
        """
        unit = CompletionService.get_unit(unit_id)

        step_score = ScoringInterface.score_step(
            unit.unit_id,
            unit.step_type,
            unit.content or {},
            answers=answers,
            grade=grade,
            pass_threshold_percent=unit.pass_threshold_percent,
        )

        already_completed = ProgressService.get_completion_status(user_id, unit.unit_id)
        decision = try_complete(unit.unit_id, user_id, step_score, already_completed)

        if not decision.just_completed:
            return AttemptOutcome(
                unit_id=unit.unit_id,
                step_score=step_score,
                just_completed=False,
                already_completed=already_completed,
                progress=ProgressService.get_progress(user_id) if already_completed else None,
            )

        xp = step_score.reward.xp_awarded
        try:
            status = ProgressService.record_completion(user_id, unit.unit_id, xp)
            if status is CompletionRecordStatus.ALREADY_EXISTS:
                db.session.commit()
                return AttemptOutcome(
                    unit_id=unit.unit_id,
                    step_score=step_score,
                    just_completed=False,
                    already_completed=True,
                    progress=ProgressService.get_progress(user_id),
                )

            progress = ProgressService.update_progress(user_id, ProgressDelta(
                units_completed=1,
                xp=xp,
                ecosystem=unit.primary_ecosystem,
                unit_id=unit.unit_id,
                reason=f'Completed {unit.title}',
            ))
            db.session.commit()
        except HabitatError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(
                f"Error recording completion of unit {unit.unit_id} for user {user_id}: {e}",
                exc_info=True,
            )
            raise

        current_app.logger.info(
            f"User {user_id} completed unit {unit.unit_id} (+{xp} XP, "
            f"{progress.total_units_completed} units total)"
        )

        responses = unit_completed.send(
            None,
            user_id=user_id,
            unit_id=unit.unit_id,
            ecosystem=unit.primary_ecosystem,
            region_codes=list(unit.region_codes or []),
            xp_awarded=xp,
        )
        challenges, species_unlocked = [], []
        for _receiver, result in responses:
            if isinstance(result, dict):
                challenges.extend(result.get('challenges') or [])
                species_unlocked.extend(result.get('species_unlocked') or [])

        return AttemptOutcome(
            unit_id=unit.unit_id,
            step_score=step_score,
            just_completed=True,
            already_completed=False,
            progress=progress,
            challenges=challenges,
            species_unlocked=species_unlocked,
        )
