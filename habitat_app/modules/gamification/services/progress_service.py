"""
Progress Service
Persistence of completions and cumulative learner progress.

Methods here flush but never commit; the caller owns the transaction so a
completion and its counter updates land together.
"""
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from habitat_app.core.exceptions import ValidationError
from habitat_app.core.signals import xp_awarded
from habitat_app.extensions import db
from habitat_app.models import EcosystemProgress, LearnerProgress, UnitCompletion, User, XpLog

from ..logics.streak_logic import calculate_longest_streak, calculate_streak_from_dates
from ..schemas import CompletionRecordStatus, ProgressDelta, ProgressState


class ProgressService:
    """Completion records and cumulative counters."""

    @staticmethod
    def get_completion_status(learner_id, unit_id) -> bool:
        return bool(db.session.query(
            UnitCompletion.query.filter_by(user_id=learner_id, unit_id=unit_id).exists()
        ).scalar())

    @staticmethod
    def record_completion(learner_id, unit_id, xp) -> CompletionRecordStatus:
        """
        Insert the completion row at most once per (learner, unit).

        A concurrent request that inserted first surfaces as an IntegrityError
        on the unique constraint and is reported as ALREADY_EXISTS.
        """
        if ProgressService.get_completion_status(learner_id, unit_id):
            return CompletionRecordStatus.ALREADY_EXISTS

        try:
            with db.session.begin_nested():
                db.session.add(UnitCompletion(user_id=learner_id, unit_id=unit_id, xp_earned=xp))
        except IntegrityError:
            if ProgressService.get_completion_status(learner_id, unit_id):
                current_app.logger.warning(
                    f"Completion race lost: user={learner_id} unit={unit_id} already recorded"
                )
                return CompletionRecordStatus.ALREADY_EXISTS
            # Not a duplicate: unknown learner or unit.
            raise

        return CompletionRecordStatus.SUCCESS

    @staticmethod
    def _get_or_create(learner_id) -> LearnerProgress:
        progress = db.session.get(LearnerProgress, learner_id)
        if progress is None:
            progress = LearnerProgress(
                user_id=learner_id,
                total_units_completed=0,
                total_xp=0,
                current_streak=0,
                longest_streak=0,
            )
            db.session.add(progress)
        return progress

    @staticmethod
    def update_progress(learner_id, delta: ProgressDelta) -> ProgressState:
        """Apply increments to the learner's counters. Counters never decrease."""
        if delta.units_completed < 0 or delta.xp < 0:
            raise ValidationError(
                'Progress can only increase',
                errors={'units_completed': delta.units_completed, 'xp': delta.xp},
            )

        user = db.session.get(User, learner_id)
        if user is None:
            raise ValidationError(f'Unknown learner {learner_id}')

        now = datetime.now(timezone.utc)
        progress = ProgressService._get_or_create(learner_id)
        progress.total_units_completed += delta.units_completed
        progress.total_xp += delta.xp
        progress.last_activity_at = now
        user.total_xp = progress.total_xp

        if delta.ecosystem and delta.units_completed:
            bucket = EcosystemProgress.query.filter_by(
                user_id=learner_id, ecosystem=delta.ecosystem
            ).first()
            if bucket is None:
                bucket = EcosystemProgress(user_id=learner_id, ecosystem=delta.ecosystem, units_completed=0)
                db.session.add(bucket)
            bucket.units_completed += delta.units_completed
            bucket.last_activity_date = now.date()

        if delta.xp:
            db.session.add(XpLog(
                user_id=learner_id,
                unit_id=delta.unit_id,
                xp_change=delta.xp,
                reason=delta.reason,
                source_type=delta.source_type,
                timestamp=now,
            ))

        db.session.flush()

        activity_dates = ProgressService._activity_dates(learner_id)
        progress.current_streak = calculate_streak_from_dates(activity_dates, now.date())
        progress.longest_streak = max(
            progress.longest_streak or 0,
            calculate_longest_streak(activity_dates),
        )

        if delta.xp:
            xp_awarded.send(
                None,
                user_id=learner_id,
                amount=delta.xp,
                reason=delta.reason,
                new_total=progress.total_xp,
            )

        return ProgressService._to_state(progress)

    @staticmethod
    def get_progress(learner_id) -> ProgressState:
        progress = db.session.get(LearnerProgress, learner_id)
        if progress is None:
            return ProgressState(
                user_id=learner_id,
                total_units_completed=0,
                total_xp=0,
                current_streak=0,
                longest_streak=0,
                last_activity_at=None,
                per_ecosystem_units_completed={},
                completed_unit_ids=frozenset(),
            )

        # Stored streak goes stale after a missed day; recompute for display.
        activity_dates = ProgressService._activity_dates(learner_id)
        state = ProgressService._to_state(progress)
        state.current_streak = calculate_streak_from_dates(
            activity_dates, datetime.now(timezone.utc).date()
        )
        return state

    @staticmethod
    def _activity_dates(learner_id):
        rows = (
            db.session.query(func.date(XpLog.timestamp).label('activity_date'))
            .filter(XpLog.user_id == learner_id)
            .group_by(func.date(XpLog.timestamp))
            .all()
        )
        return [row.activity_date for row in rows]

    @staticmethod
    def _to_state(progress: LearnerProgress) -> ProgressState:
        ecosystems = {
            row.ecosystem: row.units_completed
            for row in EcosystemProgress.query.filter_by(user_id=progress.user_id).all()
        }
        completed = frozenset(
            row.unit_id for row in UnitCompletion.query.filter_by(user_id=progress.user_id).all()
        )
        return ProgressState(
            user_id=progress.user_id,
            total_units_completed=progress.total_units_completed,
            total_xp=progress.total_xp,
            current_streak=progress.current_streak,
            longest_streak=progress.longest_streak,
            last_activity_at=progress.last_activity_at,
            per_ecosystem_units_completed=ecosystems,
            completed_unit_ids=completed,
        )
