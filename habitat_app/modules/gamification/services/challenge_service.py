"""
Challenge Service
Environmental challenges fed by unit completions.
"""
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import func

from habitat_app.extensions import db
from habitat_app.models import ChallengeProgress, EnvironmentalChallenge

from ..logics.challenge_logic import (
    challenge_matches_unit,
    challenge_status,
    completion_percentage,
    days_remaining,
)


class ChallengeService:

    @staticmethod
    def find_matching_challenges(ecosystem, region_codes):
        """Active challenges a unit from ``ecosystem``/``region_codes`` contributes to."""
        if not ecosystem:
            return []
        candidates = EnvironmentalChallenge.query.filter_by(
            is_active=True, target_ecosystem=ecosystem
        ).all()
        return [
            challenge for challenge in candidates
            if challenge_matches_unit(
                challenge.target_ecosystem, challenge.affected_regions, ecosystem, region_codes
            )
        ]

    @staticmethod
    def contribute_from_unit(user_id, unit_id, ecosystem, region_codes):
        """
        Add one contribution per matching challenge for a first completion.

        Returns a list of {challenge_id, challenge_name, new_contribution}.
        Commits its own transaction.
        """
        challenges = ChallengeService.find_matching_challenges(ecosystem, region_codes)
        if not challenges:
            return []

        today = datetime.now(timezone.utc).date()
        results = []
        try:
            for challenge in challenges:
                progress = ChallengeProgress.query.filter_by(
                    user_id=user_id, challenge_id=challenge.challenge_id
                ).first()
                if progress is None:
                    progress = ChallengeProgress(
                        user_id=user_id, challenge_id=challenge.challenge_id, units_contributed=0
                    )
                    db.session.add(progress)
                progress.units_contributed += 1
                progress.last_contribution = today
                challenge.total_contributions = (challenge.total_contributions or 0) + 1

                results.append({
                    'challenge_id': challenge.challenge_id,
                    'challenge_name': challenge.name,
                    'new_contribution': progress.units_contributed,
                })
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(
                f"Error recording challenge contribution for user {user_id}, unit {unit_id}: {e}",
                exc_info=True,
            )
            raise

        current_app.logger.info(
            f"User {user_id} contributed unit {unit_id} to {len(results)} challenge(s)"
        )
        return results

    @staticmethod
    def get_active_challenges(user_id=None):
        """Active challenges with community progress and, optionally, the learner's share."""
        challenges = EnvironmentalChallenge.query.filter_by(is_active=True)\
            .order_by(EnvironmentalChallenge.challenge_id.desc()).all()

        participant_counts = dict(
            db.session.query(ChallengeProgress.challenge_id, func.count(ChallengeProgress.user_id))
            .group_by(ChallengeProgress.challenge_id)
            .all()
        )

        own = {}
        if user_id is not None:
            own = {
                row.challenge_id: row.units_contributed
                for row in ChallengeProgress.query.filter_by(user_id=user_id).all()
            }

        return [
            {
                'challenge_id': c.challenge_id,
                'challenge_name': c.name,
                'challenge_type': c.challenge_type,
                'description': c.description,
                'target_ecosystem': c.target_ecosystem,
                'affected_regions': list(c.affected_regions or []),
                'units_required': c.units_required,
                'total_contributions': c.total_contributions,
                'participants_count': participant_counts.get(c.challenge_id, 0),
                'completion_percentage': completion_percentage(c.total_contributions, c.units_required),
                'status': challenge_status(c.total_contributions, c.units_required),
                'end_date': c.end_date.isoformat() if c.end_date else None,
                'days_remaining': days_remaining(c.end_date),
                'user_contribution': own.get(c.challenge_id, 0),
            }
            for c in challenges
        ]
