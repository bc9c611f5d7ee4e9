"""
Species Service
Adoptable species unlocked by ecosystem progress.
"""
from flask import current_app

from habitat_app.extensions import db
from habitat_app.models import AdoptableSpecies, EcosystemProgress, SpeciesAdoption

from ..logics.species_logic import eligible_species


class SpeciesService:

    @staticmethod
    def unlock_for_ecosystem(user_id, ecosystem, challenge_id=None):
        """
        Adopt every active species of ``ecosystem`` the learner has unlocked.

        Returns a list of {species_id, name, emoji, ecosystem} for the new
        adoptions only. Commits its own transaction.
        """
        if not ecosystem:
            return []

        bucket = EcosystemProgress.query.filter_by(user_id=user_id, ecosystem=ecosystem).first()
        units_completed = bucket.units_completed if bucket else 0

        candidates = AdoptableSpecies.query.filter_by(is_active=True, ecosystem=ecosystem).all()
        adopted_ids = {
            row.species_id for row in SpeciesAdoption.query.filter_by(user_id=user_id).all()
        }
        unlocked = eligible_species(candidates, units_completed, adopted_ids)
        if not unlocked:
            return []

        try:
            for species in unlocked:
                db.session.add(SpeciesAdoption(
                    user_id=user_id, species_id=species.species_id, challenge_id=challenge_id
                ))
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(
                f"Error adopting species for user {user_id} in {ecosystem}: {e}", exc_info=True
            )
            raise

        current_app.logger.info(f"User {user_id} adopted {len(unlocked)} {ecosystem} species")
        return [
            {
                'species_id': species.species_id,
                'name': species.name,
                'emoji': species.emoji,
                'ecosystem': species.ecosystem,
            }
            for species in unlocked
        ]

    @staticmethod
    def get_adopted_species(user_id):
        rows = SpeciesAdoption.query.filter_by(user_id=user_id)\
            .order_by(SpeciesAdoption.adopted_at.asc(), SpeciesAdoption.id.asc()).all()
        return [row.to_dict() for row in rows]
