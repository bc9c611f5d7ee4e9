from datetime import datetime, timezone

from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


class UnitCompletion(db.Model):
    """First successful completion of a unit by a learner.

    The (user_id, unit_id) unique constraint is what makes completion
    recording at-most-once under concurrent submissions.
    """
    __tablename__ = 'unit_completions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    unit_id = db.Column(db.String(64), db.ForeignKey('lesson_units.unit_id'), nullable=False)
    xp_earned = db.Column(db.Integer, nullable=False, default=0)
    completed_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (db.UniqueConstraint('user_id', 'unit_id', name='_user_unit_completion_uc'),)

    def to_dict(self):
        return {
            'unit_id': self.unit_id,
            'xp_earned': self.xp_earned,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }


class LearnerProgress(db.Model):
    """Cumulative counters for one learner. Only ever incremented here."""
    __tablename__ = 'learner_progress'

    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), primary_key=True)
    total_units_completed = db.Column(db.Integer, nullable=False, default=0)
    total_xp = db.Column(db.Integer, nullable=False, default=0)
    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)
    last_activity_at = db.Column(db.DateTime(timezone=True), nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())


class EcosystemProgress(db.Model):
    """Units completed per ecosystem (marine, forest, polar, ...)."""
    __tablename__ = 'ecosystem_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    ecosystem = db.Column(db.String(30), nullable=False)
    units_completed = db.Column(db.Integer, nullable=False, default=0)
    last_activity_date = db.Column(db.Date)

    __table_args__ = (db.UniqueConstraint('user_id', 'ecosystem', name='_user_ecosystem_uc'),)


class XpLog(db.Model):
    """History of XP changes for a learner."""
    __tablename__ = 'xp_logs'

    log_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    unit_id = db.Column(db.String(64), nullable=True)
    xp_change = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(100))
    source_type = db.Column(db.String(50), nullable=True)  # lesson, challenge, ...
    timestamp = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        db.Index('ix_xp_logs_user_timestamp', 'user_id', 'timestamp'),
        db.Index('ix_xp_logs_timestamp', 'timestamp'),
    )

    def to_dict(self):
        return {
            'log_id': self.log_id,
            'xp_change': self.xp_change,
            'unit_id': self.unit_id,
            'reason': self.reason,
            'source_type': self.source_type,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None
        }


class EnvironmentalChallenge(db.Model):
    """Community challenge that learners advance by completing units."""
    __tablename__ = 'environmental_challenges'

    challenge_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    challenge_type = db.Column(db.String(50), nullable=False, default='habitat_restoration')
    description = db.Column(db.String(500))
    target_ecosystem = db.Column(db.String(30), nullable=False)
    affected_regions = db.Column(JSON, nullable=False, default=list)
    units_required = db.Column(db.Integer, nullable=False)
    total_contributions = db.Column(db.Integer, nullable=False, default=0)
    end_date = db.Column(db.Date, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def __repr__(self):
        return f'<EnvironmentalChallenge {self.name}>'


class ChallengeProgress(db.Model):
    """One learner's contribution to a challenge."""
    __tablename__ = 'challenge_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    challenge_id = db.Column(
        db.Integer, db.ForeignKey('environmental_challenges.challenge_id'), nullable=False
    )
    units_contributed = db.Column(db.Integer, nullable=False, default=0)
    last_contribution = db.Column(db.Date)

    challenge = db.relationship('EnvironmentalChallenge')

    __table_args__ = (db.UniqueConstraint('user_id', 'challenge_id', name='_user_challenge_uc'),)


class AdoptableSpecies(db.Model):
    """Species a learner adopts once enough units of its ecosystem are done."""
    __tablename__ = 'adoptable_species'

    species_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    emoji = db.Column(db.String(16), nullable=True)
    ecosystem = db.Column(db.String(30), nullable=False)
    units_required = db.Column(db.Integer, nullable=False, default=1)
    description = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def __repr__(self):
        return f'<AdoptableSpecies {self.name}>'


class SpeciesAdoption(db.Model):
    """A species a learner has adopted. Never removed by the engine."""
    __tablename__ = 'species_adoptions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    species_id = db.Column(db.Integer, db.ForeignKey('adoptable_species.species_id'), nullable=False)
    challenge_id = db.Column(
        db.Integer, db.ForeignKey('environmental_challenges.challenge_id'), nullable=True
    )
    adopted_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    species = db.relationship('AdoptableSpecies')

    __table_args__ = (db.UniqueConstraint('user_id', 'species_id', name='_user_species_uc'),)

    def to_dict(self):
        return {
            'species_id': self.species_id,
            'name': self.species.name,
            'emoji': self.species.emoji,
            'ecosystem': self.species.ecosystem,
            'units_required': self.species.units_required,
            'challenge_id': self.challenge_id,
            'adopted_at': self.adopted_at.isoformat() if self.adopted_at else None
        }
