"""Lesson unit content model."""

from __future__ import annotations

from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..extensions import db


class LessonUnit(db.Model):
    """One learning activity as authored for the lesson player.

    ``content`` holds the step payload exactly as the player receives it
    (``gaps``, ``scenarios``, ``challenges``, ``correct_answer`` ...).
    """

    __tablename__ = 'lesson_units'

    unit_id = db.Column(db.String(64), primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    step_type = db.Column(db.String(50), nullable=False)
    content = db.Column(JSON, nullable=False, default=dict)

    # Ecosystem classification drives badges and challenge contributions.
    primary_ecosystem = db.Column(db.String(30), nullable=True)
    region_codes = db.Column(JSON, nullable=False, default=list)

    pass_threshold_percent = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'unit_id': self.unit_id,
            'title': self.title,
            'step_type': self.step_type,
            'primary_ecosystem': self.primary_ecosystem,
            'region_codes': list(self.region_codes or []),
            'pass_threshold_percent': self.pass_threshold_percent,
        }

    def __repr__(self):
        return f'<LessonUnit {self.unit_id}>'
