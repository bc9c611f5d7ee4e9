"""Learner account model."""

from __future__ import annotations

from flask_login import UserMixin
from sqlalchemy.sql import func
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db


class User(UserMixin, db.Model):
    """Application user (learner) model."""

    __tablename__ = 'users'

    ROLE_ADMIN = 'admin'
    ROLE_LEARNER = 'learner'
    ROLE_GUEST = 'guest'

    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False, default='')
    user_role = db.Column(db.String(50), default=ROLE_LEARNER, nullable=False)
    # Cached copy of learner_progress.total_xp for leaderboards.
    total_xp = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())

    progress = db.relationship(
        'LearnerProgress', uselist=False, backref='user', cascade='all, delete-orphan'
    )
    completions = db.relationship(
        'UnitCompletion', backref='user', lazy=True, cascade='all, delete-orphan'
    )
    ecosystem_progress = db.relationship(
        'EcosystemProgress', backref='user', lazy=True, cascade='all, delete-orphan'
    )

    def get_id(self) -> str:
        return str(self.user_id)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'
