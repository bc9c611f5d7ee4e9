"""Database models package for Habitat."""

from ..extensions import db

from .user import User
from .learning import LessonUnit
from .gamification import (
    AdoptableSpecies,
    ChallengeProgress,
    EcosystemProgress,
    EnvironmentalChallenge,
    LearnerProgress,
    SpeciesAdoption,
    UnitCompletion,
    XpLog,
)

__all__ = [
    'db',
    'User',
    'LessonUnit',
    'UnitCompletion',
    'LearnerProgress',
    'EcosystemProgress',
    'XpLog',
    'EnvironmentalChallenge',
    'ChallengeProgress',
    'AdoptableSpecies',
    'SpeciesAdoption',
]
