# File: habitat_app/config.py
# Application configuration, read from the environment (.env supported).

import os

from dotenv import load_dotenv

load_dotenv()

# habitat_app/ sits directly under the project root.
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "habitat.db")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return int(value)


class Config:
    """Habitat application configuration."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')
    LOG_JSON = os.environ.get('LOG_JSON', '').lower() in ('1', 'true', 'yes')

    # Scoring / gamification knobs. Anything not set here falls back to
    # modules.scoring.config.ScoringDefaultConfig.
    PASS_THRESHOLD_PERCENT = _env_int('PASS_THRESHOLD_PERCENT', 60)
    AT_RISK_AFTER_DAYS = _env_int('AT_RISK_AFTER_DAYS', 7)

    # Assessment tier bands belong to the speech-scoring service; these are
    # the bands it currently uses.
    ASSESSMENT_PRO_MIN = _env_int('ASSESSMENT_PRO_MIN', 65)
    ASSESSMENT_PREMIUM_MIN = _env_int('ASSESSMENT_PREMIUM_MIN', 80)

    LEADERBOARD_DEFAULT_LIMIT = 20

    @classmethod
    def init_app(cls, app):
        """Create the directories the app writes to."""
        uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
        if uri == f'sqlite:///{DATABASE_PATH}':
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
