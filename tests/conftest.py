import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from habitat_app import create_app, db
from habitat_app.config import Config
from habitat_app.models import LessonUnit, User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    LOG_JSON = False


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def learner(app):
    user = User(username='learner', email='learner@example.com', user_role=User.ROLE_LEARNER)
    user.set_password('password123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def make_unit(app):
    """Factory for lesson units; defaults to a five-gap marine unit."""

    def _make_unit(unit_id='marine-01', step_type='gap_fill', content=None, **kwargs):
        if content is None:
            content = {
                'gaps': [
                    {'correct_answer': 'coral'},
                    {'correct_answer': 'reef'},
                    {'correct_answer': 'tide'},
                    {'correct_answer': 'kelp'},
                    {'correct_answer': 'whale'},
                ]
            }
        kwargs.setdefault('title', f'Unit {unit_id}')
        kwargs.setdefault('primary_ecosystem', 'marine')
        kwargs.setdefault('region_codes', ['AU-QLD'])
        unit = LessonUnit(unit_id=unit_id, step_type=step_type, content=content, **kwargs)
        db.session.add(unit)
        db.session.commit()
        return unit

    return _make_unit
