import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from quizsync_app import create_app
from quizsync_app.config import Config
from quizsync_app.modules.display.engine import VirtualTickScheduler
from quizsync_app.modules.display.interface import DisplayInterface


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = 'WARNING'
    LOG_DIR = None
    DISPLAY_MAX_SESSIONS = 4


SAMPLE_QUESTIONS = [
    {
        'text': 'Which planet is known as the Red Planet?',
        'options': [
            {'text': 'Venus', 'correct': False},
            {'text': 'Mars', 'correct': True},
            {'text': 'Jupiter', 'correct': False},
        ],
        'explanation': 'Iron oxide on its surface gives it a reddish look.',
    },
    {
        'text': 'Which of these are prime numbers?',
        'options': [
            {'text': '2', 'correct': True},
            {'text': '4', 'correct': False},
            {'text': '5', 'correct': True},
        ],
        'explanation': 'They have no divisors other than 1 and themselves.',
    },
    {
        'questionText': 'What is the boiling point of water at sea level?',
        'options': [
            {'text': '90°C', 'is_correct': False},
            {'text': '100°C', 'is_correct': 'true'},
        ],
    },
]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def scheduler():
    return VirtualTickScheduler(tick_ms=16)


@pytest.fixture
def questions():
    return [dict(q, options=[dict(o) for o in q['options']]) for q in SAMPLE_QUESTIONS]


@pytest.fixture
def session(scheduler, questions):
    """Unstarted session on the virtual clock with default timings."""
    return DisplayInterface.build_session(questions, scheduler=scheduler, session_id='test-session')
