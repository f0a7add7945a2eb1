import os
import sys
import pytest

# Ensure the backend root (containing the `housie` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from housie import create_app, db, socketio
from housie.services.games.manager import game_manager
from housie.services.games.scheduler import TimerHandle


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = None
    CALL_INTERVAL_MS = 4000
    COUNTDOWN_MS = 3000
    ROOM_CODE_ATTEMPTS = 100
    BOT_NAMES = ('Lucky Bot', 'Clever Bot')
    AVATAR_URL = 'https://api.dicebear.com/7.x/avataaars/svg?seed={seed}'
    LOG_LEVEL = 'DEBUG'


class ManualScheduler:
    """Records timers instead of starting them; tests fire them explicitly."""

    def __init__(self):
        self.jobs = []

    def call_later(self, delay_ms, fn, *args):
        handle = TimerHandle(fn.__name__)
        self.jobs.append({'repeat': False, 'delay': delay_ms, 'fn': fn, 'args': args, 'handle': handle})
        return handle

    def call_every(self, interval_ms, fn, *args):
        handle = TimerHandle(fn.__name__)
        self.jobs.append({'repeat': True, 'delay': interval_ms, 'fn': fn, 'args': args, 'handle': handle})
        return handle

    def active(self, repeat=None):
        return [
            j for j in self.jobs
            if not j['handle'].cancelled and (repeat is None or j['repeat'] == repeat)
        ]

    def fire_countdowns(self):
        """Run every pending one-shot timer once."""
        for job in self.active(repeat=False):
            job['handle'].cancel()
            job['fn'](*job['args'])

    def tick(self, times=1):
        """Fire each live repeating timer `times` times."""
        for _ in range(times):
            for job in self.active(repeat=True):
                job['fn'](*job['args'])


class FakeConnection:
    def __init__(self, is_open=True):
        self.is_open = is_open
        self.sent = []

    def send(self, payload):
        self.sent.append(payload)

    def last(self, message_type='game_state'):
        matching = [p for p in self.sent if p.get('type') == message_type]
        return matching[-1] if matching else None


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import housie.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    game_manager.registry.clear()


@pytest.fixture()
def scheduler(flask_app):
    manual = ManualScheduler()
    game_manager.scheduler = manual
    return manual


@pytest.fixture()
def manager(flask_app, scheduler):
    return game_manager


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app, scheduler):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app, scheduler):
    """Factory for extra socket clients, all disconnected on teardown."""
    created = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        created.append(c)
        return c

    yield _make
    for c in created:
        try:
            if c.is_connected('/ws'):
                c.disconnect(namespace='/ws')
        except Exception:
            pass
