import time

from flask import current_app

from housie import socketio
from housie.services.games.scheduler import BackgroundScheduler, TimerHandle


def _wait_for(predicate, timeout=3.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_timer_handle_cancel_is_idempotent():
    handle = TimerHandle('x')
    assert not handle.cancelled
    handle.cancel()
    handle.cancel()
    assert handle.cancelled


def test_call_later_fires_once_in_app_context(flask_app):
    sched = BackgroundScheduler(socketio, flask_app)
    seen = []
    sched.call_later(10, lambda v: seen.append((v, current_app.name)), 'go')
    assert _wait_for(lambda: len(seen) == 1)
    time.sleep(0.05)
    assert seen == [('go', flask_app.name)]


def test_cancelled_call_later_never_fires(flask_app):
    sched = BackgroundScheduler(socketio, flask_app)
    seen = []
    handle = sched.call_later(50, seen.append, 1)
    handle.cancel()
    time.sleep(0.15)
    assert seen == []


def test_call_every_repeats_until_cancelled(flask_app):
    sched = BackgroundScheduler(socketio, flask_app)
    seen = []
    handle = sched.call_every(10, seen.append, 1)
    assert _wait_for(lambda: len(seen) >= 3)
    handle.cancel()
    # At most one tick can already be in flight when cancel lands
    time.sleep(0.05)
    settled = len(seen)
    time.sleep(0.1)
    assert len(seen) == settled


def test_raising_callback_keeps_repeating(flask_app):
    sched = BackgroundScheduler(socketio, flask_app)
    calls = []

    def boom():
        calls.append(1)
        raise RuntimeError('tick failed')

    handle = sched.call_every(10, boom)
    assert _wait_for(lambda: len(calls) >= 2)
    handle.cancel()
