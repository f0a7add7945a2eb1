from typing import Callable


class TimerHandle:
    """Cancellation flag shared with a background timer worker."""

    def __init__(self, name: str = ''):
        self.name = name
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class BackgroundScheduler:
    """Timers backed by Socket.IO background tasks.

    - Works under whichever async mode Flask-SocketIO selected (threading, eventlet, gevent)
    - Callbacks run inside an application context
    - A cancelled timer never fires again; cancelling twice is harmless
    - A raising callback is logged; repeating timers keep going
    """

    def __init__(self, socketio, app):
        self.socketio = socketio
        self.app = app

    def call_later(self, delay_ms: int, fn: Callable, *args) -> TimerHandle:
        handle = TimerHandle(getattr(fn, '__name__', 'timer'))
        self.socketio.start_background_task(self._run_once, handle, delay_ms / 1000.0, fn, args)
        return handle

    def call_every(self, interval_ms: int, fn: Callable, *args) -> TimerHandle:
        handle = TimerHandle(getattr(fn, '__name__', 'timer'))
        self.socketio.start_background_task(self._run_every, handle, interval_ms / 1000.0, fn, args)
        return handle

    def _run_once(self, handle: TimerHandle, delay: float, fn: Callable, args) -> None:
        self.socketio.sleep(delay)
        if handle.cancelled:
            return
        self._fire(handle, fn, args)

    def _run_every(self, handle: TimerHandle, interval: float, fn: Callable, args) -> None:
        while True:
            self.socketio.sleep(interval)
            if handle.cancelled:
                return
            self._fire(handle, fn, args)

    def _fire(self, handle: TimerHandle, fn: Callable, args) -> None:
        with self.app.app_context():
            try:
                fn(*args)
            except Exception:
                self.app.logger.exception(f"[timer-error] timer={handle.name} args={args}")
