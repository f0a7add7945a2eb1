"""In-process registry of live connections and draw timers per room.

Lost on restart and never shared between processes. Anything that wants to
fan out across several server instances has to replace this class.
"""
from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, List, NewType, Optional, Protocol

SessionId = NewType('SessionId', str)


class Connection(Protocol):
    """Transport-neutral handle the gateway registers for a session."""

    @property
    def is_open(self) -> bool: ...

    def send(self, payload: dict) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


@dataclass
class GameSession:
    room_code: str
    connections: Dict[SessionId, Connection] = field(default_factory=dict)
    timer: Optional[Cancellable] = None
    countdown: Optional[Cancellable] = None


class SessionRegistry:

    def __init__(self):
        self._lock = RLock()
        self._sessions: Dict[str, GameSession] = {}

    def open_session(self, room_code: str, session_id: SessionId, connection: Connection) -> GameSession:
        """Start a fresh entry for a room holding only the given connection."""
        with self._lock:
            session = GameSession(room_code=room_code, connections={session_id: connection})
            self._sessions[room_code] = session
            return session

    def add_connection(self, room_code: str, session_id: SessionId, connection: Connection) -> GameSession:
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None:
                return self.open_session(room_code, session_id, connection)
            session.connections[session_id] = connection
            return session

    def remove_connection(self, room_code: str, session_id: SessionId) -> int:
        """Drop a connection and return how many remain for the room."""
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None:
                return 0
            session.connections.pop(session_id, None)
            return len(session.connections)

    def get(self, room_code: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(room_code)

    def connections(self, room_code: str) -> List[Connection]:
        with self._lock:
            session = self._sessions.get(room_code)
            return list(session.connections.values()) if session else []

    def rooms_for(self, session_id: SessionId) -> List[str]:
        with self._lock:
            return [code for code, s in self._sessions.items() if session_id in s.connections]

    def discard(self, room_code: str) -> None:
        with self._lock:
            self._sessions.pop(room_code, None)

    def attach_timer(self, room_code: str, handle: Cancellable) -> bool:
        """Register the draw timer unless one is already active."""
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None or session.timer is not None:
                return False
            session.timer = handle
            return True

    def detach_timer(self, room_code: str) -> Optional[Cancellable]:
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None:
                return None
            handle, session.timer = session.timer, None
            return handle

    def has_timer(self, room_code: str) -> bool:
        with self._lock:
            session = self._sessions.get(room_code)
            return bool(session and session.timer is not None)

    def attach_countdown(self, room_code: str, handle: Cancellable) -> bool:
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None or session.countdown is not None:
                return False
            session.countdown = handle
            return True

    def detach_countdown(self, room_code: str) -> Optional[Cancellable]:
        with self._lock:
            session = self._sessions.get(room_code)
            if session is None:
                return None
            handle, session.countdown = session.countdown, None
            return handle

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, room_code) -> bool:
        with self._lock:
            return room_code in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
