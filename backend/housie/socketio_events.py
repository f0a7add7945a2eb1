from flask import current_app, request
from flask_socketio import emit
from marshmallow import ValidationError
from typing import Dict
import uuid

from housie import socketio, db
from housie.schemas import parse_message
from housie.services.games.manager import game_manager
from housie.services.games.sessions import SessionId

NAMESPACE = '/ws'
JOIN_FAILED = 'Room not found or already started'
INVALID_MESSAGE = 'Invalid message format'
INTERNAL_ERROR = 'Internal server error'


class SocketConnection:
    """Connection handle for one Socket.IO client, keyed by its sid."""

    def __init__(self, sid: str, namespace: str = NAMESPACE):
        self.sid = sid
        self.namespace = namespace
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def send(self, payload: dict) -> None:
        socketio.emit('message', payload, to=self.sid, namespace=self.namespace)


# Socket.IO sid -> issued session id / connection handle
_sid_to_session: Dict[str, SessionId] = {}
_sid_to_connection: Dict[str, SocketConnection] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _reply(message_type: str, **fields) -> None:
    emit('message', {'type': message_type, **fields})


def _current_session():
    sid = _get_sid()
    session_id = _sid_to_session.get(sid)
    connection = _sid_to_connection.get(sid)
    if session_id is None or connection is None:
        # Message arrived before our connect handler registered the sid
        session_id = SessionId(uuid.uuid4().hex)
        connection = SocketConnection(sid)
        _sid_to_session[sid] = session_id
        _sid_to_connection[sid] = connection
    return session_id, connection


def handle_connect(auth=None):
    session_id = SessionId(uuid.uuid4().hex)
    _sid_to_session[_get_sid()] = session_id
    _sid_to_connection[_get_sid()] = SocketConnection(_get_sid())
    current_app.logger.info(f"[ws-connect] session={session_id}")
    emit('connected', {'message': 'Connected to /ws', 'sessionId': session_id})


def handle_disconnect(reason=None):
    sid = _get_sid()
    session_id = _sid_to_session.pop(sid, None)
    connection = _sid_to_connection.pop(sid, None)
    if connection is not None:
        connection.close()
    if session_id is None:
        return
    current_app.logger.info(f"[disconnect] session={session_id} reason={reason}")
    game_manager.handle_disconnect(session_id)


def handle_message(data):
    try:
        message = parse_message(data)
    except ValidationError as exc:
        current_app.logger.warning(f"[ws-invalid] {exc.messages}")
        _reply('error', message=INVALID_MESSAGE)
        return

    session_id, connection = _current_session()
    msg_type = message['type']

    if msg_type in ('create_room', 'create_solo_room'):
        if msg_type == 'create_room':
            room_code = game_manager.create_room(session_id, message['playerName'], connection)
        else:
            room_code = game_manager.create_solo_room(session_id, message['playerName'], connection)
        _reply('room_created', roomCode=room_code)
        game_manager.broadcast_game_state(room_code)

    elif msg_type == 'join_room':
        room_code = message['roomCode']
        if game_manager.join_room(room_code, session_id, message['playerName'], connection):
            _reply('room_joined', roomCode=room_code)
        else:
            _reply('error', message=JOIN_FAILED)

    elif msg_type == 'start_game':
        game_manager.start_game(message['roomCode'])

    elif msg_type == 'mark_cell':
        game_manager.mark_cell(
            message['roomCode'],
            message['playerId'],
            message['ticketIndex'],
            message['rowIndex'],
            message['colIndex'],
        )

    elif msg_type == 'game_tick':
        # Clients use this to resync; the draw loop itself is server driven
        game_manager.broadcast_game_state(message['roomCode'])


def handle_error(exc):
    current_app.logger.exception(f"[ws-error] {exc}")
    db.session.rollback()
    _reply('error', message=INTERNAL_ERROR)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_error)
