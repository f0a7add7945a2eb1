import copy
import random
import uuid
from urllib.parse import quote

from housie import db, socketio
from housie.store import RoomStore, RoomCodeUnavailable
from .scheduler import BackgroundScheduler
from .sessions import SessionRegistry
from .tickets import generate_ticket_data, cell_at

LOBBY = 'lobby'
COUNTDOWN = 'countdown'
RUNNING = 'running'
ENDED = 'ended'

SOLO = 'solo'
FRIENDS = 'friends'

ALL_NUMBERS = range(1, 91)


class GameManager:
    """Room lifecycle and the number-calling loop.

    Reads and writes go through the store on every step; the registry only knows
    which connections and timers belong to which room code. No operation here
    raises for a missing room, a stale player or a bad cell address.
    """

    def __init__(self, store=None, registry=None, scheduler=None):
        self.store = store if store is not None else RoomStore()
        self.registry = registry if registry is not None else SessionRegistry()
        self.scheduler = scheduler
        self.app = None

    def init_app(self, app):
        self.app = app
        self.scheduler = BackgroundScheduler(socketio, app)
        self.registry.clear()

    # ---- config helpers ----

    def _config(self, key, default):
        if self.app is None:
            return default
        return self.app.config.get(key, default)

    def _log(self, message):
        if self.app is not None:
            self.app.logger.info(message)

    def _avatar_for(self, name):
        template = self._config('AVATAR_URL', 'https://api.dicebear.com/7.x/avataaars/svg?seed={seed}')
        return template.format(seed=quote(name or '', safe=''))

    # ---- room creation / joining ----

    def generate_room_code(self) -> str:
        """Random 4-digit code not currently used by any room."""
        attempts = int(self._config('ROOM_CODE_ATTEMPTS', 100))
        for _ in range(attempts):
            code = str(random.randint(1000, 9999))
            if not self.store.get_room(code):
                return code
        raise RoomCodeUnavailable(f'No free room code after {attempts} attempts')

    def _add_player(self, room, session_id, name, is_host=False, is_bot=False):
        return self.store.add_player(
            room_id=room.id,
            session_id=session_id,
            name=name,
            is_bot=is_bot,
            is_host=is_host,
            ticket_data=generate_ticket_data(),
            avatar=self._avatar_for(name),
        )

    def _create(self, host_session_id, host_name, connection, mode):
        room_code = self.generate_room_code()
        room = self.store.create_room(
            room_code=room_code,
            host_id=host_session_id,
            status=LOBBY,
            mode=mode,
            current_number=None,
            called_numbers=[],
            call_interval_ms=int(self._config('CALL_INTERVAL_MS', 4000)),
        )
        try:
            self._add_player(room, host_session_id, host_name, is_host=True)
            if mode == SOLO:
                for bot_name in self._config('BOT_NAMES', ('Lucky Bot', 'Clever Bot')):
                    self._add_player(room, f"bot-{uuid.uuid4().hex}", bot_name, is_bot=True)
        except Exception:
            # Not registered yet; no disconnect would ever delete this room
            db.session.rollback()
            self.store.delete_room(room_code)
            self._log(f"[room-create-failed] room={room_code} host={host_session_id}")
            raise
        self.registry.open_session(room_code, host_session_id, connection)
        self._log(f"[room-created] room={room_code} mode={mode} host={host_session_id}")
        return room_code

    def create_room(self, host_session_id, host_name, connection) -> str:
        return self._create(host_session_id, host_name, connection, FRIENDS)

    def create_solo_room(self, host_session_id, host_name, connection) -> str:
        return self._create(host_session_id, host_name, connection, SOLO)

    def join_room(self, room_code, session_id, player_name, connection) -> bool:
        room = self.store.get_room(room_code)
        if not room or room.status != LOBBY:
            self._log(f"[join-rejected] room={room_code} session={session_id} status={room.status if room else None}")
            return False
        self._add_player(room, session_id, player_name)
        self.registry.add_connection(room_code, session_id, connection)
        self._log(f"[room-joined] room={room_code} session={session_id}")
        self.broadcast_game_state(room_code)
        return True

    # ---- game flow ----

    def start_game(self, room_code) -> None:
        room = self.store.get_room(room_code)
        if not room:
            return
        if room.status != LOBBY:
            self._log(f"[timer-skip] room={room_code} start ignored in status={room.status}")
            return
        self.store.update_room(room_code, status=COUNTDOWN)
        self.broadcast_game_state(room_code)

        delay = int(self._config('COUNTDOWN_MS', 3000))
        handle = self.scheduler.call_later(delay, self._finish_countdown, room_code)
        # Without a session entry the countdown still runs against the store
        tracked = self.registry.attach_countdown(room_code, handle)
        self._log(f"[countdown] room={room_code} delay={delay}ms tracked={tracked}")

    def _finish_countdown(self, room_code) -> None:
        self.registry.detach_countdown(room_code)
        room = self.store.get_room(room_code)
        if not room or room.status != COUNTDOWN:
            self._log(f"[timer-abort] room={room_code} countdown finished in status={room.status if room else None}")
            return
        self.store.update_room(room_code, status=RUNNING)
        self._log(f"[game-running] room={room_code}")
        self.broadcast_game_state(room_code)
        self.start_game_loop(room_code)

    def start_game_loop(self, room_code) -> None:
        """Draw the first number now, then one every callIntervalMs."""
        if not self.registry.connections(room_code):
            self._log(f"[timer-skip] room={room_code} no live connections")
            return
        if self.registry.has_timer(room_code):
            self._log(f"[timer-skip] room={room_code} draw timer already active")
            return
        room = self.store.get_room(room_code)
        if not room:
            return

        self.draw_next_number(room_code)
        room = self.store.get_room(room_code)
        if not room or room.status != RUNNING:
            return

        handle = self.scheduler.call_every(room.call_interval_ms, self.draw_next_number, room_code)
        if not self.registry.attach_timer(room_code, handle):
            handle.cancel()
            self._log(f"[timer-skip] room={room_code} lost race for draw timer")
            return
        self._log(f"[timer-set] room={room_code} interval={room.call_interval_ms}ms")

    def stop_game_loop(self, room_code) -> None:
        handle = self.registry.detach_timer(room_code)
        if handle is not None:
            handle.cancel()
            self._log(f"[timer-stop] room={room_code}")

    def draw_next_number(self, room_code):
        """One draw tick. Returns the number drawn, or None when nothing was drawn."""
        room = self.store.get_room(room_code)
        if not room or room.status != RUNNING:
            self.stop_game_loop(room_code)
            return None

        called = list(room.called_numbers or [])
        seen = set(called)
        available = [n for n in ALL_NUMBERS if n not in seen]
        if not available:
            self.store.update_room(room_code, status=ENDED)
            self._log(f"[game-ended] room={room_code}")
            self.broadcast_game_state(room_code)
            self.stop_game_loop(room_code)
            return None

        number = random.choice(available)
        called.insert(0, number)
        changes = {'current_number': number, 'called_numbers': called}
        ended = len(available) == 1
        if ended:
            changes['status'] = ENDED
        self.store.update_room(room_code, **changes)
        self._log(f"[draw] room={room_code} number={number} count={len(called)}")
        self.broadcast_game_state(room_code)
        if ended:
            self._log(f"[game-ended] room={room_code}")
            self.stop_game_loop(room_code)
        return number

    def mark_cell(self, room_code, player_id, ticket_index, row_index, col_index) -> None:
        room = self.store.get_room(room_code)
        if not room:
            return
        player = next((p for p in self.store.list_players(room.id) if p.id == player_id), None)
        if not player:
            return

        ticket_data = copy.deepcopy(player.ticket_data)
        cell = cell_at(ticket_data, ticket_index, row_index, col_index)
        if cell:
            cell['marked'] = not cell.get('marked', False)
            self.store.update_player(player.id, ticket_data=ticket_data)
        self.broadcast_game_state(room_code)

    # ---- fan-out / teardown ----

    def snapshot(self, room_code):
        room = self.store.get_room(room_code)
        if not room:
            return None
        return {
            'type': 'game_state',
            'room': room.to_dict(),
            'players': [p.to_dict() for p in self.store.list_players(room.id)],
        }

    def broadcast_game_state(self, room_code) -> None:
        connections = self.registry.connections(room_code)
        if not connections:
            return
        payload = self.snapshot(room_code)
        if payload is None:
            return
        for connection in connections:
            if connection.is_open:
                connection.send(payload)

    def handle_disconnect(self, session_id) -> None:
        self.store.remove_player_by_session(session_id)
        for room_code in self.registry.rooms_for(session_id):
            remaining = self.registry.remove_connection(room_code, session_id)
            self._log(f"[disconnect] room={room_code} session={session_id} remaining={remaining}")
            self.broadcast_game_state(room_code)
            if remaining == 0:
                self.stop_game_loop(room_code)
                countdown = self.registry.detach_countdown(room_code)
                if countdown is not None:
                    countdown.cancel()
                self.registry.discard(room_code)
                self.store.delete_room(room_code)
                self._log(f"[room-deleted] room={room_code}")


game_manager = GameManager()
