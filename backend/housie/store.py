"""Room and player persistence.

Thin record keeper over the SQLAlchemy models. Each call commits on its own;
nothing here spans more than one record's worth of consistency, callers
tolerate interleavings between calls.
"""
from housie import db
from housie.models import Room, Player, utcnow


class RoomCodeUnavailable(RuntimeError):
    """No free room code could be found."""


class RoomStore:

    # ---- rooms ----

    def create_room(self, **fields) -> Room:
        room = Room(**fields)
        db.session.add(room)
        db.session.commit()
        return room

    def get_room(self, room_code: str):
        return Room.query.filter_by(room_code=room_code).first()

    def update_room(self, room_code: str, **changes):
        room = self.get_room(room_code)
        if not room:
            return None
        for key, value in changes.items():
            setattr(room, key, value)
        room.updated_at = utcnow()
        db.session.add(room)
        db.session.commit()
        return room

    def delete_room(self, room_code: str) -> None:
        room = self.get_room(room_code)
        if not room:
            return
        Player.query.filter_by(room_id=room.id).delete()
        Room.query.filter_by(id=room.id).delete()
        db.session.commit()

    # ---- players ----

    def add_player(self, **fields) -> Player:
        player = Player(**fields)
        db.session.add(player)
        db.session.commit()
        return player

    def list_players(self, room_id: str):
        return Player.query.filter_by(room_id=room_id).order_by(Player.joined_at).all()

    def get_player(self, player_id: str):
        return db.session.get(Player, player_id)

    def update_player(self, player_id: str, **changes):
        player = self.get_player(player_id)
        if not player:
            return None
        for key, value in changes.items():
            setattr(player, key, value)
        db.session.add(player)
        db.session.commit()
        return player

    def remove_player(self, player_id: str) -> None:
        Player.query.filter_by(id=player_id).delete()
        db.session.commit()

    def remove_player_by_session(self, session_id: str) -> None:
        Player.query.filter_by(session_id=session_id).delete()
        db.session.commit()
