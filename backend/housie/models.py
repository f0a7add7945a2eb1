from housie import db
from datetime import datetime, timezone
import uuid


def _new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    room_code = db.Column(db.String(4), unique=True, nullable=False, index=True)
    host_id = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False, default='lobby')  # lobby, countdown, running, ended
    mode = db.Column(db.String(16), nullable=False, default='friends')  # solo, friends
    current_number = db.Column(db.Integer, nullable=True)
    # Most recent first; read and written whole
    called_numbers = db.Column(db.JSON, nullable=False, default=list)
    call_interval_ms = db.Column(db.Integer, nullable=False, default=4000)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    players = db.relationship(
        'Player', back_populates='room', cascade='all, delete-orphan', passive_deletes=True
    )

    def to_dict(self):
        return {
            'id': self.id,
            'roomCode': self.room_code,
            'hostId': self.host_id,
            'status': self.status,
            'mode': self.mode,
            'currentNumber': self.current_number,
            'calledNumbers': list(self.called_numbers or []),
            'callIntervalMs': self.call_interval_ms,
            'createdAt': _isoformat(self.created_at),
            'updatedAt': _isoformat(self.updated_at),
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    room_id = db.Column(db.String(36), db.ForeignKey('room.id', ondelete='CASCADE'), nullable=False, index=True)
    session_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    is_bot = db.Column(db.Boolean, nullable=False, default=False)
    is_host = db.Column(db.Boolean, nullable=False, default=False)
    # List of 3x9 grids; a cell is either None or {number, marked, id}
    ticket_data = db.Column(db.JSON, nullable=False)
    # Percent-encoded name inside the avatar template
    avatar = db.Column(db.String(1024), nullable=True)
    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    room = db.relationship('Room', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'roomId': self.room_id,
            'sessionId': self.session_id,
            'name': self.name,
            'isBot': self.is_bot,
            'isHost': self.is_host,
            'ticketData': self.ticket_data,
            'avatar': self.avatar,
            'joinedAt': _isoformat(self.joined_at),
        }
