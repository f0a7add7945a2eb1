"""Schemas for inbound socket messages.

Each message is a JSON object discriminated by its ``type`` field. Unknown
keys are dropped; a missing or unknown ``type`` fails validation.
"""
import json

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate

PLAYER_NAME = validate.Length(min=1, max=64)


class MessageSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    type = fields.String(required=True)


class CreateRoomSchema(MessageSchema):
    playerName = fields.String(required=True, validate=PLAYER_NAME)


class CreateSoloRoomSchema(MessageSchema):
    playerName = fields.String(required=True, validate=PLAYER_NAME)


class JoinRoomSchema(MessageSchema):
    roomCode = fields.String(required=True)
    playerName = fields.String(required=True, validate=PLAYER_NAME)


class StartGameSchema(MessageSchema):
    roomCode = fields.String(required=True)


class MarkCellSchema(MessageSchema):
    roomCode = fields.String(required=True)
    playerId = fields.String(required=True)
    ticketIndex = fields.Integer(required=True, strict=True)
    rowIndex = fields.Integer(required=True, strict=True)
    colIndex = fields.Integer(required=True, strict=True)


class GameTickSchema(MessageSchema):
    roomCode = fields.String(required=True)


MESSAGE_SCHEMAS = {
    'create_room': CreateRoomSchema(),
    'create_solo_room': CreateSoloRoomSchema(),
    'join_room': JoinRoomSchema(),
    'start_game': StartGameSchema(),
    'mark_cell': MarkCellSchema(),
    'game_tick': GameTickSchema(),
}

_type_field = fields.String(required=True, validate=validate.OneOf(sorted(MESSAGE_SCHEMAS)))


def parse_message(raw):
    """Validate a raw socket payload and return the loaded message dict.

    Accepts either a decoded object or a JSON string. Raises
    ``marshmallow.ValidationError`` when the payload does not match any message type.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError({'_schema': ['Payload is not valid JSON']})
    if not isinstance(raw, dict):
        raise ValidationError({'_schema': ['Payload must be an object']})

    msg_type = _type_field.deserialize(raw.get('type'), 'type', raw)
    return MESSAGE_SCHEMAS[msg_type].load(raw)
