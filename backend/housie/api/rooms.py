from flask import Blueprint, jsonify
from housie.services.games.manager import game_manager


rooms = Blueprint('rooms', __name__)


@rooms.route('/room/<string:room_code>', methods=['GET'])
def get_room(room_code):
    """Read-through view of a room and its players."""
    store = game_manager.store
    room = store.get_room(room_code)
    if not room:
        return jsonify({'error': 'Room not found'}), 404
    players = store.list_players(room.id)
    return jsonify({
        'room': room.to_dict(),
        'players': [p.to_dict() for p in players],
    })
