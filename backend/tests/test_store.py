from housie.models import Room, Player
from housie.store import RoomStore


def _room(store, code='1234'):
    return store.create_room(room_code=code, host_id='host', status='lobby', mode='friends',
                             current_number=None, called_numbers=[], call_interval_ms=4000)


def _player(store, room, session_id='s1', name='Alice'):
    return store.add_player(room_id=room.id, session_id=session_id, name=name,
                            is_bot=False, is_host=False, ticket_data=[[[None] * 9] * 3])


def test_create_get_update_room(flask_app):
    store = RoomStore()
    room = _room(store)
    assert room.id
    assert store.get_room('1234').id == room.id
    assert store.get_room('9999') is None

    before = room.updated_at
    updated = store.update_room('1234', status='countdown', called_numbers=[5, 7])
    assert updated.status == 'countdown'
    assert updated.called_numbers == [5, 7]
    assert updated.updated_at >= before
    assert store.update_room('9999', status='running') is None


def test_players_crud(flask_app):
    store = RoomStore()
    room = _room(store)
    alice = _player(store, room)
    bob = _player(store, room, session_id='s2', name='Bob')

    assert {p.name for p in store.list_players(room.id)} == {'Alice', 'Bob'}

    store.update_player(alice.id, name='Alicia')
    assert store.get_player(alice.id).name == 'Alicia'
    assert store.update_player('missing', name='x') is None

    store.remove_player(bob.id)
    assert [p.name for p in store.list_players(room.id)] == ['Alicia']

    store.remove_player_by_session('s1')
    assert store.list_players(room.id) == []
    # Removing again is harmless
    store.remove_player_by_session('s1')
    store.remove_player(bob.id)


def test_delete_room_removes_players(flask_app):
    store = RoomStore()
    room = _room(store)
    room_id = room.id
    _player(store, room)
    _player(store, room, session_id='s2')

    store.delete_room('1234')
    assert store.get_room('1234') is None
    assert Player.query.filter_by(room_id=room_id).count() == 0
    assert Room.query.count() == 0
    store.delete_room('1234')


def test_to_dict_uses_wire_names(flask_app):
    store = RoomStore()
    room = _room(store)
    player = _player(store, room)
    rd = room.to_dict()
    assert rd['roomCode'] == '1234'
    assert rd['calledNumbers'] == []
    assert rd['currentNumber'] is None
    assert rd['callIntervalMs'] == 4000
    pd = player.to_dict()
    assert pd['roomId'] == room.id
    assert pd['sessionId'] == 's1'
    assert pd['isBot'] is False
    assert len(pd['ticketData']) == 1
