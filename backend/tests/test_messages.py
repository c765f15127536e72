import pytest

from salvo.messages import (
    CreateRoom,
    JoinRoom,
    LeaveRoom,
    Move,
    ShotFired,
    ErrorEvent,
    parse_message,
)
from salvo.services.games.errors import MalformedMessage


def test_parse_create_and_join():
    assert parse_message({'type': 'createRoom', 'playerName': ' Alice '}) == CreateRoom('Alice')
    assert parse_message({'type': 'joinRoom', 'roomCode': 'ab12cd', 'playerName': 'Bob'}) == JoinRoom('AB12CD', 'Bob')


def test_parse_move_accepts_legacy_tag_and_flag():
    msg = parse_message({'type': 'gameMove', 'roomCode': 'AB12CD', 'playerId': 'p1',
                         'row': '3', 'col': 4, 'isHorizontal': False})
    assert msg == Move('AB12CD', 'p1', 3, 4, False)
    msg = parse_message({'type': 'move', 'roomCode': 'AB12CD', 'playerId': 'p1', 'row': 0, 'col': 0})
    assert msg.horizontal is True


def test_parse_leave():
    assert parse_message({'type': 'leaveRoom', 'roomCode': 'x', 'playerId': 'p'}) == LeaveRoom('X', 'p')


@pytest.mark.parametrize('data', [
    None,
    [],
    'createRoom',
    {},
    {'type': 'dance'},
    {'type': ['createRoom']},
    {'type': 'createRoom'},
    {'type': 'createRoom', 'playerName': '   '},
    {'type': 'createRoom', 'playerName': 'x' * 65},
    {'type': 'joinRoom', 'playerName': 'Bob'},
    {'type': 'move', 'roomCode': 'A', 'playerId': 'p', 'row': 'two', 'col': 0},
    {'type': 'move', 'roomCode': 'A', 'playerId': 'p', 'row': True, 'col': 0},
    {'type': 'move', 'roomCode': 'A', 'playerId': 'p', 'row': 1.5, 'col': 0},
    {'type': 'move', 'roomCode': 'A', 'playerId': 'p', 'row': 1, 'col': 0, 'horizontal': 'yes'},
    {'type': 'move', 'roomCode': 'A', 'row': 1, 'col': 0},
])
def test_malformed_messages_rejected(data):
    with pytest.raises(MalformedMessage):
        parse_message(data)


def test_event_payloads_are_camel_case():
    event = ShotFired(seat=1, row=2, col=3, hit=True, game_over=False, target_board=[[3]], next_seat=2)
    assert event.to_dict() == {
        'type': 'shotFired', 'seat': 1, 'row': 2, 'col': 3, 'hit': True,
        'gameOver': False, 'targetBoard': [[3]], 'nextSeat': 2,
    }
    assert ErrorEvent(message='boom').to_dict() == {'type': 'error', 'message': 'boom', 'code': 'server_error'}
