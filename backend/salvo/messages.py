"""Inbound and outbound message types.

Messages travel as JSON objects carrying a `type` tag. Inbound messages are
parsed into one dataclass per kind; outbound events are dataclasses whose
`to_dict()` gives the camelCase wire payload.
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, List, Optional, Union

from salvo.services.games.errors import MalformedMessage

MAX_NAME_LENGTH = 64


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedMessage(f'{key} is required')
    return value.strip()


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise MalformedMessage(f'{key} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise MalformedMessage(f'{key} must be an integer')


def _player_name(data: Dict[str, Any]) -> str:
    name = _require_str(data, 'playerName')
    if len(name) > MAX_NAME_LENGTH:
        raise MalformedMessage(f'playerName must be at most {MAX_NAME_LENGTH} characters')
    return name


# ---- inbound ----

@dataclass(frozen=True)
class CreateRoom:
    player_name: str

    @classmethod
    def from_payload(cls, data):
        return cls(player_name=_player_name(data))


@dataclass(frozen=True)
class JoinRoom:
    room_code: str
    player_name: str

    @classmethod
    def from_payload(cls, data):
        return cls(room_code=_require_str(data, 'roomCode').upper(), player_name=_player_name(data))


@dataclass(frozen=True)
class Move:
    room_code: str
    player_id: str
    row: int
    col: int
    horizontal: bool = True

    @classmethod
    def from_payload(cls, data):
        horizontal = data.get('horizontal', data.get('isHorizontal', True))
        if not isinstance(horizontal, bool):
            raise MalformedMessage('horizontal must be a boolean')
        return cls(
            room_code=_require_str(data, 'roomCode').upper(),
            player_id=_require_str(data, 'playerId'),
            row=_require_int(data, 'row'),
            col=_require_int(data, 'col'),
            horizontal=horizontal,
        )


@dataclass(frozen=True)
class LeaveRoom:
    room_code: str
    player_id: str

    @classmethod
    def from_payload(cls, data):
        return cls(room_code=_require_str(data, 'roomCode').upper(), player_id=_require_str(data, 'playerId'))


InboundMessage = Union[CreateRoom, JoinRoom, Move, LeaveRoom]

INBOUND_TYPES = {
    'createRoom': CreateRoom,
    'joinRoom': JoinRoom,
    'move': Move,
    'gameMove': Move,  # older browser clients
    'leaveRoom': LeaveRoom,
}


def parse_message(data) -> InboundMessage:
    if not isinstance(data, dict):
        raise MalformedMessage('Message must be a JSON object')
    tag = data.get('type')
    kind = INBOUND_TYPES.get(tag) if isinstance(tag, str) else None
    if kind is None:
        raise MalformedMessage(f'Unknown message type: {tag!r}')
    return kind.from_payload(data)


# ---- outbound ----

class Event:
    type: ClassVar[str] = ''

    def to_dict(self) -> Dict[str, Any]:
        payload = {'type': self.type}
        for f in fields(self):
            payload[_camel(f.name)] = getattr(self, f.name)
        return payload


@dataclass
class RoomCreated(Event):
    type: ClassVar[str] = 'roomCreated'
    room_code: str
    seat: int
    player_id: str


@dataclass
class RoomJoined(Event):
    type: ClassVar[str] = 'roomJoined'
    room_code: str
    seat: int
    player_id: str
    game_state: Dict[str, Any]


@dataclass
class PlayerJoined(Event):
    type: ClassVar[str] = 'playerJoined'
    seat: int
    player_name: str
    total_players: int


@dataclass
class GameStart(Event):
    type: ClassVar[str] = 'gameStart'
    first_seat: int
    ship_sizes: List[int]


@dataclass
class ShipPlaced(Event):
    type: ClassVar[str] = 'shipPlaced'
    seat: int
    board: List[List[int]]
    next_ship_size: Optional[int]


@dataclass
class PlacementComplete(Event):
    type: ClassVar[str] = 'placementComplete'
    seat: int
    next_seat: int


@dataclass
class BattleStart(Event):
    type: ClassVar[str] = 'battleStart'
    first_seat: int


@dataclass
class ShotFired(Event):
    type: ClassVar[str] = 'shotFired'
    seat: int
    row: int
    col: int
    hit: bool
    game_over: bool
    target_board: List[List[int]]
    next_seat: int


@dataclass
class PlayerLeft(Event):
    type: ClassVar[str] = 'playerLeft'
    seat: int
    message: str


@dataclass
class GameOver(Event):
    type: ClassVar[str] = 'gameOver'
    winner: int
    reason: str


@dataclass
class ErrorEvent(Event):
    type: ClassVar[str] = 'error'
    message: str
    code: str = 'server_error'
