from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union
import threading
import time
import uuid

from .board import Board, ShotOutcome
from .errors import (
    DuplicateShot,
    InvalidCoordinates,
    InvalidPhase,
    InvalidPlacement,
    NotYourTurn,
    PlayerNotFound,
    RoomFull,
)

SEATS = (1, 2)
DEFAULT_SHIP_SIZES = (5, 4, 3, 3, 2)


class Phase(str, Enum):
    WAITING = 'waiting'
    PLACEMENT = 'placement'
    BATTLE = 'battle'
    FINISHED = 'finished'


@dataclass
class Player:
    id: str
    name: str
    seat: int


@dataclass
class PlacementResult:
    seat: int
    row: int
    col: int
    horizontal: bool
    ship_size: int
    board: List[List[int]]
    next_ship_size: Optional[int]
    seat_done: bool
    battle_started: bool
    next_seat: int


@dataclass
class ShotResult:
    seat: int
    target_seat: int
    row: int
    col: int
    hit: bool
    game_over: bool
    next_seat: int
    winner: Optional[int]


MoveResult = Union[PlacementResult, ShotResult]


def other_seat(seat: int) -> int:
    return 2 if seat == 1 else 1


class Session:
    """One room: two seats, their boards, the phase and the turn pointer.

    The session does no locking of its own; callers hold `lock` around
    every read-modify-write so that only one move is in flight at a time.
    """

    def __init__(self, code: str, rows: int = 7, cols: int = 9,
                 ship_sizes: Sequence[int] = DEFAULT_SHIP_SIZES):
        if not ship_sizes or any(size < 1 for size in ship_sizes):
            raise ValueError('ship_sizes must be a non-empty list of positive lengths')
        self.code = code
        self.rows = rows
        self.cols = cols
        self.ship_sizes = tuple(ship_sizes)
        self.players: Dict[int, Player] = {}
        self.boards: Dict[int, Board] = {}
        self.phase = Phase.WAITING
        self.turn = 1
        self.winner: Optional[int] = None
        self.placement_cursor = {seat: 0 for seat in SEATS}
        self.ships_placed = {seat: False for seat in SEATS}
        self.last_update = time.time()
        self.lock = threading.RLock()
        self.closed = False

    # ---- membership ----

    def join(self, name: str) -> Player:
        if len(self.players) >= len(SEATS) or self.phase != Phase.WAITING:
            raise RoomFull()
        seat = next(s for s in SEATS if s not in self.players)
        player = Player(id=uuid.uuid4().hex, name=name, seat=seat)
        self.players[seat] = player
        self.boards[seat] = Board(self.rows, self.cols)
        if len(self.players) == len(SEATS):
            self.phase = Phase.PLACEMENT
            self.turn = 1
        self._touch()
        return player

    def leave(self, player_id: str) -> Player:
        """Remove a player. Leaving a game in progress forfeits it."""
        player = self.player(player_id)
        del self.players[player.seat]
        if self.players:
            remaining = next(iter(self.players))
            if self.phase in (Phase.PLACEMENT, Phase.BATTLE):
                self.phase = Phase.FINISHED
                self.winner = remaining
            self.turn = remaining
        self._touch()
        return player

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players.values():
            if player.id == player_id:
                return player
        return None

    def player(self, player_id: str) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise PlayerNotFound()
        return player

    @property
    def is_empty(self) -> bool:
        return not self.players

    # ---- moves ----

    def apply_move(self, seat: int, row: int, col: int, horizontal: bool = True) -> MoveResult:
        if seat not in self.players:
            raise PlayerNotFound()
        if seat != self.turn:
            raise NotYourTurn()
        if self.phase == Phase.PLACEMENT:
            result = self._place(seat, row, col, horizontal)
        elif self.phase == Phase.BATTLE:
            result = self._fire(seat, row, col)
        else:
            raise InvalidPhase(f'Moves are not accepted while the game is {self.phase.value}')
        self._touch()
        return result

    def _place(self, seat: int, row: int, col: int, horizontal: bool) -> PlacementResult:
        board = self.boards[seat]
        if not board.in_bounds(row, col):
            raise InvalidCoordinates()
        size = self._ship_size_at(seat)
        if size is None:
            # This seat already placed its fleet and is waiting on the other seat.
            raise InvalidPhase('All ships already placed')
        if not board.can_place(row, col, size, horizontal):
            raise InvalidPlacement()

        board.place(row, col, size, horizontal)
        self.placement_cursor[seat] += 1

        seat_done = self.placement_cursor[seat] == len(self.ship_sizes)
        battle_started = False
        if seat_done:
            self.ships_placed[seat] = True
            if all(self.ships_placed.values()):
                self.phase = Phase.BATTLE
                self.turn = 1
                battle_started = True
            else:
                self.turn = other_seat(seat)

        return PlacementResult(
            seat=seat,
            row=row,
            col=col,
            horizontal=horizontal,
            ship_size=size,
            board=board.snapshot(),
            next_ship_size=self._ship_size_at(seat),
            seat_done=seat_done,
            battle_started=battle_started,
            next_seat=self.turn,
        )

    def _fire(self, seat: int, row: int, col: int) -> ShotResult:
        target_seat = other_seat(seat)
        target = self.boards[target_seat]
        if not target.in_bounds(row, col):
            raise InvalidCoordinates()

        outcome = target.fire_at(row, col)
        if outcome == ShotOutcome.ALREADY_TARGETED:
            raise DuplicateShot()

        game_over = target.all_ships_sunk()
        if game_over:
            self.phase = Phase.FINISHED
            self.winner = seat
        else:
            self.turn = target_seat

        return ShotResult(
            seat=seat,
            target_seat=target_seat,
            row=row,
            col=col,
            hit=outcome == ShotOutcome.HIT,
            game_over=game_over,
            next_seat=self.turn,
            winner=self.winner,
        )

    def _ship_size_at(self, seat: int) -> Optional[int]:
        cursor = self.placement_cursor[seat]
        if cursor < len(self.ship_sizes):
            return self.ship_sizes[cursor]
        return None

    def _touch(self) -> None:
        self.last_update = time.time()

    # ---- views ----

    def snapshot(self, viewer_seat: Optional[int] = None) -> dict:
        """Full game state; only the viewer's own board shows intact ships."""
        return {
            'roomCode': self.code,
            'phase': self.phase.value,
            'currentSeat': self.turn,
            'winner': self.winner,
            'rows': self.rows,
            'cols': self.cols,
            'shipSizes': list(self.ship_sizes),
            'placement': {
                str(seat): {
                    'placed': self.placement_cursor[seat],
                    'done': self.ships_placed[seat],
                    'nextShipSize': self._ship_size_at(seat),
                }
                for seat in SEATS
            },
            'boards': {
                str(seat): board.snapshot(reveal_ships=(seat == viewer_seat))
                for seat, board in self.boards.items()
            },
            'players': [
                {'name': p.name, 'seat': p.seat} for _, p in sorted(self.players.items())
            ],
            'lastUpdate': self.last_update,
        }
