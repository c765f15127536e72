from typing import Any, Dict, List, Optional
import logging
import threading
import time

from salvo.messages import (
    BattleStart,
    CreateRoom,
    Event,
    GameOver,
    GameStart,
    JoinRoom,
    LeaveRoom,
    Move,
    PlacementComplete,
    PlayerJoined,
    PlayerLeft,
    RoomCreated,
    RoomJoined,
    ShipPlaced,
    ShotFired,
)
from .errors import PlayerNotFound, RoomNotFound
from .registry import SessionRegistry
from .session import Phase, PlacementResult, Player, Session, ShotResult


class GameService:
    """Single entry point shared by every transport.

    Transports hand in parsed messages together with the channel the
    requester is reachable on; the service applies them to the session and
    routes the resulting events to each seat's channel. All session
    mutations and their deliveries happen under the session lock, so events
    reach each player in the order they were produced.
    """

    def __init__(self, registry: SessionRegistry, logger: Optional[logging.Logger] = None, clock=time.time):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)
        self._channels: Dict[str, Any] = {}
        self._rooms: Dict[str, str] = {}
        self._last_seen: Dict[str, float] = {}
        self._clock = clock
        self._lock = threading.Lock()

    def handle(self, message, channel, handle=None) -> Dict[str, Any]:
        if isinstance(message, CreateRoom):
            return self.create_room(message.player_name, channel, handle)
        if isinstance(message, JoinRoom):
            return self.join_room(message.room_code, message.player_name, channel, handle)
        if isinstance(message, Move):
            return self.move(message.room_code, message.player_id, message.row, message.col, message.horizontal)
        if isinstance(message, LeaveRoom):
            return self.leave(message.room_code, message.player_id)
        raise TypeError(f'Unhandled message type: {type(message).__name__}')

    # ---- room membership ----

    def create_room(self, player_name: str, channel, handle=None) -> Dict[str, Any]:
        code, session = self.registry.create()
        with session.lock:
            player = session.join(player_name)
            self._register(player, code, channel, handle)
            self._broadcast(session, PlayerJoined(seat=player.seat, player_name=player.name, total_players=1))
        self.logger.info(f"[room-created] code={code} seat={player.seat} player={player.id}")
        return RoomCreated(room_code=code, seat=player.seat, player_id=player.id).to_dict()

    def join_room(self, room_code: str, player_name: str, channel, handle=None) -> Dict[str, Any]:
        session = self.registry.get(room_code)
        with session.lock:
            # A room is joinable only once its creator is seated.
            if session.closed or session.is_empty:
                raise RoomNotFound()
            player = session.join(player_name)
            self._register(player, session.code, channel, handle)
            self._broadcast(session, PlayerJoined(
                seat=player.seat, player_name=player.name, total_players=len(session.players)))
            if session.phase == Phase.PLACEMENT:
                self._broadcast(session, GameStart(first_seat=session.turn, ship_sizes=list(session.ship_sizes)))
            state = session.snapshot(viewer_seat=player.seat)
        self.logger.info(f"[room-joined] code={session.code} seat={player.seat} player={player.id}")
        return RoomJoined(room_code=session.code, seat=player.seat, player_id=player.id, game_state=state).to_dict()

    def leave(self, room_code: str, player_id: str) -> Dict[str, Any]:
        session = self.registry.get(room_code)
        with session.lock:
            player = session.player(player_id)
            self._remove_player(session, player)
        return {'type': 'roomLeft', 'success': True, 'roomCode': session.code, 'seat': player.seat}

    def leave_player(self, player_id: str) -> None:
        """Drop a player whose connection went away."""
        code = self.room_of(player_id)
        if code is None:
            return
        try:
            self.leave(code, player_id)
        except (RoomNotFound, PlayerNotFound):
            # Room already disposed by a concurrent leave.
            self._unregister(player_id)

    def _remove_player(self, session: Session, player: Player) -> None:
        was_running = session.phase in (Phase.PLACEMENT, Phase.BATTLE)
        session.leave(player.id)
        self._unregister(player.id)
        self._broadcast(session, PlayerLeft(seat=player.seat, message=f'Player {player.seat} disconnected'))
        if was_running and session.phase == Phase.FINISHED:
            self._broadcast(session, GameOver(winner=session.winner, reason='forfeit'))
            self.logger.info(f"[game-over] code={session.code} winner={session.winner} reason=forfeit")
        self.logger.info(f"[room-left] code={session.code} seat={player.seat} remaining={len(session.players)}")
        if session.is_empty:
            self.registry.remove(session.code)
            self.logger.info(f"[room-disposed] code={session.code}")

    # ---- moves ----

    def move(self, room_code: str, player_id: str, row: int, col: int, horizontal: bool = True) -> Dict[str, Any]:
        session = self.registry.get(room_code)
        with session.lock:
            if session.closed:
                raise RoomNotFound()
            player = session.player(player_id)
            self._seen(player.id)
            result = session.apply_move(player.seat, row, col, horizontal)
            if isinstance(result, PlacementResult):
                return self._after_placement(session, result)
            if isinstance(result, ShotResult):
                return self._after_shot(session, result)
            raise TypeError(f'Unhandled move result: {type(result).__name__}')

    def _after_placement(self, session: Session, result: PlacementResult) -> Dict[str, Any]:
        acting = session.players[result.seat]
        self._send(acting.id, ShipPlaced(seat=result.seat, board=result.board, next_ship_size=result.next_ship_size))
        if result.battle_started:
            self._broadcast(session, BattleStart(first_seat=session.turn))
            self.logger.info(f"[battle-start] code={session.code} first_seat={session.turn}")
        elif result.seat_done:
            self._broadcast(session, PlacementComplete(seat=result.seat, next_seat=result.next_seat))
        return {
            'type': 'moveResult',
            'success': True,
            'phase': session.phase.value,
            'seat': result.seat,
            'shipSize': result.ship_size,
            'board': result.board,
            'nextShipSize': result.next_ship_size,
            'placementComplete': result.seat_done,
            'battleStarted': result.battle_started,
            'nextSeat': result.next_seat,
        }

    def _after_shot(self, session: Session, result: ShotResult) -> Dict[str, Any]:
        target_board = session.boards[result.target_seat]
        masked = target_board.snapshot(reveal_ships=False)
        for seat, player in session.players.items():
            self._send(player.id, ShotFired(
                seat=result.seat,
                row=result.row,
                col=result.col,
                hit=result.hit,
                game_over=result.game_over,
                target_board=target_board.snapshot() if seat == result.target_seat else masked,
                next_seat=result.next_seat,
            ))
        if result.game_over:
            self._broadcast(session, GameOver(winner=result.winner, reason='fleet_sunk'))
            self.logger.info(f"[game-over] code={session.code} winner={result.winner} reason=fleet_sunk")
        return {
            'type': 'moveResult',
            'success': True,
            'phase': session.phase.value,
            'seat': result.seat,
            'row': result.row,
            'col': result.col,
            'hit': result.hit,
            'gameOver': result.game_over,
            'targetBoard': masked,
            'nextSeat': result.next_seat,
            'winner': result.winner,
        }

    # ---- polling ----

    def poll(self, room_code: str, player_id: Optional[str] = None) -> Dict[str, Any]:
        """State snapshot plus any events buffered for `player_id`."""
        session = self.registry.get(room_code)
        with session.lock:
            player = session.find_player(player_id) if player_id else None
            if player is not None:
                self._seen(player.id)
            state = session.snapshot(viewer_seat=player.seat if player else None)
            players = [{'name': p.name, 'seat': p.seat} for _, p in sorted(session.players.items())]
        messages = self.pending(player.id) if player else []
        return {'gameState': state, 'players': players, 'messages': messages}

    def pending(self, player_id: str):
        with self._lock:
            channel = self._channels.get(player_id)
        if channel is None:
            return []
        return channel.dequeue_pending(player_id)

    def room_of(self, player_id: str) -> Optional[str]:
        with self._lock:
            return self._rooms.get(player_id)

    def reap_idle(self, timeout: float, now: Optional[float] = None) -> List[str]:
        """Remove polling players not heard from for more than `timeout` seconds.

        Socket players are left alone; their disconnect removes them.
        """
        now = self._clock() if now is None else now
        with self._lock:
            idle = [
                player_id for player_id, seen in self._last_seen.items()
                if now - seen > timeout and getattr(self._channels.get(player_id), 'reaps_idle', False)
            ]
        for player_id in idle:
            self.logger.info(f"[player-reaped] player={player_id} room={self.room_of(player_id)}")
            self.leave_player(player_id)
        return idle

    # ---- routing ----

    def _seen(self, player_id: str) -> None:
        with self._lock:
            if player_id in self._rooms:
                self._last_seen[player_id] = self._clock()

    def _register(self, player: Player, code: str, channel, handle) -> None:
        channel.attach(player.id, handle)
        with self._lock:
            self._channels[player.id] = channel
            self._rooms[player.id] = code
            self._last_seen[player.id] = self._clock()

    def _unregister(self, player_id: str) -> None:
        with self._lock:
            channel = self._channels.pop(player_id, None)
            self._rooms.pop(player_id, None)
            self._last_seen.pop(player_id, None)
        if channel is not None:
            channel.detach(player_id)

    def _send(self, player_id: str, event: Event) -> None:
        with self._lock:
            channel = self._channels.get(player_id)
        if channel is not None:
            channel.deliver(player_id, event)

    def _broadcast(self, session: Session, event: Event) -> None:
        for _, player in sorted(session.players.items()):
            self._send(player.id, event)
