"""Delivery channels for outbound events.

A channel knows how to reach a player: `SocketChannel` pushes over
Socket.IO as soon as an event is produced, `PollingChannel` buffers events
until the player polls over HTTP.
"""

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Set
import threading

from salvo.messages import Event


class Channel:
    """Transport-side half of the game service."""

    # Players on this channel are removed after going quiet
    reaps_idle = False

    def attach(self, player_id: str, handle: Any = None) -> None:
        raise NotImplementedError

    def detach(self, player_id: str) -> None:
        raise NotImplementedError

    def deliver(self, player_id: str, event: Event) -> None:
        raise NotImplementedError

    def dequeue_pending(self, player_id: str) -> List[Dict[str, Any]]:
        return []


class SocketChannel(Channel):
    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace
        self._sid_by_player: Dict[str, str] = {}
        self._players_by_sid: Dict[str, Set[str]] = defaultdict(set)
        self._lock = threading.Lock()

    def attach(self, player_id, handle=None):
        if handle is None:
            raise ValueError('SocketChannel.attach needs the socket sid')
        with self._lock:
            self._sid_by_player[player_id] = handle
            self._players_by_sid[handle].add(player_id)

    def detach(self, player_id):
        with self._lock:
            sid = self._sid_by_player.pop(player_id, None)
            if sid is not None:
                self._players_by_sid[sid].discard(player_id)
                if not self._players_by_sid[sid]:
                    del self._players_by_sid[sid]

    def players_for(self, sid: str) -> List[str]:
        with self._lock:
            return list(self._players_by_sid.get(sid, ()))

    def deliver(self, player_id, event):
        with self._lock:
            sid = self._sid_by_player.get(player_id)
        if sid is None:
            return
        self.socketio.emit(event.type, event.to_dict(), to=sid, namespace=self.namespace)


class PollingChannel(Channel):
    """Per-player FIFO buffers drained on each poll.

    Delivery is at most once: a drained event is gone, and events for a
    player who never polls are dropped when the player detaches.
    """

    reaps_idle = True

    def __init__(self):
        self._queues: Dict[str, Deque[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def attach(self, player_id, handle=None):
        with self._lock:
            self._queues.setdefault(player_id, deque())

    def detach(self, player_id):
        with self._lock:
            self._queues.pop(player_id, None)

    def deliver(self, player_id, event):
        with self._lock:
            queue = self._queues.get(player_id)
            if queue is not None:
                queue.append(event.to_dict())

    def dequeue_pending(self, player_id):
        with self._lock:
            queue = self._queues.get(player_id)
            if not queue:
                return []
            drained = list(queue)
            queue.clear()
            return drained
