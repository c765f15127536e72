from typing import Dict, Sequence
import random
import string
import threading

from .errors import RoomNotFound
from .session import DEFAULT_SHIP_SIZES, Session

CODE_ALPHABET = string.ascii_uppercase + string.digits


class SessionRegistry:
    """Live sessions keyed by room code.

    One instance per application; create/get/remove are atomic with
    respect to each other.
    """

    def __init__(self, rows: int = 7, cols: int = 9,
                 ship_sizes: Sequence[int] = DEFAULT_SHIP_SIZES, code_length: int = 6):
        self.rows = rows
        self.cols = cols
        self.ship_sizes = tuple(ship_sizes)
        self.code_length = code_length
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def _generate_code(self) -> str:
        while True:
            code = ''.join(random.choices(CODE_ALPHABET, k=self.code_length))
            if code not in self._sessions:
                return code

    def create(self):
        with self._lock:
            code = self._generate_code()
            session = Session(code, rows=self.rows, cols=self.cols, ship_sizes=self.ship_sizes)
            self._sessions[code] = session
        return code, session

    def get(self, code: str) -> Session:
        if not isinstance(code, str):
            raise RoomNotFound()
        with self._lock:
            session = self._sessions.get(code.strip().upper())
        if session is None:
            raise RoomNotFound()
        return session

    def remove(self, code: str) -> None:
        with self._lock:
            session = self._sessions.pop(code.upper(), None)
        if session is not None:
            session.closed = True

    def __contains__(self, code) -> bool:
        with self._lock:
            return isinstance(code, str) and code.upper() in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
