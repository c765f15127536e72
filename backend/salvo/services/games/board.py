from enum import Enum, IntEnum
from typing import List, Tuple


class Cell(IntEnum):
    EMPTY = 0
    SHIP = 1
    MISS = 2
    HIT = 3


class ShotOutcome(Enum):
    ALREADY_TARGETED = 'already_targeted'
    HIT = 'hit'
    MISS = 'miss'


class Board:
    """Fixed-size grid of cells owned by one seat.

    Legal transitions are EMPTY -> SHIP while placing, and SHIP -> HIT or
    EMPTY -> MISS while fighting.
    """

    def __init__(self, rows: int = 7, cols: int = 9):
        if rows < 1 or cols < 1:
            raise ValueError('Board dimensions must be positive')
        self.rows = rows
        self.cols = cols
        self._cells = [[Cell.EMPTY] * cols for _ in range(rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise ValueError(f'({row}, {col}) is outside the board')
        return self._cells[row][col]

    def _run(self, row: int, col: int, length: int, horizontal: bool) -> List[Tuple[int, int]]:
        if horizontal:
            return [(row, col + i) for i in range(length)]
        return [(row + i, col) for i in range(length)]

    def can_place(self, row: int, col: int, length: int, horizontal: bool) -> bool:
        if length < 1:
            return False
        run = self._run(row, col, length, horizontal)
        return all(self.in_bounds(r, c) and self._cells[r][c] == Cell.EMPTY for r, c in run)

    def place(self, row: int, col: int, length: int, horizontal: bool) -> None:
        if not self.can_place(row, col, length, horizontal):
            raise ValueError(f'Cannot place length {length} ship at ({row}, {col})')
        for r, c in self._run(row, col, length, horizontal):
            self._cells[r][c] = Cell.SHIP

    def fire_at(self, row: int, col: int) -> ShotOutcome:
        current = self.cell(row, col)
        if current in (Cell.HIT, Cell.MISS):
            return ShotOutcome.ALREADY_TARGETED
        if current == Cell.SHIP:
            self._cells[row][col] = Cell.HIT
            return ShotOutcome.HIT
        self._cells[row][col] = Cell.MISS
        return ShotOutcome.MISS

    def all_ships_sunk(self) -> bool:
        return not any(Cell.SHIP in line for line in self._cells)

    def snapshot(self, reveal_ships: bool = True) -> List[List[int]]:
        """Board as rows of ints; hides intact ships unless `reveal_ships`."""
        if reveal_ships:
            return [[int(c) for c in line] for line in self._cells]
        return [[int(Cell.EMPTY if c == Cell.SHIP else c) for c in line] for line in self._cells]
