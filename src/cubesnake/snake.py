"""
snake.py

Snake state: the ordered cells (head first) and the current heading, plus the
single-slot buffer that holds a turn requested between two ticks.
"""

import logging
from typing import FrozenSet, Optional, Sequence, Tuple
from dataclasses import dataclass
from functools import cached_property

from cubesnake.board import Board, Cell, CellKey
from cubesnake.config import Direction

logger = logging.getLogger(__name__)

##########################
# SNAKE
##########################

@dataclass(frozen=True)
class Snake:
    """
    Immutable snapshot of the snake. The move resolver builds a new one every
    tick instead of mutating this one, so renderers can hold on to it safely.
    """
    cells: Tuple[Cell, ...]
    heading: Direction = Direction.RIGHT

    def __post_init__(self) -> None:
        if not self.cells:
            raise ValueError("a snake needs at least one cell")
        object.__setattr__(self, "cells", tuple(Cell(int(x), int(z)) for x, z in self.cells))

    @property
    def head(self) -> Cell:
        return self.cells[0]

    @property
    def tail(self) -> Cell:
        return self.cells[-1]

    def __len__(self) -> int:
        return len(self.cells)

    @cached_property
    def body_keys(self) -> FrozenSet[CellKey]:
        """Keys of cells 1..n-1, the cells a moving head can run into"""
        return frozenset(Board.cell_key(c) for c in self.cells[1:])

    @cached_property
    def keys(self) -> FrozenSet[CellKey]:
        return frozenset(Board.cell_key(c) for c in self.cells)

    def occupies(self, cell: Tuple[int, int]) -> bool:
        return Board.cell_key(cell) in self.keys

    def with_cells(self, cells: Sequence[Cell]) -> 'Snake':
        return Snake(tuple(cells), self.heading)


def initial_snake(board: Board, length: int = 5, heading: Direction = Direction.RIGHT) -> Snake:
    """
    Snake at game start: head on the board center, body extended opposite to
    the heading. On small boards the whole body is shifted to stay in bounds.
    """
    if length < 1 or length > board.size:
        raise ValueError(f"initial length {length} does not fit a {board.size}x{board.size} board")
    head = board.center
    cells = [head.offset(-heading.dx * i, -heading.dz * i) for i in range(length)]
    if not all(board.in_bounds(c) for c in cells):
        # Slide along the travel axis until the tail is back on the board
        tail = cells[-1]
        shift_x = (0 - tail.x) if tail.x < 0 else (board.size - 1 - tail.x if tail.x >= board.size else 0)
        shift_z = (0 - tail.z) if tail.z < 0 else (board.size - 1 - tail.z if tail.z >= board.size else 0)
        cells = [c.offset(shift_x, shift_z) for c in cells]
    return Snake(tuple(cells), heading)

##########################
# INPUT BUFFER
##########################

def is_legal_turn(current: Direction, requested: Direction) -> bool:
    """Only left/right turns relative to the travel axis are legal"""
    return current.is_perpendicular(requested)


class HeadingBuffer:
    """
    Holds at most one pending heading. Input arrives asynchronously; the
    controller applies the pending value at the next tick boundary. A new
    legal request overwrites an unapplied one; illegal requests (reversal or
    repeating the current heading) leave the buffer untouched.
    """

    def __init__(self) -> None:
        self.pending: Optional[Direction] = None

    def request(self, current: Direction, requested: Direction) -> bool:
        """Buffer a turn if it is legal relative to the current heading"""
        if not is_legal_turn(current, requested):
            logger.debug(f"Ignored turn {requested.name} while heading {current.name}")
            return False
        self.pending = requested
        return True

    def take(self, current: Direction) -> Direction:
        """Heading to use for the next tick; clears the buffer"""
        pending, self.pending = self.pending, None
        return pending if pending is not None else current

    def clear(self) -> None:
        self.pending = None
