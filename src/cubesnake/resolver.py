"""
resolver.py

The move resolver: given the current snake, the heading for this tick, the
mode and the registries, compute either the next snake or the collision that
ends the round. Outcomes are returned as values for the caller to match on.
"""

import logging
from typing import Optional, Union
from dataclasses import dataclass
from enum import Enum

from cubesnake.board import Board, Cell
from cubesnake.config import Direction, GameMode
from cubesnake.registries import BarrierKind, BarrierRegistry, ObstacleRegistry
from cubesnake.snake import Snake, is_legal_turn

logger = logging.getLogger(__name__)


class CollisionReason(Enum):
    """Why a round ended"""
    SELF = "self"
    OBSTACLE = "obstacle"
    BARRIER = "barrier"
    OUT_OF_BOUNDS = "out-of-bounds"


@dataclass(frozen=True)
class Moved:
    snake: Snake
    ate_apple: bool = False
    grew: bool = False


@dataclass(frozen=True)
class Collided:
    reason: CollisionReason
    cell: Optional[Cell] = None


Outcome = Union[Moved, Collided]


def effective_heading(current: Direction, requested: Optional[Direction]) -> Direction:
    """Requested heading if it is a legal turn, otherwise keep going straight"""
    if requested is None or not is_legal_turn(current, requested):
        return current
    return requested


# Every variant is lethal on overlap; boundary walls are normally caught
# earlier by the out-of-bounds check.
BARRIER_REASONS = {
    BarrierKind.BOUNDARY: CollisionReason.BARRIER,
    BarrierKind.COMPLEX: CollisionReason.BARRIER,
    BarrierKind.RANDOM_SHAPE: CollisionReason.BARRIER,
}


def _barrier_collision(barriers: BarrierRegistry, cell: Cell) -> Optional[CollisionReason]:
    barrier = barriers.barrier_at(cell)
    if barrier is None:
        return None
    return BARRIER_REASONS[barrier.kind]


def advance(snake: Snake, heading: Optional[Direction], mode: GameMode,
            apple: Optional[Cell], board: Board,
            obstacles: Optional[ObstacleRegistry] = None,
            barriers: Optional[BarrierRegistry] = None,
            max_segments: int = 100) -> Outcome:
    """
    Advance the snake by one cell.

    Order of checks: boundary policy, self collision against the current body
    (cells 1..n-1), obstacle/barrier registries, then the apple. A reversal or
    a repeat of the current heading is treated as "keep going straight".
    """
    heading = effective_heading(snake.heading, heading)
    new_head = snake.head.offset(heading.dx, heading.dz)

    # Boundary policy
    if not board.in_bounds(new_head):
        if mode.wraps:
            new_head = board.wrap(new_head)
        else:
            logger.debug(f"Head left the board at {new_head}")
            return Collided(CollisionReason.OUT_OF_BOUNDS, new_head)

    if board.cell_key(new_head) in snake.body_keys:
        return Collided(CollisionReason.SELF, new_head)

    if mode.uses_obstacles and obstacles is not None and obstacles.contains(new_head):
        return Collided(CollisionReason.OBSTACLE, new_head)

    if barriers is not None:
        reason = _barrier_collision(barriers, new_head)
        if reason is not None:
            return Collided(reason, new_head)

    ate_apple = apple is not None and board.cell_key(new_head) == board.cell_key(apple)
    grew = ate_apple and len(snake) < max_segments

    cells = (new_head,) + snake.cells if grew else (new_head,) + snake.cells[:-1]
    return Moved(Snake(cells, heading), ate_apple=ate_apple, grew=grew)
