"""
state.py

The explicit game state owned by the simulation controller. Every component
takes or returns this object instead of reaching for shared module globals.
"""

from typing import Optional, Tuple
from dataclasses import dataclass

from cubesnake.board import Board, Cell
from cubesnake.config import GameMode, GameStatus, ModeConfig
from cubesnake.registries import BarrierRegistry, ObstacleRegistry
from cubesnake.resolver import CollisionReason
from cubesnake.snake import Snake


@dataclass
class GameState:
    """
    Snapshot of one round: snake, apple, registries and status.
    Rendering reads it; only the controller replaces its fields.
    """
    board: Board
    mode_config: ModeConfig
    snake: Snake
    obstacles: ObstacleRegistry
    barriers: BarrierRegistry
    apple: Optional[Cell] = None
    status: GameStatus = GameStatus.ALIVE
    collision: Optional[CollisionReason] = None
    apples_eaten: int = 0
    ticks: int = 0

    @property
    def mode(self) -> GameMode:
        return self.mode_config.mode

    @property
    def alive(self) -> bool:
        return self.status is GameStatus.ALIVE

    def is_occupied(self, cell: Tuple[int, int]) -> bool:
        """True if the snake, an obstacle or a barrier sits on the cell"""
        return (self.snake.occupies(cell)
                or self.obstacles.occupies(cell)
                or self.barriers.contains(cell))

    def is_blocked_for_spawn(self, cell: Tuple[int, int]) -> bool:
        """Occupancy check for obstacle spawns, which must also avoid the apple"""
        if self.apple is not None and self.board.cell_key(cell) == self.board.cell_key(self.apple):
            return True
        return self.is_occupied(cell)

    def __repr__(self) -> str:
        return (
            f"<GameState mode={self.mode.value}, status={self.status.value}, "
            f"length={len(self.snake)}, apple={self.apple}, ticks={self.ticks}>"
        )
