"""
game.py

The simulation controller. Owns the GameState between ticks, buffers heading
input, advances the snake on a fixed interval that shortens as apples are
eaten, runs the integrity auditor on its own cadence and reports what
happened as a list of events for the score collaborator.
"""

import logging
import random
from typing import List, MutableSequence, Optional, Tuple, Union
from dataclasses import dataclass

from cubesnake.apple import place_apple
from cubesnake.board import Board, Cell
from cubesnake.config import Direction, GameConfig, GameMode, GameStatus, ModeConfig
from cubesnake.integrity import IntegrityAuditor
from cubesnake.registries import ObstacleRegistry, build_barrier_registry
from cubesnake.resolver import Collided, CollisionReason, advance
from cubesnake.snake import HeadingBuffer, initial_snake
from cubesnake.state import GameState

logger = logging.getLogger(__name__)

##########################
# EVENTS
##########################

@dataclass(frozen=True)
class ApplePickedUp:
    cell: Cell
    length: int
    grew: bool


@dataclass(frozen=True)
class SnakeCollided:
    reason: CollisionReason
    cell: Optional[Cell] = None


@dataclass(frozen=True)
class BoardFilled:
    length: int


GameEvent = Union[ApplePickedUp, SnakeCollided, BoardFilled]

##########################
# CONTROLLER
##########################

class SimulationController:
    """
    Single-threaded driver of the simulation core.

    The caller invokes update(now) every frame with a monotonic game clock in
    milliseconds; the controller decides whether a tick and/or an integrity
    pass is due. Nothing here blocks or sleeps.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.auditor = IntegrityAuditor(self.config.MAX_SEGMENTS)
        self.buffer = HeadingBuffer()
        self.state: Optional[GameState] = None
        self.paused = False
        self.visuals: Optional[MutableSequence] = None
        self.last_move_time = 0
        self.last_audit_time = 0

    def build_state(self, mode_config: ModeConfig, now: int = 0) -> GameState:
        """Construct a complete fresh state without touching the current one"""
        if mode_config.board_size < self.config.INITIAL_LENGTH:
            raise ValueError(f"board_size {mode_config.board_size} is smaller than the initial snake")
        board = Board(mode_config.board_size, self.config.CELL_SPAN)
        snake = initial_snake(board, self.config.INITIAL_LENGTH, Direction.RIGHT)
        barriers = build_barrier_registry(board, mode_config, snake.cells, self.config, self.rng)
        obstacles = ObstacleRegistry(board, self.config)
        state = GameState(board=board, mode_config=mode_config, snake=snake,
                          obstacles=obstacles, barriers=barriers)
        if mode_config.mode.uses_obstacles:
            obstacles.populate(mode_config.obstacle_count,
                               lambda cell: snake.occupies(cell) or barriers.contains(cell),
                               snake.head, now, self.rng)
        state.apple = self._place_apple(state)
        if state.apple is None:
            state.status = GameStatus.VICTORY
        return state

    def reset(self, mode_config: Optional[ModeConfig] = None, now: int = 0) -> GameState:
        """
        Discard the round and start a new one. The new state is built in full
        before it replaces the old one, so readers never see a half-built board.
        """
        if mode_config is None:
            mode_config = self.state.mode_config if self.state else ModeConfig.for_mode(GameMode.CLASSIC, self.config)
        state = self.build_state(mode_config, now)
        self.state = state
        self.buffer.clear()
        self.paused = False
        self.last_move_time = now
        self.last_audit_time = now
        logger.info(f"Game has been reset: mode={mode_config.mode.value}, "
                    f"barriers={len(state.barriers)}, obstacles={len(state.obstacles)}")
        return state

    def attach_visuals(self, visuals: Optional[MutableSequence]) -> None:
        """Register the renderer's per-segment objects for length auditing"""
        self.visuals = visuals

    ##########################
    # INPUT
    ##########################

    def request_heading(self, heading: Union[Direction, Tuple[int, int]]) -> bool:
        """Buffer a heading change for the next tick; illegal input is ignored"""
        if self.state is None or not self.state.alive:
            return False
        if not isinstance(heading, Direction):
            heading = Direction.from_vector(heading)
            if heading is None:
                return False
        return self.buffer.request(self.state.snake.heading, heading)

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def toggle_pause(self) -> bool:
        self.paused = not self.paused
        logger.info(f"Game {'paused' if self.paused else 'resumed'}")
        return self.paused

    ##########################
    # TICKS
    ##########################

    @property
    def move_interval(self) -> int:
        """Milliseconds between moves; shrinks per apple down to a floor"""
        eaten = self.state.apples_eaten if self.state else 0
        return max(self.config.MIN_MOVE_INTERVAL,
                   self.config.BASE_MOVE_INTERVAL - eaten * self.config.SPEEDUP_PER_APPLE)

    def update(self, now: int) -> List[GameEvent]:
        """Per-frame entry point; ticks and audits only when due and unpaused"""
        if self.state is None or self.paused or not self.state.alive:
            return []
        if now - self.last_audit_time >= self.config.AUDIT_INTERVAL:
            self.audit()
            self.last_audit_time = now
        if now - self.last_move_time < self.move_interval:
            return []
        self.last_move_time = now
        return self.tick(now)

    def tick(self, now: int = 0) -> List[GameEvent]:
        """Advance exactly one step (if the round is still alive)"""
        state = self.state
        if state is None or not state.alive:
            return []

        heading = self.buffer.take(state.snake.heading)
        outcome = advance(state.snake, heading, state.mode, state.apple, state.board,
                          obstacles=state.obstacles, barriers=state.barriers,
                          max_segments=self.config.MAX_SEGMENTS)
        state.ticks += 1

        if isinstance(outcome, Collided):
            state.status = GameStatus.TERMINATED
            state.collision = outcome.reason
            logger.info(f"Game Over! Collision: {outcome.reason.value} at {outcome.cell}, "
                        f"length {len(state.snake)}, mode {state.mode.value}")
            return [SnakeCollided(outcome.reason, outcome.cell)]

        events: List[GameEvent] = []
        state.snake = outcome.snake
        if outcome.ate_apple:
            state.apples_eaten += 1
            events.append(ApplePickedUp(state.snake.head, len(state.snake), outcome.grew))
            logger.info(f"Apple collected at {tuple(state.snake.head)}, length {len(state.snake)}")
            state.apple = self._place_apple(state)
            if state.apple is None:
                state.status = GameStatus.VICTORY
                events.append(BoardFilled(len(state.snake)))
                return events

        if state.mode.uses_obstacles:
            state.obstacles.update(now, state.is_blocked_for_spawn, state.snake.head, self.rng)
        return events

    def audit(self) -> bool:
        """Run one integrity pass over the current state"""
        if self.state is None:
            return False
        return self.auditor.check_game(self.state, self.visuals)

    def _place_apple(self, state: GameState) -> Optional[Cell]:
        return place_apple(state.board, state.is_occupied,
                           snake_length=len(state.snake),
                           attempts=self.config.APPLE_ATTEMPTS,
                           full_ratio=self.config.BOARD_FULL_RATIO,
                           rng=self.rng)
