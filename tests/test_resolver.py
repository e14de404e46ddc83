"""
Tests for resolver.py - one tick of movement and every way it can end.
"""

import pytest

from cubesnake.board import Board, Cell
from cubesnake.config import Direction, GameConfig, GameMode
from cubesnake.registries import (
    BarrierRegistry,
    ComplexBarrier,
    Obstacle,
    ObstacleKind,
    ObstacleRegistry,
    RandomShapeBarrier,
)
from cubesnake.resolver import Collided, CollisionReason, Moved, advance, effective_heading
from cubesnake.snake import Snake


@pytest.fixture
def board():
    return Board(20)


@pytest.fixture
def snake():
    return Snake(((9, 9), (8, 9), (7, 9), (6, 9), (5, 9)), Direction.RIGHT)


def straight_snake(head, length, heading):
    """Snake of the given length trailing behind head opposite to heading"""
    return Snake(tuple((head[0] - heading.dx * i, head[1] - heading.dz * i)
                       for i in range(length)), heading)


class TestPlainMoves:
    """Tests for ordinary movement and apples."""

    def test_step_keeps_length(self, board, snake):
        outcome = advance(snake, None, GameMode.CLASSIC, None, board)
        assert isinstance(outcome, Moved)
        assert outcome.snake.cells == ((10, 9), (9, 9), (8, 9), (7, 9), (6, 9))
        assert not outcome.ate_apple

    def test_eating_apple_grows(self, board, snake):
        """Head lands on the apple at (10, 9): length 6, tail kept."""
        outcome = advance(snake, None, GameMode.CLASSIC, Cell(10, 9), board)
        assert isinstance(outcome, Moved)
        assert outcome.ate_apple and outcome.grew
        assert len(outcome.snake) == 6
        assert outcome.snake.cells[:2] == ((10, 9), (9, 9))
        assert outcome.snake.tail == Cell(5, 9)

    def test_reversal_keeps_heading(self, board, snake):
        """Requesting LEFT while moving RIGHT moves the snake right."""
        outcome = advance(snake, Direction.LEFT, GameMode.CLASSIC, None, board)
        assert outcome.snake.head == Cell(10, 9)
        assert outcome.snake.heading is Direction.RIGHT

    def test_perpendicular_turn_applies(self, board, snake):
        outcome = advance(snake, Direction.UP, GameMode.CLASSIC, None, board)
        assert outcome.snake.head == Cell(9, 8)
        assert outcome.snake.heading is Direction.UP

    def test_effective_heading(self):
        assert effective_heading(Direction.UP, None) is Direction.UP
        assert effective_heading(Direction.UP, Direction.DOWN) is Direction.UP
        assert effective_heading(Direction.UP, Direction.RIGHT) is Direction.RIGHT

    def test_growth_stops_at_cap(self, board):
        """At the segment cap eating moves the snake without growing it."""
        snake = Snake(tuple((x, z) for z in range(5) for x in range(20)), Direction.RIGHT)
        snake = Snake((Cell(0, 10),) + snake.cells[:99], Direction.DOWN)
        assert len(snake) == 100
        outcome = advance(snake, None, GameMode.CLASSIC, Cell(0, 11), board, max_segments=100)
        assert isinstance(outcome, Moved)
        assert outcome.ate_apple and not outcome.grew
        assert len(outcome.snake) == 100


class TestBoundaryPolicy:
    """Tests for wrap versus lethal edges."""

    @pytest.mark.parametrize("head, heading, expected", [
        ((19, 5), Direction.RIGHT, (0, 5)),
        ((0, 5), Direction.LEFT, (19, 5)),
        ((5, 19), Direction.DOWN, (5, 0)),
        ((5, 0), Direction.UP, (5, 19)),
    ])
    def test_classic_wraps_every_edge(self, board, head, heading, expected):
        snake = Snake((head,), heading)
        outcome = advance(snake, None, GameMode.CLASSIC, None, board)
        assert isinstance(outcome, Moved)
        assert outcome.snake.head == Cell(*expected)

    @pytest.mark.parametrize("mode", [
        GameMode.BARRIERS, GameMode.CAMPAIGN, GameMode.OBSTACLES, GameMode.RANDOM_BARRIERS,
    ])
    def test_other_modes_are_boundary_lethal(self, board, mode):
        """Head at (0, 5) moving LEFT dies in every non-classic mode."""
        snake = straight_snake((0, 5), 3, Direction.LEFT)
        outcome = advance(snake, None, mode, None, board)
        assert outcome == Collided(CollisionReason.OUT_OF_BOUNDS, Cell(-1, 5))


class TestCollisions:
    """Tests for self, obstacle and barrier collisions."""

    def test_self_collision(self, board):
        snake = Snake(((2, 2), (3, 2), (3, 3), (2, 3), (1, 3)), Direction.LEFT)
        outcome = advance(snake, Direction.DOWN, GameMode.CLASSIC, None, board)
        assert outcome == Collided(CollisionReason.SELF, Cell(2, 3))

    def test_moving_into_current_tail_is_lethal(self, board):
        """The tail still occupies its cell when the head is checked."""
        snake = Snake(((1, 1), (2, 1), (2, 2), (1, 2)), Direction.LEFT)
        outcome = advance(snake, Direction.DOWN, GameMode.CLASSIC, None, board)
        assert isinstance(outcome, Collided)
        assert outcome.reason is CollisionReason.SELF

    def test_self_collision_after_wrap(self, board):
        snake = Snake(((19, 4), (18, 4), (0, 4)), Direction.RIGHT)
        outcome = advance(snake, None, GameMode.CLASSIC, None, board)
        assert outcome == Collided(CollisionReason.SELF, Cell(0, 4))

    def test_obstacle_collision(self, board, snake):
        obstacles = ObstacleRegistry(board, GameConfig())
        obstacles.add(Obstacle(Cell(10, 9), ObstacleKind.ROCK))
        outcome = advance(snake, None, GameMode.OBSTACLES, None, board, obstacles=obstacles)
        assert outcome == Collided(CollisionReason.OBSTACLE, Cell(10, 9))

    def test_fading_obstacle_is_passable(self, board, snake):
        obstacles = ObstacleRegistry(board, GameConfig())
        obstacles.add(Obstacle(Cell(10, 9), ObstacleKind.TREE, fading=True, fade_started_at=0))
        outcome = advance(snake, None, GameMode.OBSTACLES, None, board, obstacles=obstacles)
        assert isinstance(outcome, Moved)

    def test_obstacles_ignored_outside_obstacle_mode(self, board, snake):
        obstacles = ObstacleRegistry(board, GameConfig())
        obstacles.add(Obstacle(Cell(10, 9), ObstacleKind.ROCK))
        outcome = advance(snake, None, GameMode.CLASSIC, None, board, obstacles=obstacles)
        assert isinstance(outcome, Moved)

    def test_complex_barrier_collision(self, board, snake):
        barriers = BarrierRegistry(board, [ComplexBarrier(Cell(10, 9))])
        outcome = advance(snake, None, GameMode.BARRIERS, None, board, barriers=barriers)
        assert outcome == Collided(CollisionReason.BARRIER, Cell(10, 9))

    def test_random_shape_collision(self, board, snake):
        shape = RandomShapeBarrier("vertical_line", Cell(10, 8),
                                   (Cell(10, 8), Cell(10, 9), Cell(10, 10)))
        barriers = BarrierRegistry(board, [shape])
        outcome = advance(snake, None, GameMode.RANDOM_BARRIERS, None, board, barriers=barriers)
        assert outcome == Collided(CollisionReason.BARRIER, Cell(10, 9))

    def test_self_checked_before_barriers(self, board):
        """When a cell is both body and barrier the self collision is reported."""
        snake = Snake(((2, 2), (3, 2), (3, 3), (2, 3), (1, 3)), Direction.LEFT)
        barriers = BarrierRegistry(board, [ComplexBarrier(Cell(2, 3))])
        outcome = advance(snake, Direction.DOWN, GameMode.BARRIERS, None, board, barriers=barriers)
        assert outcome.reason is CollisionReason.SELF
