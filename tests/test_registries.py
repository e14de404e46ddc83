"""
Tests for registries.py and shapes.py - obstacles, barriers and the shape pool.
"""

import random

import pytest

from cubesnake.board import Board, Cell
from cubesnake.config import GameConfig, GameMode, ModeConfig
from cubesnake.registries import (
    BarrierKind,
    BarrierRegistry,
    BoundaryBarrier,
    ComplexBarrier,
    ObstacleRegistry,
    RandomShapeBarrier,
    build_barrier_registry,
    create_boundary_barriers,
    create_complex_barriers,
    create_random_shape_barriers,
    is_near,
)
from cubesnake.shapes import BARRIER_SHAPES, place_shape_at, shape_extent
from cubesnake.snake import initial_snake


@pytest.fixture
def board():
    return Board(20)


@pytest.fixture
def snake_cells(board):
    return initial_snake(board, 5).cells


class TestShapes:
    """Tests for the polyomino pool."""

    def test_pool_has_twelve_shapes(self):
        assert len(BARRIER_SHAPES) == 12

    def test_every_shape_starts_at_origin_box(self):
        """Offsets are non-negative so anchors bound the shape's top-left."""
        for offsets in BARRIER_SHAPES.values():
            assert all(dx >= 0 and dz >= 0 for dx, dz in offsets)

    def test_place_shape_at_translates(self):
        assert place_shape_at([(0, 0), (1, 2)], (5, 6)) == [Cell(5, 6), Cell(6, 8)]

    def test_shape_extent(self):
        assert shape_extent(BARRIER_SHAPES["rectangle"]) == (1, 2)


class TestObstacleRegistry:
    """Tests for obstacle placement and lifetime."""

    def test_populate_avoids_snake_and_head_zone(self, board, snake_cells):
        """Obstacles never land on the snake or within 3 cells of the head."""
        registry = ObstacleRegistry(board, GameConfig())
        snake_keys = {board.cell_key(c) for c in snake_cells}
        placed = registry.populate(10, lambda c: board.cell_key(c) in snake_keys,
                                   snake_cells[0], 0, random.Random(1))
        assert placed == 10
        assert len(registry) == 10
        for obstacle in registry:
            assert board.cell_key(obstacle.cell) not in snake_keys
            assert not is_near(snake_cells[0], obstacle.cell, 3)
            assert obstacle.anchor == board.cell_to_anchor(obstacle.cell)

    def test_contains_is_constant_time_lookup(self, board):
        """contains() answers from the keyed index."""
        registry = ObstacleRegistry(board, GameConfig())
        registry.populate(3, lambda c: False, None, 0, random.Random(2))
        for cell in registry.cells():
            assert registry.contains(cell)
        free = next(c for c in board.iter_cells() if not registry.occupies(c))
        assert not registry.contains(free)

    def test_exhaustion_keeps_partial_batch(self):
        """When attempts run out the registry keeps what it placed."""
        board = Board(4)
        registry = ObstacleRegistry(board, GameConfig())
        placed = registry.populate(30, lambda c: False, None, 0, random.Random(3))
        assert placed < 30
        assert len(registry) == placed

    def test_lifetime_fade_and_replacement(self, board):
        """Obstacles fade after their lifetime, stop colliding, then get replaced."""
        config = GameConfig(OBSTACLE_LIFETIME=100, OBSTACLE_FADE_TIME=50)
        registry = ObstacleRegistry(board, config)
        registry.populate(5, lambda c: False, None, 0, random.Random(4))
        first_batch = list(registry.cells())

        assert registry.update(100, lambda c: False, None, random.Random(5)) == []
        assert all(o.fading for o in registry)
        assert not any(registry.contains(c) for c in first_batch)
        assert all(registry.occupies(c) for c in first_batch)

        spawned = registry.update(150, lambda c: False, None, random.Random(6))
        assert len(spawned) == 5
        assert len(registry) == 5
        assert all(not o.fading and o.created_at == 150 for o in registry)

    def test_fade_progress(self, board):
        config = GameConfig(OBSTACLE_LIFETIME=100, OBSTACLE_FADE_TIME=50)
        registry = ObstacleRegistry(board, config)
        registry.populate(1, lambda c: False, None, 0, random.Random(7))
        obstacle = registry.obstacles[0]
        assert registry.fade_progress(obstacle, 50) == 0.0
        registry.update(100, lambda c: False, None)
        assert registry.fade_progress(obstacle, 125) == pytest.approx(0.5)


class TestBarriers:
    """Tests for the barrier variants and their construction."""

    def test_boundary_walls_sit_outside_the_board(self, board):
        walls = create_boundary_barriers(board)
        assert [w.side for w in walls] == ["north", "south", "east", "west"]
        for wall in walls:
            assert len(wall.cells) == 20
            assert not any(board.in_bounds(c) for c in wall.cells)
        assert Cell(5, -1) in walls[0].cells
        assert Cell(-1, 7) in walls[3].cells

    def test_variant_tags(self):
        assert BoundaryBarrier("north", ()).kind is BarrierKind.BOUNDARY
        assert ComplexBarrier(Cell(1, 1)).kind is BarrierKind.COMPLEX
        assert RandomShapeBarrier("dot", Cell(1, 1), (Cell(1, 1),)).kind is BarrierKind.RANDOM_SHAPE

    def test_complex_barriers_avoid_snake_and_each_other(self, board, snake_cells):
        barriers = create_complex_barriers(board, 12, snake_cells, GameConfig(), random.Random(8))
        cells = [b.cell for b in barriers]
        assert len(barriers) == 12
        assert len(set(cells)) == 12
        assert not set(cells) & set(snake_cells)
        assert all(not is_near(snake_cells[0], c, 3) for c in cells)

    def test_complex_barriers_best_effort(self, board, snake_cells):
        """Asking for more barriers than fit yields a subset, not an error."""
        barriers = create_complex_barriers(board, 500, snake_cells, GameConfig(), random.Random(9))
        assert 0 < len(barriers) < 500

    def test_random_shapes_fit_and_do_not_overlap(self, board, snake_cells):
        barriers = create_random_shape_barriers(board, snake_cells, GameConfig(), random.Random(10))
        seen = set()
        for barrier in barriers:
            assert barrier.shape in BARRIER_SHAPES
            for cell in barrier.cells:
                assert board.in_bounds(cell)
                assert cell not in seen
                assert cell not in snake_cells
                seen.add(cell)
        assert seen
        # placement stops once the target is met, overshooting by at most one shape
        assert len(seen) < 70 + 7

    def test_registry_lookup(self, board):
        barrier = ComplexBarrier(Cell(4, 4))
        registry = BarrierRegistry(board, [barrier])
        assert registry.contains((4, 4))
        assert registry.barrier_at(Cell(4, 4)) is barrier
        assert registry.barrier_at((4, 5)) is None

    def test_registry_replace_reindexes(self, board):
        old = ComplexBarrier(Cell(25, 4))
        registry = BarrierRegistry(board, [old])
        new = ComplexBarrier(Cell(19, 4))
        registry.replace(old, new)
        assert not registry.contains((25, 4))
        assert registry.contains((19, 4))
        assert registry.barriers == [new]


class TestBuildBarrierRegistry:
    """Tests for the per-mode barrier assembly."""

    @pytest.mark.parametrize("mode", [GameMode.CLASSIC, GameMode.OBSTACLES])
    def test_modes_without_barriers(self, board, snake_cells, mode):
        registry = build_barrier_registry(board, ModeConfig(mode=mode), snake_cells,
                                          GameConfig(), random.Random(11))
        assert len(registry) == 0

    def test_barrier_mode_has_walls_and_complex(self, board, snake_cells):
        registry = build_barrier_registry(board, ModeConfig(GameMode.BARRIERS, barrier_count=6),
                                          snake_cells, GameConfig(), random.Random(12))
        assert len(registry.of_kind(BarrierKind.BOUNDARY)) == 4
        assert len(registry.of_kind(BarrierKind.COMPLEX)) == 6

    def test_maze_mode_has_random_shapes(self, board, snake_cells):
        registry = build_barrier_registry(board, ModeConfig(GameMode.RANDOM_BARRIERS),
                                          snake_cells, GameConfig(), random.Random(13))
        assert registry.of_kind(BarrierKind.RANDOM_SHAPE)
        assert not registry.of_kind(BarrierKind.COMPLEX)
