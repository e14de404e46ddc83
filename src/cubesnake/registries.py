"""
registries.py

Occupancy registries for everything on the board that is not the snake or the
apple: obstacles (trees and rocks with a limited lifetime) and barriers
(boundary walls, single complex stacks and random polyomino shapes).

Every registry answers "is this cell mine" through a dict keyed on
Board.cell_key, so collision checks stay O(1) however many cells are placed.
Random placement is best-effort: when the attempt budget runs out the
registry keeps whatever was placed so far and logs how short it fell.
"""

import logging
import random
from typing import Callable, ClassVar, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from cubesnake.board import Board, Cell, CellKey
from cubesnake.config import GameConfig, ModeConfig
from cubesnake.shapes import random_shape, shape_extent, place_shape_at

logger = logging.getLogger(__name__)

Blocked = Callable[[Cell], bool]


def is_near(head: Optional[Cell], cell: Cell, distance: int) -> bool:
    """Chebyshev proximity test used to keep spawns away from the head"""
    if head is None:
        return False
    return abs(head.x - cell.x) <= distance and abs(head.z - cell.z) <= distance


class CellRegistry:
    """Base registry: a collection of occupied cells with O(1) lookup"""

    def __init__(self, board: Board):
        self.board = board
        self._index: Dict[CellKey, object] = {}

    def contains(self, cell: Tuple[int, int]) -> bool:
        return self.board.cell_key(cell) in self._index

    def cells(self) -> List[Cell]:
        """Occupied cells, for rendering and debugging only"""
        return [Cell(*key) for key in self._index]

    def __len__(self) -> int:
        return len(self._index)

##########################
# OBSTACLES
##########################

class ObstacleKind(Enum):
    """Shape tag of an obstacle; animation is visual only"""
    TREE = "tree"
    ROCK = "rock"


@dataclass
class Obstacle:
    """A single obstacle cell with its lifetime bookkeeping"""
    cell: Cell
    kind: ObstacleKind
    created_at: int = 0
    anchor: Tuple[float, float] = (0.0, 0.0)
    fading: bool = False
    fade_started_at: Optional[int] = None


class ObstacleRegistry(CellRegistry):
    """
    Obstacles of the obstacle mode. Each one lives OBSTACLE_LIFETIME ms,
    then fades for OBSTACLE_FADE_TIME ms (no longer lethal while fading)
    and is finally replaced by a fresh obstacle somewhere else.
    """

    def __init__(self, board: Board, config: GameConfig):
        super().__init__(board)
        self.config = config
        self.obstacles: List[Obstacle] = []

    def contains(self, cell: Tuple[int, int]) -> bool:
        obstacle = self._index.get(self.board.cell_key(cell))
        return obstacle is not None and not obstacle.fading

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self.obstacles)

    def occupies(self, cell: Tuple[int, int]) -> bool:
        """True for any obstacle on the cell, fading or not"""
        return self.board.cell_key(cell) in self._index

    def add(self, obstacle: Obstacle) -> None:
        self.obstacles.append(obstacle)
        self._index[self.board.cell_key(obstacle.cell)] = obstacle

    def remove(self, obstacle: Obstacle) -> None:
        self.obstacles.remove(obstacle)
        self.reindex()

    def reindex(self) -> None:
        """Rebuild the lookup after cells were moved in place"""
        self._index = {self.board.cell_key(o.cell): o for o in self.obstacles}

    def spawn(self, blocked: Blocked, head: Optional[Cell], now: int,
              rng=random) -> Optional[Obstacle]:
        """Create one obstacle on a random valid cell, None if none was found"""
        for _ in range(self.config.OBSTACLE_ATTEMPTS):
            cell = Cell(rng.randrange(self.board.size), rng.randrange(self.board.size))
            if self.occupies(cell) or blocked(cell):
                continue
            if is_near(head, cell, self.config.HEAD_CLEARANCE):
                continue
            kind = ObstacleKind.TREE if rng.random() > 0.5 else ObstacleKind.ROCK
            obstacle = Obstacle(cell=cell, kind=kind, created_at=now,
                                anchor=self.board.cell_to_anchor(cell))
            self.add(obstacle)
            return obstacle
        logger.warning("Could not find a valid position for an obstacle")
        return None

    def populate(self, count: int, blocked: Blocked, head: Optional[Cell],
                 now: int = 0, rng=random) -> int:
        """Place up to count obstacles; returns how many were placed"""
        placed = 0
        for _ in range(count):
            if self.spawn(blocked, head, now, rng) is not None:
                placed += 1
        if placed < count:
            logger.warning(f"Placed {placed} of {count} requested obstacles.")
        else:
            logger.info(f"Generated {placed} obstacles.")
        return placed

    def update(self, now: int, blocked: Blocked, head: Optional[Cell],
               rng=random) -> List[Obstacle]:
        """
        Advance obstacle lifetimes to game time `now`.
        Returns the obstacles spawned to replace the ones that faded out.
        """
        expired = []
        for obstacle in self.obstacles:
            if not obstacle.fading and now - obstacle.created_at >= self.config.OBSTACLE_LIFETIME:
                obstacle.fading = True
                obstacle.fade_started_at = now
            if obstacle.fading and now - obstacle.fade_started_at >= self.config.OBSTACLE_FADE_TIME:
                expired.append(obstacle)

        if not expired:
            return []
        for obstacle in expired:
            self.obstacles.remove(obstacle)
        self.reindex()

        spawned = []
        for _ in expired:
            obstacle = self.spawn(blocked, head, now, rng)
            if obstacle is not None:
                spawned.append(obstacle)
        logger.debug(f"Replaced {len(expired)} expired obstacles ({len(spawned)} re-placed)")
        return spawned

    def fade_progress(self, obstacle: Obstacle, now: int) -> float:
        """0.0 while solid, rising to 1.0 at the end of the fade"""
        if not obstacle.fading or obstacle.fade_started_at is None:
            return 0.0
        return min((now - obstacle.fade_started_at) / self.config.OBSTACLE_FADE_TIME, 1.0)

##########################
# BARRIERS
##########################

class BarrierKind(Enum):
    """Barrier variant tag"""
    BOUNDARY = "boundary"
    COMPLEX = "complex"
    RANDOM_SHAPE = "random-shape"


@dataclass(frozen=True)
class BoundaryBarrier:
    """One edge of the board, a row of cells just outside it"""
    side: str
    cells: Tuple[Cell, ...]
    kind: ClassVar[BarrierKind] = BarrierKind.BOUNDARY


@dataclass(frozen=True)
class ComplexBarrier:
    """A single stacked barrier inside the board"""
    cell: Cell
    kind: ClassVar[BarrierKind] = BarrierKind.COMPLEX

    @property
    def cells(self) -> Tuple[Cell, ...]:
        return (self.cell,)


@dataclass(frozen=True)
class RandomShapeBarrier:
    """A polyomino from the shape pool placed at a random anchor"""
    shape: str
    anchor: Cell
    cells: Tuple[Cell, ...] = field(default_factory=tuple)
    kind: ClassVar[BarrierKind] = BarrierKind.RANDOM_SHAPE


Barrier = Union[BoundaryBarrier, ComplexBarrier, RandomShapeBarrier]


class BarrierRegistry(CellRegistry):
    """All barriers of the current mode or level. Immutable once built."""

    def __init__(self, board: Board, barriers: Iterable[Barrier] = ()):
        super().__init__(board)
        self.barriers: List[Barrier] = []
        for barrier in barriers:
            self.add(barrier)

    def __iter__(self) -> Iterator[Barrier]:
        return iter(self.barriers)

    def add(self, barrier: Barrier) -> None:
        self.barriers.append(barrier)
        for cell in barrier.cells:
            self._index[self.board.cell_key(cell)] = barrier

    def barrier_at(self, cell: Tuple[int, int]) -> Optional[Barrier]:
        return self._index.get(self.board.cell_key(cell))

    def of_kind(self, kind: BarrierKind) -> List[Barrier]:
        return [b for b in self.barriers if b.kind is kind]

    def replace(self, old: Barrier, new: Barrier) -> None:
        """Swap a barrier for a repaired copy (used by the integrity auditor)"""
        self.barriers[self.barriers.index(old)] = new
        self._index = {}
        for barrier in self.barriers:
            for cell in barrier.cells:
                self._index[self.board.cell_key(cell)] = barrier


def create_boundary_barriers(board: Board) -> List[BoundaryBarrier]:
    """The four walls at z=-1, z=N, x=N and x=-1"""
    n = board.size
    return [
        BoundaryBarrier("north", tuple(Cell(i, -1) for i in range(n))),
        BoundaryBarrier("south", tuple(Cell(i, n) for i in range(n))),
        BoundaryBarrier("east", tuple(Cell(n, i) for i in range(n))),
        BoundaryBarrier("west", tuple(Cell(-1, i) for i in range(n))),
    ]


def create_complex_barriers(board: Board, count: int, snake_cells: Iterable[Cell],
                            config: GameConfig, rng=random) -> List[ComplexBarrier]:
    """Single-cell barriers away from the snake and its head"""
    snake_cells = list(snake_cells)
    snake_keys = {board.cell_key(c) for c in snake_cells}
    head = snake_cells[0] if snake_cells else None
    taken = set()
    barriers = []
    attempts = 0
    while len(barriers) < count and attempts < config.BARRIER_ATTEMPTS:
        attempts += 1
        cell = Cell(rng.randrange(board.size), rng.randrange(board.size))
        key = board.cell_key(cell)
        if key in taken or key in snake_keys:
            continue
        if is_near(head, cell, config.HEAD_CLEARANCE):
            continue
        taken.add(key)
        barriers.append(ComplexBarrier(cell))

    if len(barriers) < count:
        logger.warning(f"Placed {len(barriers)} of {count} complex barriers after {attempts} attempts")
    return barriers


def create_random_shape_barriers(board: Board, snake_cells: Iterable[Cell],
                                 config: GameConfig, rng=random) -> List[RandomShapeBarrier]:
    """
    Drop random shapes until MAZE_TARGET_CELLS cells are covered. Shapes never
    overlap each other or the snake's starting cells and always fit the board.
    """
    occupied = {board.cell_key(c) for c in snake_cells}
    barriers = []
    covered = 0
    attempts = 0
    while covered < config.MAZE_TARGET_CELLS and attempts < config.MAZE_ATTEMPTS:
        attempts += 1
        name, offsets = random_shape(rng)
        max_dx, max_dz = shape_extent(offsets)
        if max_dx >= board.size or max_dz >= board.size:
            continue
        anchor = Cell(rng.randrange(board.size - max_dx), rng.randrange(board.size - max_dz))
        cells = place_shape_at(offsets, anchor)
        if any(board.cell_key(c) in occupied for c in cells):
            continue
        occupied.update(board.cell_key(c) for c in cells)
        barriers.append(RandomShapeBarrier(shape=name, anchor=anchor, cells=tuple(cells)))
        covered += len(cells)

    if covered < config.MAZE_TARGET_CELLS:
        logger.warning(f"Random barriers cover {covered} of {config.MAZE_TARGET_CELLS} target cells")
    else:
        logger.info(f"Created {covered} random barrier cells in {len(barriers)} shapes")
    return barriers


def build_barrier_registry(board: Board, mode_config: ModeConfig, snake_cells: Iterable[Cell],
                           config: GameConfig, rng=random) -> BarrierRegistry:
    """Assemble the barrier set a mode needs (empty for classic and obstacles)"""
    snake_cells = list(snake_cells)
    mode = mode_config.mode
    registry = BarrierRegistry(board)
    if mode.uses_boundary:
        for barrier in create_boundary_barriers(board):
            registry.add(barrier)
    if mode.uses_complex_barriers:
        for barrier in create_complex_barriers(board, mode_config.barrier_count,
                                               snake_cells, config, rng):
            registry.add(barrier)
    if mode.uses_random_barriers:
        for barrier in create_random_shape_barriers(board, snake_cells, config, rng):
            registry.add(barrier)
    return registry
