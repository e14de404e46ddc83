"""
config.py

Enums and configuration shared by the simulation core and its collaborators.
Holds the tunables dataclass, the game modes, the four headings and the
campaign level table.
"""

from typing import Tuple, List, Optional
from dataclasses import dataclass
from enum import Enum

##########################
# ENUMS
##########################

class Direction(Enum):
    """Unit heading vectors on the (x, z) grid with helper methods"""
    RIGHT = (1, 0)
    LEFT = (-1, 0)
    DOWN = (0, 1)
    UP = (0, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dz(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> 'Direction':
        """Returns the opposite direction, used for preventing 180-degree turns"""
        return Direction((-self.dx, -self.dz))

    def is_perpendicular(self, other: 'Direction') -> bool:
        """True when the two headings travel on different axes"""
        return self.dx * other.dx + self.dz * other.dz == 0

    @classmethod
    def from_vector(cls, vector: Tuple[int, int]) -> Optional['Direction']:
        """Map a raw (dx, dz) intent to a heading, None if it is not a unit vector"""
        try:
            return cls((int(vector[0]), int(vector[1])))
        except (ValueError, TypeError, IndexError):
            return None


class GameMode(Enum):
    """Selects which registries take part in collisions and the boundary policy"""
    CLASSIC = "classic"
    BARRIERS = "barriers"
    CAMPAIGN = "campaign"
    OBSTACLES = "obstacles"
    RANDOM_BARRIERS = "random-barriers"

    @property
    def wraps(self) -> bool:
        """Classic mode teleports across edges, every other mode is boundary-lethal"""
        return self is GameMode.CLASSIC

    @property
    def uses_obstacles(self) -> bool:
        return self is GameMode.OBSTACLES

    @property
    def uses_complex_barriers(self) -> bool:
        return self in (GameMode.BARRIERS, GameMode.CAMPAIGN)

    @property
    def uses_random_barriers(self) -> bool:
        return self is GameMode.RANDOM_BARRIERS

    @property
    def uses_boundary(self) -> bool:
        return self in (GameMode.BARRIERS, GameMode.CAMPAIGN, GameMode.RANDOM_BARRIERS)


class GameStatus(Enum):
    """Lifecycle of one round. ALIVE is the only state that accepts ticks."""
    ALIVE = "alive"
    TERMINATED = "terminated"
    VICTORY = "victory"

##########################
# CONFIG
##########################

@dataclass
class GameConfig:
    """
    Centralized configuration for game settings.
    Shared by the core (board, placement, auditing) and the pygame driver.
    """
    # Grid settings
    BOARD_SIZE: int = 20
    CELL_SPAN: float = 2.0  # Anchor units per cell edge
    MAX_SEGMENTS: int = 100
    INITIAL_LENGTH: int = 5

    # Timing (milliseconds of game time)
    FPS: int = 60
    BASE_MOVE_INTERVAL: int = 200
    MIN_MOVE_INTERVAL: int = 80
    SPEEDUP_PER_APPLE: int = 4
    AUDIT_INTERVAL: int = 2000

    # Placement
    APPLE_ATTEMPTS: int = 100
    BOARD_FULL_RATIO: float = 0.9
    HEAD_CLEARANCE: int = 3
    OBSTACLE_COUNT: int = 10
    OBSTACLE_ATTEMPTS: int = 50
    OBSTACLE_LIFETIME: int = 10000
    OBSTACLE_FADE_TIME: int = 1000
    BARRIER_COUNT: int = 10
    BARRIER_ATTEMPTS: int = 1000
    MAZE_TARGET_CELLS: int = 70
    MAZE_ATTEMPTS: int = 500

    # Scoring
    POINTS_PER_APPLE: int = 10
    OBSTACLE_BONUS: int = 2
    MAX_SCORES: int = 5

    # Colors (as RGB tuples)
    WHITE: Tuple[int, ...] = (255, 255, 255)
    BLACK: Tuple[int, ...] = (0, 0, 0)
    FLOOR: Tuple[int, ...] = (51, 51, 51)
    RED: Tuple[int, ...] = (200, 0, 0)
    GREEN: Tuple[int, ...] = (0, 200, 0)
    HEAD: Tuple[int, ...] = (255, 0, 0)
    GRAY: Tuple[int, ...] = (119, 119, 119)
    WALL: Tuple[int, ...] = (68, 68, 68)
    TREE: Tuple[int, ...] = (34, 139, 34)
    ROCK: Tuple[int, ...] = (130, 130, 150)
    YELLOW: Tuple[int, ...] = (200, 200, 0)


@dataclass(frozen=True)
class LevelInfo:
    """One campaign level"""
    level: int
    name: str
    barrier_count: int
    target_apples: int = 10


CAMPAIGN_LEVELS: List[LevelInfo] = [
    LevelInfo(1, "Beginner", 3),
    LevelInfo(2, "Apprentice", 5),
    LevelInfo(3, "Explorer", 8),
    LevelInfo(4, "Adventurer", 10),
    LevelInfo(5, "Hunter", 12),
    LevelInfo(6, "Warrior", 15),
    LevelInfo(7, "Master", 18),
    LevelInfo(8, "Strategist", 22),
    LevelInfo(9, "Legendary", 25),
    LevelInfo(10, "Final Challenger", 30),
]


def level_info(level: int) -> LevelInfo:
    """Look up a campaign level (1-based), clamped to the table"""
    index = max(1, min(len(CAMPAIGN_LEVELS), level)) - 1
    return CAMPAIGN_LEVELS[index]


@dataclass(frozen=True)
class ModeConfig:
    """
    Parameter set handed to the core at reset time.
    The core treats it as opaque apart from these four fields.
    """
    mode: GameMode = GameMode.CLASSIC
    obstacle_count: int = 0
    barrier_count: int = 0
    board_size: int = 20

    def __post_init__(self) -> None:
        if not isinstance(self.mode, GameMode):
            # Accept the plain mode names coming from menus
            object.__setattr__(self, "mode", GameMode(self.mode))
        if self.board_size < 4:
            raise ValueError("board_size must be >= 4")
        if self.obstacle_count < 0:
            raise ValueError("obstacle_count must be >= 0")
        if self.barrier_count < 0:
            raise ValueError("barrier_count must be >= 0")

    @classmethod
    def for_mode(cls, mode: GameMode, config: Optional[GameConfig] = None,
                 level: Optional[int] = None) -> 'ModeConfig':
        """Build the default parameter set for a mode (campaign reads its level)"""
        config = config or GameConfig()
        mode = GameMode(mode)
        obstacle_count = config.OBSTACLE_COUNT if mode.uses_obstacles else 0
        barrier_count = 0
        if mode is GameMode.CAMPAIGN:
            barrier_count = level_info(level or 1).barrier_count
        elif mode is GameMode.BARRIERS:
            barrier_count = config.BARRIER_COUNT
        return cls(mode=mode,
                   obstacle_count=obstacle_count,
                   barrier_count=barrier_count,
                   board_size=config.BOARD_SIZE)
