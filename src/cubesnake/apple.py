"""
apple.py

Apple placement. Tries uniform random sampling first, falls back to a full
row-major scan of the board, and reports a full board (a win) as None.
Placement only reads the occupancy it is given; it never mutates registries.
"""

import logging
import random
from typing import Callable, Optional

from cubesnake.board import Board, Cell

logger = logging.getLogger(__name__)


def sample_free_cell(board: Board, is_occupied: Callable[[Cell], bool],
                     attempts: int, rng=random) -> Optional[Cell]:
    """Tier 1: up to `attempts` uniformly random cells, first free one wins"""
    for _ in range(attempts):
        cell = Cell(rng.randrange(board.size), rng.randrange(board.size))
        if not is_occupied(cell):
            return cell
    return None


def scan_free_cell(board: Board, is_occupied: Callable[[Cell], bool],
                   rng=random) -> Optional[Cell]:
    """Tier 2: enumerate the whole board and pick uniformly among free cells"""
    free = [cell for cell in board.iter_cells() if not is_occupied(cell)]
    if not free:
        return None
    return rng.choice(free)


def place_apple(board: Board, is_occupied: Callable[[Cell], bool],
                snake_length: int = 0, attempts: int = 100,
                full_ratio: float = 0.9, rng=random) -> Optional[Cell]:
    """
    Find a cell for the next apple.

    Returns None when the board counts as full: either the snake covers at
    least `full_ratio` of the cells or no free cell exists at all. The caller
    treats that as victory, not as an error.
    """
    if snake_length >= full_ratio * board.cell_count:
        logger.info(f"Snake covers {snake_length} of {board.cell_count} cells, board is full")
        return None

    cell = sample_free_cell(board, is_occupied, max(attempts, 100), rng)
    if cell is not None:
        return cell

    logger.warning(f"Random apple placement failed after {max(attempts, 100)} attempts, scanning board")
    cell = scan_free_cell(board, is_occupied, rng)
    if cell is None:
        logger.info("No free cell left for the apple, board is full")
    return cell
