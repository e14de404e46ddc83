"""
integrity.py

Periodic consistency pass over the game state. Each corruption class is
checked and repaired on its own:

- snake longer than the segment cap: truncated to the cap
- snake cells and the renderer's segment objects out of step: the longer
  sequence is truncated to the shorter one
- snake cell off the board: the head goes back to the center, any other
  segment copies the segment in front of it
- obstacle or barrier cell off the board: clamped, anchor recomputed
- apple off the board: clamped

Duplicate segments are only reported. A duplicate pair is what a growth tick
legitimately looks like, so removing it would break growth.
"""

import logging
from dataclasses import replace
from typing import List, MutableSequence, Optional, Tuple

from cubesnake.board import Cell
from cubesnake.registries import BoundaryBarrier, ComplexBarrier, RandomShapeBarrier
from cubesnake.state import GameState

logger = logging.getLogger(__name__)


def find_duplicates(cells) -> List[Tuple[int, Cell]]:
    """(index, cell) for every cell that repeats an earlier one"""
    seen = set()
    duplicates = []
    for index, cell in enumerate(cells):
        key = (int(cell[0]), int(cell[1]))
        if key in seen:
            duplicates.append((index, Cell(*key)))
        else:
            seen.add(key)
    return duplicates


class IntegrityAuditor:
    """Detects and repairs state corruption without ever ending the game"""

    def __init__(self, max_segments: int = 100):
        self.max_segments = max_segments
        self.corrections = 0

    def check_snake(self, state: GameState,
                    visuals: Optional[MutableSequence] = None) -> bool:
        board = state.board
        cells = list(state.snake.cells)
        corrected = False

        # Segment cap
        if len(cells) > self.max_segments:
            logger.warning(f"Snake length {len(cells)} exceeds the cap of {self.max_segments}, truncating")
            del cells[self.max_segments:]
            corrected = True
        if visuals is not None and len(visuals) > self.max_segments:
            del visuals[self.max_segments:]
            corrected = True

        # Logical cells vs. the renderer's segment objects
        if visuals is not None and len(visuals) != len(cells):
            logger.warning(f"Length mismatch: {len(cells)} cells vs {len(visuals)} segment objects")
            if len(visuals) > len(cells):
                del visuals[len(cells):]
                corrected = True
            elif visuals:
                del cells[len(visuals):]
                corrected = True
            else:
                logger.debug("No segment objects built yet, leaving the cells alone")

        # Bounds
        for index, cell in enumerate(cells):
            if board.in_bounds(cell):
                continue
            logger.warning(f"Invalid position on segment {index}: {tuple(cell)}")
            cells[index] = board.center if index == 0 else Cell(*cells[index - 1])
            corrected = True

        duplicates = find_duplicates(cells)
        if duplicates:
            logger.warning(f"Duplicate segment positions detected: {duplicates}")

        if corrected:
            state.snake = state.snake.with_cells(cells)
        return corrected

    def check_obstacles(self, state: GameState) -> bool:
        board = state.board
        corrected = False
        for obstacle in state.obstacles:
            if board.in_bounds(obstacle.cell):
                continue
            logger.warning(f"Obstacle with invalid position: {tuple(obstacle.cell)}")
            obstacle.cell = board.clamp_to_board(obstacle.cell)
            obstacle.anchor = board.cell_to_anchor(obstacle.cell)
            corrected = True
        if corrected:
            state.obstacles.reindex()
        return corrected

    def check_barriers(self, state: GameState) -> bool:
        board = state.board
        corrected = False
        for barrier in list(state.barriers):
            if isinstance(barrier, BoundaryBarrier):
                # Walls live outside the board on purpose
                continue
            if all(board.in_bounds(c) for c in barrier.cells):
                continue
            logger.warning(f"Barrier with invalid position: {[tuple(c) for c in barrier.cells]}")
            if isinstance(barrier, ComplexBarrier):
                repaired = replace(barrier, cell=board.clamp_to_board(barrier.cell))
            elif isinstance(barrier, RandomShapeBarrier):
                repaired = replace(barrier,
                                   anchor=board.clamp_to_board(barrier.anchor),
                                   cells=tuple(board.clamp_to_board(c) for c in barrier.cells))
            else:
                raise TypeError(f"unknown barrier variant {type(barrier).__name__}")
            state.barriers.replace(barrier, repaired)
            corrected = True
        return corrected

    def check_apple(self, state: GameState) -> bool:
        if state.apple is None or state.board.in_bounds(state.apple):
            return False
        logger.warning(f"Apple with invalid position: {tuple(state.apple)}")
        state.apple = state.board.clamp_to_board(state.apple)
        return True

    def check_game(self, state: GameState,
                   visuals: Optional[MutableSequence] = None) -> bool:
        """
        Run every check. Returns True if anything was corrected; a failing
        check is logged and skipped so the others still run.
        """
        checks = (
            ("snake", lambda: self.check_snake(state, visuals)),
            ("obstacles", lambda: self.check_obstacles(state)),
            ("apple", lambda: self.check_apple(state)),
            ("barriers", lambda: self.check_barriers(state)),
        )
        corrected = False
        for name, check in checks:
            try:
                corrected = check() or corrected
            except Exception:
                logger.exception(f"Integrity check '{name}' failed")
        if corrected:
            self.corrections += 1
            logger.info(f"Integrity pass applied corrections (total passes with fixes: {self.corrections})")
        return corrected
