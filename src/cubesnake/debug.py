"""
debug.py

Debug views of the board: a text dump for logs and tests, and a PNG snapshot
of every occupied cell drawn through the board's anchor mapping.
"""

import logging
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw

from cubesnake.config import GameConfig
from cubesnake.registries import ObstacleKind
from cubesnake.state import GameState

logger = logging.getLogger(__name__)


def board_glyphs(state: GameState) -> Dict[Tuple[int, int], str]:
    """Map of in-bounds cell -> glyph. Later layers draw over earlier ones."""
    board = state.board
    glyphs = {}
    for cell in state.barriers.cells():
        if board.in_bounds(cell):
            glyphs[board.cell_key(cell)] = '#'
    for obstacle in state.obstacles:
        glyphs[board.cell_key(obstacle.cell)] = 'T' if obstacle.kind is ObstacleKind.TREE else 'R'
    if state.apple is not None:
        glyphs[board.cell_key(state.apple)] = 'A'
    for index, cell in enumerate(state.snake.cells):
        if board.in_bounds(cell):
            glyphs[board.cell_key(cell)] = 'H' if index == 0 else 'o'
    return glyphs


def render_board_text(state: GameState) -> str:
    """
    Returns a string representation of the board with:
    . = empty, A = apple, H = head, o = body, # = barrier, T/R = tree/rock
    Rows are printed with z=0 at the bottom and x labels underneath.
    """
    size = state.board.size
    glyphs = board_glyphs(state)
    result = []
    for z in range(size - 1, -1, -1):
        row = ' '.join(glyphs.get((x, z), '.') for x in range(size))
        result.append(f"{z:2d} {row}")
    result.append("   " + " ".join(str(x % 10) for x in range(size)))
    return "\n".join(result)


def save_board_snapshot(state: GameState, path: str, pixels_per_unit: int = 8,
                        config: Optional[GameConfig] = None) -> str:
    """Draw the board as a PNG, one square per occupied cell, and return the path"""
    config = config or GameConfig()
    board = state.board
    scale = pixels_per_unit
    side = int(board.size * board.cell_span * scale)
    image = Image.new("RGB", (side, side), config.FLOOR)
    draw = ImageDraw.Draw(image)

    colors = {
        '#': config.GRAY,
        'T': config.TREE,
        'R': config.ROCK,
        'A': config.RED,
        'H': config.HEAD,
        'o': config.GREEN,
    }
    half = board.cell_span / 2 * scale * 0.9
    for (x, z), glyph in board_glyphs(state).items():
        ax, az = board.cell_to_anchor((x, z))
        cx, cz = ax * scale, az * scale
        draw.rectangle([cx - half, cz - half, cx + half, cz + half], fill=colors[glyph])

    image.save(path, format="PNG")
    logger.debug(f"Board snapshot written to {path}")
    return path
