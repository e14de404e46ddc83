"""
shapes.py

Pool of polyomino patterns used to build the random-shape barriers of the
maze mode. Each pattern is a list of (dx, dz) offsets from an anchor cell.
"""

import random
from typing import Dict, List, Tuple

from cubesnake.board import Cell

Offsets = List[Tuple[int, int]]

BARRIER_SHAPES: Dict[str, Offsets] = {
    "dot": [(0, 0)],
    "horizontal_line": [(0, 0), (1, 0), (2, 0)],
    "vertical_line": [(0, 0), (0, 1), (0, 2)],
    "l_shape": [(0, 0), (0, 1), (1, 1)],
    "inverted_l": [(0, 0), (1, 0), (0, 1)],
    "t_shape": [(0, 0), (1, 0), (2, 0), (1, 1)],
    "cross": [(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)],
    "square": [(0, 0), (0, 1), (1, 0), (1, 1)],
    "z_shape": [(0, 0), (1, 0), (1, 1), (2, 1)],
    "inverted_z": [(0, 1), (1, 1), (1, 0), (2, 0)],
    "u_shape": [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2), (2, 1), (2, 0)],
    "rectangle": [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2)],
}


def random_shape(rng=random) -> Tuple[str, Offsets]:
    """Pick a shape uniformly from the pool"""
    name = rng.choice(sorted(BARRIER_SHAPES))
    return name, BARRIER_SHAPES[name]


def shape_extent(offsets: Offsets) -> Tuple[int, int]:
    """Largest dx and dz of a pattern"""
    return max(dx for dx, _ in offsets), max(dz for _, dz in offsets)


def place_shape_at(offsets: Offsets, anchor: Tuple[int, int]) -> List[Cell]:
    """Translate a pattern so its origin sits on the anchor cell"""
    ax, az = anchor
    return [Cell(ax + dx, az + dz) for dx, dz in offsets]
