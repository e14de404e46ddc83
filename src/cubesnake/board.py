"""
board.py

Static geometry of the square playing grid. Pure functions only: the board
never holds game state, it just answers coordinate questions.
"""

import math
from typing import Iterator, NamedTuple, Tuple
from dataclasses import dataclass


class Cell(NamedTuple):
    """Discrete grid coordinate. Equal iff both coordinates match."""
    x: int
    z: int

    def offset(self, dx: int, dz: int) -> 'Cell':
        return Cell(self.x + dx, self.z + dz)


CellKey = Tuple[int, int]


@dataclass(frozen=True)
class Board:
    """
    Square N x N grid with a pure mapping from cells to visualization anchors.
    Anchors are only consumed by rendering; collision logic works on cells.
    """
    size: int = 20
    cell_span: float = 2.0

    @property
    def center(self) -> Cell:
        center = (self.size - 1) // 2
        return Cell(center, center)

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def in_bounds(self, cell: Tuple[int, int]) -> bool:
        x, z = cell
        return 0 <= x < self.size and 0 <= z < self.size

    def clamp_to_board(self, cell: Tuple[int, int]) -> Cell:
        """Clamp both coordinates into [0, N-1]. Idempotent."""
        x, z = cell
        return Cell(max(0, min(self.size - 1, int(x))),
                    max(0, min(self.size - 1, int(z))))

    def wrap(self, cell: Tuple[int, int]) -> Cell:
        """Teleport a coordinate that left the board to the opposite edge"""
        x, z = cell
        return Cell(int(x) % self.size, int(z) % self.size)

    @staticmethod
    def cell_key(cell: Tuple[int, int]) -> CellKey:
        """Canonical hashable identity used for every set membership check"""
        return (int(cell[0]), int(cell[1]))

    def cell_to_anchor(self, cell: Tuple[int, int]) -> Tuple[float, float]:
        """Center point of a cell in visualization units"""
        x, z = cell
        half = self.cell_span / 2
        return (x * self.cell_span + half, z * self.cell_span + half)

    def anchor_to_cell(self, anchor: Tuple[float, float]) -> Cell:
        """
        Inverse of cell_to_anchor. Any point inside a cell's square maps back
        to that cell, so anchor_to_cell(cell_to_anchor(c)) == c for every
        integer cell, including cells just outside the edges.
        """
        ax, az = anchor
        return Cell(int(math.floor(ax / self.cell_span)),
                    int(math.floor(az / self.cell_span)))

    def iter_cells(self) -> Iterator[Cell]:
        """Every cell in row-major order (z rows, x columns)"""
        for z in range(self.size):
            for x in range(self.size):
                yield Cell(x, z)
