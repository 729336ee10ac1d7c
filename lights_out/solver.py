"""Solvability check for binary boards using the "chase the lights" technique.

Every row except the last is cleared by activating the cell below each lit
cell.  What remains in the final row (the residue) decides solvability: the
board can be cleared iff the residue is empty or one of the patterns that can
be resolved for the board width.  The residue table only holds for the width
it was derived for, other widths derive theirs with
:func:`derive_residue_patterns`.
"""

from __future__ import annotations

import logging
from itertools import product
from typing import Dict, FrozenSet, Iterable, Optional

from .game import BOARD_SIZE, Grid


logger = logging.getLogger(__name__)

RESIDUE_PATTERNS: Dict[int, FrozenSet[str]] = {
    5: frozenset({"00111", "01010", "01101", "10001", "10110", "11011", "11100"}),
}


def chase_lights(grid: Grid) -> str:
    """Chase a scratch copy of ``grid`` and return the final row as a bit string."""

    scratch = Grid(size=grid.size, propagate_neighbors=True)
    for cell in grid:
        if cell.is_lit():
            scratch.cell(cell.row, cell.column).toggle()

    for row in range(grid.size - 1):
        for column in range(grid.size):
            if scratch.cell(row, column).is_lit():
                scratch.activate(row + 1, column)

    final_row = grid.size - 1
    return "".join(
        "1" if scratch.cell(final_row, column).is_lit() else "0"
        for column in range(grid.size)
    )


def derive_residue_patterns(size: int) -> FrozenSet[str]:
    """Brute force the non-empty residues that are solvable for ``size``.

    Presses below the top row are cancelled by the chase itself, so the
    residues of solvable boards are exactly the residues left by the
    ``2 ** size`` press patterns on the top row of a blank board.
    """

    residues = set()
    for presses in product((False, True), repeat=size):
        board = Grid(size=size)
        for column, pressed in enumerate(presses):
            if pressed:
                board.activate(0, column)
        residues.add(chase_lights(board))
    residues.discard("0" * size)
    return frozenset(residues)


class SolvabilityAnalyzer:
    """Decide whether a board can be driven to all-off."""

    def __init__(self, size: int = BOARD_SIZE, residues: Optional[Iterable[str]] = None):
        self.size = size
        if residues is not None:
            self.residues = frozenset(residues)
        elif size in RESIDUE_PATTERNS:
            self.residues = RESIDUE_PATTERNS[size]
        else:
            logger.debug("No residue table for width %d, deriving one", size)
            self.residues = derive_residue_patterns(size)
        for pattern in self.residues:
            if len(pattern) != size or set(pattern) - {"0", "1"}:
                raise ValueError(f"Invalid residue pattern for width {size}: {pattern!r}")

    def residue(self, grid: Grid) -> str:
        if grid.size != self.size:
            raise ValueError(
                f"Analyzer for width {self.size} cannot check a {grid.size}x{grid.size} board"
            )
        return chase_lights(grid)

    def is_solvable(self, grid: Grid) -> bool:
        residue = self.residue(grid)
        solvable = residue == "0" * self.size or residue in self.residues
        logger.debug("Residue %s -> solvable=%s", residue, solvable)
        return solvable


__all__ = [
    "RESIDUE_PATTERNS",
    "SolvabilityAnalyzer",
    "chase_lights",
    "derive_residue_patterns",
]
