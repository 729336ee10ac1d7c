"""Board editor: free cell editing gated by a solvability check."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .game import BOARD_SIZE, GameSession, Grid
from .levels import Level, LevelCodec
from .solver import SolvabilityAnalyzer


logger = logging.getLogger(__name__)


class BoardEditor:
    """Edit a blank board cell by cell, then promote it into a playable game.

    Edits toggle single cells without touching their neighbours.  After every
    edit the board is checked with :class:`SolvabilityAnalyzer` and the result
    decides whether :meth:`promote` is allowed.
    """

    def __init__(
        self,
        grid: Optional[Grid] = None,
        *,
        analyzer: Optional[SolvabilityAnalyzer] = None,
    ) -> None:
        self.grid = grid or Grid(size=BOARD_SIZE)
        self.grid.set_propagate_neighbors(False)
        self.analyzer = analyzer or SolvabilityAnalyzer(self.grid.size)
        self.solvable = self.analyzer.is_solvable(self.grid)
        self.promoted = False
        self.grid.add_listener(self._handle_board_changed)

    @property
    def status_text(self) -> str:
        return "Solvable!" if self.solvable else "Not solvable"

    @property
    def can_start(self) -> bool:
        return self.solvable and not self.promoted

    def toggle(self, row: int, column: int) -> None:
        if self.promoted:
            raise RuntimeError("Board has already been promoted to a game")
        self.grid.activate(row, column)

    def _handle_board_changed(self, grid: Grid) -> None:
        if self.promoted:
            return
        self.solvable = self.analyzer.is_solvable(grid)

    def promote(self, *, time_limit_seconds: int = 0) -> GameSession:
        if not self.can_start:
            raise RuntimeError("Only an unpromoted, solvable board can be played")
        self.promoted = True
        self.grid.remove_listener(self._handle_board_changed)
        self.grid.set_propagate_neighbors(True)
        logger.info("Editor board promoted to a game")
        return GameSession(self.grid, time_limit_seconds=time_limit_seconds)

    def to_level(self, time_limit_seconds: int = 0) -> Level:
        cells = [
            [self.grid.cell(row, column).copy() for column in range(self.grid.size)]
            for row in range(self.grid.size)
        ]
        return Level(cells=cells, time_limit_seconds=time_limit_seconds, name="custom")

    def save(self, path: Path, time_limit_seconds: int = 0) -> Path:
        path = Path(path)
        codec = LevelCodec(self.grid.size)
        path.write_text(codec.dumps(self.to_level(time_limit_seconds)), encoding="utf-8")
        logger.info("Saved edited board to %s", path)
        return path


__all__ = ["BoardEditor"]
