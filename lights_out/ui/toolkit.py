"""Minimal pygame board view used by the app and by headless tests.

The view only draws cell colours and forwards left clicks as activations.
It listens to the grid so it knows when a redraw is due.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional, Tuple

from ..game import GameSession, Grid
from . import layout


# The import is performed lazily in ``ensure_pygame`` so test environments can
# select the SDL ``dummy`` drivers before pygame initialises.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
    return _PYGAME


class LightsOutUI:
    """Render a grid and turn mouse clicks into cell activations."""

    def __init__(
        self,
        grid: Grid,
        *,
        session: Optional[GameSession] = None,
        cell_size: int = layout.CELL_SIZE,
        gap: int = layout.CELL_GAP,
        surface=None,
        use_display: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.grid = grid
        self.session = session
        self.cell_size = cell_size
        self.gap = gap
        extent = layout.board_extent(grid.size, cell_size, gap)
        self.surface = surface or pygame.Surface((extent, extent))
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode((extent, extent))
        self.needs_render = True
        self.change_count = 0
        grid.add_listener(self._handle_board_changed)

    def _handle_board_changed(self, grid: Grid) -> None:
        self.change_count += 1
        self.needs_render = True

    def detach(self) -> None:
        self.grid.remove_listener(self._handle_board_changed)

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> List[Tuple[int, int]]:
        pygame = ensure_pygame()
        activated: List[Tuple[int, int]] = []
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                cell = self._handle_click(event.pos)
                if cell is not None:
                    activated.append(cell)
        return activated

    def cell_from_pixel(self, pos: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        x, y = pos
        pitch = self.cell_size + self.gap
        column, column_offset = divmod(x - self.gap, pitch)
        row, row_offset = divmod(y - self.gap, pitch)
        if column_offset >= self.cell_size or row_offset >= self.cell_size:
            return None
        if not self.grid.inside(row, column):
            return None
        return row, column

    def _handle_click(self, pos: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        cell = self.cell_from_pixel(pos)
        if cell is None or not self.grid.enabled:
            return None
        if self.session is not None:
            if not self.session.accepting_input:
                return None
            self.session.activate(*cell)
        else:
            self.grid.activate(*cell)
        return cell

    # ------------------------------------------------------------------
    # Rendering helpers
    def cell_rect(self, row: int, column: int) -> Tuple[int, int, int, int]:
        pitch = self.cell_size + self.gap
        return (
            self.gap + column * pitch,
            self.gap + row * pitch,
            self.cell_size,
            self.cell_size,
        )

    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BOARD_BACKGROUND_COLOR)
        for cell in self.grid:
            color = layout.CELL_COLORS[cell.variant][cell.state]
            self.surface.fill(color, pygame.Rect(*self.cell_rect(cell.row, cell.column)))
        self.needs_render = False
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface


__all__ = ["LightsOutUI", "ensure_pygame"]
