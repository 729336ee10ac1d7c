"""Layout constants for the Lights Out UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..game import CellVariant

Color = Tuple[int, int, int]

# Cell metrics
CELL_SIZE: int = 50
CELL_GAP: int = 5
BOARD_OUTER_PADDING: int = 24

# Status area below the board
STATUS_HEIGHT: int = 96
STATUS_LINE_SPACING: int = 24

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Color = (238, 238, 238)
BOARD_BACKGROUND_COLOR: Color = (200, 200, 210)
TEXT_COLOR: Color = (20, 20, 28)
WARNING_COLOR: Color = (220, 0, 0)
OFF_COLOR: Color = (64, 64, 64)
GREEN_COLOR: Color = (0, 255, 0)
RED_COLOR: Color = (255, 0, 0)
BLUE_COLOR: Color = (0, 0, 255)

# Cell state -> color, per variant
CELL_COLORS: Dict[CellVariant, Tuple[Color, ...]] = {
    CellVariant.BINARY: (OFF_COLOR, GREEN_COLOR),
    CellVariant.CYCLIC4: (GREEN_COLOR, OFF_COLOR, RED_COLOR, BLUE_COLOR),
}

# Remaining seconds below which the clock turns red
TIME_WARNING_SECONDS: int = 10


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel rectangles for the board and the status area."""

    board: Tuple[int, int, int, int]
    status: Tuple[int, int, int, int]
    window: Tuple[int, int]


def board_extent(board_size: int, cell_size: int = CELL_SIZE, gap: int = CELL_GAP) -> int:
    return board_size * cell_size + (board_size + 1) * gap


def compute_geometry(board_size: int) -> BoardGeometry:
    """Compute the rectangles for rendering the game window."""

    extent = board_extent(board_size)

    board_x = BOARD_OUTER_PADDING
    board_y = BOARD_OUTER_PADDING

    status_x = board_x
    status_y = board_y + extent + BOARD_OUTER_PADDING

    window_width = board_x + extent + BOARD_OUTER_PADDING
    window_height = status_y + STATUS_HEIGHT + BOARD_OUTER_PADDING

    return BoardGeometry(
        board=(board_x, board_y, extent, extent),
        status=(status_x, status_y, extent, STATUS_HEIGHT),
        window=(window_width, window_height),
    )
