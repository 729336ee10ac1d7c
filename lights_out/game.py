"""Core game logic for the Lights Out puzzle."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)

BOARD_SIZE = 5

NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class CellVariant(Enum):
    """State kinds a board cell can hold."""

    BINARY = "binary"
    CYCLIC4 = "cyclic4"

    @property
    def state_count(self) -> int:
        return 2 if self is CellVariant.BINARY else 4

    @property
    def lit_states(self) -> Tuple[int, ...]:
        if self is CellVariant.BINARY:
            return (1,)
        return (2, 3)

    @staticmethod
    def from_name(name: str) -> "CellVariant":
        name = name.lower()
        aliases = {"normal": "binary", "coloured": "cyclic4", "colored": "cyclic4"}
        try:
            return CellVariant(aliases.get(name, name))
        except ValueError as exc:
            raise ValueError(f"Unknown cell variant: {name}") from exc


@dataclass
class Cell:
    """Single board position holding a binary or four colour state."""

    row: int
    column: int
    variant: CellVariant = CellVariant.BINARY
    state: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.state, int):
            raise ValueError(
                f"Cell state must be an int or bool, got {type(self.state).__name__}"
            )
        state = int(self.state)
        if not 0 <= state < self.variant.state_count:
            raise ValueError(
                f"Invalid {self.variant.value} state {self.state!r} "
                f"for cell ({self.row}, {self.column})"
            )
        self.state = state

    def __setattr__(self, name: str, value: object) -> None:
        if name == "variant" and "variant" in self.__dict__:
            raise AttributeError("Cell variant cannot change after construction")
        super().__setattr__(name, value)

    def toggle(self) -> None:
        if self.variant is CellVariant.BINARY:
            self.state = 1 - self.state
        elif self.state + 1 >= self.variant.state_count:
            # Wraps to the first colour, 0 is only ever a loaded start state.
            self.state = 1
        else:
            self.state += 1

    def is_lit(self) -> bool:
        return self.state in self.variant.lit_states

    def copy(self) -> "Cell":
        return Cell(self.row, self.column, self.variant, self.state)


BoardListener = Callable[["Grid"], None]


class Grid:
    """Square board of cells applying the plus-shaped activation rule.

    Listeners registered through :meth:`add_listener` are called once after
    every :meth:`activate`.  Bound methods are referenced weakly so a grid never
    keeps the session or UI that observes it alive.
    """

    def __init__(
        self,
        cells: Optional[Sequence[Sequence[Cell]]] = None,
        *,
        size: int = BOARD_SIZE,
        propagate_neighbors: bool = True,
    ) -> None:
        if size <= 0:
            raise ValueError(f"Board size must be positive, got {size}")
        self.size = size
        self._propagate_neighbors = bool(propagate_neighbors)
        self.enabled = True
        self._listeners: List[Callable[[], Optional[BoardListener]]] = []
        if cells is None:
            self._cells: List[List[Cell]] = [
                [Cell(row, column) for column in range(size)] for row in range(size)
            ]
        else:
            self._cells = self._validate_cells(cells, size)

    @staticmethod
    def _validate_cells(cells: Sequence[Sequence[Cell]], size: int) -> List[List[Cell]]:
        if len(cells) != size:
            raise ValueError(f"Expected {size} rows of cells, got {len(cells)}")
        matrix: List[List[Cell]] = []
        for row_index, row in enumerate(cells):
            if len(row) != size:
                raise ValueError(
                    f"Row {row_index} holds {len(row)} cells, expected {size}"
                )
            for column_index, cell in enumerate(row):
                if (cell.row, cell.column) != (row_index, column_index):
                    raise ValueError(
                        f"Cell ({cell.row}, {cell.column}) placed at "
                        f"({row_index}, {column_index})"
                    )
            matrix.append(list(row))
        return matrix

    @property
    def propagate_neighbors(self) -> bool:
        return self._propagate_neighbors

    def set_propagate_neighbors(self, enabled: bool) -> None:
        self._propagate_neighbors = bool(enabled)

    def disable(self) -> None:
        self.enabled = False

    def inside(self, row: int, column: int) -> bool:
        return 0 <= row < self.size and 0 <= column < self.size

    def cell(self, row: int, column: int) -> Cell:
        self._check_bounds(row, column)
        return self._cells[row][column]

    def __iter__(self) -> Iterator[Cell]:
        for row in self._cells:
            yield from row

    def _check_bounds(self, row: int, column: int) -> None:
        if not self.inside(row, column):
            raise IndexError(
                f"Cell ({row}, {column}) is outside the {self.size}x{self.size} board"
            )

    # ------------------------------------------------------------------
    # Change notification
    @staticmethod
    def _reference(callback: BoardListener) -> Callable[[], Optional[BoardListener]]:
        if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
            return weakref.WeakMethod(callback)
        return lambda: callback

    def add_listener(self, callback: BoardListener) -> None:
        self._listeners.append(self._reference(callback))

    def remove_listener(self, callback: BoardListener) -> None:
        self._listeners = [
            reference
            for reference in self._listeners
            if reference() is not None and reference() != callback
        ]

    def _notify(self) -> None:
        alive: List[Callable[[], Optional[BoardListener]]] = []
        callbacks: List[BoardListener] = []
        for reference in self._listeners:
            callback = reference()
            if callback is None:
                continue
            alive.append(reference)
            callbacks.append(callback)
        self._listeners = alive
        for callback in callbacks:
            callback(self)

    # ------------------------------------------------------------------
    # Play
    def activate(self, row: int, column: int) -> None:
        self._check_bounds(row, column)
        self._cells[row][column].toggle()
        self._propagate(row, column)
        self._notify()

    def _propagate(self, row: int, column: int) -> None:
        # The activated cell itself is toggled by the caller.
        if not self._propagate_neighbors:
            return
        for d_row, d_column in NEIGHBOR_OFFSETS:
            neighbor_row, neighbor_column = row + d_row, column + d_column
            if self.inside(neighbor_row, neighbor_column):
                self._cells[neighbor_row][neighbor_column].toggle()

    def is_solved(self) -> bool:
        return not any(cell.is_lit() for cell in self)

    # ------------------------------------------------------------------
    # Snapshots
    def lit_pattern(self) -> Tuple[Tuple[bool, ...], ...]:
        return tuple(tuple(cell.is_lit() for cell in row) for row in self._cells)

    def states(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(cell.state for cell in row) for row in self._cells)

    def copy(self) -> "Grid":
        """Return an independent grid with the same cells and mode but no listeners."""

        clone = Grid(
            [[cell.copy() for cell in row] for row in self._cells],
            size=self.size,
            propagate_neighbors=self._propagate_neighbors,
        )
        clone.enabled = self.enabled
        return clone

    def render_text(self) -> str:
        return "\n".join(
            "".join("X" if cell.is_lit() else "O" for cell in row) for row in self._cells
        )


class SessionState(Enum):
    """Lifecycle of a single play-through."""

    PLAYING = "playing"
    WON = "won"
    DISABLED = "disabled"


SessionListener = Callable[["GameSession"], None]


def format_clock(seconds: int) -> str:
    minutes, seconds = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{seconds:02d}"


class GameSession:
    """Move counting, time limit and win detection for one level."""

    def __init__(
        self,
        grid: Grid,
        *,
        time_limit_seconds: int = 0,
        time_limit_enabled: bool = False,
        level_number: Optional[int] = None,
    ) -> None:
        if time_limit_seconds < 0:
            raise ValueError(f"Time limit must not be negative: {time_limit_seconds}")
        self.grid = grid
        self.time_limit_seconds = int(time_limit_seconds)
        self.time_limit_enabled = bool(time_limit_enabled)
        self.level_number = level_number
        self.state = SessionState.PLAYING
        self.moves = 0
        self.elapsed_seconds = 0
        self._listeners: List[SessionListener] = []
        grid.add_listener(self._handle_board_changed)

    @property
    def progression_enabled(self) -> bool:
        return self.level_number is not None

    @property
    def is_over(self) -> bool:
        return self.state is not SessionState.PLAYING

    @property
    def accepting_input(self) -> bool:
        return self.state is SessionState.PLAYING and self.grid.enabled

    @property
    def time_limited(self) -> bool:
        # A limit of 0 means the level has no limit.
        return self.time_limit_enabled and self.time_limit_seconds > 0

    @property
    def remaining_seconds(self) -> Optional[int]:
        if not self.time_limited:
            return None
        return max(0, self.time_limit_seconds - self.elapsed_seconds)

    def add_listener(self, callback: SessionListener) -> None:
        self._listeners.append(callback)

    def enable_time_limit(self) -> None:
        self.time_limit_enabled = True

    def disable_time_limit(self) -> None:
        self.time_limit_enabled = False

    def activate(self, row: int, column: int) -> None:
        if not self.accepting_input:
            raise RuntimeError(f"Session is {self.state.value} and accepts no moves")
        self.grid.activate(row, column)

    def _handle_board_changed(self, grid: Grid) -> None:
        if self.state is not SessionState.PLAYING:
            return
        if grid.is_solved():
            logger.info("Board solved after %d moves", self.moves)
            self._set_state(SessionState.WON)
        else:
            self.moves += 1

    def on_tick(self, elapsed_seconds: int) -> SessionState:
        # The final time is frozen once the session ends.
        if self.state is not SessionState.PLAYING:
            return self.state
        self.elapsed_seconds = int(elapsed_seconds)
        if self.time_limited and self.elapsed_seconds > self.time_limit_seconds:
            logger.info(
                "Time limit of %ds exceeded at %ds", self.time_limit_seconds, self.elapsed_seconds
            )
            self.grid.disable()
            self._set_state(SessionState.DISABLED)
        return self.state

    def time_status(self) -> str:
        if self.state is SessionState.DISABLED:
            return "Times up!"
        status = f"Time taken: {format_clock(self.elapsed_seconds)}"
        remaining = self.remaining_seconds
        if remaining is not None:
            status += f" - {format_clock(remaining)} left"
        return status

    def close(self) -> None:
        self.grid.remove_listener(self._handle_board_changed)
        self._listeners.clear()

    def _set_state(self, state: SessionState) -> None:
        self.state = state
        for callback in list(self._listeners):
            callback(self)


__all__ = [
    "BOARD_SIZE",
    "Cell",
    "CellVariant",
    "GameSession",
    "Grid",
    "SessionState",
    "format_clock",
]
