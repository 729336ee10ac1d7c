"""Level file parsing, validation and loading.

A level file holds one line per board row with comma separated cell values
(``0``/``1`` for normal levels, ``0``-``3`` for coloured levels), optionally
followed by a single line with the time limit in seconds::

    0,0,0,0,0
    0,0,1,0,0
    0,1,1,1,0
    0,0,1,0,0
    0,0,0,0,0
    30

Some legacy files carry invisible characters inside cell values, so every
non-digit character is stripped from a cell before it is interpreted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .game import BOARD_SIZE, Cell, CellVariant, Grid


logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")
_TIME_LIMIT = re.compile(r"[0-9]+")
_LEVEL_FILE = {
    CellVariant.BINARY: re.compile(r"^level(\d+)\.csv$"),
    CellVariant.CYCLIC4: re.compile(r"^colouredlevel(\d+)\.csv$"),
}
_LEVEL_PREFIX = {
    CellVariant.BINARY: "level",
    CellVariant.CYCLIC4: "colouredlevel",
}


class InvalidLevelError(ValueError):
    """Raised when level data cannot be turned into a board."""

    def __init__(self, reason: str, source: str):
        super().__init__(f"{source}: {reason}")
        self.reason = reason
        self.source = source


class MalformedRowError(InvalidLevelError):
    """A row does not hold exactly one value per board column."""


class InvalidCellTokenError(InvalidLevelError):
    """A cell value is not valid for the level variant."""


class TrailingDataError(InvalidLevelError):
    """Content follows the time limit line."""


class MissingRowsError(InvalidLevelError):
    """The data ends before every board row was read."""


class InvalidTimeLimitError(InvalidLevelError):
    """The time limit line is not a non-negative integer."""


@dataclass
class Level:
    """Parsed level: the starting cells and the time limit."""

    cells: List[List[Cell]]
    time_limit_seconds: int = 0
    variant: CellVariant = CellVariant.BINARY
    name: str = ""

    @property
    def size(self) -> int:
        return len(self.cells)

    def build_grid(self, propagate_neighbors: bool = True) -> Grid:
        return Grid(
            [[cell.copy() for cell in row] for row in self.cells],
            size=self.size,
            propagate_neighbors=propagate_neighbors,
        )


class LevelCodec:
    """Convert between level text and :class:`Level` values."""

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size

    def parse(
        self,
        raw_text: str,
        variant: CellVariant = CellVariant.BINARY,
        *,
        source: str = "<string>",
    ) -> Level:
        lines = [line.strip() for line in raw_text.splitlines()]
        lines = [line for line in lines if line]
        if len(lines) < self.size:
            raise MissingRowsError(
                f"Level has {len(lines)} rows, expected {self.size}", source
            )

        states = [
            self._parse_row(line, row, variant, source)
            for row, line in enumerate(lines[: self.size])
        ]

        extra = lines[self.size :]
        time_limit = 0
        if extra:
            tokens = extra[0].split()
            time_limit = self._parse_time_limit(tokens[0], source)
            trailing = tokens[1:] + extra[1:]
            if trailing:
                raise TrailingDataError(
                    f"Unexpected data after the time limit: {trailing[0]!r}", source
                )

        cells = [
            [Cell(row, column, variant, state) for column, state in enumerate(row_states)]
            for row, row_states in enumerate(states)
        ]
        logger.debug(
            "Parsed %s %s level with time limit %ds", source, variant.value, time_limit
        )
        return Level(cells=cells, time_limit_seconds=time_limit, variant=variant, name=source)

    def _parse_row(
        self, line: str, row: int, variant: CellVariant, source: str
    ) -> List[int]:
        tokens = line.split(",")
        if len(tokens) != self.size:
            raise MalformedRowError(
                f"Row {row + 1} has {len(tokens)} columns, expected {self.size}", source
            )
        valid = {str(state) for state in range(variant.state_count)}
        states: List[int] = []
        for column, token in enumerate(tokens):
            cleaned = _NON_DIGITS.sub("", token)
            if cleaned not in valid:
                raise InvalidCellTokenError(
                    f"Invalid {variant.value} cell value {token.strip()!r} "
                    f"at row {row + 1}, column {column + 1}",
                    source,
                )
            states.append(int(cleaned))
        return states

    @staticmethod
    def _parse_time_limit(token: str, source: str) -> int:
        if not _TIME_LIMIT.fullmatch(token):
            raise InvalidTimeLimitError(f"Invalid time limit {token!r}", source)
        return int(token)

    def dumps(self, level: Level) -> str:
        rows: Sequence[Sequence[Cell]] = level.cells
        lines = [",".join(str(cell.state) for cell in row) for row in rows]
        if level.time_limit_seconds:
            lines.append(str(level.time_limit_seconds))
        return "\n".join(lines) + "\n"


class LevelLoader:
    """Load numbered level files stored as CSV."""

    def __init__(self, root: Path, codec: Optional[LevelCodec] = None):
        self.root = Path(root)
        self.codec = codec or LevelCodec()

    def path_for(self, number: int, variant: CellVariant = CellVariant.BINARY) -> Path:
        return self.root / f"{_LEVEL_PREFIX[variant]}{number}.csv"

    def load(self, number: int, variant: CellVariant = CellVariant.BINARY) -> Level:
        return self.load_path(self.path_for(number, variant), variant)

    def load_path(self, path: Path, variant: CellVariant = CellVariant.BINARY) -> Level:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        logger.debug("Loading level file %s", path)
        return self.codec.parse(path.read_text(encoding="utf-8"), variant, source=path.name)

    def available_levels(self, variant: CellVariant = CellVariant.BINARY) -> List[int]:
        pattern = _LEVEL_FILE[variant]
        numbers = []
        for path in self.root.glob("*.csv"):
            match = pattern.match(path.name)
            if match:
                numbers.append(int(match.group(1)))
        return sorted(numbers)


__all__ = [
    "InvalidCellTokenError",
    "InvalidLevelError",
    "InvalidTimeLimitError",
    "Level",
    "LevelCodec",
    "LevelLoader",
    "MalformedRowError",
    "MissingRowsError",
    "TrailingDataError",
]
