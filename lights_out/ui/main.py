"""Command line entry point and interactive pygame app for Lights Out."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..campaign import Campaign
from ..editor import BoardEditor
from ..game import BOARD_SIZE, CellVariant, GameSession, SessionState
from ..levels import InvalidLevelError, LevelLoader
from ..logging_config import setup_logging
from ..solver import SolvabilityAnalyzer
from . import layout
from .toolkit import LightsOutUI, ensure_pygame

LEVEL_ENV_VAR = "LIGHTS_OUT_LEVEL_ROOT"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIDirectories:
    """Bundle with resolved directories required by the UI."""

    level_root: Path


def _default_level_root() -> Path:
    return Path(__file__).resolve().parents[1] / "levels"


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> UIDirectories:
    """Resolve the level directory, honouring ``LIGHTS_OUT_LEVEL_ROOT``.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the resolved directory
        does not exist on disk.
    """

    level_root = _read_directory(LEVEL_ENV_VAR, _default_level_root())

    if check_exists and not level_root.exists():
        raise FileNotFoundError(f"Level directory does not exist: {level_root}")

    return UIDirectories(level_root=level_root)


class LightsOutApp:
    """Pygame driven window for playing levels or editing a custom board."""

    def __init__(
        self,
        *,
        variant: CellVariant = CellVariant.BINARY,
        level: int = 1,
        time_limit_enabled: bool = False,
        editor: bool = False,
        directories: Optional[UIDirectories] = None,
    ) -> None:
        pygame = ensure_pygame()
        pygame.init()
        pygame.display.set_caption("Lights Out")
        self.directories = directories or resolve_directories()
        self.geometry = layout.compute_geometry(BOARD_SIZE)
        self.screen = pygame.display.set_mode(self.geometry.window)
        self.font = pygame.font.Font(None, 24)
        self.clock = pygame.time.Clock()

        self.campaign = Campaign(
            LevelLoader(self.directories.level_root),
            variant,
            time_limit_enabled=time_limit_enabled,
        )
        self.editor: Optional[BoardEditor] = None
        self.session: Optional[GameSession] = None
        self.message: Optional[str] = None
        if editor:
            self.editor = BoardEditor()
            self._attach_view(self.editor.grid, None)
        else:
            self._start_session(self.campaign.start(level))

    def _attach_view(self, grid, session: Optional[GameSession]) -> None:
        pygame = ensure_pygame()
        board = self.geometry.board
        self.view = LightsOutUI(
            grid,
            session=session,
            surface=pygame.Surface((board[2], board[3])),
        )

    def _start_session(self, session: GameSession) -> None:
        self.session = session
        self.message = None
        self.started_at = time.perf_counter()
        self.last_tick = 0
        self._attach_view(session.grid, session)
        logger.debug("Showing session for level %s", session.level_number)

    def _tick(self) -> None:
        if self.session is None or self.session.is_over:
            return
        elapsed = int(time.perf_counter() - self.started_at)
        if elapsed != self.last_tick:
            self.last_tick = elapsed
            self.session.on_tick(elapsed)

    def _handle_key(self, key: int) -> None:
        pygame = ensure_pygame()
        if key == pygame.K_RETURN and self.editor is not None and self.editor.can_start:
            session = self.editor.promote()
            self.editor = None
            self._start_session(session)
        elif key == pygame.K_r and self.session is not None and self.session.progression_enabled:
            self._load_level(self.campaign.restart)
        elif key == pygame.K_n and self.session is not None and self.session.progression_enabled:
            if self.session.state is SessionState.WON and self.campaign.has_next:
                self._load_level(self.campaign.advance)

    def _load_level(self, opener) -> None:
        try:
            session = opener()
        except (InvalidLevelError, FileNotFoundError) as exc:
            logger.warning("Could not load level: %s", exc)
            self.message = f"Could not load level: {exc}"
            return
        self._start_session(session)

    def _status_lines(self) -> List[str]:
        if self.editor is not None:
            return [self.editor.status_text, "Enter: start game"]
        session = self.session
        title = self.campaign.label if session.progression_enabled else "Custom level"
        lines = [f"{title}   Moves: {session.moves}", session.time_status()]
        if session.state is SessionState.WON:
            if not session.progression_enabled:
                lines.append("Custom level complete!")
            elif self.campaign.has_next:
                lines.append(f"{self.campaign.completion_message()}  N: next, R: stay")
            else:
                lines.append(self.campaign.completion_message())
        if self.message:
            lines.append(self.message)
        return lines

    def _status_color(self):
        if self.editor is not None:
            return layout.GREEN_COLOR if self.editor.solvable else layout.WARNING_COLOR
        remaining = self.session.remaining_seconds
        if remaining is not None and remaining <= layout.TIME_WARNING_SECONDS:
            return layout.WARNING_COLOR
        return layout.TEXT_COLOR

    def draw(self) -> None:
        self.screen.fill(layout.BACKGROUND_COLOR)
        board_x, board_y, _, _ = self.geometry.board
        self.screen.blit(self.view.render(), (board_x, board_y))
        status_x, status_y, _, _ = self.geometry.status
        color = self._status_color()
        for index, line in enumerate(self._status_lines()):
            surface = self.font.render(line, True, color)
            self.screen.blit(surface, (status_x, status_y + index * layout.STATUS_LINE_SPACING))

    def run(self) -> None:
        pygame = ensure_pygame()
        running = True
        while running:
            events = pygame.event.get()
            for event in events:
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        self._handle_key(event.key)
            self.view.process_events(events)
            self._tick()
            self.draw()
            pygame.display.flip()
            self.clock.tick(30)
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lights-out", description="Lights Out puzzle")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the resolved level directory and exit without launching the UI.",
    )
    parser.add_argument(
        "--list-levels", action="store_true", help="List the available levels and exit."
    )
    parser.add_argument(
        "--check",
        metavar="FILE",
        type=Path,
        help="Validate a level file, print it and report whether it is solvable.",
    )
    parser.add_argument(
        "--coloured", action="store_true", help="Use the four colour variant."
    )
    parser.add_argument("--level", type=int, default=1, help="Level to start at.")
    parser.add_argument(
        "--time-limit", action="store_true", help="Enforce the level time limits."
    )
    parser.add_argument(
        "--editor", action="store_true", help="Start with the board editor."
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def _check_level(path: Path, variant: CellVariant, directories: UIDirectories) -> int:
    loader = LevelLoader(directories.level_root)
    try:
        level = loader.load_path(path, variant)
    except (InvalidLevelError, FileNotFoundError) as exc:
        print(f"Invalid level: {exc}", file=sys.stderr)
        return 1
    grid = level.build_grid()
    print(grid.render_text())
    print(f"Time limit: {level.time_limit_seconds}s")
    if variant is CellVariant.BINARY:
        solvable = SolvabilityAnalyzer(grid.size).is_solvable(grid)
        print("Solvable" if solvable else "Not solvable")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))
    variant = CellVariant.CYCLIC4 if args.coloured else CellVariant.BINARY

    try:
        directories = resolve_directories()
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 2

    if args.info:
        print(
            "Lights Out bootstrap\n"
            f"  levels: {directories.level_root}\n"
            f"Set {LEVEL_ENV_VAR} to point to a custom level directory if needed."
        )
        return 0

    if args.list_levels:
        numbers = LevelLoader(directories.level_root).available_levels(variant)
        print("Available levels: " + ", ".join(str(number) for number in numbers))
        return 0

    if args.check is not None:
        return _check_level(args.check, variant, directories)

    try:
        app = LightsOutApp(
            variant=variant,
            level=args.level,
            time_limit_enabled=args.time_limit,
            editor=args.editor,
            directories=directories,
        )
    except (InvalidLevelError, FileNotFoundError) as exc:
        print(f"Could not load level {args.level}: {exc}", file=sys.stderr)
        return 1
    app.run()
    return 0


def run() -> None:
    """Console script entry point."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    run()
