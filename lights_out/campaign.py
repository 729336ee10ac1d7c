"""Level progression across consecutive game sessions."""

from __future__ import annotations

import logging
from typing import Optional

from .game import CellVariant, GameSession, SessionState
from .levels import Level, LevelLoader


logger = logging.getLogger(__name__)

FINAL_LEVEL = 15


class Campaign:
    """Play numbered levels in order, one fresh session per level."""

    def __init__(
        self,
        loader: LevelLoader,
        variant: CellVariant = CellVariant.BINARY,
        *,
        time_limit_enabled: bool = False,
        final_level: int = FINAL_LEVEL,
    ) -> None:
        self.loader = loader
        self.variant = variant
        self.time_limit_enabled = time_limit_enabled
        self.final_level = final_level
        self.level_number: Optional[int] = None
        self.level: Optional[Level] = None
        self.session: Optional[GameSession] = None

    @property
    def label(self) -> str:
        prefix = "Coloured Level" if self.variant is CellVariant.CYCLIC4 else "Level"
        return f"{prefix}: {self.level_number}"

    @property
    def has_next(self) -> bool:
        if self.level_number is None or self.level_number >= self.final_level:
            return False
        return self.loader.path_for(self.level_number + 1, self.variant).exists()

    def start(self, number: int) -> GameSession:
        level = self.loader.load(number, self.variant)
        if self.session is not None:
            self.session.close()
        self.level_number = number
        self.level = level
        self.session = GameSession(
            level.build_grid(),
            time_limit_seconds=level.time_limit_seconds,
            time_limit_enabled=self.time_limit_enabled,
            level_number=number,
        )
        logger.info("Started %s (time limit %ds)", self.label, level.time_limit_seconds)
        return self.session

    def restart(self) -> GameSession:
        if self.level_number is None:
            raise RuntimeError("No level has been started")
        return self.start(self.level_number)

    def advance(self) -> GameSession:
        if self.session is None or self.session.state is not SessionState.WON:
            raise RuntimeError("The current level has not been won yet")
        if not self.has_next:
            raise RuntimeError(f"Level {self.level_number} is the final level")
        return self.start(self.level_number + 1)

    def completion_message(self) -> str:
        prefix = "Coloured Level" if self.variant is CellVariant.CYCLIC4 else "Level"
        return f"{prefix} {self.level_number} complete!"


__all__ = ["Campaign", "FINAL_LEVEL"]
