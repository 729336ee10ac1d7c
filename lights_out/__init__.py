"""Lights Out puzzle package."""

from .campaign import Campaign
from .editor import BoardEditor
from .game import BOARD_SIZE, Cell, CellVariant, GameSession, Grid, SessionState
from .levels import InvalidLevelError, Level, LevelCodec, LevelLoader
from .solver import SolvabilityAnalyzer

__all__ = [
    "BOARD_SIZE",
    "BoardEditor",
    "Campaign",
    "Cell",
    "CellVariant",
    "GameSession",
    "Grid",
    "InvalidLevelError",
    "Level",
    "LevelCodec",
    "LevelLoader",
    "SessionState",
    "SolvabilityAnalyzer",
]
