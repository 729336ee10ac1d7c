"""User interface package for Lights Out."""

from .main import (
    LEVEL_ENV_VAR,
    LightsOutApp,
    UIDirectories,
    main,
    resolve_directories,
    run,
)
from .toolkit import LightsOutUI

__all__ = [
    "LEVEL_ENV_VAR",
    "UIDirectories",
    "LightsOutApp",
    "LightsOutUI",
    "main",
    "resolve_directories",
    "run",
]
