"""
Process-wide shell state and its marker-file persistence.

A marker file's existence stands for a boolean ``True``; markers are read
once at startup and rewritten on every toggle.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from statusbar_shell.statusbar_shell import logger as app_logger

NIGHT_LIGHT_MARKER = "ags-nightlight-active"
CAFFEINE_MARKER = "ags-caffeine-active"
DEFAULT_BRIGHTNESS = 100


class MarkerStore:
    """Thin wrapper over a directory of empty flag files."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._logger = app_logger.get_logger()

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def is_set(self, name: str) -> bool:
        return self.path_for(name).exists()

    def set(self, name: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(name).touch(exist_ok=True)
        except OSError as exc:
            self._logger.warning("Could not create marker {}: {}", self.path_for(name), exc)

    def clear(self, name: str) -> None:
        try:
            self.path_for(name).unlink(missing_ok=True)
        except OSError as exc:
            self._logger.warning("Could not remove marker {}: {}", self.path_for(name), exc)

    def write(self, name: str, value: bool) -> None:
        if value:
            self.set(name)
        else:
            self.clear(name)


@dataclass
class ShellState:
    """
    Mutable state shared by the brightness, caffeine and night-light
    controllers. Each field is written only by its owning controller.
    """

    brightness: int = DEFAULT_BRIGHTNESS
    caffeine: bool = False
    night_light_enabled: bool = False
    night_light_auto: bool = True

    @classmethod
    def from_markers(cls, markers: MarkerStore) -> "ShellState":
        return cls(
            caffeine=markers.is_set(CAFFEINE_MARKER),
            night_light_enabled=markers.is_set(NIGHT_LIGHT_MARKER),
        )
