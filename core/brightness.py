"""
Software brightness level applied through the external brightness script.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from core.command_gateway import CommandGateway, shell_quote
from core.state_store import ShellState

MIN_BRIGHTNESS = 5
MAX_BRIGHTNESS = 100


def clamp_brightness(value: float) -> int:
    return max(MIN_BRIGHTNESS, min(MAX_BRIGHTNESS, int(round(value))))


class BrightnessController(QObject):
    brightnessChanged = Signal(int)

    def __init__(self, state: ShellState, gateway: CommandGateway, *, script: str) -> None:
        super().__init__()
        self._state = state
        self._gateway = gateway
        self._script = script

    @property
    def level(self) -> int:
        return self._state.brightness

    def set_level(self, value: float) -> int:
        level = clamp_brightness(value)
        self._state.brightness = level
        self._gateway.run_async(f"{shell_quote(self._script)} {level}")
        self.brightnessChanged.emit(level)
        return level

    def step(self, delta: int) -> int:
        return self.set_level(self._state.brightness + delta)
