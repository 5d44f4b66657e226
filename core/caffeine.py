"""
Caffeine mode: hold a systemd idle inhibitor while enabled.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from core.command_gateway import CommandGateway
from core.state_store import CAFFEINE_MARKER, MarkerStore, ShellState
from statusbar_shell.statusbar_shell import logger as app_logger

INHIBITOR_TAG = "statusbar-caffeine"
INHIBIT_COMMAND = (
    f"systemd-inhibit --what=idle --who={INHIBITOR_TAG} --why='Caffeine mode' sleep infinity"
)
RELEASE_COMMAND = f"pkill -f 'systemd-inhibit.*{INHIBITOR_TAG}'"


class CaffeineController(QObject):
    toggled = Signal(bool)

    def __init__(self, state: ShellState, markers: MarkerStore, gateway: CommandGateway) -> None:
        super().__init__()
        self._state = state
        self._markers = markers
        self._gateway = gateway
        self._logger = app_logger.get_logger()

    @property
    def active(self) -> bool:
        return self._state.caffeine

    @property
    def icon(self) -> str:
        return "󰅶" if self._state.caffeine else "󰛊"

    @property
    def tooltip(self) -> str:
        return "Caffeine ON" if self._state.caffeine else "Caffeine OFF"

    def toggle(self) -> bool:
        enabled = not self._state.caffeine
        self._state.caffeine = enabled
        if enabled:
            self._gateway.run_async(INHIBIT_COMMAND)
        else:
            self._gateway.run_async(RELEASE_COMMAND)
        self._markers.write(CAFFEINE_MARKER, enabled)
        self._logger.info("Caffeine {}.", "enabled" if enabled else "disabled")
        self.toggled.emit(enabled)
        return enabled
