"""
Always-visible tray indicators and the glyph helpers they share with the
popups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.network_cli import NmcliClient
from core.scheduler import PollHandle, Scheduler

NETWORK_POLL_MS = 2000

_DEVICE_ICONS = (
    (("headphone", "earbuds", "buds", "airpod"), "󰋋"),
    (("keyboard",), "󰍽"),
    (("mouse",), "󰦏"),
    (("controller", "gamepad"), "󰊴"),
    (("speaker",), "󰓃"),
)
_DEFAULT_DEVICE_ICON = "󰂱"


def wifi_signal_icon(strength: int) -> str:
    if strength >= 80:
        return "󰤨"
    if strength >= 60:
        return "󰤥"
    if strength >= 40:
        return "󰤢"
    if strength >= 20:
        return "󰤟"
    return "󰤯"


def device_icon(name: str) -> str:
    lowered = name.lower()
    for keywords, icon in _DEVICE_ICONS:
        if any(keyword in lowered for keyword in keywords):
            return icon
    return _DEFAULT_DEVICE_ICON


@dataclass(frozen=True)
class NetworkStatus:
    enabled: bool = False
    connected: bool = False
    signal: int = 0

    @property
    def icon(self) -> str:
        if not self.enabled:
            return "󰤭"
        if not self.connected:
            return "󰤯"
        return wifi_signal_icon(self.signal)

    @property
    def tooltip(self) -> str:
        if not self.enabled:
            return "WiFi Disabled"
        if not self.connected:
            return "WiFi Not Connected"
        return f"WiFi {self.signal}%"


class NetworkIndicator(QObject):
    statusChanged = Signal(object)

    def __init__(self, client: NmcliClient, scheduler: Scheduler) -> None:
        super().__init__()
        self._client = client
        self._scheduler = scheduler
        self._handle: Optional[PollHandle] = None
        self._status: Optional[NetworkStatus] = None

    @property
    def status(self) -> NetworkStatus:
        return self._status or NetworkStatus()

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> None:
        if self.active:
            return
        self.poll()
        self._handle = self._scheduler.every(NETWORK_POLL_MS, self.poll)

    def stop(self) -> None:
        self._scheduler.cancel(self._handle)
        self._handle = None

    def poll(self) -> None:
        status = self._read_status()
        if status != self._status:
            self._status = status
            self.statusChanged.emit(status)

    def _read_status(self) -> NetworkStatus:
        if not self._client.is_enabled():
            return NetworkStatus()
        if not self._client.current_connection():
            return NetworkStatus(enabled=True)
        signal = next(
            (network.signal for network in self._client.scan_networks() if network.active),
            0,
        )
        return NetworkStatus(enabled=True, connected=True, signal=signal)
