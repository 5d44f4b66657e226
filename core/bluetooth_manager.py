"""
Bluetooth power and paired-device management through bluetoothctl.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from core.network_cli import BluetoothctlClient
from core.scheduler import PollHandle, Scheduler
from shared.network_models import BluetoothDevice
from statusbar_shell.statusbar_shell import logger as app_logger

DEVICE_REFRESH_MS = 1000
POWER_REFRESH_MS = 500
INDICATOR_POLL_MS = 2000


@dataclass(frozen=True)
class BluetoothSnapshot:
    powered: bool = False
    devices: List[BluetoothDevice] = field(default_factory=list)

    @property
    def empty_message(self) -> str:
        if not self.powered:
            return "Bluetooth is off"
        if not self.devices:
            return "No paired devices"
        return ""


class BluetoothManager(QObject):
    """
    State behind the Bluetooth popup.

    Pairing is assumed to exist already; the device list is rebuilt from
    scratch on every refresh.
    """

    changed = Signal()

    def __init__(self, client: BluetoothctlClient, scheduler: Scheduler) -> None:
        super().__init__()
        self._client = client
        self._scheduler = scheduler
        self._logger = app_logger.get_logger()
        self._snapshot = BluetoothSnapshot()

    @property
    def snapshot(self) -> BluetoothSnapshot:
        return self._snapshot

    def refresh(self) -> None:
        powered = self._client.is_powered()
        devices = self._client.paired_devices() if powered else []
        self._snapshot = BluetoothSnapshot(powered=powered, devices=devices)
        self.changed.emit()

    def on_visibility_change(self, visible: bool) -> None:
        if visible:
            self.refresh()

    def find_device(self, mac: str) -> Optional[BluetoothDevice]:
        for device in self._snapshot.devices:
            if device.mac == mac:
                return device
        return None

    def toggle_device(self, mac: str) -> None:
        device = self.find_device(mac)
        if device is None:
            self._logger.warning("Ignoring action on unknown device {}.", mac)
            return
        if device.connected:
            self.disconnect_device(mac)
        else:
            self.connect_device(mac)

    def connect_device(self, mac: str) -> None:
        self._logger.info("Connecting Bluetooth device {}.", mac)
        self._client.connect(mac)
        self._scheduler.after(DEVICE_REFRESH_MS, self.refresh)

    def disconnect_device(self, mac: str) -> None:
        self._logger.info("Disconnecting Bluetooth device {}.", mac)
        self._client.disconnect(mac)
        self._scheduler.after(DEVICE_REFRESH_MS, self.refresh)

    def toggle_power(self) -> None:
        target = not self._snapshot.powered
        self._logger.info("Turning Bluetooth power {}.", "on" if target else "off")
        self._client.set_power(target)
        self._scheduler.after(POWER_REFRESH_MS, self.refresh)


@dataclass(frozen=True)
class BluetoothStatus:
    powered: bool = False
    connected: bool = False

    @property
    def icon(self) -> str:
        if not self.powered:
            return "󰂲"
        if self.connected:
            return "󰂱"
        return "󰂯"

    @property
    def tooltip(self) -> str:
        if not self.powered:
            return "Bluetooth Off"
        if self.connected:
            return "Bluetooth Connected"
        return "Bluetooth On"


class BluetoothIndicator(QObject):
    """Keeps the tray icon current by polling power and connection summary."""

    statusChanged = Signal(object)

    def __init__(self, client: BluetoothctlClient, scheduler: Scheduler) -> None:
        super().__init__()
        self._client = client
        self._scheduler = scheduler
        self._handle: Optional[PollHandle] = None
        self._status: Optional[BluetoothStatus] = None

    @property
    def status(self) -> BluetoothStatus:
        return self._status or BluetoothStatus()

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> None:
        if self.active:
            return
        self.poll()
        self._handle = self._scheduler.every(INDICATOR_POLL_MS, self.poll)

    def stop(self) -> None:
        self._scheduler.cancel(self._handle)
        self._handle = None

    def poll(self) -> None:
        powered = self._client.is_powered()
        connected = powered and self._client.any_connected()
        status = BluetoothStatus(powered=powered, connected=connected)
        if status != self._status:
            self._status = status
            self.statusChanged.emit(status)
