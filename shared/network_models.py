"""
Shared representations of WiFi networks, Bluetooth devices and the transient
password-connection session.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_CONNECT_ATTEMPTS = 5


@dataclass(frozen=True, slots=True)
class WifiNetwork:
    """
    One row of a WiFi scan round.

    ``security`` is the raw nmcli security column; an empty string means the
    network is open.
    """

    ssid: str
    signal: int
    security: str = ""
    active: bool = False
    saved: bool = False

    @property
    def is_open(self) -> bool:
        return not self.security

    @property
    def requires_password(self) -> bool:
        return bool(self.security) and not self.saved


@dataclass(frozen=True, slots=True)
class BluetoothDevice:
    mac: str
    name: str
    connected: bool = False


@dataclass(slots=True)
class WifiConnectionSession:
    """
    Tracks one password-protected connection attempt.

    Created on submit, discarded on success, on final failure, or when the
    user backs out of the password prompt.
    """

    target_ssid: str
    attempt: int = 0
    max_attempts: int = MAX_CONNECT_ATTEMPTS
