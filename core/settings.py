"""
Environment-backed configuration for the status bar shell runtime.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from statusbar_shell.statusbar_shell import logger as app_logger

_LOGGER = app_logger.get_logger()

_PREFIX = "STATUSBAR_SHELL_"
DEFAULT_LATITUDE = 30.27
DEFAULT_LONGITUDE = -97.74
DEFAULT_WIFI_DEVICE = "wlp5s0"
DEFAULT_COMMAND_TIMEOUT = 10.0
_MIN_COMMAND_TIMEOUT = 1.0
_MAX_COMMAND_TIMEOUT = 60.0


def _default_brightness_script() -> Path:
    return Path.home() / ".config" / "hypr" / "scripts" / "set-brightness.sh"


@dataclass(eq=True)
class ShellSettings:
    latitude: float = DEFAULT_LATITUDE
    longitude: float = DEFAULT_LONGITUDE
    marker_dir: Path = Path("/tmp")
    brightness_script: Path = field(default_factory=_default_brightness_script)
    wifi_fallback_device: str = DEFAULT_WIFI_DEVICE
    command_timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT
    network_settings_command: str = "plasma-open-settings kcm_networkmanagement"
    bluetooth_settings_command: str = "plasma-open-settings kcm_bluetooth"
    audio_settings_command: str = "pavucontrol"


class ShellSettingsManager:
    """Reads ``STATUSBAR_SHELL_*`` variables and clamps invalid data."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def read_settings(self) -> ShellSettings:
        defaults = ShellSettings()
        return ShellSettings(
            latitude=self._read_float("LATITUDE", defaults.latitude, -90.0, 90.0),
            longitude=self._read_float("LONGITUDE", defaults.longitude, -180.0, 180.0),
            marker_dir=self._read_path("MARKER_DIR", defaults.marker_dir),
            brightness_script=self._read_path("BRIGHTNESS_SCRIPT", defaults.brightness_script),
            wifi_fallback_device=self._read_str("WIFI_DEVICE", defaults.wifi_fallback_device),
            command_timeout_seconds=self._read_float(
                "COMMAND_TIMEOUT",
                defaults.command_timeout_seconds,
                _MIN_COMMAND_TIMEOUT,
                _MAX_COMMAND_TIMEOUT,
            ),
            network_settings_command=self._read_str(
                "NETWORK_SETTINGS_CMD", defaults.network_settings_command
            ),
            bluetooth_settings_command=self._read_str(
                "BLUETOOTH_SETTINGS_CMD", defaults.bluetooth_settings_command
            ),
            audio_settings_command=self._read_str(
                "AUDIO_SETTINGS_CMD", defaults.audio_settings_command
            ),
        )

    def _raw(self, name: str) -> Optional[str]:
        value = self._environ.get(_PREFIX + name)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _read_str(self, name: str, default: str) -> str:
        raw = self._raw(name)
        return default if raw is None else raw

    def _read_path(self, name: str, default: Path) -> Path:
        raw = self._raw(name)
        return default if raw is None else Path(raw).expanduser()

    def _read_float(self, name: str, default: float, minimum: float, maximum: float) -> float:
        raw = self._raw(name)
        if raw is None:
            return default
        try:
            value = float(raw)
        except ValueError:
            _LOGGER.warning("Ignoring non-numeric {}{}={!r}.", _PREFIX, name, raw)
            return default
        if value < minimum or value > maximum:
            _LOGGER.warning(
                "{}{}={} is outside [{}, {}]. Clamping to safe bounds.",
                _PREFIX,
                name,
                value,
                minimum,
                maximum,
            )
        return max(minimum, min(maximum, value))
