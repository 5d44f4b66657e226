"""
Parsers for nmcli and bluetoothctl output shared by the runtime managers.

All functions are pure: they take decoded command output and never raise on
malformed rows, which are skipped instead.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .network_models import BluetoothDevice, WifiNetwork

MAX_NETWORKS = 8
WIRELESS_CONNECTION_TYPE = "802-11-wireless"
WIFI_DEVICE_TYPE = "wifi"


def split_terse_line(line: str) -> List[str]:
    """
    Split one row of ``nmcli -t`` output into fields.

    nmcli escapes literal colons as ``\\:`` and backslashes as ``\\\\`` in
    terse mode, so a plain ``str.split(":")`` would break SSIDs containing
    a colon.
    """
    fields: List[str] = []
    current: List[str] = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        current.append("\\")
    fields.append("".join(current))
    return fields


def _rows(output: str) -> Iterable[List[str]]:
    for line in output.strip().splitlines():
        if line.strip():
            yield split_terse_line(line)


def parse_saved_wifi_connections(output: str) -> Set[str]:
    """Names of saved wireless profiles from ``nmcli -t -f NAME,TYPE connection show``."""
    saved: Set[str] = set()
    for parts in _rows(output):
        if len(parts) >= 2 and parts[1] == WIRELESS_CONNECTION_TYPE and parts[0]:
            saved.add(parts[0])
    return saved


def parse_active_wifi_connection(output: str) -> str:
    """
    Return the active wireless connection name, or an empty string.

    Expects ``nmcli -t -f NAME,TYPE,DEVICE connection show --active``; a row
    only counts when it is bound to a device.
    """
    for parts in _rows(output):
        if len(parts) >= 3 and parts[1] == WIRELESS_CONNECTION_TYPE and parts[2]:
            return parts[0]
    return ""


def parse_wifi_networks(
    output: str,
    saved: Optional[Set[str]] = None,
    *,
    limit: int = MAX_NETWORKS,
) -> List[WifiNetwork]:
    """
    Build the ranked network list from ``nmcli -t -f SSID,SIGNAL,SECURITY,ACTIVE device wifi list``.

    Hidden networks (empty SSID) are dropped, repeated SSIDs keep their first
    row, and the result is ordered by descending signal and truncated.
    """
    saved = saved or set()
    seen: Set[str] = set()
    networks: List[WifiNetwork] = []
    for parts in _rows(output):
        if len(parts) < 4:
            continue
        ssid = parts[0]
        if not ssid or ssid in seen:
            continue
        seen.add(ssid)
        networks.append(
            WifiNetwork(
                ssid=ssid,
                signal=_parse_signal(parts[1]),
                security=parts[2].strip(),
                active=parts[3] == "yes",
                saved=ssid in saved,
            )
        )
    networks.sort(key=lambda network: network.signal, reverse=True)
    return networks[:limit]


def _parse_signal(value: str) -> int:
    try:
        signal = int(value.strip())
    except ValueError:
        return 0
    return max(0, min(100, signal))


def parse_wifi_device(output: str) -> Optional[str]:
    """First WiFi-capable device from ``nmcli -t -f DEVICE,TYPE device status``."""
    for parts in _rows(output):
        if len(parts) >= 2 and parts[1] == WIFI_DEVICE_TYPE and parts[0]:
            return parts[0]
    return None


def parse_radio_enabled(output: str) -> bool:
    return output.strip() == "enabled"


def parse_paired_devices(output: str) -> List[BluetoothDevice]:
    """
    Parse ``bluetoothctl devices Paired`` lines of the form ``Device <MAC> <Name>``.

    Connection state is not part of this listing; callers fill it in per
    device.
    """
    devices: List[BluetoothDevice] = []
    for line in output.strip().splitlines():
        if not line.startswith("Device "):
            continue
        remainder = line[len("Device "):]
        mac, separator, name = remainder.partition(" ")
        if not separator or not mac:
            continue
        devices.append(BluetoothDevice(mac=mac, name=name.strip()))
    return devices


def parse_info_connected(output: str) -> bool:
    """Whether ``bluetoothctl info <MAC>`` reports an active connection."""
    return "Connected: yes" in output


def parse_powered(output: str) -> bool:
    """Whether ``bluetoothctl show`` reports the controller as powered."""
    return "Powered: yes" in output


def parse_any_connected(output: str) -> bool:
    """Whether ``bluetoothctl devices Connected`` lists at least one device."""
    return any(line.startswith("Device ") for line in output.strip().splitlines())
