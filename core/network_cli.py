"""
Command builders and state queries for nmcli and bluetoothctl.
"""

from __future__ import annotations

from typing import List, Optional, Set

from core.command_gateway import CommandGateway, shell_quote
from shared.cli_output import (
    parse_active_wifi_connection,
    parse_any_connected,
    parse_info_connected,
    parse_paired_devices,
    parse_powered,
    parse_radio_enabled,
    parse_saved_wifi_connections,
    parse_wifi_device,
    parse_wifi_networks,
)
from shared.network_models import BluetoothDevice, WifiNetwork

WIFI_LIST_COMMAND = "nmcli -t -f SSID,SIGNAL,SECURITY,ACTIVE device wifi list"
SAVED_CONNECTIONS_COMMAND = "nmcli -t -f NAME,TYPE connection show"
ACTIVE_CONNECTIONS_COMMAND = "nmcli -t -f NAME,TYPE,DEVICE connection show --active"
DEVICE_STATUS_COMMAND = "nmcli -t -f DEVICE,TYPE device status"
RADIO_STATUS_COMMAND = "nmcli radio wifi"
RESCAN_COMMAND = "nmcli device wifi rescan"


class NmcliClient:
    """WiFi queries (blocking) and actions (fire-and-forget) via nmcli."""

    def __init__(self, gateway: CommandGateway) -> None:
        self._gateway = gateway

    def is_enabled(self) -> bool:
        return parse_radio_enabled(self._gateway.run_text(RADIO_STATUS_COMMAND))

    def current_connection(self) -> str:
        return parse_active_wifi_connection(self._gateway.run_text(ACTIVE_CONNECTIONS_COMMAND))

    def saved_connections(self) -> Set[str]:
        return parse_saved_wifi_connections(self._gateway.run_text(SAVED_CONNECTIONS_COMMAND))

    def scan_networks(self) -> List[WifiNetwork]:
        result = self._gateway.run_sync(WIFI_LIST_COMMAND)
        if not result.success:
            return []
        return parse_wifi_networks(result.text, self.saved_connections())

    def wifi_device(self) -> Optional[str]:
        return parse_wifi_device(self._gateway.run_text(DEVICE_STATUS_COMMAND))

    def rescan(self) -> None:
        self._gateway.run_async(RESCAN_COMMAND)

    def set_radio(self, enabled: bool) -> None:
        self._gateway.run_async(f"nmcli radio wifi {'on' if enabled else 'off'}")

    def connect_open(self, ssid: str) -> None:
        self._gateway.run_async(f"nmcli device wifi connect {shell_quote(ssid)}")

    def connect_with_password(self, ssid: str, password: str) -> None:
        self._gateway.run_async(
            f"nmcli device wifi connect {shell_quote(ssid)} password {shell_quote(password)}"
        )

    def connection_up(self, ssid: str) -> None:
        self._gateway.run_async(f"nmcli connection up {shell_quote(ssid)}")

    def connection_delete(self, ssid: str) -> None:
        self._gateway.run_async(f"nmcli connection delete {shell_quote(ssid)}")

    def disconnect_device(self, device: str) -> None:
        self._gateway.run_async(f"nmcli device disconnect {shell_quote(device)}")


class BluetoothctlClient:
    def __init__(self, gateway: CommandGateway) -> None:
        self._gateway = gateway

    def is_powered(self) -> bool:
        return parse_powered(self._gateway.run_text("bluetoothctl show"))

    def any_connected(self) -> bool:
        return parse_any_connected(self._gateway.run_text("bluetoothctl devices Connected"))

    def is_connected(self, mac: str) -> bool:
        return parse_info_connected(self._gateway.run_text(f"bluetoothctl info {shell_quote(mac)}"))

    def paired_devices(self) -> List[BluetoothDevice]:
        """
        Paired devices with live connection state.

        One ``info`` query per device; the paired list is short and this only
        runs on refresh.
        """
        result = self._gateway.run_sync("bluetoothctl devices Paired")
        if not result.success:
            return []
        return [
            BluetoothDevice(mac=device.mac, name=device.name, connected=self.is_connected(device.mac))
            for device in parse_paired_devices(result.text)
        ]

    def set_power(self, enabled: bool) -> None:
        self._gateway.run_async(f"bluetoothctl power {'on' if enabled else 'off'}")

    def connect(self, mac: str) -> None:
        self._gateway.run_async(f"bluetoothctl connect {shell_quote(mac)}")

    def disconnect(self, mac: str) -> None:
        self._gateway.run_async(f"bluetoothctl disconnect {shell_quote(mac)}")
