"""
Application coordinator wiring managers, popups and the tray icon together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from PySide6.QtCore import QObject
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from core.bluetooth_manager import BluetoothIndicator, BluetoothManager
from core.brightness import BrightnessController
from core.caffeine import CaffeineController
from core.command_gateway import CommandGateway
from core.indicators import NetworkIndicator, device_icon, wifi_signal_icon
from core.network_cli import BluetoothctlClient, NmcliClient
from core.night_light import NightLightController, SunScheduleCache
from core.popup_controller import (
    AUDIO_POPUP,
    BACKDROP,
    BLUETOOTH_POPUP,
    BRIGHTNESS_POPUP,
    WIFI_POPUP,
    PopupController,
)
from core.popup_window import PopupBackdrop, PopupRow, PopupWindow
from core.scheduler import QtTimerScheduler
from core.settings import ShellSettings, ShellSettingsManager
from core.state_store import MarkerStore, ShellState
from core.wifi_manager import WifiManager, WifiView
from statusbar_shell.statusbar_shell import logger as app_logger

APP_NAME = "Status Bar Shell"
APP_VERSION = "1.0.0"
BRIGHTNESS_STEP = 10


@dataclass
class AppCoordinator(QObject):
    settings_manager: ShellSettingsManager = field(default_factory=ShellSettingsManager)

    def __post_init__(self) -> None:
        super().__init__()
        self._logger = app_logger.get_logger()
        self._manual_shutdown_requested = False
        self._settings: ShellSettings = self.settings_manager.read_settings()

        self._scheduler = QtTimerScheduler(self)
        self._gateway = CommandGateway(timeout_seconds=self._settings.command_timeout_seconds)
        self._markers = MarkerStore(self._settings.marker_dir)
        self._state = ShellState.from_markers(self._markers)

        nmcli = NmcliClient(self._gateway)
        bluetoothctl = BluetoothctlClient(self._gateway)
        self._popups = PopupController()
        self._wifi = WifiManager(nmcli, self._scheduler, fallback_device=self._settings.wifi_fallback_device)
        self._bluetooth = BluetoothManager(bluetoothctl, self._scheduler)
        self._network_indicator = NetworkIndicator(nmcli, self._scheduler)
        self._bluetooth_indicator = BluetoothIndicator(bluetoothctl, self._scheduler)
        script = str(self._settings.brightness_script)
        self._brightness = BrightnessController(self._state, self._gateway, script=script)
        self._caffeine = CaffeineController(self._state, self._markers, self._gateway)
        self._night_light = NightLightController(
            self._state,
            self._markers,
            self._gateway,
            self._scheduler,
            SunScheduleCache(latitude=self._settings.latitude, longitude=self._settings.longitude),
            brightness_script=script,
        )

        self._backdrop = PopupBackdrop()
        self._backdrop.clicked.connect(self._popups.close_all)
        self._windows: Dict[str, PopupWindow] = {
            AUDIO_POPUP: PopupWindow("󰕾 Audio"),
            BRIGHTNESS_POPUP: PopupWindow("󰃟 Display"),
            WIFI_POPUP: PopupWindow("󰤨 WiFi"),
            BLUETOOTH_POPUP: PopupWindow("󰂯 Bluetooth"),
        }
        for name, window in self._windows.items():
            window.escapePressed.connect(lambda name=name: self._on_escape(name))
        wifi_window = self._windows[WIFI_POPUP]
        wifi_window.submitted.connect(self._wifi.submit_password)
        wifi_window.backRequested.connect(self._wifi.cancel_password)

        self._popups.visibilityChanged.connect(self._on_visibility_changed)
        self._wifi.changed.connect(self._render_wifi)
        self._bluetooth.changed.connect(self._render_bluetooth)
        self._brightness.brightnessChanged.connect(lambda _level: self._render_brightness())
        self._night_light.stateChanged.connect(self._on_night_light_changed)
        self._caffeine.toggled.connect(lambda _enabled: self._update_tray())
        self._network_indicator.statusChanged.connect(lambda _status: self._update_tray())
        self._bluetooth_indicator.statusChanged.connect(lambda _status: self._update_tray())

        self._tray = QSystemTrayIcon(self)
        self._tray.setIcon(QApplication.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon))
        self._tray.activated.connect(self._on_tray_activated)
        self._build_menu()

    def start(self) -> None:
        self._logger.info("Starting {} v{}.", APP_NAME, APP_VERSION)
        self._render_audio()
        self._render_brightness()
        self._network_indicator.start()
        self._bluetooth_indicator.start()
        self._night_light.start()
        self._update_tray()
        self._tray.show()

    def shutdown(self) -> None:
        self._logger.info("Shutting down on user request.")
        self._manual_shutdown_requested = True
        self._network_indicator.stop()
        self._bluetooth_indicator.stop()
        self._night_light.stop()
        self._wifi.stop_polling()
        self._popups.close_all()
        self._tray.hide()
        QApplication.instance().quit()

    @property
    def manual_shutdown_requested(self) -> bool:
        return self._manual_shutdown_requested

    # -- tray ---------------------------------------------------------

    def _build_menu(self) -> None:
        menu = QMenu()
        for label, name in (
            ("WiFi", WIFI_POPUP),
            ("Bluetooth", BLUETOOTH_POPUP),
            ("Display", BRIGHTNESS_POPUP),
            ("Audio", AUDIO_POPUP),
        ):
            action = QAction(label, menu)
            action.triggered.connect(lambda _checked=False, name=name: self._popups.toggle(name))
            menu.addAction(action)
        menu.addSeparator()

        self._caffeine_action = QAction("Caffeine", menu, checkable=True)
        self._caffeine_action.triggered.connect(lambda _checked: self._caffeine.toggle())
        self._night_action = QAction("Night Light", menu, checkable=True)
        self._night_action.triggered.connect(lambda _checked: self._night_light.toggle_manual())
        self._auto_action = QAction("Auto Night Light", menu, checkable=True)
        self._auto_action.triggered.connect(lambda checked: self._night_light.set_auto(checked))
        menu.addAction(self._caffeine_action)
        menu.addAction(self._night_action)
        menu.addAction(self._auto_action)
        menu.addSeparator()

        exit_action = QAction("Quit", menu)
        exit_action.triggered.connect(self.shutdown)
        menu.addAction(exit_action)
        self._menu = menu
        self._tray.setContextMenu(menu)

    def _update_tray(self) -> None:
        network = self._network_indicator.status
        bluetooth = self._bluetooth_indicator.status
        lines: List[str] = [
            f"{APP_NAME} v{APP_VERSION}",
            f"{network.icon} {network.tooltip}",
            f"{bluetooth.icon} {bluetooth.tooltip}",
            f"{self._caffeine.icon} {self._caffeine.tooltip}",
        ]
        self._tray.setToolTip("\n".join(lines))
        self._caffeine_action.setChecked(self._caffeine.active)
        self._night_action.setChecked(self._night_light.enabled)
        self._auto_action.setChecked(self._night_light.auto_mode)

    def _on_tray_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self._popups.toggle(WIFI_POPUP)

    # -- popups -------------------------------------------------------

    def _on_visibility_changed(self, name: str, visible: bool) -> None:
        if name == BACKDROP:
            if visible:
                self._backdrop.present()
            else:
                self._backdrop.hide()
            return
        window = self._windows.get(name)
        if window is not None:
            if visible:
                window.present()
            else:
                window.hide()
        if name == WIFI_POPUP:
            self._wifi.on_visibility_change(visible)
        elif name == BLUETOOTH_POPUP:
            self._bluetooth.on_visibility_change(visible)
        elif name == BRIGHTNESS_POPUP and visible:
            self._render_brightness()

    def _on_escape(self, name: str) -> None:
        if name == WIFI_POPUP:
            self._wifi.cancel_password()
        self._popups.close_all()

    def _open_external(self, command: str) -> None:
        self._gateway.run_async(command)
        self._popups.close_all()

    def _render_wifi(self) -> None:
        window = self._windows[WIFI_POPUP]
        snapshot = self._wifi.snapshot
        window.set_header_action("ON" if snapshot.enabled else "OFF", self._wifi.toggle_power)
        status = snapshot.connection_label
        if snapshot.scanning:
            status += "\nScanning..."
        window.set_status(status)
        if snapshot.view is WifiView.PASSWORD:
            window.show_entry(
                snapshot.password_title,
                message=snapshot.password_message,
                is_error=snapshot.password_error,
                submit_label=snapshot.submit_label,
                submit_enabled=snapshot.submit_enabled,
            )
            return
        window.hide_entry()
        rows: List[PopupRow] = []
        if snapshot.enabled:
            for network in snapshot.networks:
                marks = ""
                if network.saved and not network.active:
                    marks += " 󰄬"
                if network.requires_password:
                    marks += " 󰌾"
                rows.append(
                    PopupRow(
                        f"{wifi_signal_icon(network.signal)} {network.ssid}{marks}  {network.signal}%",
                        on_click=lambda ssid=network.ssid: self._wifi.activate(ssid),
                        on_secondary=(lambda ssid=network.ssid: self._wifi.forget(ssid)) if network.saved else None,
                        tooltip="Saved" if network.saved else "",
                    )
                )
        if snapshot.empty_message:
            rows.append(PopupRow(snapshot.empty_message))
        rows.append(PopupRow(" Open Settings", on_click=lambda: self._open_external(self._settings.network_settings_command)))
        window.set_rows(rows)

    def _render_bluetooth(self) -> None:
        window = self._windows[BLUETOOTH_POPUP]
        snapshot = self._bluetooth.snapshot
        window.set_header_action("ON" if snapshot.powered else "OFF", self._bluetooth.toggle_power)
        rows: List[PopupRow] = []
        if snapshot.powered:
            for device in snapshot.devices:
                action = "Disconnect" if device.connected else "Connect"
                rows.append(
                    PopupRow(
                        f"{device_icon(device.name)} {device.name}  [{action}]",
                        on_click=lambda mac=device.mac: self._bluetooth.toggle_device(mac),
                    )
                )
        if snapshot.empty_message:
            rows.append(PopupRow(snapshot.empty_message))
        rows.append(PopupRow(" Open Settings", on_click=lambda: self._open_external(self._settings.bluetooth_settings_command)))
        window.set_rows(rows)

    def _render_brightness(self) -> None:
        window = self._windows[BRIGHTNESS_POPUP]
        window.set_status(f"All Monitors: {self._brightness.level}%")
        night = "ON" if self._night_light.enabled else "OFF"
        auto = "ON" if self._night_light.auto_mode else "OFF"
        window.set_rows(
            [
                PopupRow("󰃞 Dimmer", on_click=lambda: self._brightness.step(-BRIGHTNESS_STEP)),
                PopupRow("󰃠 Brighter", on_click=lambda: self._brightness.step(BRIGHTNESS_STEP)),
                PopupRow(f"󰖔 Night Light: {night}", on_click=self._night_light.toggle_manual),
                PopupRow(self._night_light.describe()),
                PopupRow(f"Auto Schedule: {auto}", on_click=self._night_light.toggle_auto),
            ]
        )

    def _render_audio(self) -> None:
        window = self._windows[AUDIO_POPUP]
        window.set_rows(
            [PopupRow(" Settings", on_click=lambda: self._open_external(self._settings.audio_settings_command))]
        )

    def _on_night_light_changed(self, _enabled: bool, _auto: bool) -> None:
        self._render_brightness()
        self._update_tray()
