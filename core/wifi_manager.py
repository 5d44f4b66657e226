"""
WiFi discovery and connection flows driven through nmcli.

Every mutating action is fire-and-forget; its outcome is observed by a
delayed refresh or, for password connections, a bounded poll of the active
connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from core.network_cli import NmcliClient
from core.scheduler import PollHandle, PollUntil, Repeat, Scheduler
from shared.network_models import MAX_CONNECT_ATTEMPTS, WifiConnectionSession, WifiNetwork
from shared.validation import PasswordValidationError, validate_password
from statusbar_shell.statusbar_shell import logger as app_logger

POLL_INTERVAL_MS = 5000
INITIAL_SCAN_REFRESH_MS = 1500
RESCAN_REFRESH_MS = 1000
CONNECT_REFRESH_MS = 2000
SAVED_CHECK_MS = 2000
PASSWORD_POLL_INTERVAL_MS = 2000
DISCONNECT_REFRESH_MS = 1000
FORGET_REFRESH_MS = 500
POWER_REFRESH_MS = 500
POWER_ON_POLL_DELAY_MS = 1000

SUBMIT_LABEL = "Connect"
SUBMIT_BUSY_LABEL = "Connecting..."
AUTH_HINT = "System auth may be required..."
CONNECT_FAILED_MESSAGE = "Connection failed. Check password."


class WifiView(Enum):
    NETWORKS = "networks"
    PASSWORD = "password"


@dataclass(frozen=True)
class WifiSnapshot:
    """Everything the WiFi popup renders, replaced wholesale on each change."""

    enabled: bool = False
    current_connection: str = ""
    networks: List[WifiNetwork] = field(default_factory=list)
    scanning: bool = False
    view: WifiView = WifiView.NETWORKS
    password_target: Optional[str] = None
    password_message: str = ""
    password_error: bool = False
    submit_enabled: bool = True
    submit_label: str = SUBMIT_LABEL

    @property
    def connection_label(self) -> str:
        if self.current_connection:
            return f"Connected: {self.current_connection}"
        return "Not connected"

    @property
    def empty_message(self) -> str:
        if not self.enabled:
            return "WiFi is disabled"
        if not self.networks and not self.scanning:
            return "No networks found"
        return ""

    @property
    def password_title(self) -> str:
        return f'Connect to "{self.password_target}"' if self.password_target else ""


class WifiManager(QObject):
    """State machine behind the WiFi popup."""

    changed = Signal()

    def __init__(
        self,
        client: NmcliClient,
        scheduler: Scheduler,
        *,
        fallback_device: str,
        max_attempts: int = MAX_CONNECT_ATTEMPTS,
    ) -> None:
        super().__init__()
        self._client = client
        self._scheduler = scheduler
        self._fallback_device = fallback_device
        self._max_attempts = max_attempts
        self._logger = app_logger.get_logger()
        self._snapshot = WifiSnapshot()
        self._poll_handle: Optional[PollHandle] = None
        self._session: Optional[WifiConnectionSession] = None
        self._connect_poll: Optional[PollUntil] = None
        self._saved_check: Optional[PollHandle] = None
        self._visible = False

    @property
    def snapshot(self) -> WifiSnapshot:
        return self._snapshot

    @property
    def session(self) -> Optional[WifiConnectionSession]:
        return self._session

    @property
    def polling(self) -> bool:
        return self._poll_handle is not None and self._poll_handle.active

    def _update(self, **changes) -> None:
        self._snapshot = replace(self._snapshot, **changes)
        self.changed.emit()

    # -- discovery -------------------------------------------------------

    def refresh(self) -> None:
        enabled = self._client.is_enabled()
        current = self._client.current_connection()
        networks = self._client.scan_networks()
        scanning = self._snapshot.scanning and enabled and not networks
        self._update(
            enabled=enabled,
            current_connection=current,
            networks=networks,
            scanning=scanning,
        )

    def on_visibility_change(self, visible: bool) -> None:
        self._visible = visible
        if visible:
            self.refresh()
            self.start_polling()
        else:
            self._cancel_saved_check()
            self.stop_polling()

    def start_polling(self) -> None:
        if self.polling:
            return
        if not self._client.is_enabled():
            return
        self._update(scanning=True)
        self._client.rescan()
        self._scheduler.after(INITIAL_SCAN_REFRESH_MS, self._finish_initial_scan)
        self._poll_handle = self._scheduler.every(POLL_INTERVAL_MS, self._poll_tick)
        self._logger.debug("WiFi polling started.")

    def stop_polling(self) -> None:
        if self._poll_handle is not None:
            self._scheduler.cancel(self._poll_handle)
            self._poll_handle = None
            self._logger.debug("WiFi polling stopped.")
        if self._snapshot.scanning:
            self._update(scanning=False)

    def _finish_initial_scan(self) -> None:
        self.refresh()
        if self._snapshot.scanning:
            self._update(scanning=False)

    def _poll_tick(self) -> Repeat:
        if not self._client.is_enabled():
            self.stop_polling()
            return Repeat.STOP
        self._client.rescan()
        self._scheduler.after(RESCAN_REFRESH_MS, self.refresh)
        return Repeat.CONTINUE

    # -- actions on a network row -------------------------------------

    def find_network(self, ssid: str) -> Optional[WifiNetwork]:
        for network in self._snapshot.networks:
            if network.ssid == ssid:
                return network
        return None

    def activate(self, ssid: str) -> None:
        """Primary click on a network row."""
        network = self.find_network(ssid)
        if network is None:
            self._logger.warning("Ignoring click on unknown network {}.", ssid)
            return
        self._cancel_saved_check()
        if network.active:
            self.disconnect()
        elif network.saved:
            self.connect_saved(network.ssid)
        elif network.requires_password:
            self.show_password_prompt(network.ssid)
        elif network.is_open:
            self.connect_open(network.ssid)

    def connect_open(self, ssid: str) -> None:
        self._logger.info("Connecting to open network {}.", ssid)
        self._client.connect_open(ssid)
        self._scheduler.after(CONNECT_REFRESH_MS, self.refresh)

    def connect_saved(self, ssid: str) -> None:
        self._logger.info("Bringing up saved connection {}.", ssid)
        self._client.connection_up(ssid)
        self._cancel_saved_check()

        def check() -> None:
            self._saved_check = None
            if self._client.current_connection() == ssid:
                self.refresh()
                return
            # A live session or another network's prompt owns the password view.
            if self._session is not None or self._snapshot.view is WifiView.PASSWORD:
                self._logger.debug("Skipping password fallback for {}; prompt is busy.", ssid)
                return
            self._logger.info("Saved profile for {} did not activate; asking for a password.", ssid)
            self.show_password_prompt(ssid)

        self._saved_check = self._scheduler.after(SAVED_CHECK_MS, check)

    def _cancel_saved_check(self) -> None:
        self._scheduler.cancel(self._saved_check)
        self._saved_check = None

    def disconnect(self) -> None:
        device = self._client.wifi_device()
        if not device:
            # TODO: pick the device bound to the active connection instead of a fixed name on multi-adapter hosts.
            self._logger.warning(
                "Could not determine WiFi device; falling back to {}.", self._fallback_device
            )
            device = self._fallback_device
        self._logger.info("Disconnecting WiFi device {}.", device)
        self._client.disconnect_device(device)
        self._scheduler.after(DISCONNECT_REFRESH_MS, self.refresh)

    def forget(self, ssid: str) -> None:
        """Secondary action on a network row; only saved networks can be forgotten."""
        network = self.find_network(ssid)
        if network is None or not network.saved:
            return
        self._logger.info("Forgetting saved network {}.", ssid)
        self._client.connection_delete(ssid)
        self._scheduler.after(FORGET_REFRESH_MS, self.refresh)

    def toggle_power(self) -> None:
        if self._snapshot.enabled:
            self._logger.info("Turning WiFi radio off.")
            self._client.set_radio(False)
            self.stop_polling()
        else:
            self._logger.info("Turning WiFi radio on.")
            self._client.set_radio(True)
            self._scheduler.after(POWER_ON_POLL_DELAY_MS, self._resume_polling)
        self._scheduler.after(POWER_REFRESH_MS, self.refresh)

    def _resume_polling(self) -> None:
        if not self._visible:
            return
        self.start_polling()

    # -- password prompt ----------------------------------------------

    def show_password_prompt(self, ssid: str) -> None:
        self._update(
            view=WifiView.PASSWORD,
            password_target=ssid,
            password_message="",
            password_error=False,
            submit_enabled=True,
            submit_label=SUBMIT_LABEL,
        )

    def submit_password(self, password: str) -> None:
        target = self._snapshot.password_target
        if self._snapshot.view is not WifiView.PASSWORD or not target:
            return
        if self._session is not None:
            return
        try:
            validate_password(password)
        except PasswordValidationError as exc:
            self._update(password_message=str(exc), password_error=True)
            return

        self._session = WifiConnectionSession(target_ssid=target, max_attempts=self._max_attempts)
        self._update(
            password_message=AUTH_HINT,
            password_error=False,
            submit_enabled=False,
            submit_label=SUBMIT_BUSY_LABEL,
        )
        self._logger.info("Connecting to {} with a password.", target)
        self._client.connect_with_password(target, password)
        self._connect_poll = PollUntil(
            self._scheduler,
            interval_ms=PASSWORD_POLL_INTERVAL_MS,
            max_attempts=self._session.max_attempts,
            predicate=lambda: self._client.current_connection() == target,
            on_success=self._on_password_connected,
            on_exhausted=self._on_password_failed,
            on_attempt=self._record_attempt,
        )
        self._connect_poll.start()

    def _record_attempt(self, attempt: int) -> None:
        if self._session is not None:
            self._session.attempt = attempt

    def _on_password_connected(self) -> None:
        ssid = self._session.target_ssid if self._session else self._snapshot.password_target
        self._logger.info("Connected to {}.", ssid)
        self._end_session()
        self._update(
            view=WifiView.NETWORKS,
            password_target=None,
            password_message="",
            password_error=False,
            submit_enabled=True,
            submit_label=SUBMIT_LABEL,
        )
        self.refresh()

    def _on_password_failed(self) -> None:
        ssid = self._session.target_ssid if self._session else self._snapshot.password_target
        self._logger.warning("Connection to {} not confirmed after {} checks.", ssid, self._max_attempts)
        self._end_session()
        self._update(
            password_message=CONNECT_FAILED_MESSAGE,
            password_error=True,
            submit_enabled=True,
            submit_label=SUBMIT_LABEL,
        )

    def cancel_password(self) -> None:
        """Back button or Escape: leave the prompt without issuing commands."""
        self._cancel_saved_check()
        if self._connect_poll is not None:
            self._connect_poll.cancel()
        self._end_session()
        if self._snapshot.view is WifiView.NETWORKS and self._snapshot.password_target is None:
            return
        self._update(
            view=WifiView.NETWORKS,
            password_target=None,
            password_message="",
            password_error=False,
            submit_enabled=True,
            submit_label=SUBMIT_LABEL,
        )

    def _end_session(self) -> None:
        self._session = None
        self._connect_poll = None
