"""
Unit tests for WifiManager.

Tests cover:
- Refresh and the popup-scoped polling lifecycle
- Row activation for open, saved, secured and active networks
- Password validation and the bounded connection check
- Cancelling a pending connection
- Forget and radio power actions

See tests.unit for instructions on running tests.
"""

from core.network_cli import (
    ACTIVE_CONNECTIONS_COMMAND,
    DEVICE_STATUS_COMMAND,
    RADIO_STATUS_COMMAND,
    RESCAN_COMMAND,
    SAVED_CONNECTIONS_COMMAND,
    WIFI_LIST_COMMAND,
    NmcliClient,
)
from core.wifi_manager import (
    AUTH_HINT,
    CONNECT_FAILED_MESSAGE,
    SUBMIT_BUSY_LABEL,
    SUBMIT_LABEL,
    WifiManager,
    WifiView,
)
from tests.unit import TestCase
from tests.unit.fakes import FakeGateway, ManualScheduler, qt_app

SCAN_OUTPUT = "Office:40:WPA2:no\nHome:80:WPA2:no\nCafe:60::no\n"
SAVED_OUTPUT = "Home:802-11-wireless\nWired connection 1:802-3-ethernet\n"


class WifiManagerTestCase(TestCase):
    """Shared fixture: radio on, three visible networks, Home saved."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.app = qt_app()

    def setUp(self) -> None:
        self.gateway = FakeGateway(
            {
                RADIO_STATUS_COMMAND: "enabled\n",
                ACTIVE_CONNECTIONS_COMMAND: "",
                WIFI_LIST_COMMAND: SCAN_OUTPUT,
                SAVED_CONNECTIONS_COMMAND: SAVED_OUTPUT,
            }
        )
        self.scheduler = ManualScheduler()
        self.manager = WifiManager(NmcliClient(self.gateway), self.scheduler, fallback_device="wlp5s0")
        self.changes = 0
        self.manager.changed.connect(self._count_change)

    def _count_change(self) -> None:
        self.changes += 1

    def set_active(self, ssid: str) -> None:
        self.gateway.responses[ACTIVE_CONNECTIONS_COMMAND] = f"{ssid}:802-11-wireless:wlan0\n"


class TestRefreshAndPolling(WifiManagerTestCase):
    """Discovery tests."""

    def test_refresh_builds_ranked_list(self) -> None:
        self.manager.refresh()
        snapshot = self.manager.snapshot

        self.assertTrue(snapshot.enabled)
        self.assertEqual([n.ssid for n in snapshot.networks], ["Home", "Cafe", "Office"])
        self.assertTrue(snapshot.networks[0].saved)
        self.assertEqual(snapshot.connection_label, "Not connected")
        self.assertEqual(self.changes, 1)

    def test_refresh_reports_current_connection(self) -> None:
        self.set_active("Home")
        self.manager.refresh()
        self.assertEqual(self.manager.snapshot.connection_label, "Connected: Home")

    def test_failed_scan_gives_empty_list(self) -> None:
        del self.gateway.responses[WIFI_LIST_COMMAND]
        self.manager.refresh()

        self.assertEqual(self.manager.snapshot.networks, [])
        self.assertEqual(self.manager.snapshot.empty_message, "No networks found")
        self.assertNotIn(SAVED_CONNECTIONS_COMMAND, self.gateway.sync_calls)

    def test_polling_runs_only_while_visible(self) -> None:
        self.manager.on_visibility_change(True)
        self.assertTrue(self.manager.polling)
        self.assertTrue(self.manager.snapshot.scanning)
        self.assertEqual(self.gateway.async_calls, [RESCAN_COMMAND])

        self.scheduler.advance(1500)
        self.assertFalse(self.manager.snapshot.scanning)

        self.scheduler.advance(3500)
        self.assertEqual(self.gateway.async_calls.count(RESCAN_COMMAND), 2)

        self.manager.on_visibility_change(False)
        self.scheduler.advance(60_000)
        self.assertFalse(self.manager.polling)
        self.assertEqual(self.gateway.async_calls.count(RESCAN_COMMAND), 2)

    def test_no_polling_when_radio_disabled(self) -> None:
        self.gateway.responses[RADIO_STATUS_COMMAND] = "disabled\n"
        self.manager.on_visibility_change(True)

        self.assertFalse(self.manager.polling)
        self.assertEqual(self.gateway.async_calls, [])
        self.assertEqual(self.manager.snapshot.empty_message, "WiFi is disabled")

    def test_start_polling_twice_keeps_one_timer(self) -> None:
        self.manager.start_polling()
        self.manager.start_polling()
        self.scheduler.advance(5000)
        # one initial rescan and one poll tick
        self.assertEqual(self.gateway.async_calls.count(RESCAN_COMMAND), 2)


class TestActivate(WifiManagerTestCase):
    """Primary click on a network row."""

    def setUp(self) -> None:
        super().setUp()
        self.manager.refresh()

    def test_open_network_connects_directly(self) -> None:
        self.manager.activate("Cafe")
        self.assertEqual(self.gateway.async_calls, ["nmcli device wifi connect 'Cafe'"])
        self.assertIs(self.manager.snapshot.view, WifiView.NETWORKS)

    def test_secured_network_shows_prompt(self) -> None:
        self.manager.activate("Office")
        snapshot = self.manager.snapshot

        self.assertIs(snapshot.view, WifiView.PASSWORD)
        self.assertEqual(snapshot.password_target, "Office")
        self.assertEqual(snapshot.password_title, 'Connect to "Office"')
        self.assertEqual(self.gateway.async_calls, [])

    def test_saved_network_brought_up(self) -> None:
        self.manager.activate("Home")
        self.set_active("Home")
        self.scheduler.advance(2000)

        self.assertEqual(self.gateway.async_calls, ["nmcli connection up 'Home'"])
        self.assertIs(self.manager.snapshot.view, WifiView.NETWORKS)
        self.assertEqual(self.manager.snapshot.current_connection, "Home")

    def test_saved_network_falls_back_to_prompt(self) -> None:
        """A saved profile that does not activate asks for a password."""
        self.manager.activate("Home")
        self.scheduler.advance(2000)

        self.assertIs(self.manager.snapshot.view, WifiView.PASSWORD)
        self.assertEqual(self.manager.snapshot.password_target, "Home")

    def test_active_network_disconnects_device(self) -> None:
        self.gateway.responses[WIFI_LIST_COMMAND] = "Home:80:WPA2:yes\n"
        self.gateway.responses[DEVICE_STATUS_COMMAND] = "eth0:ethernet\nwlan0:wifi\n"
        self.manager.refresh()

        self.manager.activate("Home")

        self.assertEqual(self.gateway.async_calls, ["nmcli device disconnect 'wlan0'"])

    def test_disconnect_uses_fallback_device(self) -> None:
        self.manager.disconnect()
        self.assertEqual(self.gateway.async_calls, ["nmcli device disconnect 'wlp5s0'"])

    def test_unknown_network_ignored(self) -> None:
        self.manager.activate("Nowhere")
        self.assertEqual(self.gateway.async_calls, [])

    def test_ssid_with_quote_is_escaped(self) -> None:
        self.gateway.responses[WIFI_LIST_COMMAND] = "Bob's Hotspot:70::no\n"
        self.manager.refresh()

        self.manager.activate("Bob's Hotspot")

        self.assertEqual(self.gateway.async_calls, ["nmcli device wifi connect 'Bob'\\''s Hotspot'"])


class TestPasswordFlow(WifiManagerTestCase):
    """Password prompt and bounded connection checking."""

    def setUp(self) -> None:
        super().setUp()
        self.manager.refresh()
        self.manager.activate("Office")

    def test_short_password_rejected_locally(self) -> None:
        self.manager.submit_password("short")
        snapshot = self.manager.snapshot

        self.assertEqual(snapshot.password_message, "Password must be at least 8 characters")
        self.assertTrue(snapshot.password_error)
        self.assertIsNone(self.manager.session)
        self.assertEqual(self.gateway.async_calls, [])

    def test_submit_issues_single_connect(self) -> None:
        self.manager.submit_password("correct horse")
        snapshot = self.manager.snapshot

        self.assertEqual(
            self.gateway.async_calls,
            ["nmcli device wifi connect 'Office' password 'correct horse'"],
        )
        self.assertEqual(snapshot.password_message, AUTH_HINT)
        self.assertFalse(snapshot.submit_enabled)
        self.assertEqual(snapshot.submit_label, SUBMIT_BUSY_LABEL)
        self.assertEqual(self.manager.session.target_ssid, "Office")
        # only the connection check is pending
        self.assertEqual(self.scheduler.pending, 1)

    def test_second_submit_ignored_while_pending(self) -> None:
        self.manager.submit_password("correct horse")
        self.manager.submit_password("another guess")
        self.assertEqual(len(self.gateway.async_calls), 1)

    def test_connection_confirmed_on_third_check(self) -> None:
        self.manager.submit_password("correct horse")
        self.scheduler.advance(4000)
        self.assertEqual(self.manager.session.attempt, 2)

        self.set_active("Office")
        self.scheduler.advance(2000)
        snapshot = self.manager.snapshot

        self.assertIsNone(self.manager.session)
        self.assertIs(snapshot.view, WifiView.NETWORKS)
        self.assertIsNone(snapshot.password_target)
        self.assertEqual(snapshot.current_connection, "Office")
        self.assertEqual(self.scheduler.pending, 0)

    def test_failure_after_five_checks(self) -> None:
        before = self.gateway.sync_count(ACTIVE_CONNECTIONS_COMMAND)
        self.manager.submit_password("wrong password")

        self.scheduler.advance(60_000)
        snapshot = self.manager.snapshot

        self.assertEqual(self.gateway.sync_count(ACTIVE_CONNECTIONS_COMMAND) - before, 5)
        self.assertIs(snapshot.view, WifiView.PASSWORD)
        self.assertEqual(snapshot.password_message, CONNECT_FAILED_MESSAGE)
        self.assertTrue(snapshot.password_error)
        self.assertTrue(snapshot.submit_enabled)
        self.assertEqual(snapshot.submit_label, SUBMIT_LABEL)
        self.assertIsNone(self.manager.session)

    def test_retry_after_failure_allowed(self) -> None:
        self.manager.submit_password("wrong password")
        self.scheduler.advance(60_000)

        self.manager.submit_password("correct horse")

        self.assertEqual(len(self.gateway.async_calls), 2)
        self.assertIsNotNone(self.manager.session)

    def test_cancel_stops_pending_checks(self) -> None:
        self.manager.submit_password("correct horse")
        self.scheduler.advance(2000)
        checks = self.gateway.sync_count(ACTIVE_CONNECTIONS_COMMAND)

        self.manager.cancel_password()
        self.scheduler.advance(60_000)
        snapshot = self.manager.snapshot

        self.assertEqual(self.gateway.sync_count(ACTIVE_CONNECTIONS_COMMAND), checks)
        self.assertIsNone(self.manager.session)
        self.assertIs(snapshot.view, WifiView.NETWORKS)
        self.assertEqual(snapshot.password_message, "")

    def test_submit_ignored_outside_prompt(self) -> None:
        self.manager.cancel_password()
        self.manager.submit_password("correct horse")
        self.assertEqual(self.gateway.async_calls, [])


class TestForgetAndPower(WifiManagerTestCase):
    """Secondary actions and radio control."""

    def setUp(self) -> None:
        super().setUp()
        self.manager.refresh()

    def test_forget_saved_network(self) -> None:
        self.manager.forget("Home")
        self.assertEqual(self.gateway.async_calls, ["nmcli connection delete 'Home'"])

    def test_forget_unsaved_network_ignored(self) -> None:
        self.manager.forget("Cafe")
        self.assertEqual(self.gateway.async_calls, [])

    def test_power_off_stops_polling(self) -> None:
        self.manager.start_polling()

        self.manager.toggle_power()

        self.assertIn("nmcli radio wifi off", self.gateway.async_calls)
        self.assertFalse(self.manager.polling)

    def test_power_on_restarts_polling(self) -> None:
        self.gateway.responses[RADIO_STATUS_COMMAND] = "disabled\n"
        self.manager.on_visibility_change(True)

        self.manager.toggle_power()
        self.gateway.responses[RADIO_STATUS_COMMAND] = "enabled\n"
        self.scheduler.advance(1000)

        self.assertIn("nmcli radio wifi on", self.gateway.async_calls)
        self.assertTrue(self.manager.polling)

    def test_power_on_after_hide_does_not_poll(self) -> None:
        """Closing the popup before the delayed restart keeps polling off."""
        self.gateway.responses[RADIO_STATUS_COMMAND] = "disabled\n"
        self.manager.on_visibility_change(True)

        self.manager.toggle_power()
        self.gateway.responses[RADIO_STATUS_COMMAND] = "enabled\n"
        self.manager.on_visibility_change(False)
        self.scheduler.advance(60_000)

        self.assertFalse(self.manager.polling)
        self.assertNotIn(RESCAN_COMMAND, self.gateway.async_calls)


class TestSavedProfileCheck(WifiManagerTestCase):
    """The delayed check after bringing up a saved profile."""

    def setUp(self) -> None:
        super().setUp()
        self.manager.refresh()

    def test_other_network_prompt_not_overwritten(self) -> None:
        """A pending saved check does not hijack another network's password session."""
        self.manager.activate("Home")
        self.manager.activate("Office")
        self.manager.submit_password("correct horse")

        self.scheduler.advance(2000)
        snapshot = self.manager.snapshot

        self.assertEqual(snapshot.password_target, "Office")
        self.assertEqual(self.manager.session.target_ssid, "Office")
        self.assertFalse(snapshot.submit_enabled)

    def test_cancel_drops_pending_check(self) -> None:
        self.manager.activate("Home")
        self.manager.cancel_password()

        self.scheduler.advance(2000)

        self.assertIs(self.manager.snapshot.view, WifiView.NETWORKS)
        self.assertIsNone(self.manager.snapshot.password_target)

    def test_hide_drops_pending_check(self) -> None:
        self.manager.activate("Home")
        self.manager.on_visibility_change(False)

        self.scheduler.advance(2000)

        self.assertIs(self.manager.snapshot.view, WifiView.NETWORKS)
        self.assertEqual(self.scheduler.pending, 0)
