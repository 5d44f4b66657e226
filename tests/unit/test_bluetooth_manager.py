"""
Unit tests for BluetoothManager and BluetoothIndicator.

See tests.unit for instructions on running tests.
"""

from core.bluetooth_manager import BluetoothIndicator, BluetoothManager
from core.network_cli import BluetoothctlClient
from shared.network_models import BluetoothDevice
from tests.unit import TestCase
from tests.unit.fakes import FakeGateway, ManualScheduler, qt_app

HEADPHONES = "AA:BB:CC:DD:EE:FF"
KEYBOARD = "11:22:33:44:55:66"
PAIRED_OUTPUT = f"Device {HEADPHONES} WH-1000XM4 Headphones\nDevice {KEYBOARD} MX Keys Keyboard\n"


class BluetoothTestCase(TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.app = qt_app()

    def setUp(self) -> None:
        self.gateway = FakeGateway(
            {
                "bluetoothctl show": "Controller 00:1A:7D:DA:71:13 host\n\tPowered: yes\n",
                "bluetoothctl devices Paired": PAIRED_OUTPUT,
                f"bluetoothctl info '{HEADPHONES}'": "\tName: WH-1000XM4\n\tConnected: yes\n",
                f"bluetoothctl info '{KEYBOARD}'": "\tName: MX Keys\n\tConnected: no\n",
                "bluetoothctl devices Connected": f"Device {HEADPHONES} WH-1000XM4 Headphones\n",
            }
        )
        self.scheduler = ManualScheduler()
        self.client = BluetoothctlClient(self.gateway)

    def power_off(self) -> None:
        self.gateway.responses["bluetoothctl show"] = "Controller 00:1A:7D:DA:71:13 host\n\tPowered: no\n"


class TestBluetoothManager(BluetoothTestCase):
    """Popup state and device actions."""

    def setUp(self) -> None:
        super().setUp()
        self.manager = BluetoothManager(self.client, self.scheduler)

    def test_refresh_lists_paired_devices(self) -> None:
        self.manager.refresh()

        self.assertEqual(
            self.manager.snapshot.devices,
            [
                BluetoothDevice(mac=HEADPHONES, name="WH-1000XM4 Headphones", connected=True),
                BluetoothDevice(mac=KEYBOARD, name="MX Keys Keyboard", connected=False),
            ],
        )
        self.assertEqual(self.manager.snapshot.empty_message, "")

    def test_unpowered_skips_device_query(self) -> None:
        self.power_off()
        self.manager.refresh()

        self.assertFalse(self.manager.snapshot.powered)
        self.assertEqual(self.manager.snapshot.devices, [])
        self.assertEqual(self.manager.snapshot.empty_message, "Bluetooth is off")
        self.assertNotIn("bluetoothctl devices Paired", self.gateway.sync_calls)

    def test_no_paired_devices_message(self) -> None:
        self.gateway.responses["bluetoothctl devices Paired"] = ""
        self.manager.refresh()
        self.assertEqual(self.manager.snapshot.empty_message, "No paired devices")

    def test_visibility_refreshes(self) -> None:
        self.manager.on_visibility_change(True)
        self.assertEqual(len(self.manager.snapshot.devices), 2)

    def test_toggle_connected_device_disconnects(self) -> None:
        self.manager.refresh()
        self.manager.toggle_device(HEADPHONES)

        self.assertEqual(self.gateway.async_calls, [f"bluetoothctl disconnect '{HEADPHONES}'"])

        self.gateway.responses[f"bluetoothctl info '{HEADPHONES}'"] = "\tConnected: no\n"
        self.scheduler.advance(1000)
        self.assertFalse(self.manager.find_device(HEADPHONES).connected)

    def test_toggle_disconnected_device_connects(self) -> None:
        self.manager.refresh()
        self.manager.toggle_device(KEYBOARD)
        self.assertEqual(self.gateway.async_calls, [f"bluetoothctl connect '{KEYBOARD}'"])

    def test_toggle_power(self) -> None:
        self.manager.refresh()
        self.manager.toggle_power()

        self.assertEqual(self.gateway.async_calls, ["bluetoothctl power off"])

        self.power_off()
        self.scheduler.advance(500)
        self.assertFalse(self.manager.snapshot.powered)


class TestBluetoothIndicator(BluetoothTestCase):
    """Tray indicator polling."""

    def setUp(self) -> None:
        super().setUp()
        self.indicator = BluetoothIndicator(self.client, self.scheduler)
        self.statuses = []
        self.indicator.statusChanged.connect(self.statuses.append)

    def test_connected_status(self) -> None:
        self.indicator.start()
        status = self.indicator.status

        self.assertTrue(status.connected)
        self.assertEqual(status.icon, "󰂱")
        self.assertEqual(status.tooltip, "Bluetooth Connected")

    def test_emits_only_on_change(self) -> None:
        self.indicator.start()
        self.scheduler.advance(6000)
        self.assertEqual(len(self.statuses), 1)

        self.power_off()
        self.scheduler.advance(2000)

        self.assertEqual(len(self.statuses), 2)
        self.assertEqual(self.indicator.status.tooltip, "Bluetooth Off")
        self.assertEqual(self.indicator.status.icon, "󰂲")

    def test_stop_halts_polling(self) -> None:
        self.indicator.start()
        self.indicator.stop()
        calls = len(self.gateway.sync_calls)

        self.scheduler.advance(10_000)

        self.assertEqual(len(self.gateway.sync_calls), calls)
        self.assertFalse(self.indicator.active)
