from dataclasses import dataclass
from datetime import timedelta

from modmqttgw.config import ModbusWatchdogConfig
from modmqttgw.modbus_watchdog import ModbusWatchdog


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@dataclass
class FakeCommand:
    ok: bool

    def executed_ok(self):
        return self.ok


def make_watchdog(period_ms=300, device_path=""):
    clock = FakeClock()
    watchdog = ModbusWatchdog(clock=clock)
    watchdog.configure(
        ModbusWatchdogConfig(
            auto_watch_period=False,
            watch_period=timedelta(milliseconds=period_ms),
            device_path=device_path,
        )
    )
    return watchdog, clock


def test_no_reconnect_within_watch_period():
    watchdog, clock = make_watchdog()
    watchdog.inspect_command(FakeCommand(False))
    clock.advance(0.2)
    assert watchdog.is_reconnect_required() is False


def test_reconnect_when_no_command_succeeds():
    watchdog, clock = make_watchdog()
    watchdog.inspect_command(FakeCommand(False))
    clock.advance(0.5)
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.current_error_period() == timedelta(milliseconds=500)
    assert watchdog.is_reconnect_required() is True


def test_successful_command_resets_error_period():
    watchdog, clock = make_watchdog()
    clock.advance(0.25)
    watchdog.inspect_command(FakeCommand(True))
    clock.advance(0.25)
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.current_error_period() == timedelta(milliseconds=250)
    assert watchdog.is_reconnect_required() is False


def test_reset_clears_error_period():
    watchdog, clock = make_watchdog()
    clock.advance(1.0)
    assert watchdog.is_reconnect_required() is True
    watchdog.reset()
    assert watchdog.current_error_period() == timedelta(0)
    assert watchdog.is_reconnect_required() is False


def test_removed_device_forces_reconnect(tmp_path):
    watchdog, _ = make_watchdog(period_ms=10_000, device_path=str(tmp_path / "missing"))
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is True
    assert watchdog.is_reconnect_required() is True
    watchdog.reset()
    assert watchdog.is_device_removed is False


def test_present_device_is_not_removed(tmp_path):
    device = tmp_path / "ttyFAKE0"
    device.write_text("")
    watchdog, _ = make_watchdog(period_ms=10_000, device_path=str(device))
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is False
    assert watchdog.is_reconnect_required() is False


def test_device_checked_at_most_every_check_period(tmp_path):
    device = tmp_path / "ttyFAKE0"
    device.write_text("")
    watchdog, clock = make_watchdog(period_ms=10_000, device_path=str(device))

    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is False

    device.unlink()
    clock.advance(0.1)
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is False

    clock.advance(0.3)
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is True


def test_without_device_path_nothing_is_checked():
    watchdog, _ = make_watchdog(period_ms=10_000)
    watchdog.inspect_command(FakeCommand(False))
    assert watchdog.is_device_removed is False
    assert watchdog.device_path == ""


def test_set_watch_period_to_twice_min_refresh():
    watchdog, clock = make_watchdog(period_ms=10_000)
    watchdog.set_watch_period(timedelta(seconds=10) * 2)
    assert watchdog.config.watch_period == timedelta(seconds=20)
    clock.advance(15)
    assert watchdog.is_reconnect_required() is False
    clock.advance(6)
    assert watchdog.is_reconnect_required() is True


def test_configure_copies_config():
    config = ModbusWatchdogConfig(watch_period=timedelta(seconds=5), device_path="/dev/fake0")
    watchdog = ModbusWatchdog(clock=FakeClock())
    watchdog.configure(config)
    watchdog.set_watch_period(timedelta(seconds=1))
    assert config.watch_period == timedelta(seconds=5)
    assert watchdog.config.watch_period == timedelta(seconds=1)
    assert watchdog.device_path == "/dev/fake0"