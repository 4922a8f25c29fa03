"""Detects a modbus network that needs reconnecting."""

from __future__ import annotations

import dataclasses
import logging
import os
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol

from .config import ModbusWatchdogConfig
from .logsetup import TRACE_LEVEL

_log = logging.getLogger(__name__)

_DEVICE_CHECK_PERIOD = timedelta(milliseconds=300)


class ExecutedCommand(Protocol):
    def executed_ok(self) -> bool: ...


class ModbusWatchdog:
    """Asks for a reconnect after a period without a successful command,
    or when the serial device has disappeared."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._config = ModbusWatchdogConfig()
        self._last_successful_command_time = clock()
        self._last_device_check_time: float | None = None
        self._last_command_ok = True
        self._device_removed = False

    @property
    def config(self) -> ModbusWatchdogConfig:
        return self._config

    @property
    def device_path(self) -> str:
        return self._config.device_path

    @property
    def is_device_removed(self) -> bool:
        return self._device_removed

    @property
    def last_successful_command_time(self) -> float:
        return self._last_successful_command_time

    def configure(self, config: ModbusWatchdogConfig) -> None:
        self._config = dataclasses.replace(config)
        self.reset()
        _log.info("Watchdog initialized. Watch period set to %s", self._config.watch_period)
        if self._config.device_path:
            _log.debug("Monitoring %s existence", self._config.device_path)

    def set_watch_period(self, period: timedelta) -> None:
        self._config.watch_period = period
        _log.info("Watchdog period updated to %s", period)

    def inspect_command(self, command: ExecutedCommand) -> None:
        ok = command.executed_ok()
        if ok:
            self.reset()
        elif self._config.device_path and not self._device_removed:
            now = self._clock()
            check_due = (
                self._last_device_check_time is None
                or timedelta(seconds=now - self._last_device_check_time) > _DEVICE_CHECK_PERIOD
            )
            if self._last_command_ok or check_due:
                self._device_removed = not os.path.exists(self._config.device_path)
                self._last_device_check_time = now
                if self._device_removed:
                    _log.warning("Detected device %s removal", self._config.device_path)
        self._last_command_ok = ok

    def current_error_period(self) -> timedelta:
        return timedelta(seconds=self._clock() - self._last_successful_command_time)

    def is_reconnect_required(self) -> bool:
        if self._device_removed:
            return True
        error_period = self.current_error_period()
        _log.log(TRACE_LEVEL, "Watchdog: current error period is %s", error_period)
        return error_period > self._config.watch_period

    def reset(self) -> None:
        self._last_successful_command_time = self._clock()
        self._device_removed = False
        self._last_command_ok = True