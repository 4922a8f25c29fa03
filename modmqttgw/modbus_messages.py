"""Messages exchanged with the modbus worker."""

from __future__ import annotations

import copy
import logging
import time
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import timedelta

from .debugtools import DebugError
from .modbus_types import ModbusSlaveAddressRange, PublishMode, RegisterType

_log = logging.getLogger(__name__)


class MsgRegisterValues(ModbusSlaveAddressRange):
    """Register values read from, or to be written to, a slave."""

    def __init__(
        self,
        slave_id: int,
        register_type: RegisterType,
        register: int,
        registers: Sequence[int],
        command_id: int = 0,
    ) -> None:
        super().__init__(slave_id, register, register_type, len(registers))
        self.registers = list(registers)
        self.creation_time = time.monotonic()
        self.command_id = command_id

    def has_command_id(self) -> bool:
        return self.command_id != 0


class MsgRegisterReadFailed(ModbusSlaveAddressRange):
    """A register range could not be read."""

    def __init__(
        self, slave_id: int, register_type: RegisterType, register: int, count: int
    ) -> None:
        super().__init__(slave_id, register, register_type, count)


class MsgRegisterWriteFailed(ModbusSlaveAddressRange):
    """A register range could not be written."""

    def __init__(
        self, slave_id: int, register_type: RegisterType, register: int, count: int
    ) -> None:
        super().__init__(slave_id, register, register_type, count)


class MsgRegisterPoll(ModbusSlaveAddressRange):
    """A register range to poll. ``refresh`` of None means no poll period set."""

    def __init__(
        self,
        slave_id: int,
        register: int,
        register_type: RegisterType,
        count: int = 1,
        refresh: timedelta | None = None,
        publish_mode: PublishMode = PublishMode.ON_CHANGE,
    ) -> None:
        if register < 0:
            raise DebugError("Invalid register number")
        if count <= 0:
            raise DebugError("Count cannot be 0 or negative")
        super().__init__(slave_id, register, register_type, count)
        self.refresh = refresh
        self.publish_mode = publish_mode

    def merge(self, other: MsgRegisterPoll) -> None:
        """Extend the range, keep the shortest refresh and the most eager publish mode."""
        super().merge(other)

        if self.refresh is None:
            self.refresh = other.refresh
        elif other.refresh is not None and self.refresh > other.refresh:
            self.refresh = other.refresh
            _log.debug(
                "Setting refresh %s on existing register %d", self.refresh, self.register
            )

        if self.publish_mode is PublishMode.ON_CHANGE:
            if other.publish_mode is PublishMode.EVERY_POLL:
                self.publish_mode = other.publish_mode
        elif self.publish_mode is PublishMode.ONCE:
            self.publish_mode = other.publish_mode

    def is_same_as(self, other: MsgRegisterPoll) -> bool:
        return super().is_same_as(other) and self.slave_id == other.slave_id


class MsgRegisterPollSpecification:
    """The set of registers a network should poll."""

    def __init__(self, network_name: str) -> None:
        self.network_name = network_name
        self.registers: list[MsgRegisterPoll] = []

    def group(self) -> None:
        """Join consecutive registers of the same slave and type into single polls.

        Overlapping ranges are not joined.
        """
        by_slave: dict[int, dict[RegisterType, list[MsgRegisterPoll]]] = defaultdict(
            lambda: defaultdict(list)
        )
        for reg in self.registers:
            by_slave[reg.slave_id][reg.register_type].append(copy.copy(reg))

        result: list[MsgRegisterPoll] = []
        for slave_id in sorted(by_slave):
            types = by_slave[slave_id]
            for reg_type in sorted(types):
                regs = sorted(types[reg_type], key=lambda r: r.register)
                grouped = [regs[0]]
                for reg in regs[1:]:
                    if grouped[-1].is_consecutive_of(reg):
                        grouped[-1].merge(reg)
                    else:
                        grouped.append(reg)
                result.extend(grouped)
        self.registers = result

    def merge(self, poll: MsgRegisterPoll) -> None:
        """Merge ``poll`` with every overlapping range of the same slave, or add it."""
        overlapped = [
            reg for reg in self.registers
            if poll.slave_id == reg.slave_id and poll.overlaps(reg)
        ]
        if not overlapped:
            _log.debug(
                "Adding new register %d.%d (%d) type=%d, refresh=%s on network %s",
                poll.slave_id, poll.register, poll.count, int(poll.register_type),
                poll.refresh, self.network_name,
            )
            self.registers.append(copy.copy(poll))
            return

        self.registers = [reg for reg in self.registers if reg not in overlapped]
        merged = copy.copy(poll)
        for reg in overlapped:
            merged.merge(reg)
        self.registers.append(merged)

    def merge_all(self, polls: Iterable[MsgRegisterPoll]) -> None:
        for poll in polls:
            self.merge(poll)


@dataclass
class MsgModbusNetworkState:
    network_name: str
    is_up: bool


@dataclass
class MsgMqttNetworkState:
    is_up: bool


@dataclass
class EndWorkMessage:
    """Tells the modbus worker to stop."""