"""Decides which registers are due for polling and how long to wait for the next poll."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Protocol

from .logsetup import TRACE_LEVEL
from .modbus_types import PublishMode, RegisterType

_log = logging.getLogger(__name__)


class PollRegister(Protocol):
    """What the scheduler needs to know about a polled register.

    ``last_read`` is a monotonic time point in seconds.
    """

    register: int
    register_type: RegisterType
    refresh: timedelta
    publish_mode: PublishMode
    last_read: float
    last_read_ok: bool


RegisterMap = dict[int, list[PollRegister]]


class ModbusScheduler:
    """Holds the poll specification of a network, grouped by slave id."""

    def __init__(self) -> None:
        self._register_map: RegisterMap = {}

    def set_poll_specification(
        self, register_map: Mapping[int, Sequence[PollRegister]]
    ) -> None:
        self._register_map = {slave: list(regs) for slave, regs in register_map.items()}

    def poll_specification(self) -> RegisterMap:
        return self._register_map

    def get_registers_to_poll(self, time_point: float) -> tuple[RegisterMap, timedelta]:
        """Return the registers due at ``time_point`` and the wait until the next poll.

        The wait is ``timedelta.max`` when nothing is left to poll.
        """
        to_poll: RegisterMap = {}
        wait = timedelta.max

        for slave_id in sorted(self._register_map):
            for reg in self._register_map[slave_id]:
                if reg.publish_mode is PublishMode.ONCE and reg.last_read_ok:
                    continue

                time_passed = timedelta(seconds=time_point - reg.last_read)
                time_to_poll = reg.refresh

                if time_passed >= reg.refresh:
                    _log.log(
                        TRACE_LEVEL,
                        "Register %d.%d added, last read %s ago",
                        slave_id, reg.register, time_passed,
                    )
                    to_poll.setdefault(slave_id, []).append(reg)
                else:
                    time_to_poll = reg.refresh - time_passed

                if wait > time_to_poll:
                    wait = time_to_poll
                    _log.log(
                        TRACE_LEVEL,
                        "Wait duration set to %s as next poll for register %d.%d",
                        time_to_poll, slave_id, reg.register,
                    )
        return to_poll, wait

    def get_min_poll_time(self) -> timedelta:
        """Return the shortest refresh period, or ``timedelta.max`` if there is none."""
        return min(
            (reg.refresh for regs in self._register_map.values() for reg in regs),
            default=timedelta.max,
        )

    def remove(
        self, slave_id: int, register_number: int, register_type: RegisterType
    ) -> None:
        """Drop the first matching register of a slave; drop the slave when it is empty."""
        regs = self._register_map.get(slave_id)
        if regs is None:
            return
        for index, reg in enumerate(regs):
            if reg.register == register_number and reg.register_type == register_type:
                del regs[index]
                if not regs:
                    del self._register_map[slave_id]
                return