"""Per-slave settings of a modbus network."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

import yaml

from .config import parse_duration, read_optional_value

_log = logging.getLogger(__name__)

_USHORT_MAX = 0xFFFF


def _to_ushort(text: str) -> int:
    value = int(text)
    if not 0 <= value <= _USHORT_MAX:
        raise ValueError(f"{value} out of range 0-{_USHORT_MAX}")
    return value


@dataclass
class ModbusSlaveConfig:
    address: int
    slave_name: str = ""
    delay_before_command: timedelta | None = None
    delay_before_first_command: timedelta | None = None
    max_write_retry_count: int = 0
    max_read_retry_count: int = 0

    @classmethod
    def from_node(cls, address: int, node: yaml.Node) -> ModbusSlaveConfig:
        config = cls(address=address)
        name = read_optional_value(node, "name", str)
        if name is not None:
            config.slave_name = name

        delay = read_optional_value(node, "delay_before_poll", parse_duration)
        if delay is not None:
            _log.warning(
                "'delay_before_poll' is deprecated and will be removed in future "
                "releases. Rename it to 'delay_before_command'"
            )
            config.delay_before_command = delay
        delay = read_optional_value(node, "delay_before_command", parse_duration)
        if delay is not None:
            config.delay_before_command = delay

        delay = read_optional_value(node, "delay_before_first_poll", parse_duration)
        if delay is not None:
            _log.warning(
                "'delay_before_first_poll' is deprecated and will be removed in future "
                "releases. Rename it to 'delay_before_first_command'"
            )
            config.delay_before_first_command = delay
        delay = read_optional_value(node, "delay_before_first_command", parse_duration)
        if delay is not None:
            config.delay_before_first_command = delay

        retries = read_optional_value(node, "write_retries", _to_ushort)
        if retries is not None:
            config.max_write_retry_count = retries
        retries = read_optional_value(node, "read_retries", _to_ushort)
        if retries is not None:
            config.max_read_retry_count = retries
        return config