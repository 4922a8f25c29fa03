"""Configuration of modbus networks and the mqtt broker, read from YAML nodes."""

from __future__ import annotations

import enum
import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TypeVar

import yaml

_log = logging.getLogger(__name__)

T = TypeVar("T")

_NULL_TAG = "tag:yaml.org,2002:null"
_MAP_TAG = "tag:yaml.org,2002:map"
_DURATION_RE = re.compile(r"\s*(-?\d+)\s*(ms|s|min)\s*")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "min": timedelta(minutes=1),
}
_MAX_RESPONSE_TIMEOUT = timedelta(milliseconds=999)
_USHORT_MAX = 0xFFFF


class ConfigurationError(Exception):
    """A configuration value is missing or invalid; ``line_number`` is 1-based or 0."""

    def __init__(self, what: str, mark: yaml.Mark | None = None) -> None:
        self.line_number = 0
        if mark is None:
            message = f"config error: {what}"
        else:
            self.line_number = mark.line + 1
            message = f"config error(line {self.line_number}): {what}"
        super().__init__(message)


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``500ms``, ``10s`` or ``1min``."""
    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"'{text}' is not a duration, use <number>ms, <number>s or <number>min")
    return int(match.group(1)) * _DURATION_UNITS[match.group(2)]


def load_node(text: str) -> yaml.Node:
    """Compose a YAML document into a node tree that keeps source positions."""
    try:
        node = yaml.compose(text)
    except yaml.YAMLError as ex:
        raise ConfigurationError(str(ex), getattr(ex, "problem_mark", None)) from None
    if node is None:
        return yaml.MappingNode(_MAP_TAG, [])
    return node


def _is_scalar(node: yaml.Node) -> bool:
    return isinstance(node, yaml.ScalarNode) and node.tag != _NULL_TAG


def _child(parent: yaml.Node | None, name: str) -> yaml.Node | None:
    if not isinstance(parent, yaml.MappingNode):
        return None
    for key, value in parent.value:
        if isinstance(key, yaml.ScalarNode) and key.value == name:
            return value
    return None


def _convert(node: yaml.Node, name: str, convert: Callable[[str], T]) -> T:
    try:
        return convert(node.value)
    except (ValueError, TypeError) as ex:
        raise ConfigurationError(f"Invalid value for {name}: {ex}", node.start_mark) from None


def read_required_value(parent: yaml.Node, name: str) -> str:
    """Return the scalar text of a required child node."""
    node = _child(parent, name)
    if node is None:
        raise ConfigurationError(f"Missing required property '{name}'", parent.start_mark)
    if not _is_scalar(node):
        raise ConfigurationError("string expected, list/null found", node.start_mark)
    return node.value


def read_required_string(parent: yaml.Node, name: str) -> str:
    """Return a required, non-empty string."""
    value = read_required_value(parent, name)
    if not value:
        raise ConfigurationError(f"{name} is an empty string", parent.start_mark)
    return value


def read_optional_value(
    parent: yaml.Node, name: str, convert: Callable[[str], T]
) -> T | None:
    """Return the converted value of an optional child node, or None if it is absent."""
    node = _child(parent, name)
    if node is None:
        return None
    if not _is_scalar(node):
        raise ConfigurationError(
            f"{name} must have a single value. List/null found", parent.start_mark
        )
    return _convert(node, name, convert)


def _required(parent: yaml.Node, name: str, convert: Callable[[str], T]) -> T:
    read_required_value(parent, name)
    node = _child(parent, name)
    return _convert(node, name, convert)


def _to_ushort(text: str) -> int:
    value = int(text)
    if not 0 <= value <= _USHORT_MAX:
        raise ValueError(f"{value} out of range 0-{_USHORT_MAX}")
    return value


def _to_char(text: str) -> str:
    if len(text) != 1:
        raise ValueError(f"'{text}' is not a single character")
    return text


class NetworkType(enum.Enum):
    RTU = "rtu"
    TCPIP = "tcpip"


class RtuRtsMode(enum.Enum):
    NONE = "none"
    UP = "up"
    DOWN = "down"


class RtuSerialMode(enum.Enum):
    UNSPECIFIED = "unspecified"
    RS232 = "rs232"
    RS485 = "rs485"


def _enum_parser(enum_type: type[enum.Enum]) -> Callable[[str], enum.Enum]:
    def parse(text: str) -> enum.Enum:
        try:
            return enum_type(text.strip().lower())
        except ValueError:
            valid = ",".join(member.value for member in enum_type)
            raise ValueError(f"'{text}' is not one of {valid}") from None

    return parse


@dataclass
class ModbusWatchdogConfig:
    """When ``auto_watch_period`` is set, the period follows the poll specification."""

    auto_watch_period: bool = True
    watch_period: timedelta = timedelta(seconds=10)
    device_path: str = ""


@dataclass
class ModbusNetworkConfig:
    name: str = ""
    type: NetworkType = NetworkType.TCPIP
    response_timeout: timedelta = timedelta(milliseconds=500)
    response_data_timeout: timedelta = timedelta(0)
    delay_before_command: timedelta | None = None
    delay_before_first_command: timedelta | None = None
    max_write_retry_count: int = 2
    max_read_retry_count: int = 1
    # RTU only
    device: str = ""
    baud: int = 0
    parity: str = ""
    data_bit: int = 0
    stop_bit: int = 0
    rtu_serial_mode: RtuSerialMode = RtuSerialMode.UNSPECIFIED
    rts_mode: RtuRtsMode = RtuRtsMode.NONE
    rts_delay_us: int = 0
    # TCP only
    address: str = ""
    port: int = 0
    watchdog: ModbusWatchdogConfig = field(default_factory=ModbusWatchdogConfig)

    @classmethod
    def from_node(cls, node: yaml.Node) -> ModbusNetworkConfig:
        config = cls(name=read_required_string(node, "name"))

        for key in ("response_timeout", "response_data_timeout"):
            value = read_optional_value(node, key, parse_duration)
            if value is None:
                continue
            if value < timedelta(0) or value > _MAX_RESPONSE_TIMEOUT:
                raise ConfigurationError(
                    f"{key} value must be in range 0-999ms", _child(node, key).start_mark
                )
            setattr(config, key, value)

        delay = read_optional_value(node, "min_delay_before_poll", parse_duration)
        if delay is not None:
            _log.warning(
                "'min_delay_before_poll' is deprecated and will be removed in future "
                "releases. Rename it to 'delay_before_command'"
            )
            config.delay_before_command = delay
        delay = read_optional_value(node, "delay_before_command", parse_duration)
        if delay is not None:
            config.delay_before_command = delay
        delay = read_optional_value(node, "delay_before_first_command", parse_duration)
        if delay is not None:
            config.delay_before_first_command = delay

        retries = read_optional_value(node, "write_retries", _to_ushort)
        if retries is not None:
            config.max_write_retry_count = retries
        retries = read_optional_value(node, "read_retries", _to_ushort)
        if retries is not None:
            config.max_read_retry_count = retries

        if _child(node, "device") is not None:
            config.type = NetworkType.RTU
            config.device = read_required_string(node, "device")
            config.baud = _required(node, "baud", int)
            config.parity = _required(node, "parity", _to_char)
            config.data_bit = _required(node, "data_bit", int)
            config.stop_bit = _required(node, "stop_bit", int)
            serial_mode = read_optional_value(
                node, "rtu_serial_mode", _enum_parser(RtuSerialMode)
            )
            if serial_mode is not None:
                config.rtu_serial_mode = serial_mode
            rts_mode = read_optional_value(node, "rtu_rts_mode", _enum_parser(RtuRtsMode))
            if rts_mode is not None:
                config.rts_mode = rts_mode
            rts_delay = read_optional_value(node, "rtu_rts_delay_us", int)
            if rts_delay is not None:
                config.rts_delay_us = rts_delay
            config.watchdog.device_path = config.device
        elif _child(node, "address") is not None:
            config.type = NetworkType.TCPIP
            config.address = read_required_string(node, "address")
            config.port = _required(node, "port", int)
        else:
            raise ConfigurationError(
                "Cannot determine modbus network type: missing 'device' or 'address'",
                node.start_mark,
            )

        watchdog = _child(node, "watchdog")
        if watchdog is not None:
            period = read_optional_value(watchdog, "watch_period", parse_duration)
            if period is not None:
                config.watchdog.watch_period = period
            config.watchdog.auto_watch_period = False

        return config


@dataclass
class MqttBrokerConfig:
    host: str = ""
    port: int = 1883
    keepalive: int = 60
    username: str = ""
    password: str = ""
    client_id: str = ""
    tls: bool = False
    cafile: str = ""

    @classmethod
    def from_node(cls, node: yaml.Node) -> MqttBrokerConfig:
        config = cls(host=read_required_string(node, "host"))
        tls = _child(node, "tls")
        if tls is not None:
            config.tls = True
            config.port = 8883
            cafile = read_optional_value(tls, "cafile", str)
            if cafile is not None:
                config.cafile = cafile
                if not os.path.exists(cafile) or os.path.isdir(cafile):
                    raise ConfigurationError(
                        f"CA file '{cafile}' is not a readable file",
                        _child(tls, "cafile").start_mark,
                    )
        port = read_optional_value(node, "port", int)
        if port is not None:
            config.port = port
        keepalive = read_optional_value(node, "keepalive", int)
        if keepalive is not None:
            config.keepalive = keepalive
        username = read_optional_value(node, "username", str)
        if username is not None:
            config.username = username
        secret = read_optional_value(node, "password", str)
        if secret is not None:
            config.password = secret
        return config

    def is_same_as(self, other: MqttBrokerConfig) -> bool:
        """Compare connection settings, ignoring the client id."""
        return (
            self.host == other.host
            and self.port == other.port
            and self.keepalive == other.keepalive
            and self.username == other.username
            and self.password == other.password
            and self.tls == other.tls
            and self.cafile == other.cafile
        )