from datetime import timedelta

import pytest

from modmqttgw.config import ConfigurationError, load_node
from modmqttgw.modbus_slave import ModbusSlaveConfig


def test_empty_node_gives_defaults():
    config = ModbusSlaveConfig.from_node(3, load_node(""))
    assert config.address == 3
    assert config.slave_name == ""
    assert config.delay_before_command is None
    assert config.delay_before_first_command is None
    assert config.max_read_retry_count == 0
    assert config.max_write_retry_count == 0


def test_all_fields_read():
    text = (
        "name: meter\ndelay_before_command: 20ms\n"
        "delay_before_first_command: 1s\nwrite_retries: 4\nread_retries: 2\n"
    )
    config = ModbusSlaveConfig.from_node(7, load_node(text))
    assert config.slave_name == "meter"
    assert config.delay_before_command == timedelta(milliseconds=20)
    assert config.delay_before_first_command == timedelta(seconds=1)
    assert config.max_write_retry_count == 4
    assert config.max_read_retry_count == 2


def test_deprecated_names_still_apply():
    text = "delay_before_poll: 15ms\ndelay_before_first_poll: 30ms\n"
    config = ModbusSlaveConfig.from_node(1, load_node(text))
    assert config.delay_before_command == timedelta(milliseconds=15)
    assert config.delay_before_first_command == timedelta(milliseconds=30)


def test_new_names_override_deprecated():
    text = (
        "delay_before_poll: 15ms\ndelay_before_command: 25ms\n"
        "delay_before_first_poll: 30ms\ndelay_before_first_command: 40ms\n"
    )
    config = ModbusSlaveConfig.from_node(1, load_node(text))
    assert config.delay_before_command == timedelta(milliseconds=25)
    assert config.delay_before_first_command == timedelta(milliseconds=40)


def test_list_value_is_rejected():
    with pytest.raises(ConfigurationError, match="single value"):
        ModbusSlaveConfig.from_node(1, load_node("read_retries: [1, 2]\n"))


def test_invalid_retry_count_is_rejected():
    with pytest.raises(ConfigurationError, match="write_retries"):
        ModbusSlaveConfig.from_node(1, load_node("write_retries: -1\n"))


def test_invalid_duration_is_rejected():
    with pytest.raises(ConfigurationError, match="delay_before_command"):
        ModbusSlaveConfig.from_node(1, load_node("delay_before_command: soon\n"))