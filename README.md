# modmqttgw

Building blocks for a gateway that polls Modbus devices and publishes their
register values over MQTT. The package holds the logic that does not itself
talk to a bus or a broker:

- **Register ranges** (`modmqttgw.modbus_types`): `RegisterType` (coil, bit,
  holding, input), `PublishMode` (on change, every poll, once),
  `ModbusAddressRange` and `ModbusSlaveAddressRange`, with `overlaps`,
  `is_consecutive_of`, `is_same_as` and `merge`.
- **Messages** (`modmqttgw.modbus_messages`): `MsgRegisterValues`,
  `MsgRegisterReadFailed`, `MsgRegisterWriteFailed`, `MsgRegisterPoll`,
  `MsgRegisterPollSpecification`, `MsgModbusNetworkState`,
  `MsgMqttNetworkState` and `EndWorkMessage`. A poll specification can
  `group()` adjacent registers of the same slave and type into one poll, and
  `merge()` / `merge_all()` overlapping polls; merging keeps the shortest
  refresh period and the most eager publish mode.
- **Scheduling** (`modmqttgw.modbus_scheduler`): `ModbusScheduler` tells which
  registers are due for a poll at a given monotonic time and how long to wait
  for the next one.
- **Watchdog** (`modmqttgw.modbus_watchdog`): `ModbusWatchdog` tracks the
  outcome of executed commands and says when a connection should be
  re-established: after a watch period without a successful command, or when
  the configured serial device path no longer exists.
- **Configuration** (`modmqttgw.config`, `modmqttgw.modbus_slave`):
  `ModbusNetworkConfig`, `MqttBrokerConfig`, `ModbusWatchdogConfig` and
  `ModbusSlaveConfig`, read from YAML nodes. Errors are raised as
  `ConfigurationError`, whose `line_number` points at the offending entry.
- **Converter specifications** (`modmqttgw.conv_name_parser`): splitting
  strings such as `std.divide(1000, precision=3)` into plugin, converter and
  argument text, and parsing the argument text into named values.
- **Default command conversion** (`modmqttgw.default_command_converter`):
  turning an MQTT payload into register values, a single integer for one
  register or a JSON array of integers for several.
- **Logging** (`modmqttgw.logsetup`): `Severity`, `parse_severity`,
  `set_level` and `init_logging`, which sends the `modmqttgw` logger to stderr.
- **Debug output** (`modmqttgw.debugtools`): `registers_to_str`.

## What the package does not do

There is no Modbus transport (TCP or RTU), no MQTT client, no worker that
executes poll and write commands, no converter plugins and no command to start
a gateway. The scheduler and the watchdog work on any objects that carry the
attributes they read, so they can be driven by such parts supplied elsewhere.

## Installation

Install the package with your usual Python package tool; it needs Python 3.10
or newer and depends on PyYAML only.

## Examples

Parsing a converter specification and its arguments:

```python
from modmqttgw.conv_name_parser import parse_converter_args, parse_converter_spec

spec = parse_converter_spec("std.divide(1000,precision=3)")
print(spec.plugin, spec.converter, spec.arguments)
# std divide 1000,precision=3

print(parse_converter_args(["divider", "precision"], spec.arguments))
# {'divider': '1000', 'precision': '3'}
```

Positional values take the argument names in order; `name=value` pairs may
follow them. Values may be quoted with `"` or `'`. Unknown names, repeated
names and too many values raise `ConvNameParserError`.

Merging poll requests:

```python
from datetime import timedelta
from modmqttgw.modbus_messages import MsgRegisterPoll, MsgRegisterPollSpecification
from modmqttgw.modbus_types import RegisterType

spec = MsgRegisterPollSpecification("tcptest")
spec.merge_all([
    MsgRegisterPoll(1, 10, RegisterType.HOLDING, 2, refresh=timedelta(seconds=5)),
    MsgRegisterPoll(1, 11, RegisterType.HOLDING, 2, refresh=timedelta(seconds=1)),
])
poll = spec.registers[0]
print(poll.register, poll.count, poll.refresh)
# 10 3 0:00:01
```

Scheduling polls:

```python
import time
from dataclasses import dataclass
from datetime import timedelta
from modmqttgw.modbus_scheduler import ModbusScheduler
from modmqttgw.modbus_types import PublishMode, RegisterType

@dataclass
class Poll:
    register: int
    register_type: RegisterType
    refresh: timedelta
    publish_mode: PublishMode = PublishMode.ON_CHANGE
    last_read: float = 0.0
    last_read_ok: bool = False

now = time.monotonic()
scheduler = ModbusScheduler()
scheduler.set_poll_specification(
    {1: [Poll(1, RegisterType.HOLDING, timedelta(seconds=1), last_read=now - 0.2)]}
)
due, wait = scheduler.get_registers_to_poll(now)
# due is empty, wait is about 800 ms
```

Registers with `PublishMode.ONCE` that were read successfully are never due
again. When nothing is left to poll, the wait is `timedelta.max`.

Watching a network:

```python
from datetime import timedelta
from modmqttgw.config import ModbusWatchdogConfig
from modmqttgw.modbus_watchdog import ModbusWatchdog

watchdog = ModbusWatchdog()
watchdog.configure(ModbusWatchdogConfig(watch_period=timedelta(milliseconds=300)))
# after every command: watchdog.inspect_command(command)  (command.executed_ok())
if watchdog.is_reconnect_required():
    watchdog.reset()
```

Reading a network section of a configuration file:

```python
from modmqttgw.config import ConfigurationError, ModbusNetworkConfig, load_node

node = load_node("""
name: tcptest
address: localhost
port: 501
watchdog:
  watch_period: 300ms
""")
try:
    network = ModbusNetworkConfig.from_node(node)
except ConfigurationError as err:
    print(err.line_number, err)
```

A network section needs either `device` (with `baud`, `parity`, `data_bit`
and `stop_bit`, and optionally `rtu_serial_mode`, `rtu_rts_mode` and
`rtu_rts_delay_us`) for an RTU network, or `address` and `port` for a TCP
network. Durations are written as `<number>ms`, `<number>s` or
`<number>min`; `response_timeout` and `response_data_timeout` must lie
between 0 and 999 ms. A `watchdog` section turns off the automatic watch
period. `MqttBrokerConfig.from_node` reads `host`, `port`, `keepalive`,
`username`, `password` and a `tls` section with an optional `cafile`, which
must name an existing file; with `tls` the default port is 8883 instead of
1883.

Converting command payloads:

```python
from modmqttgw.default_command_converter import DefaultCommandConverter

converter = DefaultCommandConverter()
print(converter.to_modbus("42", 1))      # [42]
print(converter.to_modbus("[1, 2]", 2))  # [1, 2]
```

Values outside 0–65535, non-integer payloads and arrays of the wrong length
raise `ConversionError`.

Choosing a log level and formatting registers:

```python
from modmqttgw.debugtools import registers_to_str
from modmqttgw.logsetup import init_logging, parse_severity

init_logging(parse_severity("debug"))   # or a number 0-6
print(registers_to_str([0x10, 0xFF]))   # [10][ff]
```

Accepted level names are `off`, `critical`, `error`, `warning`, `info`,
`debug` and `trace`; anything else raises `ValueError`. When stderr is the
systemd journal stream, log lines are written without a timestamp.

## Running the tests

The tests use pytest and live in the `tests/` directory; install the `test`
extra to get it, then run `pytest`.