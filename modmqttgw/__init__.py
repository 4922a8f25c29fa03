"""Building blocks of a Modbus to MQTT gateway: register ranges, messages,
poll scheduling, watchdog, configuration and converter specifications."""

__version__ = "0.1.0"