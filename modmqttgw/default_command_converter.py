"""Default conversion of mqtt command payloads to register values."""

from __future__ import annotations

import json

_UINT16_MAX = 0xFFFF
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class ConversionError(Exception):
    """A value cannot be converted to or from register values."""


def _to_uint16(value: int) -> int:
    if 0 <= value <= _UINT16_MAX:
        return value
    raise ConversionError(f"Conversion failed, register value {value} out of range")


def _as_text(value: str | bytes | int | float) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return str(value)


class DefaultCommandConverter:
    """Writes a single integer, or a JSON array of integers for several registers."""

    def to_modbus(self, value: str | bytes | int | float, register_count: int) -> list[int]:
        if register_count > 1:
            return self.parse_as_json(_as_text(value), register_count)

        if isinstance(value, (int, float)):
            number = int(value)
        else:
            try:
                number = int(_as_text(value).strip(), 10)
            except ValueError:
                raise ConversionError("Failed to convert mqtt value to int16") from None
        if not _INT32_MIN <= number <= _INT32_MAX:
            raise ConversionError("mqtt value is out of range")
        if not 0 <= number <= _UINT16_MAX:
            raise ConversionError(f"Conversion failed, value {number} out of range")
        return [number]

    @staticmethod
    def parse_as_json(json_data: str, register_count: int) -> list[int]:
        """Parse a JSON array of exactly ``register_count`` uint16 values."""
        try:
            doc = json.loads(json_data)
        except ValueError:
            doc = None
        if not isinstance(doc, list):
            raise ConversionError(
                "Only json array is supported when converting to multiple registers"
            )
        if len(doc) != register_count:
            raise ConversionError(
                f"Wrong json array size ({len(doc)}), need {register_count}"
            )
        result = []
        for item in doc:
            if isinstance(item, bool) or not isinstance(item, int):
                raise ConversionError(f"Json array value {item!r} is not an integer")
            result.append(_to_uint16(item))
        return result