"""Parsing of converter specifications such as ``std.divide(1000, precision=3)``."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass

_RE_CONV = re.compile(r"([a-z0-9]+)\.([a-z0-9]+)\s?\((.*)\)")


class ConvNameParserError(Exception):
    """A converter specification or its argument list is malformed."""


@dataclass
class ConverterSpecification:
    plugin: str
    converter: str
    arguments: str


def parse_converter_spec(spec: str) -> ConverterSpecification:
    """Split ``plugin.converter(arguments)`` into its three parts."""
    match = _RE_CONV.fullmatch(spec.strip())
    if match is None:
        raise ConvNameParserError(
            "Supply converter spec in form: plugin.converter(value1, param=value2, …)"
        )
    return ConverterSpecification(*match.groups())


class _State(enum.Enum):
    SCAN = enum.auto()
    ARGVALUE = enum.auto()
    ESCAPE = enum.auto()


class _ArgParser:
    def __init__(self, arg_names: Iterable[str]) -> None:
        self._arg_names = list(arg_names)
        self._positional = iter(self._arg_names)
        self._use_arg_order = True
        self._states = [_State.SCAN]
        self._name = ""
        self._value = ""
        self._values: dict[str, str] = {}

    def _set_arg_value(self) -> None:
        try:
            if self._name:
                self._use_arg_order = False
            else:
                if not self._use_arg_order:
                    raise ConvNameParserError(
                        "Cannot use positional argument after named argument "
                        f"{len(self._arg_names)}"
                    )
                name = next(self._positional, None)
                if name is None:
                    raise ConvNameParserError(
                        f"Too many arguments provided, need {len(self._arg_names)}"
                    )
                self._name = name

            if self._name in self._values:
                raise ConvNameParserError(f"{self._name} already set")
            if self._name not in self._arg_names:
                raise ConvNameParserError(f"Unknown argument {self._name}")

            self._values[self._name] = self._value
            self._name = ""
            self._value = ""
        except ConvNameParserError as ex:
            raise ConvNameParserError(
                f"Error setting argument {self._name}:{ex}"
            ) from None

    def _escaped(self, char: str) -> None:
        self._value += char
        self._states.pop()

    def parse(self, text: str) -> dict[str, str]:
        delimiter = ""
        for char in text:
            state = self._states[-1]
            if state is _State.ESCAPE:
                self._escaped(char)
            elif char == "\\":
                if state is _State.SCAN:
                    self._states.append(_State.ESCAPE)
                else:
                    self._value += char
            elif char == "=":
                if state is _State.ARGVALUE:
                    raise ConvNameParserError(
                        f"Name for argument {len(self._values) + 1} cannot be quoted"
                    )
                if not self._value:
                    raise ConvNameParserError(
                        f"Missing name for argument {len(self._values) + 1}"
                    )
                if self._name:
                    raise ConvNameParserError(
                        f"Name for argument {len(self._values) + 1} "
                        f"already set to {self._name}"
                    )
                self._name = self._value
                self._value = ""
            elif char == ",":
                if state is _State.ARGVALUE:
                    self._value += char
                else:
                    if not self._value:
                        raise ConvNameParserError(
                            f"Argument {len(self._values) + 1} is empty"
                        )
                    self._set_arg_value()
            elif char in "\"'":
                if state is _State.SCAN:
                    self._states.append(_State.ARGVALUE)
                    delimiter = char
                elif char == delimiter:
                    self._states.pop()
                else:
                    self._value += char
            elif char == " ":
                if state is _State.ARGVALUE:
                    self._value += char
            else:
                self._value += char

        state = self._states[-1]
        if state is _State.ARGVALUE:
            raise ConvNameParserError(
                f"Argument {len(self._values)} is an unterminated string"
            )
        if state is _State.ESCAPE:
            raise ConvNameParserError(
                f"Argument {len(self._values)} has an invalid escape sequence"
            )
        if self._value:
            self._set_arg_value()
        return self._values


def parse_converter_args(arg_names: Iterable[str], arguments: str) -> dict[str, str]:
    """Parse a converter argument list against the converter's argument names.

    Positional values are assigned in the order of ``arg_names``; named values
    (``name=value``) may follow them. Returns the values that were given.
    """
    return _ArgParser(arg_names).parse(arguments)