import pytest

from modmqttgw.conv_name_parser import (
    ConverterSpecification,
    ConvNameParserError,
    parse_converter_args,
    parse_converter_spec,
)


def test_spec_with_arguments():
    spec = parse_converter_spec("std.divide(1000,precision=3)")
    assert spec == ConverterSpecification("std", "divide", "1000,precision=3")


def test_spec_without_arguments():
    spec = parse_converter_spec("std.uint32()")
    assert (spec.plugin, spec.converter, spec.arguments) == ("std", "uint32", "")


def test_spec_on_new_line_is_trimmed():
    spec = parse_converter_spec("  std.map('{24:  1}')\n")
    assert spec.converter == "map"
    assert spec.arguments == "'{24:  1}'"


@pytest.mark.parametrize("text", ["divide(1000)", "Std.divide(1)", "std.divide", "std.(1)"])
def test_invalid_spec(text):
    with pytest.raises(ConvNameParserError, match="Supply converter spec"):
        parse_converter_spec(text)


def test_positional_and_named_args():
    values = parse_converter_args(["divider", "precision"], "1000,precision=3")
    assert values == {"divider": "1000", "precision": "3"}


def test_positional_args_in_order():
    values = parse_converter_args(["divider", "precision"], "1000, 3")
    assert values == {"divider": "1000", "precision": "3"}


def test_quoted_value_keeps_spaces_and_commas():
    values = parse_converter_args(["map"], "'  24:1,   55:-1   '")
    assert values == {"map": "  24:1,   55:-1   "}


def test_quoted_value_holds_other_quote():
    values = parse_converter_args(["map"], "'{24:\"twenty four\"}'")
    assert values == {"map": '{24:"twenty four"}'}


def test_escaped_separator():
    values = parse_converter_args(["a"], "x\\,y")
    assert values == {"a": "x,y"}


def test_empty_argument_list():
    assert parse_converter_args(["a", "b"], "") == {}


def test_too_many_arguments():
    with pytest.raises(ConvNameParserError, match="Too many arguments provided, need 1"):
        parse_converter_args(["a"], "1,2")


def test_positional_after_named():
    with pytest.raises(ConvNameParserError, match="Cannot use positional argument"):
        parse_converter_args(["a", "b"], "b=1,2")


def test_argument_set_twice():
    with pytest.raises(ConvNameParserError, match="a already set"):
        parse_converter_args(["a", "b"], "1,a=2")


def test_unknown_named_argument():
    with pytest.raises(ConvNameParserError, match="Error setting argument c"):
        parse_converter_args(["a"], "c=1")


def test_unterminated_string():
    with pytest.raises(ConvNameParserError, match="unterminated string"):
        parse_converter_args(["a"], "'abc")


def test_invalid_escape_at_end():
    with pytest.raises(ConvNameParserError, match="invalid escape sequence"):
        parse_converter_args(["a"], "abc\\")


def test_missing_name():
    with pytest.raises(ConvNameParserError, match="Missing name for argument 1"):
        parse_converter_args(["a"], "=1")


def test_quoted_name():
    with pytest.raises(ConvNameParserError, match="cannot be quoted"):
        parse_converter_args(["a"], "'a=1'")


def test_name_set_twice():
    with pytest.raises(ConvNameParserError, match="already set to a"):
        parse_converter_args(["a"], "a=b=1")


def test_empty_argument():
    with pytest.raises(ConvNameParserError, match="Argument 2 is empty"):
        parse_converter_args(["a", "b"], "1,,2")


def test_spec_arguments_round_trip():
    spec = parse_converter_spec("std.divide(1000,precision=3)")
    values = parse_converter_args(["divider", "precision"], spec.arguments)
    assert values["divider"] == "1000"
    assert values["precision"] == "3"