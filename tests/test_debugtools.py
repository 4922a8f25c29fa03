from modmqttgw.debugtools import registers_to_str


def test_empty_list_gives_empty_string():
    assert registers_to_str([]) == ""


def test_values_are_lowercase_hex():
    assert registers_to_str([0xAB]) == "[ab]"


def test_short_list_has_one_bracket_per_value():
    out = registers_to_str(list(range(5)))
    assert out.count("[") == 5
    assert "more" not in out


def test_long_list_is_truncated():
    out = registers_to_str(list(range(12)))
    assert out.count("[") == 10
    assert out.endswith(" (… and 2 more)")


def test_exactly_ten_values_still_gets_suffix():
    out = registers_to_str([1] * 10)
    assert out.endswith("(… and 0 more)")