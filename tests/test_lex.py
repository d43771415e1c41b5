import pytest

from omparse import TextInput, BytesInput, ParseError, parse_number, parse_realnumber
from omparse.lex import (
    is_metricname_initial_char, is_metricname_char,
    is_label_name_initial_char, is_label_name_char,
    match_metricname, match_metricname_chars, match_label_name,
    match_number, match_realnumber,
)


@pytest.mark.parametrize("c", ["a", "Z", "_", ":"])
def test_metricname_initial_accepts(c):
    assert is_metricname_initial_char(c)
    assert is_metricname_char(c)


@pytest.mark.parametrize("c", ["0", "9", "-", ".", " ", "é", "{"])
def test_metricname_initial_rejects(c):
    assert not is_metricname_initial_char(c)


def test_metricname_continuation_adds_digits():
    assert is_metricname_char("7")
    assert not is_metricname_char("-")


def test_label_name_alphabet():
    # leading underscore follows the published ABNF
    assert is_label_name_initial_char("_")
    assert is_label_name_initial_char("q")
    assert not is_label_name_initial_char(":")
    assert not is_label_name_initial_char("1")
    assert is_label_name_char("1")
    assert not is_label_name_char(":")


def test_match_metricname_stops_at_label_block():
    inp = TextInput('acme:http_total{a="b"} 1')
    assert match_metricname(inp, 0) == len("acme:http_total")
    assert match_metricname(TextInput("1abc"), 0) is None


def test_match_label_name():
    assert match_label_name(TextInput("_trace_id=x"), 0) == len("_trace_id")
    assert match_label_name(TextInput("a:b"), 0) == 1
    assert match_label_name(TextInput(":a"), 0) is None


def test_match_metricname_chars_may_be_empty():
    assert match_metricname_chars(TextInput("\n"), 0) == 0
    assert match_metricname_chars(TextInput("seconds\n"), 0) == 7


def test_scanners_on_bytes():
    inp = BytesInput(b"foo_bar 1")
    assert match_metricname(inp, 0) == 7
    assert match_number(inp, 8) == 9


@pytest.mark.parametrize("text", [
    # https://github.com/prometheus/OpenMetrics/blob/main/specification/OpenMetrics.md#numbers
    "23",
    "0042",
    "1341298465647914",
    "03.123421",
    "1.89e-7",
])
def test_number_accepted_verbatim(text):
    assert parse_number(text).value == text


@pytest.mark.parametrize("text", [
    "-1", "+1", ".5", "-.5e3", "1E10", "1.", "4.20072246e+06",
    "Inf", "+Inf", "-inf", "infinity", "-Infinity", "NaN", "nan", "NAN",
])
def test_number_forms(text):
    assert parse_number(text).value == text


@pytest.mark.parametrize("text", ["", "-", ".", "e5", "+nan", "in", "1e", "0x10", "1_000"])
def test_number_rejects(text):
    with pytest.raises(ParseError):
        parse_number(text)


def test_realnumber_has_no_special_values():
    assert match_realnumber(TextInput("Inf"), 0) is None
    assert match_realnumber(TextInput("NaN"), 0) is None
    assert parse_realnumber("1520879607.789").value == "1520879607.789"


def test_number_prefix_match_leaves_rest():
    inp = TextInput("12.5 1000")
    assert match_number(inp, 0) == 4
    assert match_number(inp, 5) == 9


def test_infinity_matched_whole():
    assert match_number(TextInput("+Infinity "), 0) == len("+Infinity")
    assert match_number(TextInput("-Inf "), 0) == len("-Inf")
