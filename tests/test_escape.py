import pytest

from omparse import (
    FragmentKind, ParseError, parse_escaped_string, parse_help_escaped_string,
    parse_label,
)

N = FragmentKind.NORMAL
LF = FragmentKind.LINE_FEED
DQ = FragmentKind.QUOTE
BS = FragmentKind.BACKSLASH


def _frags(s):
    return [(str(f.span), f.kind) for f in s]


# https://github.com/prometheus/OpenMetrics/blob/main/tests/testdata/parsers/help_escaping/metrics
@pytest.mark.parametrize("text, expected", [
    ("foo", [("foo", N)]),
    (r"\foo", [(r"\foo", N)]),
    (r"\\foo", [(r"\\", BS), ("foo", N)]),
    (r"foo\\", [("foo", N), (r"\\", BS)]),
    (r"\\", [(r"\\", BS)]),
    (r"\n", [(r"\n", LF)]),
    (r"\\n", [(r"\\", BS), ("n", N)]),
    (r"\\\n", [(r"\\", BS), (r"\n", LF)]),
    (r"\"", [(r"\"", N)]),
    (r'\\"', [(r"\\", BS), ('"', N)]),
    ('foo"bar', [('foo"bar', N)]),
    ("", []),
])
def test_help_escaped_string(text, expected):
    s = parse_help_escaped_string(text)
    assert _frags(s) == expected
    assert s.span.value == text


@pytest.mark.parametrize("text, expected", [
    ("foo", [("foo", N)]),
    (r"\foo", [(r"\foo", N)]),
    (r"a\"b", [("a", N), (r"\"", DQ), ("b", N)]),
    (r"\\\n", [(r"\\", BS), (r"\n", LF)]),
    (r"x\ty", [(r"x\ty", N)]),
    ("", []),
])
def test_label_escaped_string(text, expected):
    assert _frags(parse_escaped_string(text)) == expected


@pytest.mark.parametrize("text", ['foo"bar', "foo\nbar", "foo\\"])
def test_label_escaped_string_stops_before_special(text):
    with pytest.raises(ParseError):
        parse_escaped_string(text)


def test_help_rejects_bare_line_feed():
    with pytest.raises(ParseError):
        parse_help_escaped_string("a\nb")


def test_dialect_difference_on_bare_quote():
    assert parse_help_escaped_string('foo"bar').decode() == 'foo"bar'
    with pytest.raises(ParseError):
        parse_label('x="foo"bar"')


@pytest.mark.parametrize("text, decoded", [
    (r"a\nb", "a\nb"),
    (r"say \"hi\"", 'say "hi"'),
    (r"C:\\dir", "C:\\dir"),
    (r"\q stays", r"\q stays"),
])
def test_decode_label_value(text, decoded):
    assert parse_escaped_string(text).decode() == decoded


def test_decode_help_keeps_escaped_quote_verbatim():
    assert parse_help_escaped_string(r"a \" b\n").decode() == 'a \\" b\n'


def test_fragments_round_trip_and_cover_span():
    text = r'pre\\mid\"x\npost\t'
    s = parse_escaped_string(text)
    assert "".join(str(f.span) for f in s) == text
    pos = s.span.start
    for f in s:
        assert f.span.start == pos
        pos = f.span.end
    assert pos == s.span.end


def test_fragments_iteration_is_restartable():
    s = parse_escaped_string(r"a\nb")
    assert list(s) == list(s)
    assert len(s) == 3


def test_bytes_buffer_decodes_utf8():
    s = parse_escaped_string("caf\u00e9 \\\"x\\\"".encode("utf-8"))
    assert s.decode() == 'caf\u00e9 "x"'
    assert isinstance(s.span.value, bytes)


def test_bytes_buffer_invalid_utf8_decodes_with_replacement():
    s = parse_help_escaped_string(b"caf\xe9 \\n")
    assert str(s.span) == "caf\ufffd \\n"
    assert s.decode() == "caf\ufffd \n"
