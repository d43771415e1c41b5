import pytest

from omparse import (
    ContextFrame, IncompleteFallbackExhausted, IncompleteInput,
    OrderingFallbackExhausted, ParseError,
    TrailingInput, UnexpectedToken, parse, parse_metric_descriptor,
    parse_metricfamily, parse_sample,
)


def _chain(err):
    return [f.production for f in err.context]


def test_errors_are_syntax_errors():
    with pytest.raises(SyntaxError):
        parse("nonsense")


def test_deepest_failure_wins_over_missing_eof():
    with pytest.raises(OrderingFallbackExhausted) as ei:
        parse("foo 1x\n# EOF\n")
    err = ei.value
    assert err.pos == 5
    assert err.line_col == (1, 6)
    assert err.expected == repr("\n")
    assert _chain(err) == ["sample", "metricfamily", "metricset", "exposition"]
    assert err.context[-1] == ContextFrame("exposition", 0)
    assert str(err).endswith("foo 1x\n     ^")


def test_ordering_error_keeps_both_arms():
    with pytest.raises(OrderingFallbackExhausted) as ei:
        parse_metricfamily("foo\n")
    first, second = ei.value.alternatives
    assert _chain(first) == ["metric_descriptor"]
    assert first.pos == 0
    assert _chain(second) == ["sample"]
    assert second.pos == 3


def test_missing_eof_is_incomplete():
    text = "# TYPE a counter\na_total 1\n"
    with pytest.raises(IncompleteInput) as ei:
        parse(text)
    assert ei.value.pos == len(text)
    assert _chain(ei.value) == ["exposition"]


@pytest.mark.parametrize("text, pos", [
    ("# EOF\n\n", 6),
    ("# EOF\nfoo 1\n", 6),
    ("# EOF ", 5),
])
def test_trailing_input(text, pos):
    with pytest.raises(TrailingInput) as ei:
        parse(text)
    assert ei.value.pos == pos
    assert _chain(ei.value) == ["exposition"]


def test_truncated_keyword_is_incomplete():
    with pytest.raises(IncompleteInput):
        parse_metric_descriptor("# TY")


def test_unexpected_token_in_sample():
    with pytest.raises(UnexpectedToken) as ei:
        parse_sample("foo 1\r\n")
    err = ei.value
    assert err.pos == 5
    assert err.kind == "unexpected_token"
    assert _chain(err) == ["sample"]


def test_unclosed_label_block_reports_label_position():
    with pytest.raises(UnexpectedToken) as ei:
        parse_sample('foo{a="b" 1\n')
    err = ei.value
    assert err.pos == 9
    assert err.expected == repr("}")
    assert _chain(err) == ["labels", "sample"]


def test_error_message_lists_context():
    with pytest.raises(ParseError) as ei:
        parse("# TYPE a counter\na_total 1\nb 2 x\n# EOF\n")
    # "x" is where an exemplar's "#" could have started
    err = ei.value
    assert err.expected == repr("#")
    msg = str(err)
    assert "at 3:5" in msg
    assert "  in exemplar at 3:4" in msg
    assert "  in sample at 3:1" in msg
    assert "  in exposition at 1:1" in msg
    assert msg.endswith("b 2 x\n    ^")


def test_bytes_buffer_error():
    with pytest.raises(OrderingFallbackExhausted) as ei:
        parse(b"foo 1x\n# EOF\n")
    assert ei.value.pos == 5
    assert str(ei.value).endswith("foo 1x\n     ^")


@pytest.mark.parametrize("text, pos", [
    ("a 1", 3),
    ("# TYPE a counter\na_total 1", 26),
    ('a{b="c', 6),
])
def test_truncated_line_is_incomplete(text, pos):
    with pytest.raises(IncompleteInput) as ei:
        parse(text)
    err = ei.value
    assert isinstance(err, OrderingFallbackExhausted)
    assert isinstance(err, IncompleteFallbackExhausted)
    assert err.kind == "incomplete_input"
    assert err.pos == pos
    assert "got end of input" in err.msg


def test_bad_token_mid_line_is_not_incomplete():
    with pytest.raises(OrderingFallbackExhausted) as ei:
        parse("a 1x\n# EOF\n")
    assert not isinstance(ei.value, IncompleteInput)


def test_caret_counts_characters_on_bytes_buffer():
    with pytest.raises(ParseError) as ei:
        parse('a{b="éé"} 1x\n# EOF\n'.encode("utf-8"))
    err = ei.value
    assert err.pos == 13
    assert str(err).endswith('a{b="éé"} 1x\n           ^')
