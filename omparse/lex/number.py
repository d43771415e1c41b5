# omparse/lex/number.py
"""Numeric literal recognizer.

    number     := realnumber
                / [sign] ("infinity" / "inf")     ; keyword case-insensitive
                / "nan"                           ; case-insensitive
    realnumber := [sign] 1*DIGIT ["." *DIGIT] [exponent]
                / [sign] "." 1*DIGIT [exponent]
    exponent   := ("e" / "E") [sign] 1*DIGIT

The recognizer only reports where the literal ends. The text is never
converted to a float and never reformatted, so "0042" stays "0042".
"""

from __future__ import annotations
from typing import Optional, TYPE_CHECKING
from . import Pattern, is_sign

if TYPE_CHECKING:
    from ..input import Input

REALNUMBER_RE = Pattern.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)

# longest keyword first, otherwise "Infinity" stops after "Inf"
_INF_KEYWORDS = ("infinity", "inf")
_NAN_KEYWORD = "nan"


def match_realnumber(inp: "Input", pos: int) -> Optional[int]:
    return inp.match(REALNUMBER_RE, pos)


def _match_infinity(inp: "Input", pos: int) -> Optional[int]:
    cur = pos
    ch = inp.next_char(cur)
    if ch is not None and is_sign(ch[0]):
        cur += ch[1]
    for kw in _INF_KEYWORDS:
        if inp.starts_with_no_case(kw, cur):
            return cur + len(kw)
    return None


def match_number(inp: "Input", pos: int) -> Optional[int]:
    end = match_realnumber(inp, pos)
    if end is not None:
        return end
    end = _match_infinity(inp, pos)
    if end is not None:
        return end
    if inp.starts_with_no_case(_NAN_KEYWORD, pos):
        return pos + len(_NAN_KEYWORD)
    return None
