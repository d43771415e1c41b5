# omparse/lex/__init__.py
"""Terminal layer: character classifiers and name scanners.

Alphabets (OpenMetrics ABNF)
----------------------------
- metricname : initial = ALPHA / "_" / ":"   continuation = initial / DIGIT
- label-name : initial = ALPHA / "_"         continuation = initial / DIGIT

Only ASCII letters and digits qualify; `str.isalpha()` would also accept
non-ASCII letters, which the format forbids.

Every scanner here is a pure function `(Input, pos) -> end | None`. They never
raise; the grammar layer turns a `None` into a positioned error.

Scanners use `regex` patterns compiled once for `str` and once for `bytes`
buffers (`Pattern`), so both adapters run the same expression.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING
import regex as re

if TYPE_CHECKING:
    from ..input import Input


@dataclass(frozen=True)
class Pattern:
    """One expression compiled for text and for byte buffers."""
    source: str
    text: "re.Pattern"
    binary: "re.Pattern"

    @classmethod
    def compile(cls, source: str, flags: int = 0) -> "Pattern":
        return cls(
            source,
            re.compile(source, flags),
            re.compile(source.encode("ascii"), flags),
        )


_ALPHA = "A-Za-z"
_DIGIT = "0-9"

METRICNAME_INITIAL = f"[{_ALPHA}_:]"
METRICNAME_CHAR = f"[{_ALPHA}{_DIGIT}_:]"
LABEL_NAME_INITIAL = f"[{_ALPHA}_]"
LABEL_NAME_CHAR = f"[{_ALPHA}{_DIGIT}_]"

METRICNAME_RE = Pattern.compile(f"{METRICNAME_INITIAL}{METRICNAME_CHAR}*")
METRICNAME_CHARS_RE = Pattern.compile(f"{METRICNAME_CHAR}*")
LABEL_NAME_RE = Pattern.compile(f"{LABEL_NAME_INITIAL}{LABEL_NAME_CHAR}*")


# ---- predicates ----

def _is_ascii_alpha(c: str) -> bool:
    return ("a" <= c <= "z") or ("A" <= c <= "Z")

def _is_ascii_digit(c: str) -> bool:
    return "0" <= c <= "9"

def is_metricname_initial_char(c: str) -> bool:
    return _is_ascii_alpha(c) or c == "_" or c == ":"

def is_metricname_char(c: str) -> bool:
    return is_metricname_initial_char(c) or _is_ascii_digit(c)

def is_label_name_initial_char(c: str) -> bool:
    return _is_ascii_alpha(c) or c == "_"

def is_label_name_char(c: str) -> bool:
    return is_label_name_initial_char(c) or _is_ascii_digit(c)

def is_sign(c: str) -> bool:
    return c == "-" or c == "+"


# ---- scanners ----

def match_metricname(inp: "Input", pos: int) -> Optional[int]:
    return inp.match(METRICNAME_RE, pos)

def match_metricname_chars(inp: "Input", pos: int) -> int:
    """Zero or more metric-name characters (UNIT payload). Always matches."""
    end = inp.match(METRICNAME_CHARS_RE, pos)
    return pos if end is None else end

def match_label_name(inp: "Input", pos: int) -> Optional[int]:
    return inp.match(LABEL_NAME_RE, pos)


from .number import match_number, match_realnumber  # noqa: E402
from .escape import (  # noqa: E402
    FragmentKind, scan_escaped_string, scan_help_escaped_string,
)
