# omparse/lex/escape.py
"""Escape scanners for the two string dialects.

Neither dialect substitutes anything. The input is cut into fragments:

- NORMAL     a maximal run of ordinary characters. A backslash followed by an
             ordinary character other than `n` is ordinary too and stays in
             the run verbatim (`\\f` is two characters of text).
- LINE_FEED  `\\n`
- QUOTE      `\\"`   (label values only)
- BACKSLASH  `\\\\`

Label values (`escaped-string`): ordinary = anything but LF, `"` and `\\`.
Help text (`help-escaped-string`): ordinary = anything but LF and `\\`. A bare
`"` is accepted and `\\"` is plain text, following the published erratum
(prometheus/OpenMetrics#288).
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, List, Tuple, TYPE_CHECKING
from . import Pattern

if TYPE_CHECKING:
    from ..input import Input


class FragmentKind(Enum):
    NORMAL = "normal"
    LINE_FEED = "lf"
    QUOTE = "dquote"
    BACKSLASH = "bs"

    @property
    def replacement(self) -> str:
        """Decoded text for an escape fragment (NORMAL copies its span)."""
        return _REPLACEMENT[self]


_REPLACEMENT = {
    FragmentKind.LINE_FEED: "\n",
    FragmentKind.QUOTE: '"',
    FragmentKind.BACKSLASH: "\\",
}

# (start, end, kind)
RawFragment = Tuple[int, int, FragmentKind]

_LABEL_NORMAL_RE = Pattern.compile(r'(?:[^\n"\\]|\\[^\n"\\n])+')
_HELP_NORMAL_RE = Pattern.compile(r"(?:[^\n\\]|\\[^\n\\n])+")

_LABEL_ESCAPES: Dict[str, FragmentKind] = {
    "n": FragmentKind.LINE_FEED,
    '"': FragmentKind.QUOTE,
    "\\": FragmentKind.BACKSLASH,
}
_HELP_ESCAPES: Dict[str, FragmentKind] = {
    "n": FragmentKind.LINE_FEED,
    "\\": FragmentKind.BACKSLASH,
}


def _scan(inp: "Input", pos: int, normal: Pattern,
          escapes: Dict[str, FragmentKind]) -> Tuple[List[RawFragment], int]:
    frags: List[RawFragment] = []
    cur = pos
    while True:
        end = inp.match(normal, cur)
        if end is not None and end > cur:
            frags.append((cur, end, FragmentKind.NORMAL))
            cur = end
            continue
        if inp.starts_with("\\", cur):
            nxt = inp.next_char(cur + 1)
            if nxt is not None and nxt[0] in escapes:
                end = cur + 1 + nxt[1]
                frags.append((cur, end, escapes[nxt[0]]))
                cur = end
                continue
        return frags, cur


def scan_escaped_string(inp: "Input", pos: int) -> Tuple[List[RawFragment], int]:
    """Label-value dialect. Stops before the closing quote (or anything else)."""
    return _scan(inp, pos, _LABEL_NORMAL_RE, _LABEL_ESCAPES)


def scan_help_escaped_string(inp: "Input", pos: int) -> Tuple[List[RawFragment], int]:
    """Help-text dialect. Stops before the terminating line feed."""
    return _scan(inp, pos, _HELP_NORMAL_RE, _HELP_ESCAPES)
