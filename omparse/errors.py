# omparse/errors.py
"""Parse errors.

Every failure is a `ParseError` (a `SyntaxError`), raised once per top-level
call and never recovered from. The error keeps:

- `pos`       offset of the failure in the caller's buffer
- `expected`  what the failing terminal wanted (e.g. "'\\n'", "metricname")
- `context`   ordered `ContextFrame`s, innermost production first. Each
              production the error unwinds through appends its own frame.

`str(err)` renders the message, the context chain and a caret snippet:

    expected '\\n', got 'x' at 2:6
      in sample at 2:1
      in metricfamily at 1:1
      in metricset at 1:1
      in exposition at 1:1
    foo 1x
         ^
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .input import Input


@dataclass(frozen=True)
class ContextFrame:
    production: str
    offset: int


def caret_snippet(src: "Input", pos: int) -> str:
    """Line containing `pos` with a caret under it."""
    start, end = src.line_bounds(pos)
    line = src.text(start, end)
    # width of the decoded prefix, not the byte count
    caret = " " * len(src.text(start, pos)) + "^"
    return f"{line}\n{caret}"


class ParseError(SyntaxError):
    kind = "parse_error"

    def __init__(self, msg: str, pos: int, source: "Input",
                 expected: Optional[str] = None):
        super().__init__(msg)
        self.msg = msg
        self.pos = pos
        self.source = source
        self.expected = expected
        self.context: List[ContextFrame] = []
        # activation id of the production currently holding this error after
        # an optional/repeated sub-production swallowed it (see grammar.parser)
        self.held_by: Optional[int] = None

    @property
    def line_col(self) -> Tuple[int, int]:
        return self.source.line_col(self.pos)

    def add_context(self, production: str, offset: int) -> None:
        self.context.append(ContextFrame(production, offset))

    def __str__(self) -> str:
        line, col = self.line_col
        out = [f"{self.msg} at {line}:{col}"]
        for fr in self.context:
            fl, fc = self.source.line_col(fr.offset)
            out.append(f"  in {fr.production} at {fl}:{fc}")
        out.append(caret_snippet(self.source, self.pos))
        return "\n".join(out)


class UnexpectedToken(ParseError):
    """A literal, keyword or character class did not match."""
    kind = "unexpected_token"


class IncompleteInput(ParseError):
    """The buffer ended while a construct was still open."""
    kind = "incomplete_input"


class TrailingInput(ParseError):
    """The exposition matched but did not reach the end of the buffer."""
    kind = "trailing_input"


class OrderingFallbackExhausted(ParseError):
    """A metric family matched neither descriptors-first nor samples-only."""
    kind = "ordering_fallback_exhausted"

    def __init__(self, msg: str, pos: int, source: "Input",
                 alternatives: Tuple[ParseError, ParseError],
                 expected: Optional[str] = None):
        super().__init__(msg, pos, source, expected)
        self.alternatives = alternatives


class IncompleteFallbackExhausted(OrderingFallbackExhausted, IncompleteInput):
    """Both metric family arms failed and the deeper one ran off the end of
    the buffer. Catchable as either parent, so a short read is told apart
    from bad syntax without looking at `alternatives`."""
    kind = "incomplete_input"
