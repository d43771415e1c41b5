# omparse/input.py
"""Buffer capability layer.

The grammar never touches the caller's buffer directly. It goes through an
`Input`, which offers exactly what the productions need:

- slicing by start/end offsets
- case-sensitive and case-insensitive literal prefix tests
- one-character access together with the character's width in the buffer
- compiled-pattern matching at an offset (see `omparse.lex.Pattern`)
- length, and line/column arithmetic for diagnostics

`TextInput` wraps a `str` (offsets are code-point indices) and `BytesInput`
wraps `bytes`/`bytearray` (offsets are byte indices; every byte is one
character). Both are thin adapters over the same interface, so the grammar is
written once.
"""

from __future__ import annotations
from typing import Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .lex import Pattern

Buffer = Union[str, bytes, bytearray]


class Input:
    """Read-only view over a caller-owned buffer."""

    __slots__ = ("buf",)

    def __init__(self, buf):
        self.buf = buf

    def __len__(self) -> int:
        return len(self.buf)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(len={len(self.buf)})"

    # ---- capabilities ----
    def next_char(self, pos: int) -> Optional[Tuple[str, int]]:
        """Character at `pos` and its width, or None at end of buffer."""
        raise NotImplementedError

    def starts_with(self, lit: str, pos: int) -> bool:
        raise NotImplementedError

    def starts_with_no_case(self, lit: str, pos: int) -> bool:
        """ASCII case-insensitive prefix test (`inf`, `infinity`, `nan`)."""
        raise NotImplementedError

    def match(self, pattern: "Pattern", pos: int) -> Optional[int]:
        """End offset of `pattern` anchored at `pos`, or None."""
        raise NotImplementedError

    def slice(self, start: int, end: int):
        return self.buf[start:end]

    def text(self, start: int, end: int) -> str:
        raise NotImplementedError

    # ---- position arithmetic ----
    def line_bounds(self, pos: int) -> Tuple[int, int]:
        """[start, end) of the line containing `pos`."""
        nl = self._newline
        start = self.buf.rfind(nl, 0, pos)
        start = 0 if start < 0 else start + 1
        end = self.buf.find(nl, pos)
        end = len(self.buf) if end < 0 else end
        return start, end

    def line_col(self, pos: int) -> Tuple[int, int]:
        """1-based (line, column) of `pos`."""
        line = self.buf.count(self._newline, 0, pos) + 1
        start, _ = self.line_bounds(pos)
        return line, (pos - start) + 1

    _newline = "\n"


class TextInput(Input):
    __slots__ = ()

    def next_char(self, pos: int) -> Optional[Tuple[str, int]]:
        if pos >= len(self.buf):
            return None
        return self.buf[pos], 1

    def starts_with(self, lit: str, pos: int) -> bool:
        return self.buf.startswith(lit, pos)

    def starts_with_no_case(self, lit: str, pos: int) -> bool:
        head = self.buf[pos:pos + len(lit)]
        return head.isascii() and head.lower() == lit.lower()

    def match(self, pattern: "Pattern", pos: int) -> Optional[int]:
        m = pattern.text.match(self.buf, pos)
        return m.end() if m else None

    def text(self, start: int, end: int) -> str:
        return self.buf[start:end]


class BytesInput(Input):
    __slots__ = ()
    _newline = b"\n"

    def next_char(self, pos: int) -> Optional[Tuple[str, int]]:
        if pos >= len(self.buf):
            return None
        # one byte is one character; multi-byte UTF-8 sequences are never
        # special to the grammar
        return chr(self.buf[pos]), 1

    def starts_with(self, lit: str, pos: int) -> bool:
        return self.buf.startswith(lit.encode("ascii"), pos)

    def starts_with_no_case(self, lit: str, pos: int) -> bool:
        head = bytes(self.buf[pos:pos + len(lit)])
        return head.lower() == lit.lower().encode("ascii")

    def match(self, pattern: "Pattern", pos: int) -> Optional[int]:
        m = pattern.binary.match(self.buf, pos)
        return m.end() if m else None

    def text(self, start: int, end: int) -> str:
        return bytes(self.buf[start:end]).decode("utf-8", errors="replace")


def as_input(buf: Union[Buffer, Input]) -> Input:
    """Wrap `buf` in the matching `Input` adapter."""
    if isinstance(buf, Input):
        return buf
    if isinstance(buf, str):
        return TextInput(buf)
    if isinstance(buf, (bytes, bytearray)):
        return BytesInput(buf)
    raise TypeError(f"unsupported buffer type: {type(buf).__name__}")
