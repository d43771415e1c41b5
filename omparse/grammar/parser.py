# omparse/grammar/parser.py
"""OpenMetrics text parser (recursive descent over an `Input` cursor).

Grammar we parse:
    exposition        := metricset "#" SP "EOF" [LF]
    metricset         := metricfamily*
    metricfamily      := metric_descriptor+ sample*
                       / metric_descriptor* sample+
    metric_descriptor := "#" SP ("TYPE" / "HELP" / "UNIT") SP metricname SP payload LF
        TYPE payload  := metric_type
        HELP payload  := help_escaped_string
        UNIT payload  := metricname_char*
    sample            := metricname [labels] SP number [SP timestamp] [exemplar] LF
    exemplar          := SP "#" SP labels SP number [SP timestamp]
    labels            := "{" [label ("," label)*] "}"
    label             := label_name "=" DQUOTE escaped_string DQUOTE

Every production runs inside `_context(name)`. On failure the cursor goes
back to where the production started and the production appends its frame to
the error's context chain.

Failures swallowed by `?`, `*` and the separated list are not thrown away:
the deepest one is parked on the parser (`_deferred`). When the enclosing
production later fails at a shallower offset, the parked failure is reported
instead. It collects the frames of every production it is carried through, so
`foo 1x` reports the bad `x`, not the missing `# EOF` at offset 0.
"""

from __future__ import annotations
import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, TypeVar, Union

from ..input import Buffer, Input, as_input
from ..errors import (
    ParseError, UnexpectedToken, IncompleteInput, TrailingInput,
    OrderingFallbackExhausted, IncompleteFallbackExhausted,
)
from ..lex import (
    match_label_name, match_metricname, match_metricname_chars,
    match_number, match_realnumber,
    scan_escaped_string, scan_help_escaped_string,
)
from .ast import (
    Span, Fragment, EscapedString, HelpEscapedString, Label, Labels,
    Exemplar, Sample, MetricType, DescriptorKind, MetricDescriptor,
    TypeDescriptor, HelpDescriptor, UnitDescriptor, Metricfamily, Metricset,
    Exposition,
)

logger = logging.getLogger(__name__)

SP = " "
LF = "\n"
DQUOTE = '"'
HASH = "#"
EQ = "="
COMMA = ","
EOF = "EOF"

# `gaugehistogram` before `gauge`, otherwise the shorter keyword wins
_METRIC_TYPES: Tuple[MetricType, ...] = (
    MetricType.COUNTER,
    MetricType.GAUGEHISTOGRAM,
    MetricType.GAUGE,
    MetricType.HISTOGRAM,
    MetricType.STATESET,
    MetricType.INFO,
    MetricType.SUMMARY,
    MetricType.UNKNOWN,
)
_DESCRIPTOR_KINDS: Tuple[DescriptorKind, ...] = (
    DescriptorKind.TYPE, DescriptorKind.HELP, DescriptorKind.UNIT,
)

PRODUCTIONS: Tuple[str, ...] = (
    "exposition", "metricset", "metricfamily", "metric_descriptor",
    "metric_type", "sample", "exemplar", "labels", "label", "number",
    "realnumber", "timestamp", "metricname", "label_name",
    "escaped_string", "help_escaped_string",
)

T = TypeVar("T")


@dataclass(frozen=True)
class _Frame:
    name: str
    start: int
    ident: int


class Parser:
    """Cursor over one buffer. Single use: build one per parse."""

    def __init__(self, buf: Union[Buffer, Input], pos: int = 0):
        self.src = as_input(buf)
        self.i = pos
        self.n = len(self.src)
        self._frames: List[_Frame] = []
        self._ids = itertools.count()
        self._deferred: Optional[ParseError] = None

    @property
    def pos(self) -> int:
        return self.i

    # ---- cursor helpers ----
    def _span(self, start: int) -> Span:
        return Span(start, self.i, self.src)

    def _err(self, expected: str, *lits: str) -> ParseError:
        nxt = self.src.next_char(self.i)
        rest = self.n - self.i
        truncated = any(
            rest < len(lit) and lit.startswith(self.src.text(self.i, self.n))
            for lit in lits
        )
        if nxt is None or truncated:
            return IncompleteInput(
                f"expected {expected}, got end of input", self.i, self.src, expected)
        return UnexpectedToken(
            f"expected {expected}, got {nxt[0]!r}", self.i, self.src, expected)

    def _eat(self, lit: str) -> None:
        if not self.src.starts_with(lit, self.i):
            raise self._err(repr(lit), lit)
        self.i += len(lit)

    def _try_eat(self, lit: str) -> bool:
        if self.src.starts_with(lit, self.i):
            self.i += len(lit)
            return True
        return False

    def _terminal(self, matcher: Callable[[Input, int], Optional[int]],
                  expected: str) -> Span:
        start = self.i
        end = matcher(self.src, start)
        if end is None:
            raise self._err(expected)
        self.i = end
        return self._span(start)

    # ---- context chain ----
    @contextmanager
    def _context(self, name: str) -> Iterator[None]:
        frame = _Frame(name, self.i, next(self._ids))
        self._frames.append(frame)
        try:
            yield
        except ParseError as e:
            self.i = frame.start
            err = self._settle(frame, e)
            err.add_context(name, frame.start)
            raise err
        finally:
            self._frames.pop()
        d = self._deferred
        if d is not None and d.held_by == frame.ident:
            # carried out of a successful production: it happened inside it
            d.add_context(name, frame.start)
            d.held_by = self._frames[-1].ident if self._frames else None

    def _settle(self, frame: _Frame, e: ParseError) -> ParseError:
        """Pick between the failure in flight and one parked in `frame`."""
        d = self._deferred
        if d is not None and d.held_by == frame.ident:
            self._deferred = None
            if d.pos > e.pos:
                return d
        return e

    def _defer(self, e: ParseError) -> None:
        d = self._deferred
        if d is None or e.pos >= d.pos:
            e.held_by = self._frames[-1].ident if self._frames else None
            self._deferred = e

    # ---- combinators ----
    def _opt(self, fn: Callable[[], T]) -> Optional[T]:
        save = self.i
        try:
            return fn()
        except ParseError as e:
            self.i = save
            self._defer(e)
            return None

    def _many0(self, fn: Callable[[], T]) -> List[T]:
        out: List[T] = []
        while True:
            save = self.i
            try:
                item = fn()
            except ParseError as e:
                self.i = save
                self._defer(e)
                return out
            if self.i == save:
                # every repeated production consumes at least one character
                return out
            out.append(item)

    def _many1(self, fn: Callable[[], T]) -> List[T]:
        first = fn()
        return [first] + self._many0(fn)

    def _separated0(self, fn: Callable[[], T], sep: str) -> List[T]:
        out: List[T] = []
        item = self._opt(fn)
        if item is None:
            return out
        out.append(item)
        while True:
            save = self.i
            if not self._try_eat(sep):
                return out
            item = self._opt(fn)
            if item is None:
                self.i = save
                return out
            out.append(item)

    # ---- structure ----
    def exposition(self) -> Exposition:
        with self._context("exposition"):
            start = self.i
            metricset = self.metricset()
            self._eat(HASH)
            self._eat(SP)
            self._eat(EOF)
            self._try_eat(LF)
            return Exposition(self._span(start), metricset)

    def metricset(self) -> Metricset:
        with self._context("metricset"):
            start = self.i
            families = self._many0(self.metricfamily)
            return Metricset(self._span(start), tuple(families))

    def metricfamily(self) -> Metricfamily:
        with self._context("metricfamily"):
            start = self.i
            try:
                descriptors = self._many1(self.metric_descriptor)
                samples = self._many0(self.sample)
            except ParseError as first:
                self.i = start
                logger.debug("metricfamily at %d: no descriptor, retrying as samples-only", start)
                try:
                    descriptors = self._many0(self.metric_descriptor)
                    samples = self._many1(self.sample)
                except ParseError as second:
                    raise self._exhausted(first, second) from None
                self._defer(first)
            return Metricfamily(self._span(start), tuple(descriptors), tuple(samples))

    def _exhausted(self, first: ParseError, second: ParseError) -> OrderingFallbackExhausted:
        deeper = first if first.pos > second.pos else second
        cls = (IncompleteFallbackExhausted if isinstance(deeper, IncompleteInput)
               else OrderingFallbackExhausted)
        err = cls(
            f"metric family matches neither descriptors-first nor samples-only: {deeper.msg}",
            deeper.pos, self.src, (first, second), deeper.expected,
        )
        err.context.extend(deeper.context)
        return err

    def metric_descriptor(self) -> MetricDescriptor:
        with self._context("metric_descriptor"):
            start = self.i
            self._eat(HASH)
            self._eat(SP)
            kind = self._descriptor_kind()
            self._eat(SP)
            name = self.metricname()
            self._eat(SP)
            if kind is DescriptorKind.TYPE:
                type_start = self.i
                metric_type = self.metric_type()
                type_span = self._span(type_start)
                self._eat(LF)
                return TypeDescriptor(self._span(start), name, metric_type, type_span)
            if kind is DescriptorKind.HELP:
                help_text = self.help_escaped_string()
                self._eat(LF)
                return HelpDescriptor(self._span(start), name, help_text)
            unit = self._terminal(match_metricname_chars, "unit")
            self._eat(LF)
            return UnitDescriptor(self._span(start), name, unit)

    def _descriptor_kind(self) -> DescriptorKind:
        for kind in _DESCRIPTOR_KINDS:
            if self._try_eat(kind.value):
                return kind
        raise self._err("TYPE, HELP or UNIT", *(k.value for k in _DESCRIPTOR_KINDS))

    def metric_type(self) -> MetricType:
        with self._context("metric_type"):
            for mt in _METRIC_TYPES:
                if self._try_eat(mt.value):
                    return mt
            raise self._err("metric type", *(mt.value for mt in _METRIC_TYPES))

    def sample(self) -> Sample:
        with self._context("sample"):
            start = self.i
            name = self.metricname()
            labels = self._opt(self.labels)
            self._eat(SP)
            number = self.number()
            timestamp = self._opt(self._spaced_timestamp)
            exemplar = self._opt(self.exemplar)
            self._eat(LF)
            return Sample(self._span(start), name, number, labels, timestamp, exemplar)

    def exemplar(self) -> Exemplar:
        with self._context("exemplar"):
            start = self.i
            self._eat(SP)
            self._eat(HASH)
            self._eat(SP)
            labels = self.labels()
            self._eat(SP)
            number = self.number()
            timestamp = self._opt(self._spaced_timestamp)
            return Exemplar(self._span(start), labels, number, timestamp)

    def _spaced_timestamp(self) -> Span:
        self._eat(SP)
        return self.timestamp()

    def labels(self) -> Labels:
        with self._context("labels"):
            start = self.i
            self._eat("{")
            items = self._separated0(self.label, COMMA)
            self._eat("}")
            return Labels(self._span(start), tuple(items))

    def label(self) -> Label:
        with self._context("label"):
            start = self.i
            name = self.label_name()
            self._eat(EQ)
            self._eat(DQUOTE)
            value = self.escaped_string()
            self._eat(DQUOTE)
            return Label(self._span(start), name, value)

    # ---- terminals ----
    def number(self) -> Span:
        with self._context("number"):
            return self._terminal(match_number, "number")

    def realnumber(self) -> Span:
        with self._context("realnumber"):
            return self._terminal(match_realnumber, "real number")

    timestamp = realnumber

    def metricname(self) -> Span:
        with self._context("metricname"):
            return self._terminal(match_metricname, "metric name")

    def label_name(self) -> Span:
        with self._context("label_name"):
            return self._terminal(match_label_name, "label name")

    def escaped_string(self) -> EscapedString:
        with self._context("escaped_string"):
            return self._fragments(scan_escaped_string, EscapedString)

    def help_escaped_string(self) -> HelpEscapedString:
        with self._context("help_escaped_string"):
            return self._fragments(scan_help_escaped_string, HelpEscapedString)

    def _fragments(self, scanner, cls):
        start = self.i
        raw, self.i = scanner(self.src, start)
        frags = tuple(Fragment(kind, Span(s, e, self.src)) for s, e, kind in raw)
        return cls(self._span(start), frags)

    # ---- driver ----
    def run(self, production: str):
        """Run `production` and require it to consume the rest of the buffer."""
        if production not in PRODUCTIONS:
            raise ValueError(f"unknown production {production!r}")
        start = self.i
        node = getattr(self, production)()
        if self.i != self.n:
            err = TrailingInput(
                f"unexpected trailing input after {production}",
                self.i, self.src, "end of input",
            )
            err.add_context(production, start)
            raise err
        return node


# ---- entry points ----

def parse_production(production: str, buf: Union[Buffer, Input]):
    """Parse the whole of `buf` as `production` (see PRODUCTIONS)."""
    return Parser(buf).run(production)


def parse(buf: Union[Buffer, Input]) -> Exposition:
    """Parse a complete OpenMetrics text exposition.

    Raises a `ParseError` subclass on any syntax error. The returned tree
    references `buf` and must not outlive it.
    """
    tree = parse_production("exposition", buf)
    if logger.isEnabledFor(logging.DEBUG):
        fams = tree.metricset.families
        logger.debug("parsed exposition: families=%d samples=%d",
                     len(fams), sum(len(f.samples) for f in fams))
    return tree


parse_exposition = parse

def parse_metricset(buf): return parse_production("metricset", buf)
def parse_metricfamily(buf): return parse_production("metricfamily", buf)
def parse_metric_descriptor(buf): return parse_production("metric_descriptor", buf)
def parse_metric_type(buf): return parse_production("metric_type", buf)
def parse_sample(buf): return parse_production("sample", buf)
def parse_exemplar(buf): return parse_production("exemplar", buf)
def parse_labels(buf): return parse_production("labels", buf)
def parse_label(buf): return parse_production("label", buf)
def parse_number(buf): return parse_production("number", buf)
def parse_realnumber(buf): return parse_production("realnumber", buf)
def parse_timestamp(buf): return parse_production("timestamp", buf)
def parse_metricname(buf): return parse_production("metricname", buf)
def parse_label_name(buf): return parse_production("label_name", buf)
def parse_escaped_string(buf): return parse_production("escaped_string", buf)
def parse_help_escaped_string(buf): return parse_production("help_escaped_string", buf)
