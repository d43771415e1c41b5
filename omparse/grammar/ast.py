# omparse/grammar/ast.py
"""Parse tree nodes.

All nodes are frozen and hold no text of their own. Anything textual is a
`Span` into the buffer given to the parser; the buffer must outlive the tree.

    Exposition
      Metricset
        Metricfamily
          MetricDescriptor (TypeDescriptor | HelpDescriptor | UnitDescriptor)*
          Sample*
            Labels? -> Label* -> EscapedString
            Exemplar? -> Labels
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Iterator, Optional, Tuple, Union

from ..input import Input
from ..lex.escape import FragmentKind


@dataclass(frozen=True)
class Span:
    """[start, end) range of the source buffer."""
    start: int
    end: int
    source: Input = field(compare=False, repr=False)

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def value(self) -> Union[str, bytes]:
        """The covered slice, in the buffer's own type (copied on access)."""
        return self.source.slice(self.start, self.end)

    def __str__(self) -> str:
        return self.source.text(self.start, self.end)


# ---- escaped strings ----

@dataclass(frozen=True)
class Fragment:
    kind: FragmentKind
    span: Span

    def decode(self) -> str:
        if self.kind is FragmentKind.NORMAL:
            return str(self.span)
        return self.kind.replacement


@dataclass(frozen=True)
class EscapedString:
    """Label value between the quotes, split into fragments."""
    span: Span
    fragments: Tuple[Fragment, ...]

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)

    def decode(self) -> str:
        """Build the unescaped text. This is the only place text is copied.

        Byte buffers are decoded as UTF-8; invalid sequences become U+FFFD,
        the same way `Span` renders them.
        """
        if isinstance(self.span.source.buf, str):
            return "".join(f.decode() for f in self.fragments)
        out = bytearray()
        for f in self.fragments:
            if f.kind is FragmentKind.NORMAL:
                out += f.span.value
            else:
                out += f.kind.replacement.encode("ascii")
        return out.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class HelpEscapedString(EscapedString):
    """HELP text: only `\\n` and `\\\\` are escapes, quotes are plain text."""


# ---- labels ----

@dataclass(frozen=True)
class Label:
    span: Span
    name: Span
    value: EscapedString


@dataclass(frozen=True)
class Labels:
    span: Span
    labels: Tuple[Label, ...]

    def __iter__(self) -> Iterator[Label]:
        return iter(self.labels)

    def __len__(self) -> int:
        return len(self.labels)


# ---- samples ----

@dataclass(frozen=True)
class Exemplar:
    span: Span
    labels: Labels
    number: Span
    timestamp: Optional[Span] = None


@dataclass(frozen=True)
class Sample:
    span: Span
    metricname: Span
    number: Span
    labels: Optional[Labels] = None
    timestamp: Optional[Span] = None
    exemplar: Optional[Exemplar] = None


# ---- descriptors ----

class MetricType(Enum):
    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    GAUGEHISTOGRAM = "gaugehistogram"
    STATESET = "stateset"
    INFO = "info"
    SUMMARY = "summary"
    UNKNOWN = "unknown"


class DescriptorKind(Enum):
    TYPE = "TYPE"
    HELP = "HELP"
    UNIT = "UNIT"


@dataclass(frozen=True)
class MetricDescriptor:
    span: Span
    metricname: Span

    kind: ClassVar[Optional[DescriptorKind]] = None


@dataclass(frozen=True)
class TypeDescriptor(MetricDescriptor):
    metric_type: MetricType
    metric_type_span: Span
    kind = DescriptorKind.TYPE


@dataclass(frozen=True)
class HelpDescriptor(MetricDescriptor):
    help: HelpEscapedString
    kind = DescriptorKind.HELP


@dataclass(frozen=True)
class UnitDescriptor(MetricDescriptor):
    unit: Span
    kind = DescriptorKind.UNIT


# ---- structure ----

@dataclass(frozen=True)
class Metricfamily:
    span: Span
    descriptors: Tuple[MetricDescriptor, ...]
    samples: Tuple[Sample, ...]

    @property
    def name(self) -> str:
        """Name from the first descriptor, else from the first sample.

        Sample names are returned as written (no `_total`/`_count` suffix
        stripping; that is semantic validation).
        """
        if self.descriptors:
            return str(self.descriptors[0].metricname)
        return str(self.samples[0].metricname)


@dataclass(frozen=True)
class Metricset:
    span: Span
    families: Tuple[Metricfamily, ...]

    def __iter__(self) -> Iterator[Metricfamily]:
        return iter(self.families)

    def __len__(self) -> int:
        return len(self.families)


@dataclass(frozen=True)
class Exposition:
    span: Span
    metricset: Metricset
