# omparse/__init__.py
"""Zero-copy parser for the OpenMetrics text exposition format.

This package provides:
- buffer adapters for `str` and `bytes` input (`omparse.input`)
- terminal scanners: classifiers, numbers, escaped strings (`omparse.lex`)
- parse tree nodes and the recursive-descent parser (`omparse.grammar`)
- positioned errors with a production context chain (`omparse.errors`)

    >>> tree = parse("# TYPE foo counter\\nfoo_total 1\\n# EOF\\n")
    >>> tree.metricset.families[0].name
    'foo'
"""

from .input import Input, TextInput, BytesInput, as_input
from .errors import (
    ContextFrame, ParseError, UnexpectedToken, IncompleteInput, TrailingInput,
    OrderingFallbackExhausted, IncompleteFallbackExhausted,
)
from .lex import FragmentKind
from .grammar.ast import (
    Span, Fragment, EscapedString, HelpEscapedString, Label, Labels,
    Exemplar, Sample, MetricType, DescriptorKind, MetricDescriptor,
    TypeDescriptor, HelpDescriptor, UnitDescriptor, Metricfamily, Metricset,
    Exposition,
)
from .grammar.parser import (
    Parser, PRODUCTIONS, parse, parse_production, parse_exposition,
    parse_metricset, parse_metricfamily, parse_metric_descriptor,
    parse_metric_type, parse_sample, parse_exemplar, parse_labels,
    parse_label, parse_number, parse_realnumber, parse_timestamp,
    parse_metricname, parse_label_name, parse_escaped_string,
    parse_help_escaped_string,
)
