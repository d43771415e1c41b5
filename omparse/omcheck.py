# omparse/omcheck.py
"""omcheck – OpenMetrics exposition checker CLI

Usage)
    $ python -m omparse.omcheck check tests/data/overall_structure.txt -D
    $ python -m omparse.omcheck dump  tests/data/overall_structure.txt --bytes

Commands
--------
- check : parse the file and print a one-line summary
- dump  : print every descriptor and sample line with its position

Debug mode (-D/--debug) turns on DEBUG logging and prints progress to stderr.
Exit status is 0 on success and 2 on any error.
"""

from __future__ import annotations
import argparse
import logging
import sys
from bisect import bisect_right
from typing import List, Optional

# ------------------------------
# helpers
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

# ------------------------------
# pipeline
# ------------------------------

def _load_tree(path: str, debug: bool, binary: bool):
    from .grammar.loader import load_exposition
    from .grammar.parser import parse

    buf = load_exposition(path, binary=binary)
    if debug: _eprint("[DEBUG] loaded %s | %d %s" %
                      (path, len(buf), "bytes" if binary else "chars"))

    tree = parse(buf)
    if debug: _eprint("[DEBUG] exposition parsed | families=%d" %
                      len(tree.metricset.families))
    return tree


def _payload(desc) -> str:
    from .grammar.ast import DescriptorKind
    if desc.kind is DescriptorKind.TYPE:
        return desc.metric_type.value
    if desc.kind is DescriptorKind.HELP:
        return repr(desc.help.decode())
    return str(desc.unit)


def _line_starts(buf) -> List[int]:
    """Offsets where each line begins, for bisecting positions to lines."""
    nl = b"\n" if isinstance(buf, (bytes, bytearray)) else "\n"
    starts = [0]
    i = buf.find(nl)
    while i >= 0:
        starts.append(i + 1)
        i = buf.find(nl, i + 1)
    return starts


def _dump_lines(tree):
    src = tree.span.source
    starts = _line_starts(src.buf)

    def at(pos: int) -> str:
        line = bisect_right(starts, pos)
        return f"@{line}:{pos - starts[line - 1] + 1}"

    i = 0
    for fam in tree.metricset.families:
        for desc in fam.descriptors:
            yield (f"{i:03d}: {desc.kind.value:<6} {str(desc.metricname):<24} "
                   f"{_payload(desc)}  {at(desc.span.start)}")
            i += 1
        for s in fam.samples:
            labels = str(s.labels.span) if s.labels is not None else ""
            extra = f" ts={s.timestamp}" if s.timestamp is not None else ""
            if s.exemplar is not None:
                extra += f" exemplar={s.exemplar.labels.span} {s.exemplar.number}"
            yield (f"{i:03d}: {'SAMPLE':<6} {str(s.metricname) + labels:<24} "
                   f"{s.number}{extra}  {at(s.span.start)}")
            i += 1

# ------------------------------
# commands
# ------------------------------

def cmd_check(args) -> int:
    try:
        tree = _load_tree(args.file, debug=args.debug, binary=args.bytes)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    fams = tree.metricset.families
    n_desc = sum(len(f.descriptors) for f in fams)
    n_samples = sum(len(f.samples) for f in fams)
    n_exemplars = sum(1 for f in fams for s in f.samples if s.exemplar is not None)
    print(f"[CHECK OK] families={len(fams)} descriptors={n_desc} "
          f"samples={n_samples} exemplars={n_exemplars}")
    return 0


def cmd_dump(args) -> int:
    """Print one line per descriptor/sample of the parsed file."""
    try:
        tree = _load_tree(args.file, debug=args.debug, binary=args.bytes)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
        return 2
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    try:
        for line in _dump_lines(tree):
            print(line)
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2
    return 0

# ------------------------------
# entry point
# ------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="omcheck", description="OpenMetrics text exposition checker")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="parse a file and report whether it is well-formed")
    p_check.add_argument("file", help="exposition file")
    p_check.add_argument("--bytes", action="store_true", help="parse the raw bytes instead of decoded text")
    p_check.add_argument("-D", "--debug", action="store_true", help="verbose debug output")
    p_check.set_defaults(func=cmd_check)

    p_dump = sub.add_parser("dump", help="print every descriptor and sample with its position")
    p_dump.add_argument("file", help="exposition file")
    p_dump.add_argument("--bytes", action="store_true", help="parse the raw bytes instead of decoded text")
    p_dump.add_argument("-D", "--debug", action="store_true", help="verbose debug output")
    p_dump.set_defaults(func=cmd_dump)

    args = ap.parse_args(argv)
    _setup_logging(args.debug)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
