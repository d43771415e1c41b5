"""Exposition file loader."""

from __future__ import annotations
from pathlib    import Path
from typing     import Union


def load_exposition(path: Union[str, Path], binary: bool = False) -> Union[str, bytes]:
    """
    Read an exposition file as-is.

    No newline translation: a CRLF payload must reach the parser unchanged so
    that it is rejected there.
    """
    data = Path(path).read_bytes()
    if binary:
        return data
    return data.decode("utf-8")
