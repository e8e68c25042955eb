"""Reading and writing small text files, with a UTF-8 sanity check."""

from __future__ import annotations

import os
import warnings
from typing import Iterable, Union

PathLike = Union[str, "os.PathLike[str]"]


def valid_utf8(data: Iterable[int]) -> bool:
    """True if the byte values form complete, well-shaped UTF-8 sequences."""
    pending = 0
    for byte in data:
        if not pending:
            if byte >> 5 == 0b110:
                pending = 1
            elif byte >> 4 == 0b1110:
                pending = 2
            elif byte >> 3 == 0b11110:
                pending = 3
            elif byte >> 7:
                return False
        else:
            if byte >> 6 != 0b10:
                return False
            pending -= 1
    return pending == 0


def text_file_read(path: PathLike) -> str:
    """Return the contents of a text file, warning if it is not UTF-8."""
    with open(path, "rb") as handle:
        raw = handle.read()
    if not valid_utf8(raw):
        warnings.warn(f"{os.fspath(path)} is not UTF8", UserWarning, stacklevel=2)
    return raw.decode("utf-8", errors="replace")


def text_file_write(path: PathLike, s: str) -> None:
    """Write ``s`` to a file, replacing what was there."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(s)