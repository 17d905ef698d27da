"""Debug helpers."""

from __future__ import annotations

import itertools
import threading
from pathlib import Path

_counter = itertools.count()
_counter_lock = threading.Lock()


def dump(file_name: str, data: bytes, seq: bool = False, directory: str | Path = "./dump") -> Path:
    """Write data under directory and return the file path.

    With seq, each call writes a new numbered file; otherwise data is appended
    to a single file.
    """
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    if seq:
        with _counter_lock:
            index = next(_counter)
        path = folder / f"{file_name}-{index}.dump"
        path.write_bytes(data)
    else:
        path = folder / f"{file_name}.dump"
        with path.open("ab") as handle:
            handle.write(data)
    return path