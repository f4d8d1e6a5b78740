"""cwtools_check.io.fs

Atomic, stable filesystem writers.

Why this module exists
----------------------
The GitLab flow hands ``errors.txt`` to a line-based annotation consumer that
may start reading as soon as the file appears. Writing to a temp file and
``os.replace()``-ing it into place means a reader never sees a half-written
report, even if the process is interrupted mid-write.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Optional


def _atomic_write_text(
    path: Path,
    write_fn,
    *,
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> None:
    """Write a file atomically by writing to a temp file and os.replace()."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{p.name}.", suffix=".tmp", dir=str(p.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline=newline) as f:
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, p)
    finally:
        # If os.replace fails, best-effort cleanup of the temp file.
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


def write_lines_atomic(path: Path, lines: Iterable[str], *, encoding: str = "utf-8") -> None:
    """Write one record per line (``\\n`` terminated), atomically."""

    def _write(f) -> None:
        for line in lines:
            f.write(line)
            f.write("\n")

    _atomic_write_text(Path(path), _write, encoding=encoding, newline="\n")


def write_json_atomic(
    path: Path,
    data: Any,
    *,
    indent: int = 2,
    ensure_ascii: bool = False,
    encoding: str = "utf-8",
) -> None:
    """Write JSON atomically with stable formatting."""

    def _write(f) -> None:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii)
        f.write("\n")

    _atomic_write_text(Path(path), _write, encoding=encoding)


def read_json(path: Path, *, encoding: str = "utf-8") -> Any:
    """Read JSON from disk."""

    with Path(path).open("r", encoding=encoding) as f:
        return json.load(f)
