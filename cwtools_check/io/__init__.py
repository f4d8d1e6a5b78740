"""cwtools_check.io

Filesystem helpers shared by the analyzer adapter and the output sinks.
"""

from __future__ import annotations

from .fs import read_json, write_json_atomic, write_lines_atomic

__all__ = ["read_json", "write_json_atomic", "write_lines_atomic"]
