"""pipeline.report.annotations

Offense -> :class:`Annotation`.

This is total: bad position data never raises, it degrades to a line-range
annotation. Rules:

* missing or non-positive start line -> line 1; missing end line, or one
  before the start line -> the start line
* missing or non-positive columns count as column 1
* columns are kept only when the offense sits on one line and
  ``start_column <= end_column``; otherwise they are dropped
"""

from __future__ import annotations

from typing import Optional

from cwtools_check.domain import Annotation, AnnotationLevel, Offense


def _positive(v: Optional[int]) -> int:
    if v is None or v < 1:
        return 1
    return v


def format_message(category: str, message: str) -> str:
    return f"{category}: {message}"


def build_annotation(
    offense: Offense,
    level: AnnotationLevel,
    check_title: str,
    *,
    path: Optional[str] = None,
) -> Annotation:
    pos = offense.position
    start_line = _positive(pos.start_line)
    end_line = pos.end_line if pos.end_line is not None else start_line
    if end_line < start_line:
        end_line = start_line

    start_column: Optional[int] = None
    end_column: Optional[int] = None
    if start_line == end_line:
        sc, ec = _positive(pos.start_column), _positive(pos.end_column)
        if sc <= ec:
            start_column, end_column = sc, ec

    return Annotation(
        path=offense.file if path is None else path,
        title=check_title,
        start_line=start_line,
        end_line=end_line,
        level=level,
        message=format_message(offense.category, offense.message),
        start_column=start_column,
        end_column=end_column,
    )
