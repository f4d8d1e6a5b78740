"""cwtools_check.domain.annotation

Annotations, verdicts and pages as published to a CI host.

The string values of :class:`AnnotationLevel` and :class:`Conclusion` are wire
vocabulary for the check-run API and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class AnnotationLevel(str, Enum):
    FAILURE = "failure"
    WARNING = "warning"
    NOTICE = "notice"


class Conclusion(str, Enum):
    SUCCESS = "success"
    NEUTRAL = "neutral"
    FAILURE = "failure"


@dataclass(frozen=True)
class Annotation:
    """A renderable finding with a normalized location.

    ``start_column``/``end_column`` are either both set (column-precise
    annotation on a single line) or both ``None`` (line-range annotation).
    """

    path: str
    title: str
    start_line: int
    end_line: int
    level: AnnotationLevel
    message: str
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def has_columns(self) -> bool:
        return self.start_column is not None and self.end_column is not None

    def to_dict(self) -> Dict[str, Any]:
        """Check-run API shape. Column keys are omitted for line-range annotations."""
        out: Dict[str, Any] = {
            "path": self.path,
            "title": self.title,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }
        if self.has_columns:
            out["start_column"] = self.start_column
            out["end_column"] = self.end_column
        out["annotation_level"] = self.level.value
        out["message"] = self.message
        return out


@dataclass(frozen=True)
class Page:
    """At most one API request worth of annotations plus the run-wide summary."""

    title: str
    summary: str
    annotations: Tuple[Annotation, ...] = field(default_factory=tuple)

    def to_output(self) -> Dict[str, Any]:
        annotations: List[Dict[str, Any]] = [a.to_dict() for a in self.annotations]
        return {
            "title": self.title,
            "summary": self.summary,
            "annotations": annotations,
        }
