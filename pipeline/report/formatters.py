"""pipeline.report.formatters

Render batched pages for a specific consumer.

Both formatters read the same pages; which one is used is decided once, by
the orchestrator for the current CI host.

* :class:`CheckRunFormatter` - incremental check-run updates followed by one
  terminal payload that carries only the conclusion.
* :class:`LineRecordFormatter` - one ``path:line:col:code:label message`` line
  per annotation, for line-based annotation consumers (reviewdog ``efm``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from cwtools_check.domain import Annotation, AnnotationLevel, Conclusion, Page

SEVERITY_CODES: Dict[AnnotationLevel, str] = {
    AnnotationLevel.FAILURE: "E",
    AnnotationLevel.WARNING: "W",
    AnnotationLevel.NOTICE: "I",
}

LEVEL_LABELS: Dict[AnnotationLevel, str] = {
    AnnotationLevel.FAILURE: "❌ Failure: ",
    AnnotationLevel.WARNING: "⚠️ Warning: ",
    AnnotationLevel.NOTICE: "ℹ️ Notice: ",
}


@dataclass(frozen=True)
class CheckRunPayloads:
    updates: List[Dict[str, Any]] = field(default_factory=list)
    final: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LineRecords:
    lines: List[str] = field(default_factory=list)


class ReportFormatter(ABC):
    @abstractmethod
    def format(self, pages: Sequence[Page], conclusion: Conclusion) -> Any:
        raise NotImplementedError


class CheckRunFormatter(ReportFormatter):
    def format(self, pages: Sequence[Page], conclusion: Conclusion) -> CheckRunPayloads:
        return CheckRunPayloads(
            updates=[page.to_output() for page in pages],
            final={"conclusion": conclusion.value},
        )


def format_line_record(annotation: Annotation) -> str:
    col = annotation.start_column if annotation.start_column is not None else 1
    return (
        f"{annotation.path}:{annotation.start_line}:{col}:"
        f"{SEVERITY_CODES[annotation.level]}:{LEVEL_LABELS[annotation.level]}{annotation.message}"
    )


class LineRecordFormatter(ReportFormatter):
    """The conclusion is not part of the line format and is ignored."""

    def format(self, pages: Sequence[Page], conclusion: Conclusion) -> LineRecords:
        return LineRecords(
            lines=[format_line_record(a) for page in pages for a in page.annotations]
        )
