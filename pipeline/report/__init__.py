"""pipeline.report

The diagnostic aggregation and reporting core.

Data flows one way::

    offenses -> filter/classify/count -> annotations -> pages -> formatter

Nothing in this package performs IO or reads process state; everything it
needs arrives as arguments (see :class:`ReportSettings`).
"""

from __future__ import annotations

from .aggregate import Report, ReportSettings, build_report
from .annotations import build_annotation
from .batching import MAX_ANNOTATIONS_PER_PAGE, batch_annotations, format_summary
from .filters import filter_offenses, freeze_categories, normalize_path
from .formatters import (
    CheckRunFormatter,
    CheckRunPayloads,
    LineRecordFormatter,
    LineRecords,
    ReportFormatter,
)
from .severity import map_severity
from .verdict import Counts, VerdictTracker

__all__ = [
    "MAX_ANNOTATIONS_PER_PAGE",
    "CheckRunFormatter",
    "CheckRunPayloads",
    "Counts",
    "LineRecordFormatter",
    "LineRecords",
    "Report",
    "ReportFormatter",
    "ReportSettings",
    "VerdictTracker",
    "batch_annotations",
    "build_annotation",
    "build_report",
    "filter_offenses",
    "freeze_categories",
    "format_summary",
    "map_severity",
    "normalize_path",
]
