"""pipeline.report.aggregate

One report pass: offenses -> annotations + counts + conclusion -> pages.

Filtering, classification, counting and annotation building happen in a
single loop over the offenses; batching runs afterwards on the finished list
so every page can share the final summary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, List, Mapping, Tuple

from cwtools_check.domain import Annotation, AnnotationLevel, Conclusion, Offense, Page

from .annotations import build_annotation
from .batching import MAX_ANNOTATIONS_PER_PAGE, batch_annotations
from .filters import freeze_categories, iter_accepted
from .verdict import Counts, VerdictTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSettings:
    """Everything the report pass needs to know about the run, and nothing else."""

    check_title: str
    workspace: str = ""
    suppressed_files: FrozenSet[str] = frozenset()
    suppressed_categories: Mapping[AnnotationLevel, FrozenSet[str]] = field(default_factory=dict)
    changed_only: bool = False
    page_size: int = MAX_ANNOTATIONS_PER_PAGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "suppressed_files", frozenset(self.suppressed_files))
        object.__setattr__(self, "suppressed_categories", freeze_categories(self.suppressed_categories))


@dataclass(frozen=True)
class Report:
    annotations: Tuple[Annotation, ...]
    counts: Counts
    conclusion: Conclusion
    pages: Tuple[Page, ...]


def build_report(
    offenses: Iterable[Offense],
    settings: ReportSettings,
    *,
    changed_files: AbstractSet[str] = frozenset(),
) -> Report:
    tracker = VerdictTracker()
    annotations: List[Annotation] = []

    for offense, path, level in iter_accepted(
        offenses,
        workspace=settings.workspace,
        suppressed_files=settings.suppressed_files,
        suppressed_categories=settings.suppressed_categories,
        changed_only=settings.changed_only,
        changed_files=changed_files,
        tracker=tracker,
    ):
        annotations.append(build_annotation(offense, level, settings.check_title, path=path))

    pages = batch_annotations(
        annotations,
        check_title=settings.check_title,
        counts=tracker.counts,
        page_size=settings.page_size,
    )
    logger.info(
        "%d offense(s) accepted (%s); conclusion=%s; %d page(s)",
        tracker.counts.total,
        ", ".join(f"{k}={v}" for k, v in tracker.counts.as_dict().items()),
        tracker.conclusion.value,
        len(pages),
    )
    return Report(
        annotations=tuple(annotations),
        counts=tracker.counts,
        conclusion=tracker.conclusion,
        pages=tuple(pages),
    )
