"""pipeline.report.batching

Split annotations into API-sized pages.

The check-run API accepts at most 50 annotations per request. Every page of a
run carries the same summary, built once from the final counts.
"""

from __future__ import annotations

from typing import List, Sequence

from cwtools_check.domain import Annotation, Page

from .verdict import Counts

MAX_ANNOTATIONS_PER_PAGE = 50


def format_summary(counts: Counts) -> str:
    return (
        f"**{counts.total}** offense(s) found:\n"
        f"* {counts.failure} failure(s)\n"
        f"* {counts.warning} warning(s)\n"
        f"* {counts.notice} notice(s)"
    )


def batch_annotations(
    annotations: Sequence[Annotation],
    *,
    check_title: str,
    counts: Counts,
    page_size: int = MAX_ANNOTATIONS_PER_PAGE,
) -> List[Page]:
    """Contiguous, order-preserving chunks of at most *page_size*.

    No annotations means no pages: "nothing to send" is not the same as a
    report with zero findings.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    summary = format_summary(counts)
    return [
        Page(
            title=check_title,
            summary=summary,
            annotations=tuple(annotations[i:i + page_size]),
        )
        for i in range(0, len(annotations), page_size)
    ]
