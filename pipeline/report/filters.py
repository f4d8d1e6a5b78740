"""pipeline.report.filters

Decide which offenses are reported.

Checks run per offense, in input order, and the order of survivors is
preserved (it becomes the annotation order):

1. normalize the path (strip the workspace prefix and whitespace)
2. drop suppressed files
3. in changed-only mode, drop files outside the changed-file set
4. classify the severity
5. drop (level, category) pairs that are suppressed

Suppression keys are annotation levels, not raw severities, so a change in the
analyzer's severity vocabulary never silently re-enables a suppression.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import AbstractSet, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from cwtools_check.domain import AnnotationLevel, Offense

from .severity import map_severity
from .verdict import VerdictTracker


def normalize_path(path: str, workspace: Optional[str]) -> str:
    """Make an analyzer path repository-relative.

    ``/ws/common/a.txt`` with workspace ``/ws`` becomes ``common/a.txt``.
    Paths outside the workspace are only stripped of whitespace.
    """
    p = (path or "").strip()
    if workspace:
        prefix = workspace.rstrip("/") + "/"
        if p.startswith(prefix):
            p = p[len(prefix):]
    return p.strip()


def freeze_categories(
    categories: Mapping[AnnotationLevel, AbstractSet[str]],
) -> Mapping[AnnotationLevel, FrozenSet[str]]:
    """Read-only copy of a level -> categories suppression map."""
    return MappingProxyType({level: frozenset(cats) for level, cats in categories.items()})


def is_category_suppressed(
    level: AnnotationLevel,
    category: str,
    suppressed_categories: Mapping[AnnotationLevel, AbstractSet[str]],
) -> bool:
    # A level with no entry suppresses nothing.
    return category in suppressed_categories.get(level, frozenset())


def iter_accepted(
    offenses: Iterable[Offense],
    *,
    workspace: Optional[str],
    suppressed_files: AbstractSet[str],
    suppressed_categories: Mapping[AnnotationLevel, AbstractSet[str]],
    changed_only: bool = False,
    changed_files: AbstractSet[str] = frozenset(),
    tracker: Optional[VerdictTracker] = None,
) -> Iterator[Tuple[Offense, str, AnnotationLevel]]:
    """Yield ``(offense, normalized_path, level)`` for every accepted offense.

    When *tracker* is given it is fed the level of each accepted offense, so
    counts and the conclusion only ever reflect what is actually reported.
    """
    for offense in offenses:
        path = normalize_path(offense.file, workspace)
        if path in suppressed_files:
            continue
        if changed_only and path not in changed_files:
            continue

        level = map_severity(offense.severity)
        if is_category_suppressed(level, offense.category, suppressed_categories):
            continue

        if tracker is not None:
            tracker.accept(level)
        yield offense, path, level


def filter_offenses(
    offenses: Iterable[Offense],
    *,
    workspace: Optional[str],
    suppressed_files: AbstractSet[str],
    suppressed_categories: Mapping[AnnotationLevel, AbstractSet[str]],
    changed_only: bool = False,
    changed_files: AbstractSet[str] = frozenset(),
    tracker: Optional[VerdictTracker] = None,
) -> List[Offense]:
    """List form of :func:`iter_accepted`; returned offenses are unchanged inputs."""
    return [
        offense
        for offense, _path, _level in iter_accepted(
            offenses,
            workspace=workspace,
            suppressed_files=suppressed_files,
            suppressed_categories=suppressed_categories,
            changed_only=changed_only,
            changed_files=changed_files,
            tracker=tracker,
        )
    ]
