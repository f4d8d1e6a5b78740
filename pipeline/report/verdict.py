"""pipeline.report.verdict

Running counts and the overall conclusion for one check run.

The tracker is fed one level per *accepted* offense, in processing order, so
the verdict is decided in the same single pass that builds annotations. The
conclusion only ever moves up: success -> neutral -> failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict

from cwtools_check.domain import AnnotationLevel, Conclusion


@dataclass(frozen=True)
class Counts:
    failure: int = 0
    warning: int = 0
    notice: int = 0

    def plus(self, level: AnnotationLevel) -> "Counts":
        """A copy with one more offense at *level*."""
        name = level.value
        return replace(self, **{name: getattr(self, name) + 1})

    def get(self, level: AnnotationLevel) -> int:
        return getattr(self, level.value)

    @property
    def total(self) -> int:
        return self.failure + self.warning + self.notice

    def as_dict(self) -> Dict[str, int]:
        return {
            AnnotationLevel.FAILURE.value: self.failure,
            AnnotationLevel.WARNING.value: self.warning,
            AnnotationLevel.NOTICE.value: self.notice,
        }


def upgrade_conclusion(current: Conclusion, level: AnnotationLevel) -> Conclusion:
    if level is AnnotationLevel.FAILURE:
        return Conclusion.FAILURE
    if level is AnnotationLevel.WARNING and current is Conclusion.SUCCESS:
        return Conclusion.NEUTRAL
    return current


@dataclass
class VerdictTracker:
    counts: Counts = field(default_factory=Counts)
    conclusion: Conclusion = Conclusion.SUCCESS

    def accept(self, level: AnnotationLevel) -> None:
        self.counts = self.counts.plus(level)
        self.conclusion = upgrade_conclusion(self.conclusion, level)
