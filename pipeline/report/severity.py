"""pipeline.report.severity

Raw analyzer severity -> annotation level.
"""

from __future__ import annotations

from typing import Dict, Optional

from cwtools_check.domain import AnnotationLevel

SEVERITY_LEVELS: Dict[str, AnnotationLevel] = {
    "error": AnnotationLevel.FAILURE,
    "warning": AnnotationLevel.WARNING,
    "information": AnnotationLevel.NOTICE,
    "hint": AnnotationLevel.NOTICE,
}


def map_severity(severity: Optional[str]) -> AnnotationLevel:
    """Case-insensitive lookup; anything unrecognized (including empty) is a notice."""
    if not isinstance(severity, str):
        return AnnotationLevel.NOTICE
    return SEVERITY_LEVELS.get(severity.lower(), AnnotationLevel.NOTICE)
