"""cwtools_check.domain

Domain objects that form the *contract* between pipeline stages.

Key idea
--------
The analyzer produces offenses in its own JSON shape. The report pipeline
turns those into platform-neutral annotations so that the output formatters
do not need to know analyzer quirks.
"""

from __future__ import annotations

from .annotation import Annotation, AnnotationLevel, Conclusion, Page
from .offense import Offense, Position, offenses_from_document

__all__ = [
    "Annotation",
    "AnnotationLevel",
    "Conclusion",
    "Offense",
    "Page",
    "Position",
    "offenses_from_document",
]
