"""cwtools_check.domain.offense

Raw analyzer offenses.

CWTools writes one JSON result document per run::

    {"files": [{"file": "/ws/common/x.txt",
                "errors": [{"severity": "Error", "category": "CW100",
                            "message": "...",
                            "position": {"startLine": 3, "endLine": 3,
                                         "startColumn": 2, "endColumn": 5}}]}]}

Parsing is deliberately forgiving. The report pipeline must be total over any
structurally valid document, so malformed fields inside an offense become
``None`` or ``""`` here and are resolved to defaults later. Only a document
whose overall shape is wrong is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from cwtools_check.errors import AnalyzerError


def _safe_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    # bool is a subclass of int; treat as invalid.
    if isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _as_str(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


@dataclass(frozen=True)
class Position:
    """Location of an offense. Any field may be missing in analyzer output."""

    start_line: Optional[int] = None
    end_line: Optional[int] = None
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Any) -> "Position":
        if not isinstance(d, Mapping):
            return cls()
        return cls(
            start_line=_safe_int(d.get("startLine")),
            end_line=_safe_int(d.get("endLine")),
            start_column=_safe_int(d.get("startColumn")),
            end_column=_safe_int(d.get("endColumn")),
        )


@dataclass(frozen=True)
class Offense:
    """One diagnostic finding as reported by the analyzer."""

    file: str
    severity: str
    category: str
    message: str
    position: Position = field(default_factory=Position)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any], *, file: str) -> "Offense":
        return cls(
            file=file,
            severity=_as_str(d.get("severity")),
            category=_as_str(d.get("category")),
            message=_as_str(d.get("message")),
            position=Position.from_dict(d.get("position")),
        )


def offenses_from_document(doc: Any) -> List[Offense]:
    """Flatten an analyzer result document into offenses, in document order.

    Raises :class:`AnalyzerError` if the document does not have the expected
    top-level shape. Entries inside ``files`` that are not mappings are
    skipped.
    """
    if not isinstance(doc, Mapping):
        raise AnalyzerError(f"Analyzer result is not a JSON object (got {type(doc).__name__}).")
    files = doc.get("files")
    if not isinstance(files, list):
        raise AnalyzerError("Analyzer result has no 'files' list.")

    out: List[Offense] = []
    for entry in files:
        if not isinstance(entry, Mapping):
            continue
        path = _as_str(entry.get("file"))
        for raw in entry.get("errors") or []:
            if isinstance(raw, Mapping):
                out.append(Offense.from_dict(raw, file=path))
    return out

