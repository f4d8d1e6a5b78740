"""cwtools_check.errors

Error taxonomy for a check run.

Only two kinds of failure ever leave a module:

* :class:`ConfigurationError` - the run cannot start (missing token, bad JSON
  in an input variable). Raised before any collaborator is called.
* :class:`CollaboratorError` - an external collaborator (analyzer, git, the
  check-run API) reported a non-success result. Fatal for the current run.

Data anomalies in analyzer output (unknown severities, odd positions) are
never errors; they degrade to defaults where they are read.
"""

from __future__ import annotations

from typing import Optional


class CwtoolsCheckError(Exception):
    """Base class for all errors raised by this project."""


class ConfigurationError(CwtoolsCheckError, ValueError):
    """Required configuration is missing or malformed."""


class CollaboratorError(CwtoolsCheckError, RuntimeError):
    """An external collaborator returned a non-success result."""


class AnalyzerError(CollaboratorError):
    """The static-analysis run did not produce a usable result document."""


class ChangeSetError(CollaboratorError):
    """The changed-file set could not be computed."""


class PublishError(CollaboratorError):
    """The check-run API rejected a request or could not be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
