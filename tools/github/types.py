from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GitHubConfig:
    """Connection settings for check-run API calls."""
    api_url: str
    token: str
    owner: str
    repo: str


@dataclass(frozen=True)
class GitHubEvent:
    """The parts of a workflow event payload a check run cares about."""
    owner: str
    repo: str
    sha: str
    before: Optional[str] = None
    base_ref: Optional[str] = None
    head_ref: Optional[str] = None

    @property
    def is_pull_request(self) -> bool:
        return bool(self.base_ref and self.head_ref)
