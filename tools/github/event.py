"""tools/github/event.py

Parse the workflow event payload (``$GITHUB_EVENT_PATH``).

For pull requests the check is attached to the PR head commit, not the merge
commit the workflow checked out.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from cwtools_check.errors import ConfigurationError
from cwtools_check.io import read_json

from .types import GitHubEvent


def parse_event(payload: Any, *, sha: str) -> GitHubEvent:
    if not isinstance(payload, Mapping):
        raise ConfigurationError("GitHub event payload is not a JSON object.")
    try:
        repository = payload["repository"]
        owner = repository["owner"]["login"]
        repo = repository["name"]
    except (KeyError, TypeError) as e:
        raise ConfigurationError(f"GitHub event payload has no repository owner/name: {e}") from e

    pr = payload.get("pull_request")
    if isinstance(pr, Mapping):
        try:
            return GitHubEvent(
                owner=owner,
                repo=repo,
                sha=pr["head"]["sha"],
                base_ref=pr["base"]["ref"],
                head_ref=pr["head"]["ref"],
            )
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed pull_request in GitHub event payload: {e}") from e

    before = payload.get("before")
    # A new branch is pushed with an all-zero "before"; there is no parent to diff.
    if not isinstance(before, str) or not before.strip("0"):
        before = None
    return GitHubEvent(owner=owner, repo=repo, sha=sha, before=before)


def read_event(path: Path, *, sha: str) -> GitHubEvent:
    try:
        payload = read_json(path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read GitHub event file {path}: {e}") from e
    return parse_event(payload, sha=sha)
