"""tools/github/api.py

All GitHub check-run HTTP calls live here.

Design goals:
  - Keep network I/O separated from report building and formatting.
  - Fail fast: any non-2xx response raises :class:`PublishError`. There is
    no retry layer; the orchestrator decides what a failure means for the run.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from cwtools_check.errors import PublishError

from .types import GitHubConfig

logger = logging.getLogger(__name__)

USER_AGENT = "cwtools-action"
REQUEST_TIMEOUT_SECONDS = 30


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _headers(cfg: GitHubConfig) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/vnd.github.antiope-preview+json",
        "Authorization": f"Bearer {cfg.token}",
        "User-Agent": USER_AGENT,
    }


def _check_runs_url(cfg: GitHubConfig, check_run_id: Optional[int] = None) -> str:
    url = f"{cfg.api_url.rstrip('/')}/repos/{cfg.owner}/{cfg.repo}/check-runs"
    return url if check_run_id is None else f"{url}/{check_run_id}"


def _send(method: str, url: str, cfg: GitHubConfig, body: Dict[str, Any]) -> requests.Response:
    try:
        resp = requests.request(
            method,
            url,
            data=json.dumps(body),
            headers=_headers(cfg),
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise PublishError(f"{method} {url} failed: {e}") from e

    if resp.status_code >= 300:
        logger.error("%s %s -> HTTP %d: %s", method, url, resp.status_code, resp.text[:2000])
        raise PublishError(
            f"{method} {url} returned HTTP {resp.status_code} {resp.reason}",
            status_code=resp.status_code,
            body=resp.text,
        )
    return resp


class CheckRunPublisher:
    """One check run on one commit: create, stream output pages, complete."""

    def __init__(self, cfg: GitHubConfig, *, name: str, head_sha: str) -> None:
        self.cfg = cfg
        self.name = name
        self.head_sha = head_sha
        self.check_run_id: Optional[int] = None

    def create(self) -> int:
        body = {
            "name": self.name,
            "head_sha": self.head_sha,
            "status": "in_progress",
            "started_at": _now_iso(),
        }
        resp = _send("POST", _check_runs_url(self.cfg), self.cfg, body)
        try:
            self.check_run_id = int(resp.json()["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise PublishError(f"Check run created but response has no id: {e}") from e
        logger.info("Created check run %s for %s", self.check_run_id, self.head_sha)
        return self.check_run_id

    def _require_id(self) -> int:
        if self.check_run_id is None:
            raise PublishError("Check run has not been created yet.")
        return self.check_run_id

    def update(self, output: Dict[str, Any]) -> None:
        body = {
            "name": self.name,
            "head_sha": self.head_sha,
            "output": output,
        }
        _send("PATCH", _check_runs_url(self.cfg, self._require_id()), self.cfg, body)

    def complete(self, conclusion: str) -> None:
        body = {
            "name": self.name,
            "head_sha": self.head_sha,
            "status": "completed",
            "completed_at": _now_iso(),
            "conclusion": conclusion,
        }
        _send("PATCH", _check_runs_url(self.cfg, self._require_id()), self.cfg, body)
        logger.info("Check run %s completed with conclusion=%s", self.check_run_id, conclusion)
