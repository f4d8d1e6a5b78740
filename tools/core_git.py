"""tools/core_git.py

Change-set provider: which files did this push / pull request touch?

Two flavours, matching the two GitHub event types we handle:

1) Pull request: every file named in the commits between the base and head
   branches (``git log --name-only origin/<base>..origin/<head>``).
2) Push: the diff between the ``before`` commit of the push and the current
   sha (``git diff --name-only <before> <sha>``).

Paths come back repository-relative, which is also what the report pipeline
produces after stripping the workspace prefix.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, List, Optional

from cwtools_check.errors import ChangeSetError

from .core_cmd import CmdResult, run_cmd

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 120


def pull_request_diff_cmd(base_ref: str, head_ref: str) -> List[str]:
    return ["git", "log", "--name-only", "--pretty=", f"origin/{base_ref}..origin/{head_ref}"]


def push_diff_cmd(before: str, sha: str) -> List[str]:
    return ["git", "diff", "--name-only", before, sha]


def parse_name_only(output: str) -> FrozenSet[str]:
    return frozenset(line.strip() for line in output.splitlines() if line.strip())


def _run_git(cmd: List[str], repo_path: Path) -> CmdResult:
    try:
        res = run_cmd(cmd, cwd=repo_path, timeout_seconds=GIT_TIMEOUT_SECONDS, log_stderr=False)
    except OSError as e:
        raise ChangeSetError(f"Could not run git: {e}") from e
    if res.exit_code != 0:
        raise ChangeSetError(
            f"`{res.command_str}` failed with exit code {res.exit_code}: {res.stderr.strip()}"
        )
    return res


def get_changed_files(
    repo_path: Path,
    *,
    sha: str,
    before: Optional[str] = None,
    base_ref: Optional[str] = None,
    head_ref: Optional[str] = None,
) -> FrozenSet[str]:
    """Return the changed-file set for a pull request (refs given) or a push.

    With nothing to diff against (no refs, no `before` commit) the set is
    empty. Raises :class:`ChangeSetError` if git fails.
    """
    if base_ref and head_ref:
        cmd = pull_request_diff_cmd(base_ref, head_ref)
    elif before:
        cmd = push_diff_cmd(before, sha)
    else:
        logger.warning("No pull request refs and no 'before' commit; the changed-file set is empty.")
        return frozenset()

    res = _run_git(cmd, repo_path)
    files = parse_name_only(res.stdout)
    logger.info("%d changed file(s)", len(files))
    logger.debug("Changed files: %s", sorted(files))
    return files
