"""pipeline.orchestrator

Per-CI-host orchestration of one check run.

GitHub::

    read event -> create check run -> [changed files] -> analyzer
      -> report -> PATCH each page -> PATCH conclusion

GitLab::

    analyzer -> report -> errors.txt (one line record per annotation)

Collaborators are keyword arguments defaulting to the real adapters so tests
can swap in fakes. Failure policy: once a GitHub check run exists, any error
is logged, a ``failure`` conclusion is reported on a best-effort basis, and
the original error is re-raised for the CLI to turn into a non-zero exit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, FrozenSet, Optional

from cwtools_check.domain import Conclusion, offenses_from_document
from cwtools_check.errors import CollaboratorError, ConfigurationError
from cwtools_check.io import write_json_atomic, write_lines_atomic

from pipeline.config import RunConfig
from pipeline.report import CheckRunFormatter, LineRecordFormatter, Report, build_report
from tools import cwtools
from tools.core_git import get_changed_files
from tools.github.api import CheckRunPublisher
from tools.github.event import read_event
from tools.github.types import GitHubConfig, GitHubEvent

logger = logging.getLogger(__name__)

GITLAB_OUTPUT_FILENAME = "errors.txt"

Analyzer = Callable[[RunConfig], Any]
ChangeSetProvider = Callable[[RunConfig, GitHubEvent], FrozenSet[str]]
PublisherFactory = Callable[[RunConfig, GitHubEvent], CheckRunPublisher]


# -------------------------
# Default collaborators
# -------------------------

def analyzer_options(config: RunConfig) -> cwtools.AnalyzerOptions:
    return cwtools.AnalyzerOptions(
        workspace=config.workspace,
        game=config.require_game(),
        loc_languages=config.loc_languages,
        mod_path=config.mod_path,
        vanilla_mode=config.vanilla_mode,
        cache_full=config.cache_full,
        cache_file_name=config.cache_file_name,
    )


def run_cwtools_analyzer(config: RunConfig) -> Any:
    return cwtools.execute(analyzer_options(config))


def result_file_analyzer(path: Path) -> Analyzer:
    """An analyzer that reads an existing result document instead of running CWTools."""

    def _load(config: RunConfig) -> Any:
        logger.info("Using existing analyzer result %s", path)
        return cwtools.load_result(Path(path))

    return _load


def git_change_set(config: RunConfig, event: GitHubEvent) -> FrozenSet[str]:
    return get_changed_files(
        Path(config.workspace),
        sha=event.sha,
        before=event.before,
        base_ref=event.base_ref,
        head_ref=event.head_ref,
    )


def github_publisher(config: RunConfig, event: GitHubEvent) -> CheckRunPublisher:
    cfg = GitHubConfig(
        api_url=config.api_url,
        token=config.token or "",
        owner=event.owner,
        repo=event.repo,
    )
    return CheckRunPublisher(cfg, name=config.check_name, head_sha=event.sha)


# -------------------------
# Shared steps
# -------------------------

def analyze(
    config: RunConfig,
    analyzer: Analyzer,
    *,
    changed_files: FrozenSet[str] = frozenset(),
) -> Report:
    document = analyzer(config)
    offenses = offenses_from_document(document)
    logger.info("Analyzer reported %d offense(s)", len(offenses))
    return build_report(offenses, config.report_settings(), changed_files=changed_files)


def write_report_json(path: Path, report: Report) -> None:
    write_json_atomic(
        path,
        {
            "conclusion": report.conclusion.value,
            "counts": report.counts.as_dict(),
            "pages": [page.to_output() for page in report.pages],
        },
    )
    logger.info("Report JSON saved to %s", path)


# -------------------------
# CI flows
# -------------------------

def run_github(
    config: RunConfig,
    *,
    analyzer: Analyzer = run_cwtools_analyzer,
    change_set: ChangeSetProvider = git_change_set,
    publisher_factory: PublisherFactory = github_publisher,
    report_json: Optional[Path] = None,
) -> Report:
    config.validate()
    event = read_event(Path(config.event_path or ""), sha=config.sha)
    if not event.sha:
        raise ConfigurationError("No commit sha: CW_SHA is empty and the event is not a pull request.")

    logger.info("Is pull request..." if event.is_pull_request else "Is commit...")
    logger.info("Annotating only changed files..." if config.changed_only else "Annotating all files...")

    publisher = publisher_factory(config, event)
    publisher.create()
    try:
        changed_files: FrozenSet[str] = frozenset()
        if config.changed_only:
            changed_files = change_set(config, event)

        report = analyze(config, analyzer, changed_files=changed_files)
        payloads = CheckRunFormatter().format(report.pages, report.conclusion)

        logger.info("Updating checks...")
        for output in payloads.updates:
            publisher.update(output)
        publisher.complete(payloads.final["conclusion"])
    except Exception:
        logger.exception("Error during processing")
        try:
            publisher.complete(Conclusion.FAILURE.value)
        except CollaboratorError:
            logger.exception("Could not report the failure conclusion")
        raise

    if report_json is not None:
        write_report_json(report_json, report)
    return report


def run_gitlab(
    config: RunConfig,
    *,
    analyzer: Analyzer = run_cwtools_analyzer,
    output_path: Optional[Path] = None,
    report_json: Optional[Path] = None,
) -> Report:
    out = output_path or Path(config.workspace) / GITLAB_OUTPUT_FILENAME
    try:
        report = analyze(config, analyzer)
        records = LineRecordFormatter().format(report.pages, report.conclusion)
        logger.info("Updating checks...")
        write_lines_atomic(out, records.lines)
        logger.info("Wrote %d line record(s) to %s", len(records.lines), out)
    except Exception:
        logger.exception("Error during processing")
        raise

    if report_json is not None:
        write_report_json(report_json, report)
    return report


def run(
    config: RunConfig,
    *,
    result_file: Optional[Path] = None,
    output_path: Optional[Path] = None,
    report_json: Optional[Path] = None,
) -> Report:
    """Pick the flow for ``config.ci_env``; the only place the CI host is branched on."""
    logger.info("CWTOOLS CHECK")
    logger.info("CI ENVIRONMENT: %s", config.ci_env)

    if result_file is not None:
        analyzer = result_file_analyzer(result_file)
    else:
        # Fail on a missing game before any collaborator call.
        config.require_game()
        analyzer = run_cwtools_analyzer

    if config.ci_env == "github":
        return run_github(config, analyzer=analyzer, report_json=report_json)
    if config.ci_env == "gitlab":
        return run_gitlab(config, analyzer=analyzer, output_path=output_path, report_json=report_json)
    raise ConfigurationError(f"Unsupported CI environment: {config.ci_env!r}")
