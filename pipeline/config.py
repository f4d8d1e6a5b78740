"""pipeline.config

Run configuration.

Everything the action reads from its environment is parsed exactly once, in
:meth:`RunConfig.from_env`, into a frozen value that is passed explicitly to
every stage. Nothing downstream reads ``os.environ``.

Variable names follow the action's ``action.yml`` contract (``CW_*`` set by
the entrypoint script, ``INPUT_*`` set by the runner from workflow inputs).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

import yaml

from cwtools_check.domain import AnnotationLevel
from cwtools_check.errors import ConfigurationError

from pipeline.report import MAX_ANNOTATIONS_PER_PAGE, ReportSettings, freeze_categories

SUPPORTED_CI_ENVS = ("github", "gitlab")
DEFAULT_CHECK_NAME = "CWTools"
DEFAULT_API_URL = "https://api.github.com"

SuppressedCategories = Mapping[AnnotationLevel, FrozenSet[str]]


def _flag(raw: Optional[str]) -> bool:
    """Action inputs arrive as strings; '' and '0' mean off."""
    return (raw or "").strip() not in ("", "0")


def _as_str_set(value: Any, what: str) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"{what} must be a list of strings, got {value!r}")
    return frozenset(v.strip() for v in value)


def parse_suppressed_categories(value: Any, what: str) -> Dict[AnnotationLevel, FrozenSet[str]]:
    """``{"failure": ["CW100"], ...}`` -> level-keyed sets.

    Keys must be annotation levels, not raw analyzer severities.
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{what} must be an object mapping level -> categories, got {value!r}")
    out: Dict[AnnotationLevel, FrozenSet[str]] = {}
    for key, cats in value.items():
        try:
            level = AnnotationLevel(str(key).strip().lower())
        except ValueError:
            valid = ", ".join(lvl.value for lvl in AnnotationLevel)
            raise ConfigurationError(f"{what}: unknown annotation level {key!r} (expected one of {valid})") from None
        out[level] = _as_str_set(cats, f"{what}[{key}]")
    return out


def _parse_json_input(raw: Optional[str], name: str) -> Any:
    if raw is None or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} is not valid JSON: {e}") from e


def load_suppressions_file(path: Path) -> Tuple[FrozenSet[str], Dict[AnnotationLevel, FrozenSet[str]]]:
    """Read a YAML suppressions file.

    Shape::

        files:
          - common/defines/00_defines.txt
        categories:
          warning: [CW242]
          notice: [CW110, CW111]
    """
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Could not read suppressions file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Suppressions file {path} is not valid YAML: {e}") from e

    if data is None:
        return frozenset(), {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Suppressions file {path} must contain a mapping.")
    return (
        _as_str_set(data.get("files"), f"{path}: files"),
        parse_suppressed_categories(data.get("categories"), f"{path}: categories"),
    )


def merge_categories(*parts: SuppressedCategories) -> Dict[AnnotationLevel, FrozenSet[str]]:
    out: Dict[AnnotationLevel, FrozenSet[str]] = {}
    for part in parts:
        for level, cats in part.items():
            out[level] = out.get(level, frozenset()) | cats
    return out


@dataclass(frozen=True)
class RunConfig:
    ci_env: str
    workspace: str
    check_name: str = DEFAULT_CHECK_NAME
    token: Optional[str] = None
    event_path: Optional[str] = None
    sha: str = ""
    api_url: str = DEFAULT_API_URL

    suppressed_files: FrozenSet[str] = frozenset()
    suppressed_categories: SuppressedCategories = field(default_factory=dict)
    changed_only: bool = False

    game: str = ""
    loc_languages: Tuple[str, ...] = ()
    mod_path: str = ""
    cache_full: bool = False
    vanilla_mode: bool = False
    cache_file_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "suppressed_files", frozenset(self.suppressed_files))
        object.__setattr__(self, "suppressed_categories", freeze_categories(self.suppressed_categories))

    @classmethod
    def from_env(cls, environ: Mapping[str, str], *, ci_env: Optional[str] = None) -> "RunConfig":
        """Build and validate the run configuration.

        Raises :class:`ConfigurationError` on anything missing or malformed, so
        the run aborts before touching any collaborator.
        """
        ci = (ci_env or environ.get("CW_CI_ENV") or "").strip().lower()
        if ci not in SUPPORTED_CI_ENVS:
            raise ConfigurationError(
                f"CW_CI_ENV must be one of {', '.join(SUPPORTED_CI_ENVS)} (got {ci!r})."
            )

        workspace = (environ.get("CW_WORKSPACE") or "").strip().rstrip("/")
        if not workspace:
            raise ConfigurationError("CW_WORKSPACE environment variable has not been defined!")

        suppressed_files = _as_str_set(
            _parse_json_input(environ.get("INPUT_SUPPRESSEDFILES"), "INPUT_SUPPRESSEDFILES"),
            "INPUT_SUPPRESSEDFILES",
        )
        suppressed_categories = parse_suppressed_categories(
            _parse_json_input(
                environ.get("INPUT_SUPPRESSEDOFFENCECATEGORIES"), "INPUT_SUPPRESSEDOFFENCECATEGORIES"
            ),
            "INPUT_SUPPRESSEDOFFENCECATEGORIES",
        )
        suppressions_file = (environ.get("INPUT_SUPPRESSIONSFILE") or "").strip()
        if suppressions_file:
            path = Path(suppressions_file)
            if not path.is_absolute():
                path = Path(workspace) / path
            extra_files, extra_categories = load_suppressions_file(path)
            suppressed_files = suppressed_files | extra_files
            suppressed_categories = merge_categories(suppressed_categories, extra_categories)

        # Change-set filtering needs a push/PR event to diff against.
        changed_only = _flag(environ.get("INPUT_CHANGEDFILESONLY")) if ci == "github" else False

        cache_full = bool((environ.get("INPUT_CACHE") or "").strip())
        vanilla_mode = _flag(environ.get("INPUT_VANILLAMODE"))
        cache_file_name = (environ.get("CACHE_FILE_NAME") or "").strip()
        if cache_full and not vanilla_mode and not cache_file_name:
            raise ConfigurationError("INPUT_CACHE is set but CACHE_FILE_NAME is empty.")

        cfg = cls(
            ci_env=ci,
            workspace=workspace,
            check_name=(environ.get("CW_CHECKNAME") or "").strip() or DEFAULT_CHECK_NAME,
            token=(environ.get("CW_TOKEN") or "").strip() or None,
            event_path=(environ.get("CW_EVENT") or "").strip() or None,
            sha=(environ.get("CW_SHA") or "").strip(),
            api_url=(environ.get("GITHUB_API_URL") or "").strip() or DEFAULT_API_URL,
            suppressed_files=suppressed_files,
            suppressed_categories=suppressed_categories,
            changed_only=changed_only,
            game=(environ.get("INPUT_GAME") or "").strip(),
            loc_languages=tuple((environ.get("INPUT_LOCLANGUAGES") or "").split()),
            mod_path=(environ.get("INPUT_MODPATH") or "").strip().strip("/"),
            cache_full=cache_full,
            vanilla_mode=vanilla_mode,
            cache_file_name=cache_file_name,
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if self.ci_env == "github":
            if not self.token:
                raise ConfigurationError("CW_TOKEN environment variable has not been defined!")
            if not self.event_path:
                raise ConfigurationError("CW_EVENT environment variable has not been defined!")

    def require_game(self) -> str:
        if not self.game:
            raise ConfigurationError("INPUT_GAME has not been defined!")
        return self.game

    def report_settings(self) -> ReportSettings:
        return ReportSettings(
            check_title=self.check_name,
            workspace=self.workspace,
            suppressed_files=self.suppressed_files,
            suppressed_categories=self.suppressed_categories,
            changed_only=self.changed_only,
            page_size=MAX_ANNOTATIONS_PER_PAGE,
        )
