"""tools/cwtools/runner.py

Tool-specific execution plumbing for the CWTools CLI.

Keeps CWTools command-line quirks close to the tool: the game alias, the
three cache modes and where the rules and cache files live inside the action
image.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

from cwtools_check.errors import AnalyzerError
from cwtools_check.io import read_json

from tools.core_cmd import run_cmd, which_or_raise

logger = logging.getLogger(__name__)

CWTOOLS_FALLBACKS = ["/usr/local/bin/cwtools", "/root/.dotnet/tools/cwtools"]

# CWTools knows Stellaris by its short name.
GAME_ALIASES = {"stellaris": "stl"}


@dataclass(frozen=True)
class AnalyzerOptions:
    workspace: str
    game: str
    loc_languages: Tuple[str, ...] = ()
    mod_path: str = ""
    vanilla_mode: bool = False
    cache_full: bool = False
    cache_file_name: str = ""
    rules_root: str = "/src"
    cache_root: str = "/"
    output_filename: str = "output.json"
    timeout_seconds: int = 0

    @property
    def game_key(self) -> str:
        return GAME_ALIASES.get(self.game, self.game)

    @property
    def mode(self) -> str:
        if self.vanilla_mode:
            return "vanilla"
        if self.cache_full:
            return "full"
        return "metadata"

    @property
    def directory(self) -> str:
        if not self.mod_path:
            return self.workspace
        return f"{self.workspace}/{self.mod_path.strip('/')}"

    @property
    def output_path(self) -> Path:
        return Path(self.workspace) / self.output_filename


def build_cwtools_cmd(cwtools_bin: str, options: AnalyzerOptions) -> List[str]:
    cmd: List[str] = [
        cwtools_bin,
        "--game",
        options.game_key,
        "--directory",
        options.directory,
    ]

    mode = options.mode
    if mode == "metadata":
        cmd += ["--cachefile", str(Path(options.cache_root) / f"{options.game_key}.cwv.bz2")]
    elif mode == "full":
        cmd += ["--cachefile", str(Path(options.cache_root) / options.cache_file_name)]

    cmd += [
        "--rulespath",
        str(Path(options.rules_root) / f"cwtools-{options.game}-config"),
        "validate",
    ]
    if mode != "vanilla":
        cmd += ["--cachetype", mode]
    cmd += [
        "--reporttype",
        "json",
        "--scope",
        "vanilla" if mode == "vanilla" else "mods",
        "--outputfile",
        options.output_filename,
    ]
    if options.loc_languages:
        cmd += ["--languages", *options.loc_languages]
    cmd.append("all")
    return cmd


def run_cwtools(cwtools_bin: str, options: AnalyzerOptions) -> int:
    """Run the analyzer inside the workspace. Returns its exit code."""
    cmd = build_cwtools_cmd(cwtools_bin, options)
    # A result left by an earlier run must never be read as this run's output.
    options.output_path.unlink(missing_ok=True)
    logger.info("Running CWTools (%s mode)...", options.mode)
    logger.info("%s", " ".join(cmd))
    res = run_cmd(cmd, cwd=Path(options.workspace), timeout_seconds=options.timeout_seconds)
    logger.info("Done running CWTools in %.1fs (exit code %d).", res.elapsed_seconds, res.exit_code)
    return res.exit_code


def load_result(path: Path) -> Any:
    """Read an analyzer result document; any failure is an :class:`AnalyzerError`."""
    if not path.exists():
        raise AnalyzerError(f"Analyzer result file not found: {path}")
    try:
        return read_json(path)
    except (OSError, ValueError) as e:
        raise AnalyzerError(f"Could not read analyzer result {path}: {e}") from e


def cwtools_executable() -> str:
    try:
        return which_or_raise("cwtools", fallbacks=CWTOOLS_FALLBACKS)
    except FileNotFoundError as e:
        raise AnalyzerError(str(e)) from e
