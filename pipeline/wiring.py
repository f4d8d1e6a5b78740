"""pipeline.wiring

This module is the **composition root** for the Python runtime.

"Composition root" means: the single place where we *assemble* the running
application from its building blocks:

- load ``.env`` files / environment variables
- configure logging
- build the immutable :class:`RunConfig`

Keeping this wiring in one place prevents configuration and dependency setup
from being duplicated across entrypoints (CLI, tests, local runs).
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from pipeline.config import RunConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Send all log output to stderr; stdout stays free for tool output."""
    name = (level or os.environ.get("CW_LOG_LEVEL") or "INFO").upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    root = logging.getLogger()
    root.setLevel(numeric)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def load_env_file(env_file: Optional[Path]) -> bool:
    """Load KEY=VALUE pairs from *env_file* without overriding the real environment.

    Local runs use a ``.env`` next to the checkout; inside CI the variables
    are already set and win.
    """
    if env_file is None or not Path(env_file).exists():
        return False
    return load_dotenv(dotenv_path=Path(env_file), override=False)


def build_config(
    *,
    environ: Optional[Mapping[str, str]] = None,
    ci_env: Optional[str] = None,
) -> RunConfig:
    return RunConfig.from_env(os.environ if environ is None else environ, ci_env=ci_env)
