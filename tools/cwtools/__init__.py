"""tools/cwtools

CWTools analyzer package: runner + result loading.

The report pipeline only ever sees the parsed result document; how it was
produced stays in here.
"""

from __future__ import annotations

import logging
from typing import Any

from .runner import AnalyzerOptions, build_cwtools_cmd, cwtools_executable, load_result, run_cwtools

logger = logging.getLogger(__name__)

__all__ = ["AnalyzerOptions", "build_cwtools_cmd", "execute", "load_result"]


def execute(options: AnalyzerOptions) -> Any:
    """Run CWTools and return its JSON result document.

    A non-zero exit code alone is not fatal (the CLI may signal findings that
    way); a missing or unreadable result file is.
    """
    exit_code = run_cwtools(cwtools_executable(), options)
    if exit_code != 0:
        logger.warning("CWTools exited with code %d; reading %s anyway.", exit_code, options.output_path)
    return load_result(options.output_path)
