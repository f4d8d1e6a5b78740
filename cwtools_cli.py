#!/usr/bin/env python3
"""
CWTools check runner.

Runs CWTools on the checked-out mod, turns its offenses into annotations and
publishes them for the current CI host:

  github - a check run on the commit / pull request head
  gitlab - errors.txt in the workspace, one line record per annotation

Configuration comes from the environment (see pipeline/config.py).

Usage:
  python cwtools_cli.py
  python cwtools_cli.py --ci-env gitlab --result-file output.json
  python cwtools_cli.py --env-file .env --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cwtools_check.errors import ConfigurationError
from pipeline.config import SUPPORTED_CI_ENVS
from pipeline.orchestrator import run
from pipeline.wiring import build_config, configure_logging, load_env_file

ROOT_DIR = Path(__file__).resolve().parent
ENV_PATH = ROOT_DIR / ".env"

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger("cwtools_cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run CWTools and publish its offenses as CI annotations.")
    parser.add_argument(
        "--ci-env",
        choices=SUPPORTED_CI_ENVS,
        help="CI host to report to (default: $CW_CI_ENV)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=ENV_PATH,
        help="Optional .env file; never overrides variables already set (default: %(default)s)",
    )
    parser.add_argument(
        "--result-file",
        type=Path,
        help="Use an existing CWTools JSON result instead of running the analyzer",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="(gitlab) Where to write line records (default: <workspace>/errors.txt)",
    )
    parser.add_argument(
        "--report-json",
        type=Path,
        help="Also write conclusion, counts and pages to this JSON file",
    )
    parser.add_argument("--log-level", help="Logging level (default: $CW_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    load_env_file(args.env_file)
    configure_logging(args.log_level)

    try:
        config = build_config(ci_env=args.ci_env)
        run(
            config,
            result_file=args.result_file,
            output_path=args.output,
            report_json=args.report_json,
        )
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.error("%s", e)
        logger.error("There was an unhandled exception. Exiting with a non-zero error code...")
        return EXIT_RUN_FAILED

    logger.info("CWTOOLS CHECK FINISHED")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
