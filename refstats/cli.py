"""paper-analyze — print reference statistics of a compiled corpus for the paper."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .api import analyze_files
from .provider import UnitProvider, UnitProviderError
from .run_types import AnalysisConfig, AnalysisRun
from . import constants

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paper-analyze", description="Print reference statistics for the paper"
    )
    parser.add_argument(
        "sources",
        nargs="*",
        metavar="PATH_TO_SOURCE_FILE",
        help="The source files to check",
    )
    parser.add_argument(
        "--dependency",
        "-d",
        action="append",
        default=[],
        dest="dependencies",
        metavar="PATH_TO_DEPENDENCY_FILE",
        help="The library files needed as dependencies",
    )
    parser.add_argument(
        "--format",
        "-f",
        default=constants.FORMAT_TEXT,
        choices=constants.OUTPUT_FORMATS,
        dest="output_format",
        help="Report format (default: text)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable info logging"
    )
    return parser


def parse_config(argv: Sequence[str] | None = None) -> AnalysisConfig:
    args = _build_parser().parse_args(argv)
    return AnalysisConfig(
        sources=tuple(args.sources),
        dependencies=tuple(args.dependencies),
        output_format=args.output_format,
        verbose=args.verbose,
    )


def render(run: AnalysisRun, output_format: str) -> str:
    if output_format == constants.FORMAT_JSON:
        return json.dumps(run.to_dict(), indent=2)
    if output_format == constants.FORMAT_TEXT:
        return (
            f"{constants.VERIFY_TIME_LABEL}: {int(run.verify_millis)}\n"
            + run.counts.report()
        )
    raise ValueError(f"Unsupported output format: {output_format}")


def main(argv: Sequence[str] | None = None, provider: UnitProvider | None = None) -> int:
    config = parse_config(argv)
    if config.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    try:
        run = analyze_files(config.sources, config.dependencies, provider)
    except UnitProviderError as exc:
        logger.info("Aborting analysis: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        for error in exc.errors:
            print(f"  {error}", file=sys.stderr)
        return 1

    print(render(run, config.output_format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
