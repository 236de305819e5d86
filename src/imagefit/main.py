"""Main module for the imagefit CLI."""

import argparse
import json
import os
import sys
from typing import List, Optional

from . import __version__
from .core.config import ConfigSource
from .core.exceptions import ImagefitError
from .core.initializers import InitializerPipeline
from .core.logging_config import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="imagefit",
        description="imagefit - configuration and backend wiring for the image service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a configuration file and show the resolved backends
  imagefit check --config config.yaml

  # Same, reading the path from the environment
  IMAGEFIT_CONFIG=config.json imagefit check

  # Show version
  imagefit version
        """,
    )

    subparsers: argparse._SubParsersAction = parser.add_subparsers(
        dest="command", help="Available commands"
    )

    check_parser: argparse.ArgumentParser = subparsers.add_parser(
        "check", help="Run the startup pipeline against a configuration file"
    )
    check_parser.add_argument(
        "--config",
        default=os.getenv("IMAGEFIT_CONFIG"),
        help="Path to a JSON or YAML configuration file (default: $IMAGEFIT_CONFIG)",
    )
    check_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers.add_parser("version", help="Show version information")
    return parser


def run_check(config_path: Optional[str], debug: bool = False) -> int:
    """Initialize from ``config_path`` and print the resolved state as JSON."""
    logger = setup_logger("imagefit.cli", level="DEBUG" if debug else None)

    if not config_path:
        logger.error("No configuration file given (use --config or IMAGEFIT_CONFIG)")
        return 2

    pipeline = InitializerPipeline()
    try:
        state = pipeline.run(ConfigSource.from_file(config_path))
    except ImagefitError as exc:
        step = pipeline.failed_step or "load"
        logger.error(f"Startup failed at '{step}': {exc}")
        return 1

    print(json.dumps(state.summary(), indent=2, sort_keys=True))
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``imagefit`` command."""
    parser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.command == "check":
        sys.exit(run_check(args.config, args.debug))

    elif args.command == "version":
        print("imagefit")
        print(f"Version {__version__}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
