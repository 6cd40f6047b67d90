"""Composition root for casework.

This module is the ONLY location that imports both the core engine and
concrete adapter implementations. All wiring happens here:

- Argument parsing and configuration loading
- Logging setup
- Output sink selection
- Unit location, companion configuration and import
- Running the engine and mapping its verdict to an exit code
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from casework import __version__
from casework.adapters.loader.companion import activate_companion_env
from casework.adapters.loader.module_loader import ModuleUnitLoader
from casework.adapters.sink.file import FileSink
from casework.adapters.sink.stdout import StdoutSink
from casework.config import Settings, load_settings
from casework.core.diagnostics import capture, format_error
from casework.core.errors import DiscoveryFault
from casework.core.orchestrator import LifecycleOrchestrator
from casework.core.ports import OutputSink, UnitLoaderPort
from casework.core.registry import discover_module
from casework.core.reporter import Reporter

PRODUCT_NAME = "casework"
DESCRIPTION = "A minimal test runner"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog=PRODUCT_NAME,
        description=f"{DESCRIPTION}: runs the test containers registered in a unit of code.",
    )
    parser.add_argument(
        "unit",
        help="Path to a .py file, or a dotted module name, that defines a TestUnit",
    )
    parser.add_argument(
        "--env-file",
        help="Settings .env file (default: .env in the current directory)",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Also write the report to this file",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level for engine diagnostics on stderr",
    )
    parser.add_argument(
        "--unit-attribute",
        help="Module attribute holding the TestUnit to run",
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the program banner",
    )
    parser.add_argument(
        "--no-companion-env",
        action="store_true",
        help="Do not activate the unit's companion environment file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def apply_arguments(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line overrides applied."""
    overrides: dict[str, object] = {}
    if args.output:
        overrides["output_path"] = args.output
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.unit_attribute:
        overrides["unit_attribute"] = args.unit_attribute
    if args.no_banner:
        overrides["banner"] = False
    if args.no_companion_env:
        overrides["companion_env"] = False
    if not overrides:
        return settings
    return Settings.model_validate({**settings.model_dump(), **overrides})


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure engine logging.

    Logs go to stderr so the report on stdout stays clean.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.WARNING)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )


def open_sink(settings: Settings) -> OutputSink:
    """Select the output sink from settings."""
    if settings.output_path:
        return FileSink(settings.output_path, echo=StdoutSink())
    return StdoutSink()


def print_banner(reporter: Reporter) -> None:
    major, minor = __version__.split(".")[:2]
    reporter.heading(
        f"{PRODUCT_NAME} - {DESCRIPTION}",
        f"Version {major}.{minor}",
    )


def run_unit(
    target: str,
    settings: Settings,
    reporter: Reporter,
    loader: UnitLoaderPort | None = None,
) -> bool:
    """Locate, configure, load and run one unit of code.

    Returns:
        Whether every container of the unit succeeded.

    Raises:
        DiscoveryFault: If the unit cannot be loaded or examined.
    """
    logger = logging.getLogger(__name__)
    loader = loader or ModuleUnitLoader()

    location = loader.locate(target)
    if location is not None and settings.companion_env:
        companion = activate_companion_env(location, settings.companion_env_suffix)
        if companion is not None:
            reporter.line()
            reporter.line("Configuration File:")
            reporter.line(str(companion))

    module = loader.load(target)
    reporter.line()
    reporter.line("Test Unit:")
    reporter.line(str(location) if location is not None else module.__name__)

    containers = discover_module(module, settings.unit_attribute)
    logger.info(f"Running {len(containers)} containers from {target}")
    summary = LifecycleOrchestrator(reporter).run_unit(containers)
    return summary.succeeded


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, wire adapters and run the requested unit.

    Exit codes:
        0: Every container succeeded
        1: A container failed, the unit could not be examined, or an
           internal error occurred
        2: Invalid command line (from argparse)
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    args = build_parser().parse_args(argv)

    try:
        settings = apply_arguments(load_settings(args.env_file), args)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)

    try:
        sink = open_sink(settings)
    except OSError as e:
        logger.error(f"Cannot open report file {settings.output_path}: {e}")
        return EXIT_FAILURE

    with sink:
        reporter = Reporter(sink)
        try:
            if settings.banner:
                print_banner(reporter)
            succeeded = run_unit(args.unit, settings, reporter)
        except DiscoveryFault as e:
            logger.error(f"Discovery failed: {e}")
            reporter.line()
            reporter.line(format_error(capture(e)))
            return EXIT_FAILURE
        except KeyboardInterrupt:
            logger.warning("Run interrupted by user (SIGINT)")
            return EXIT_INTERRUPTED
        except Exception as e:
            logger.error(f"Internal error: {e}", exc_info=True)
            reporter.line()
            reporter.line(f"An internal error occurred in {PRODUCT_NAME}:")
            reporter.line(format_error(capture(e)))
            return EXIT_FAILURE

    return EXIT_SUCCESS if succeeded else EXIT_FAILURE


def main() -> None:
    """Console entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
