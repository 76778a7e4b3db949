"""Command line entry point.

Usage:
    syncdiff [options] pilot.xml production.xml
    python -m syncdiff [options] pilot.xml production.xml
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from .assembler import DocumentAssembler
from .config import (
    Config,
    ConfigurationError,
    ConfigurationValidationError,
    LogLevel,
    load_config,
)
from .exceptions import SyncDiffError
from .snapshot import XmlSnapshot


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="syncdiff",
        description=(
            "Compare the exported synchronization configuration of a pilot "
            "server with production and write an HTML report"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare two exports and write the report to ./report
  syncdiff --output ./report pilot.xml production.xml
  # Only show differences for two connectors
  syncdiff --changes-only --connector contoso.com --connector HR pilot.xml prod.xml
  # Read settings from a configuration file
  syncdiff --config syncdiff.yaml pilot.xml production.xml""",
    )

    parser.add_argument(
        "pilot", nargs="?", help="Exported configuration of the pilot server"
    )
    parser.add_argument(
        "production", nargs="?", help="Exported configuration of the production server"
    )
    parser.add_argument("--config", help="Configuration file path")
    parser.add_argument("--output", "-o", help="Directory the report is written to")
    parser.add_argument(
        "--connector",
        action="append",
        dest="connectors",
        metavar="NAME",
        help="Connector to document (repeatable; default: all connectors)",
    )
    parser.add_argument(
        "--changes-only",
        action="store_true",
        default=None,
        help="Only show rows that differ between pilot and production",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        type=str.upper,
        help="Log level (default: from configuration, INFO otherwise)",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command line arguments on top of the loaded configuration."""
    if args.pilot:
        config.input.pilot_path = Path(args.pilot)
    if args.production:
        config.input.production_path = Path(args.production)
    if args.output:
        config.output.directory = Path(args.output)
    if args.connectors:
        config.report.connectors = args.connectors
    if args.changes_only is not None:
        config.report.changes_only = args.changes_only
    if args.log_level:
        config.system.log_level = LogLevel(args.log_level)
    return config


def run(config: Config) -> int:
    """Generate the report described by ``config``.

    Returns:
        Process exit code: 0 on success, 1 if any connector failed
    """
    if config.input.pilot_path is None or config.input.production_path is None:
        logger.error("Both a pilot and a production snapshot are required")
        return 1

    pilot = XmlSnapshot.from_file(config.input.pilot_path)
    production = XmlSnapshot.from_file(config.input.production_path)

    assembler = DocumentAssembler(
        pilot, production, options=config.report, title=config.output.title
    )
    result = assembler.write(config.output.path)

    for failure in result.failures:
        logger.error(f"Connector '{failure.connector_name}' failed: {failure.error}")
    if result.diagnostics:
        logger.warning(f"{len(result.diagnostics)} rows could not be documented")

    return 0 if result.succeeded else 1


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level or logging.INFO, format=LOG_FORMAT)

    try:
        config = apply_overrides(load_config(args.config), args)
        logging.getLogger().setLevel(config.system.log_level.value)
        return run(config)
    except ConfigurationValidationError as e:
        logger.error(f"Invalid configuration ({', '.join(e.settings)}): {e}")
        return 1
    except (ConfigurationError, ValidationError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except SyncDiffError as e:
        logger.error(f"Report generation failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
