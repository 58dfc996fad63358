"""Command-line entry point."""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .config import ConfigLoader, ConfigurationError, TransferConfig, get_settings, load_config_from_env
from .core import TransferError, TransferOrchestrator, TransferRequest, describe_provider
from .utils.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mysql-sync",
        description="Sync MySQL databases and SQL script files."
    )
    parser.add_argument("source", nargs="?", help="Absolute script path or connection string to read from")
    parser.add_argument("destination", nargs="?", help="Absolute script path or connection string to write to")
    parser.add_argument("--what-if", action="store_true", help="Plan the transfer without touching anything")
    parser.add_argument("--config", help="YAML or JSON file listing transfers to run")
    parser.add_argument(
        "--setting",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Provider setting, e.g. mysqlDumpExecutablePath=/usr/bin/mysqldump (repeatable)"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level"
    )
    parser.add_argument("--log-format", choices=["console", "json"], help="Logging format")
    parser.add_argument("--describe", action="store_true", help="Print the provider description as JSON and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _parse_settings(pairs: List[str]) -> dict:
    settings = {}
    for pair in pairs:
        name, separator, value = pair.partition("=")
        if not separator or not name.strip():
            raise ConfigurationError(f"Settings must look like NAME=VALUE, got {pair!r}")
        settings[name.strip()] = value
    return settings


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return a process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.describe:
        print(json.dumps(describe_provider(), indent=2))
        return 0

    if args.source and not args.destination:
        parser.error("DESTINATION is required when SOURCE is given")

    loader = ConfigLoader()

    try:
        single_transfer = bool(args.source) and not args.config
        if args.config:
            config = loader.load_from_file(args.config)
        elif single_transfer:
            config = TransferConfig()
        else:
            config = load_config_from_env()
            if config is None:
                parser.error("give SOURCE and DESTINATION, or --config FILE")

        setup_logging(
            log_level=args.log_level or config.log_level,
            log_format=args.log_format or config.log_format
        )
        logger = get_logger("main")

        settings = {**config.settings, **_parse_settings(args.setting)}
        provider_settings = loader.build_provider_settings(settings, base=get_settings().provider)
        orchestrator = TransferOrchestrator(provider_settings)

        if not single_transfer:
            requests = [
                TransferRequest(job.source, job.destination, dry_run=job.what_if or args.what_if)
                for job in config.get_active_transfers()
            ]
        else:
            requests = [TransferRequest(args.source, args.destination, dry_run=args.what_if)]

        for request in requests:
            result = orchestrator.transfer(request)
            logger.info(
                "Transfer finished",
                kind=result.kind.value,
                dry_run=result.dry_run,
                bytes_written=result.bytes_written
            )

    except (TransferError, ConfigurationError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"FATAL: invalid settings: {e}", file=sys.stderr)
        return 1

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
