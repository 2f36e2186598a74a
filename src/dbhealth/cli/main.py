"""
Command-line interface for the dbhealth database health monitor.

This module provides the main CLI entry point: it parses arguments, loads
and overrides the configuration, wires the connection provider into the
monitoring coordinator and exits with the coordinator's status.
"""

import argparse
import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import __version__
from ..config import apply_overrides, get_config, set_config_path
from ..db import ConnectionProvider
from ..models.config import POLLER_NAMES
from ..monitoring import MonitoringCoordinator
from ..orchestration import RuntimeState, SignalHandler
from ..validation import ValidationError, handle_cli_error

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbhealth",
        description=(
            "Watch a MySQL server for slow statements, long-running transactions "
            "and lock contention; optionally kill the offending sessions."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.toml (default: conf/config.toml in the project root).",
    )
    parser.add_argument(
        "--slowis",
        dest="slow_threshold",
        type=int,
        default=None,
        help="Seconds a statement or transaction may run before it is flagged.",
    )
    parser.add_argument(
        "--rows",
        dest="rows_threshold",
        type=int,
        default=None,
        help="Only consider transactions that modified more than this many rows.",
    )
    parser.add_argument(
        "--kill",
        action="store_true",
        default=None,
        help="Kill sessions running flagged statements or transactions.",
    )
    parser.add_argument(
        "--batch",
        action="store_true",
        default=None,
        help="Run every enabled poller exactly once, then exit.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Emit per-cycle summaries even when not killing.",
    )
    parser.add_argument(
        "--lock-threshold",
        dest="lock_threshold",
        type=int,
        default=None,
        help="Inspect locks when more slow sessions than this are seen in one cycle (0 disables).",
    )
    parser.add_argument(
        "--pollers",
        type=str,
        default=None,
        help=f"Comma-separated pollers to run, out of: {', '.join(POLLER_NAMES)}.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override the configured log level.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _run_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "slow_threshold": args.slow_threshold,
        "rows_threshold": args.rows_threshold,
        "kill": args.kill,
        "batch": args.batch,
        "verbose": args.verbose,
        "lock_threshold": args.lock_threshold,
    }


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for dbhealth.

    Raises:
        SystemExit: Always; 0 after an interrupt or a completed batch run,
            1 on configuration or connection failure.
    """
    args = build_parser().parse_args(argv)

    if args.config is not None:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (OSError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(e, "loading configuration", logger=logger)

    try:
        app_config = apply_overrides(
            app_config,
            run_overrides=_run_overrides(args),
            pollers=args.pollers,
            log_level=args.log_level,
        )
    except ValidationError as e:
        handle_cli_error(e, "applying command-line options", logger=logger)

    logging.getLogger().setLevel(app_config.log_level)

    state = RuntimeState()
    provider = ConnectionProvider(app_config.database)
    coordinator = MonitoringCoordinator(app_config, provider, state)

    with SignalHandler(state):
        try:
            status = coordinator.run()
        finally:
            provider.close()

    sys.exit(status)


if __name__ == "__main__":
    main_cli()
