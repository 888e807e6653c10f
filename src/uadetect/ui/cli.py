from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from uadetect.app import reconcile_unknown_user_agents
from uadetect.config import (
    ConfigurationError,
    configure_logging,
    get_cache_config,
    get_deviceatlas_config,
    get_reconcile_config,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return parsed


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Resolve User-Agent strings logged as unknown by the edge proxy with "
            "DeviceAtlas and publish their device type to memcached"
        )
    )
    parser.add_argument(
        "nodes",
        nargs="*",
        metavar="NODE",
        help="Memcached node as host[:port] (defaults to UADETECT_NODES)",
    )
    parser.add_argument(
        "--licence-key",
        type=str,
        help="DeviceAtlas licence key (defaults to DEVICEATLAS_LICENCE_KEY)",
    )
    parser.add_argument(
        "--server",
        type=str,
        help="DeviceAtlas Cloud host (defaults to DEVICEATLAS_SERVER or the region2 endpoint)",
    )
    parser.add_argument(
        "--max-batch-size",
        type=_positive_int,
        help="Maximum number of log entries to consider per node and run",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        help="Timeout in seconds for each DeviceAtlas call",
    )
    parser.add_argument(
        "--max-concurrency",
        type=_positive_int,
        help="Maximum number of DeviceAtlas calls in flight",
    )
    parser.add_argument(
        "--rate-limit",
        type=_positive_float,
        help="Maximum DeviceAtlas calls per second (defaults to DEVICEATLAS_RATE_LIMIT, unlimited)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every resolved User-Agent",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        cache_config = get_cache_config(parsed_args.nodes)
        deviceatlas_config = get_deviceatlas_config(
            licence_key=parsed_args.licence_key,
            server=parsed_args.server,
            timeout_seconds=parsed_args.timeout,
            max_concurrency=parsed_args.max_concurrency,
            rate_limit=parsed_args.rate_limit,
        )
        reconcile_config = get_reconcile_config(max_batch_size=parsed_args.max_batch_size)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)

    try:
        reconcile_unknown_user_agents(
            cache_config=cache_config,
            deviceatlas_config=deviceatlas_config,
            reconcile_config=reconcile_config,
        )
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
