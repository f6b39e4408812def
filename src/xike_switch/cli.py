"""Command-line entry points: ``xike-vlan`` and ``xike-stats``."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from xike_switch.client.errors import SwitchConfigError, SwitchUsageError
from xike_switch.client.http import RawHTTPClient
from xike_switch.config import DEFAULT_CONFIG_PATH, load_config
from xike_switch.logging_config import configure_logging
from xike_switch.provisioner import Provisioner, check_run_flags
from xike_switch.stats import StatsCache, collect_metrics, create_app
from xike_switch.utils.render import render_http_requests, render_membership_json

logger = logging.getLogger(__name__)

STATS_CONFIG_ENV = "VLANS_YAML"
STATS_DEFAULT_CONFIG = Path("/config/vlans.yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_vlan_parser() -> argparse.ArgumentParser:
    """Create the argument parser for ``xike-vlan``."""
    parser = argparse.ArgumentParser(
        prog="xike-vlan",
        description="Transform vlans.yaml into switch port configuration.",
    )
    parser.add_argument(
        "-f", "--file",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to vlans.yaml file",
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Output HTTP POST requests instead of JSON",
    )
    parser.add_argument(
        "-s", "--switch",
        action="append",
        default=[],
        help="Filter by switch name (can be specified multiple times)",
    )
    parser.add_argument(
        "-v", "--vlan",
        action="append",
        default=[],
        help="Filter by VLAN ID or name (can be specified multiple times)",
    )
    parser.add_argument(
        "-x", "--execute",
        action="store_true",
        help="Execute HTTP POST requests to the switches (requires --http)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed request/response information when executing",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save configuration after applying changes (requires --execute)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Per-request timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def vlan_main(argv: Sequence[str] | None = None) -> int:
    """Run ``xike-vlan``; returns the process exit code."""
    args = build_vlan_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        check_run_flags(args.http, args.execute, args.save)
        config = load_config(args.file)
    except (SwitchUsageError, SwitchConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    provisioner = Provisioner(
        config,
        switch_filters=args.switch,
        vlan_filters=args.vlan,
        client=RawHTTPClient(timeout_s=args.timeout),
    )

    if not args.http:
        print(render_membership_json(provisioner.membership_view()))
        return 0

    if not args.execute:
        print(render_http_requests(provisioner.compile().batches))
        return 0

    result = provisioner.apply(save=args.save, verbose=args.verbose)
    return 0 if result.ok else 1


def build_stats_parser() -> argparse.ArgumentParser:
    """Create the argument parser for ``xike-stats``."""
    parser = argparse.ArgumentParser(
        prog="xike-stats",
        description="Serve per-port switch statistics as metric lines on /metrics.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.environ.get(STATS_CONFIG_ENV, STATS_DEFAULT_CONFIG)),
        help=f"Path to vlans.yaml (default: ${STATS_CONFIG_ENV} or {STATS_DEFAULT_CONFIG})",
    )
    parser.add_argument("--listen", default="0.0.0.0", help="Address to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=9100, help="Port to bind (default: 9100)")
    parser.add_argument(
        "--cache-ttl",
        type=float,
        default=10.0,
        help="Seconds to reuse a scrape result (default: 10)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Per-switch request timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def stats_main(argv: Sequence[str] | None = None) -> int:
    """Run ``xike-stats`` until interrupted; returns the process exit code."""
    args = build_stats_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
    except SwitchConfigError as exc:
        logger.error("%s", exc)
        return 1

    switches = list(config.switches.values())
    client = RawHTTPClient(timeout_s=args.timeout)
    cache = StatsCache(lambda: collect_metrics(switches, client), ttl_s=args.cache_ttl)
    app = create_app(cache)
    logger.info("Serving metrics for %d switch(es) on %s:%d", len(switches), args.listen, args.port)
    app.run(host=args.listen, port=args.port, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(vlan_main())
