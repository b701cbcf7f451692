#!/usr/bin/env python3
"""
GalaSwap cycle arbitrage CLI.

Scans closed multi-hop cycles, logs the best candidate and, when execution
is enabled, replays it through the paper swap collaborator.

Usage:
    python3 run_arbitrage.py
    python3 run_arbitrage.py --config configs/arbitrage.yaml
    python3 run_arbitrage.py --config configs/arbitrage.yaml --once
"""

import argparse
import asyncio
import signal
import sys

from dotenv import load_dotenv

import logging_config
from cycle_arbitrage.config_loader import load_config
from cycle_arbitrage.config_schema import ArbitrageConfig
from cycle_arbitrage.exceptions import ConfigurationError
from cycle_arbitrage.executor import CycleExecutor
from cycle_arbitrage.gswap import GSwapQuoteClient, PaperSwapper
from cycle_arbitrage.metrics import ArbitrageMetrics
from cycle_arbitrage.quoting import RetryingQuoter
from cycle_arbitrage.runner import ArbitrageRunner
from cycle_arbitrage.scanner import CycleScanner


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="GalaSwap multi-hop cycle arbitrage scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with defaults and .env overrides
  python3 run_arbitrage.py

  # Use custom config
  python3 run_arbitrage.py --config configs/arbitrage.yaml

  # Single scan (for testing/CI)
  python3 run_arbitrage.py --config configs/arbitrage.yaml --once
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML file (defaults plus environment when omitted)",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scan round and exit",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Override logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    return parser.parse_args(argv)


async def run(config: ArbitrageConfig, once: bool = False) -> int:
    metrics = ArbitrageMetrics()
    if config.metrics.enabled:
        await metrics.start_server(port=config.metrics.port, path=config.metrics.path)

    async with GSwapQuoteClient.from_settings(
        config.quoting, fee_tiers=config.scan.fee_tiers
    ) as client:
        quoter = RetryingQuoter.from_settings(client, config.quoting)
        scanner = CycleScanner(quoter, config.scan, metrics=metrics)
        executor = CycleExecutor(quoter, PaperSwapper(), config.execution, metrics=metrics)
        runner = ArbitrageRunner(config, scanner, executor)

        try:
            if once:
                runner.log_banner()
                await runner.run_once()
            else:
                stop_event = asyncio.Event()
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    try:
                        loop.add_signal_handler(sig, stop_event.set)
                    except NotImplementedError:
                        # Windows event loops have no signal handlers
                        pass
                await runner.run(stop_event)
        finally:
            if config.metrics.enabled:
                await metrics.stop_server()

    return 0


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    load_dotenv()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1

    logging_config.setup(args.log_level or config.logging.level)

    try:
        return asyncio.run(run(config, once=args.once))
    except KeyboardInterrupt:
        print("\n\n⏸ Stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
