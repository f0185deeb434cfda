"""Portfolio valuation CLI entrypoint."""
import argparse
import sys
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path

from api.sim_feed import MockMarketDataFeed
from config.settings import DEFAULT_OUTPUT_DIR
from core.errors import InvalidSymbolError
from core.models import Account
from core.subscriber import ValuationSubscriber
from utils.config import ValuationConfig
from utils.ingest import read_positions
from utils.io import safe_write_json, snapshot_to_dict
from utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portfolio-valuation",
                                description="Live mark-to-market valuation of stock and option positions")
    p.add_argument("positions", nargs="?", help="positions CSV (default: VALUATION_POSITIONS_PATH or data/positions.csv)")
    p.add_argument("--account-id", help="account identifier shown in the snapshot header")
    p.add_argument("--account-name", help="account name shown in the snapshot header")
    p.add_argument("--cash", help="initial cash balance")
    p.add_argument("--period", type=float, help="seconds between portfolio snapshots")
    p.add_argument("--tick", type=float, help="seconds between mock feed ticks")
    p.add_argument("--duration", type=float,
                   help="run for this many seconds instead of waiting for Enter")
    p.add_argument("--seed", type=int, help="random seed for the mock feed")
    p.add_argument("--out", help=f"write the final snapshot as JSON into this directory (e.g. {DEFAULT_OUTPUT_DIR})")
    p.add_argument("--quiet", "-q", action="store_true", help="quiet mode - only show snapshots and errors")
    p.add_argument("--verbose", "-v", action="store_true", help="verbose mode - log every price update")
    p.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="INFO",
                   help="set logging level")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        log_level = "DEBUG"
    elif args.quiet:
        log_level = "ERROR"
    else:
        log_level = args.log_level

    logger = setup_logging(level=log_level, quiet=args.quiet)

    try:
        config = ValuationConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    # Override with command line args if provided
    if args.positions:
        config.positions_path = args.positions
    if args.account_id:
        config.account_id = args.account_id
    if args.account_name:
        config.account_name = args.account_name
    if args.period is not None:
        config.snapshot_period_seconds = args.period
    if args.tick is not None:
        config.feed_tick_seconds = args.tick
    if args.cash is not None:
        try:
            config.initial_cash = Decimal(args.cash)
        except InvalidOperation:
            logger.error(f"Invalid cash amount: {args.cash}")
            return 2

    if not config.is_valid():
        logger.error("Invalid configuration: check sigma, snapshot period, feed tick and cash settings")
        return 2

    try:
        positions = read_positions(config.positions_path, mu=config.default_mu, sigma=config.default_sigma)
    except InvalidSymbolError as e:
        logger.error(f"Invalid positions file {config.positions_path}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read positions file {config.positions_path}: {e}")
        return 1

    account = Account(account_id=config.account_id, name=config.account_name, cash_balance=config.initial_cash)
    for position in positions:
        account.portfolio.add_position(position)

    feed = MockMarketDataFeed(tick_interval=config.feed_tick_seconds, seed=args.seed)
    subscriber = ValuationSubscriber(
        account,
        feed,
        snapshot_period=config.snapshot_period_seconds,
        rate=config.risk_free_rate,
    )

    subscriber.start()
    try:
        if args.duration is not None:
            time.sleep(max(args.duration, 0.0))
        else:
            print("Press Enter to exit...")
            sys.stdin.readline()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        subscriber.stop()

    if args.out:
        snapshot = account.portfolio.snapshot()
        output_file = Path(args.out) / "portfolio_snapshot.json"
        safe_write_json(output_file, snapshot_to_dict(snapshot, account))
        logger.info(f"Wrote portfolio snapshot: {output_file}")

    logger.info(f"Final account value: {account.total_value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
