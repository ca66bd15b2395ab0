"""Command-line interface for the collateralized debt engine."""
from __future__ import annotations

import argparse
import asyncio
import sys

from .config import AppConfig, load_config
from .engine import CollateralEngine
from .errors import PriceUnavailable
from .ledgers import InMemoryCollateral, InMemoryDebtToken
from .logging_setup import configure_logging
from .models import FEED_DECIMALS
from .oracles import PythPriceSource, StalePriceGuard


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="cdp-engine",
        description="Multi-asset collateralized debt engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("show-config", help="Print collateral registry and constants")
    sub.add_parser("prices", help="Fetch live prices and value one unit of each asset")

    return parser


def build_engine(config: AppConfig, price_source: PythPriceSource) -> CollateralEngine:
    """Engine over in-memory ledgers, reading prices through the staleness guard."""
    return CollateralEngine.from_config(
        config,
        debt_token=InMemoryDebtToken(config.debt_token),
        price_source=StalePriceGuard(price_source, config.oracle.stale_after_seconds),
        custody={asset: InMemoryCollateral(asset) for asset in config.collateral.assets},
    )


def format_config(config: AppConfig) -> str:
    engine = config.engine
    lines = [f"Debt token: {config.debt_token}", "Collateral:"]
    for asset, feed in zip(config.collateral.assets, config.collateral.price_feeds):
        lines.append(f"  {asset} priced by {feed}")
    lines += [
        f"Liquidation threshold: {engine.liquidation_threshold}/{engine.liquidation_precision}",
        f"Liquidation bonus: {engine.liquidation_bonus}/{engine.liquidation_precision}",
        f"Minimum health factor: {engine.min_health_factor}",
        f"Stale after: {config.oracle.stale_after_seconds}s",
    ]
    return "\n".join(lines)


async def show_prices(config: AppConfig) -> str:
    source = PythPriceSource(config.oracle.pyth)
    await source.refresh(list(config.collateral.price_feeds))
    engine = build_engine(config, source)

    lines: list[str] = []
    for asset in engine.collateral_assets:
        try:
            value = engine.value_of(asset, engine.precision)
        except PriceUnavailable as e:
            lines.append(f"{asset}: unavailable ({e})")
            continue
        price, _ = source.latest_price(engine.price_feed_of(asset))
        lines.append(
            f"{asset}: price {price / 10**FEED_DECIMALS:,.4f}, "
            f"1 unit = {value / engine.precision:,.4f} {config.debt_token}"
        )
    return "\n".join(lines)


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.command == "show-config":
        print(format_config(config))
    elif args.command == "prices":
        print(await show_prices(config))
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    asyncio.run(_run(args))
