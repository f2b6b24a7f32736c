#!/usr/bin/env python3
"""Watch the live token view from a terminal.

Connects to the token server, loads a snapshot, listens to the push
channel and prints the current page plus header stats every few seconds.

Usage
-----
    python scripts/watch_tokens.py
    python scripts/watch_tokens.py --sort-by volume --order desc --period 24h
    python scripts/watch_tokens.py --page 2 --interval 5 -v
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import UTC, datetime

from tokenview import TokenFeed, TokenViewConfig
from tokenview.models import TokenRecord
from tokenview.query import Page
from tokenview.stats import TokenStats


def _fmt_number(value: float) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"{value / 1_000:.2f}K"
    return f"{value:.2f}"


def _fmt_change(value: float) -> str:
    arrow = "↑" if value > 0 else "↓" if value < 0 else " "
    return f"{arrow} {abs(value):.2f}%"


def _row(token: TokenRecord) -> str:
    return (
        f"  {token.name[:20]:<20} {token.ticker[:8]:<8} "
        f"{token.price_sol:>14.8f} {_fmt_change(token.price_change_percent):>10} "
        f"{_fmt_number(token.volume_sol):>10} {_fmt_number(token.liquidity_sol):>10}  {token.protocol}"
    )


def _render(page: Page, stats: TokenStats, connected: bool) -> str:
    out: list[str] = []
    status = "connected" if connected else "disconnected"
    out.append(f"── {datetime.now(UTC).isoformat(timespec='seconds')}  [{status}]")
    out.append(
        f"  tokens: {stats.total_tokens}   volume: {_fmt_number(stats.total_volume_sol)} SOL"
        f"   live updates: {stats.update_count}"
    )
    if not page.items:
        out.append("  No tokens found. Waiting for data...")
    else:
        out.extend(_row(token) for token in page.items)
    out.append(f"  Page {page.page} of {page.total_pages}")
    return "\n".join(out)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Print the live token view.")
    parser.add_argument("--sort-by", help="Server-side sort key")
    parser.add_argument("--order", choices=("asc", "desc"), help="Server-side sort order")
    parser.add_argument("--period", help="Server-side period (e.g. 24h)")
    parser.add_argument("--page", type=int, default=1, help="Page to display")
    parser.add_argument("--interval", type=float, default=3.0, help="Seconds between prints")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = TokenViewConfig.from_env()

    async with TokenFeed(config) as feed:
        if args.sort_by or args.order or args.period:
            await feed.apply_filters(sort_by=args.sort_by, order=args.order, period=args.period)
        feed.set_page(args.page)
        while True:
            print(_render(feed.view(), feed.stats(), feed.is_connected))
            await asyncio.sleep(args.interval)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
