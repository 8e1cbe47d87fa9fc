#!/usr/bin/env python3
"""
Trade Arena Leaderboard Watcher
Follows the live leaderboard of one or more competitions in the terminal.

Usage:
    tradearena-watch <competition_id> [<competition_id> ...] [--join=USERNAME] [--top=10]

Example:
    tradearena-watch comp-1 comp-2 --join=alice --top=5
"""

import argparse
import asyncio
import logging
from typing import Optional

import httpx
from tabulate import tabulate

from tradearena.client import (
    CompetitionApiClient,
    ConnectionMultiplexer,
    ConnectionStatus,
    LeaderboardView,
)
from tradearena.config import Config
from tradearena.errors import TradeArenaError
from tradearena.models import Trader


def format_roi(score: float) -> str:
    """Score as a signed percentage, e.g. ``+3.50%``."""
    sign = "+" if score > 0 else "-" if score < 0 else ""
    return f"{sign}{abs(score):.2f}%"


def render(view: LeaderboardView, top: int) -> str:
    """Render the top of a view as a table."""
    rows = [
        [rank, trader.name, f"{trader.score:.2f}", format_roi(trader.score)]
        for rank, trader in enumerate(view.ranked[:top], start=1)
    ]
    title = f"{view.name or view.competition_id} [{view.status.value}]"
    table = tabulate(rows, headers=["Rank", "Trader", "Score", "ROI %"], tablefmt="simple")
    return f"\n{title}\n{table}"


async def watch(
    competition_ids: list[str],
    config: Config,
    username: Optional[str] = None,
    token: Optional[str] = None,
    top: int = 10,
) -> None:
    """Open a view per competition on one shared connection and print every change."""
    api = CompetitionApiClient(config.api_url, token=token)
    multiplexer = ConnectionMultiplexer.for_url(config.ws_url)
    closed = asyncio.Event()
    views: list[LeaderboardView] = []

    def on_status(status: ConnectionStatus) -> None:
        print(f"Connection {status.value}")
        if status == ConnectionStatus.CLOSED and views:
            closed.set()

    try:
        if username:
            for competition_id in competition_ids:
                participants = await api.join(competition_id, username)
                print(f"Joined {competition_id} as {username} ({participants} participants)")

        for competition_id in competition_ids:
            view = LeaderboardView(competition_id, multiplexer, api=api)

            def on_change(_ranked: list[Trader], view: LeaderboardView = view) -> None:
                print(render(view, top))

            view.on_change = on_change
            await view.open()
            views.append(view)
            print(render(view, top))

        multiplexer.subscribe_status(on_status)
        await closed.wait()
        print("Feed closed; no longer receiving updates")
    finally:
        for view in views:
            view.close()
        multiplexer.teardown()
        await api.close()


def main():
    parser = argparse.ArgumentParser(
        description="Follow Trade Arena leaderboards live"
    )
    parser.add_argument(
        "competitions",
        nargs="+",
        help="Competition ids to follow"
    )
    parser.add_argument(
        "--join",
        metavar="USERNAME",
        help="Join the competitions as USERNAME before watching"
    )
    parser.add_argument(
        "--token",
        help="Bearer token from the identity provider"
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of ranks to show (default: 10)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = Config.from_env()

    try:
        asyncio.run(
            watch(
                args.competitions,
                config,
                username=args.join,
                token=args.token,
                top=args.top,
            )
        )
    except (TradeArenaError, httpx.HTTPError) as e:
        print(f"Error: {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
