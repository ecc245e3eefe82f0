"""Fetch command for download-ticks CLI.

Downloads klines for a symbol and interval, paginating long date
ranges, and writes them to a JSON file or stdout.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeRemainingColumn

from download_ticks.cli.main import console, print_error
from download_ticks.cli.params import DATETIME, INTERVAL
from download_ticks.errors import DownloadTicksError
from download_ticks.models import Interval, Market

VALID_MARKETS = [m.value for m in Market]


@click.command()
@click.option(
    "-m", "--market",
    type=click.Choice(VALID_MARKETS, case_sensitive=False),
    default=None,
    help="Exchange to fetch from (default: from config, binance)",
)
@click.option(
    "-s", "--symbol",
    required=True,
    help="Trading pair symbol (e.g. BTCUSDT, ETHUSDT)",
)
@click.option(
    "-i", "--interval",
    required=True,
    type=INTERVAL,
    help="Kline interval (e.g. 1m, 1h, 1d; aliases m1, h1, d1)",
)
@click.option(
    "-f", "--from-date",
    type=DATETIME,
    default=None,
    help="Start date, UTC RFC 3339 (e.g. 2019-01-01T00:00:00Z)",
)
@click.option(
    "-t", "--to-date",
    type=DATETIME,
    default=None,
    help="End date, UTC RFC 3339 (e.g. 2019-03-01T00:00:00Z)",
)
@click.option(
    "-o", "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file to save klines to (resumes if it exists)",
)
@click.option(
    "-r", "--retry-counter",
    type=click.IntRange(min=1),
    default=None,
    help="Attempts per request (default: from config, 3)",
)
@click.option(
    "--pause",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait between attempts (default: from config, 3)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Show download progress",
)
@click.pass_context
def fetch(
    ctx: click.Context,
    market: Optional[str],
    symbol: str,
    interval: Interval,
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    output_file: Optional[Path],
    retry_counter: Optional[int],
    pause: Optional[float],
    verbose: bool,
) -> None:
    """Fetch historical klines from an exchange.

    Without --from-date and --to-date the latest completed klines (up to
    1000) are fetched. Candles still in progress are never saved.
    Long ranges are split into requests of at most 1000 klines each.

    \b
    Examples:
      download-ticks fetch -s BTCUSDT -i h1
      download-ticks fetch -s BTCUSDT -i 1m -f 2019-01-01T00:00:00Z -t 2019-03-01T00:00:00Z -o output.json
      download-ticks fetch -m gate -s BTC_USDT -i 1d -f 2024-01-01
    """
    from download_ticks.client import create_session
    from download_ticks.config import Settings
    from download_ticks.fetcher import KlineDownloader
    from download_ticks.logging_config import setup_logging
    from download_ticks.markets import get_market
    from download_ticks.models import FetchQuery
    from download_ticks.storage import dump_klines

    obj = ctx.find_object(dict) or {}
    settings = obj.get("settings") or Settings()

    if verbose and not obj.get("log_level_set"):
        setup_logging("INFO", console=console)

    http = settings.http.model_copy(update={
        k: v for k, v in {"retry_counter": retry_counter, "pause": pause}.items() if v is not None
    })

    try:
        query = FetchQuery.build(
            market=market or settings.defaults.market,
            symbol=symbol,
            interval=interval,
            from_date=from_date,
            to_date=to_date,
        )
        endpoint = get_market(query.market)
        endpoint.venue_interval(query.interval)
    except ValidationError as e:
        print_error(f"Invalid arguments:\n\n{e}")
        raise SystemExit(1)
    except (DownloadTicksError, ValueError) as e:
        print_error(str(e))
        raise SystemExit(1)

    session = create_session(settings.http.user_agent)

    try:
        if verbose:
            with Progress(
                TextColumn("[cyan]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TextColumn("{task.percentage:>6.2f}%"),
                TimeRemainingColumn(),
                console=console,
            ) as progress:
                task = progress.add_task(f"{query.symbol} {query.interval.value}", total=None)

                def on_progress(done: int, total: int) -> None:
                    progress.update(task, completed=done, total=total)

                klines = KlineDownloader(
                    endpoint, session, http, output_file=output_file, on_progress=on_progress,
                ).download(query)
        else:
            klines = KlineDownloader(endpoint, session, http, output_file=output_file).download(query)
    except DownloadTicksError as e:
        print_error(f"Failed to fetch klines:\n\n{e}")
        raise SystemExit(1)
    finally:
        session.close()

    if output_file is None:
        click.echo(dump_klines(klines))
        return

    if verbose:
        console.print(f"[green]Saved {len(klines)} klines to {output_file}[/green]")
