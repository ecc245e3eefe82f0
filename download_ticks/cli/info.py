"""Info command for download-ticks CLI.

Lists supported markets and intervals, or summarizes a saved klines file.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from download_ticks.cli.main import console, print_error
from download_ticks.cli.params import INTERVAL
from download_ticks.errors import DataFileError
from download_ticks.models import Interval, Kline

# Maximum number of gaps listed in the summary
MAX_GAPS_SHOWN = 10


def find_gaps(klines: list[Kline], interval: Interval) -> list[tuple[datetime, datetime]]:
    """Find missing candles between consecutive klines.

    Monthly candles vary in length and are never reported as gaps.

    Returns:
        ``(previous_open_time, next_open_time)`` for each gap.
    """
    if interval is Interval.MM1:
        return []

    gaps = []
    for prev, curr in zip(klines, klines[1:]):
        if curr.open_time - prev.open_time > interval.duration:
            gaps.append((prev.open_time, curr.open_time))
    return gaps


def summarize_klines(klines: list[Kline], interval: Optional[Interval] = None) -> dict:
    """Summary statistics for a list of klines."""
    summary = {
        "count": len(klines),
        "first_open_time": klines[0].open_time if klines else None,
        "last_close_time": klines[-1].close_time if klines else None,
        "low": min((k.low_price for k in klines), default=None),
        "high": max((k.high_price for k in klines), default=None),
        "volume": sum(k.volume for k in klines),
        "gaps": None,
    }
    if interval is not None:
        summary["gaps"] = find_gaps(klines, interval)
    return summary


def _show_supported() -> None:
    from download_ticks.markets import MARKETS

    table = Table(
        title="Supported Markets",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Market", style="bold")
    table.add_column("Endpoint", style="dim")
    table.add_column("Intervals")

    for market, market_cls in MARKETS.items():
        endpoint = market_cls()
        table.add_row(
            market.value,
            endpoint.base_url,
            ", ".join(i.value for i in endpoint.supported_intervals()),
        )

    console.print(table)
    console.print(
        "[dim]Interval aliases: s1, m1, m3, m5, m15, m30, h1, h2, h4, h6, h8, h12, "
        "d1, d3, w1, mm1[/dim]"
    )


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z" if value else "-"


def _show_file(output_file: Path, interval: Optional[Interval]) -> None:
    from download_ticks.storage import read_klines

    try:
        klines = read_klines(output_file)
    except FileNotFoundError:
        print_error(f"File not found: {output_file}")
        raise SystemExit(1)
    except (OSError, DataFileError) as e:
        print_error(f"Failed to read {output_file}:\n\n{e}")
        raise SystemExit(1)

    summary = summarize_klines(klines, interval)

    table = Table(
        title=f"{output_file.name} ({summary['count']} klines)",
        show_header=False,
    )
    table.add_column("Field", style="bold cyan")
    table.add_column("Value", justify="right")

    table.add_row("Klines", f"{summary['count']:,}")
    table.add_row("First open time", _fmt_time(summary["first_open_time"]))
    table.add_row("Last close time", _fmt_time(summary["last_close_time"]))
    if klines:
        table.add_row("Low", f"{summary['low']:.8g}")
        table.add_row("High", f"{summary['high']:.8g}")
        table.add_row("Volume", f"{summary['volume']:,.4f}")
    if summary["gaps"] is not None:
        gap_count = len(summary["gaps"])
        style = "green" if gap_count == 0 else "yellow"
        table.add_row("Gaps", f"[{style}]{gap_count}[/{style}]")

    console.print(table)

    for start, end in (summary["gaps"] or [])[:MAX_GAPS_SHOWN]:
        console.print(f"[yellow]gap[/yellow] {_fmt_time(start)} -> {_fmt_time(end)}")
    if summary["gaps"] and len(summary["gaps"]) > MAX_GAPS_SHOWN:
        console.print(f"[dim]... and {len(summary['gaps']) - MAX_GAPS_SHOWN} more[/dim]")


@click.command()
@click.option(
    "-o", "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Saved klines file to summarize",
)
@click.option(
    "-i", "--interval",
    type=INTERVAL,
    default=None,
    help="Interval of the saved klines, enables gap detection",
)
def info(output_file: Optional[Path], interval: Optional[Interval]) -> None:
    """Show supported markets and intervals, or summarize a klines file.

    \b
    Examples:
      download-ticks info
      download-ticks info -o output.json -i 1m
    """
    if output_file is None:
        _show_supported()
    else:
        _show_file(output_file, interval)
