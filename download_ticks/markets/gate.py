"""Gate.io spot candlesticks endpoint."""

from datetime import datetime
from typing import Any, Optional

from download_ticks.markets.base import BaseMarket
from download_ticks.models import FetchQuery, Interval, Kline
from download_ticks.utils import ONE_MILLISECOND, from_millis, to_millis

INTERVAL_MAP = {
    Interval.M1: "1m",
    Interval.M5: "5m",
    Interval.M15: "15m",
    Interval.M30: "30m",
    Interval.H1: "1h",
    Interval.H4: "4h",
    Interval.H8: "8h",
    Interval.D1: "1d",
    Interval.W1: "7d",
    Interval.MM1: "30d",
}

# Gate quotes pairs as BASE_QUOTE.
KNOWN_QUOTES = ["USDT", "USDC", "BTC", "ETH", "USD", "EUR"]


def to_currency_pair(symbol: str) -> str:
    """Convert ``BTCUSDT`` or ``BTC/USDT`` to Gate's ``BTC_USDT``."""
    symbol = symbol.upper().replace("/", "_").replace("-", "_")
    if "_" in symbol:
        return symbol
    for quote in KNOWN_QUOTES:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return f"{symbol[: -len(quote)]}_{quote}"
    return symbol


class GateMarket(BaseMarket):
    """Gate.io ``/api/v4/spot/candlesticks``.

    Times are epoch seconds. ``limit`` conflicts with ``from``/``to`` and is
    only sent when no range is given.
    """

    name = "gate"
    base_url = "https://api.gateio.ws/api/v4/spot/candlesticks"
    interval_map = INTERVAL_MAP

    def base_params(self, query: FetchQuery) -> dict[str, Any]:
        return {
            "currency_pair": to_currency_pair(query.symbol),
            "interval": self.venue_interval(query.interval),
        }

    def range_params(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> dict[str, Any]:
        if start is None and end is None:
            return {"limit": self.limit}
        params = {}
        if start is not None:
            # Round up so a millisecond window start never re-requests the previous candle.
            params["from"] = -(-to_millis(start) // 1000)
        if end is not None:
            params["to"] = to_millis(end) // 1000
        return params

    def parse_row(self, row: Any, interval: Interval) -> Kline:
        # [time, quote volume, close, high, low, open, base volume, window closed]
        open_time = from_millis(int(row[0]) * 1000)
        base_volume = float(row[6]) if len(row) > 6 else 0.0
        return Kline(
            open_time=open_time,
            open_price=float(row[5]),
            high_price=float(row[3]),
            low_price=float(row[4]),
            close_price=float(row[2]),
            volume=base_volume,
            close_time=open_time + interval.duration - ONE_MILLISECOND,
            quote_asset_volume=float(row[1]),
        )

    def error_message(self, payload: Any) -> Optional[str]:
        if isinstance(payload, dict) and "label" in payload:
            return f"{payload['label']}: {payload.get('message', '')}".strip()
        return None
