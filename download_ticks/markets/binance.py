"""Binance spot klines endpoint."""

from datetime import datetime
from typing import Any, Optional

from download_ticks.markets.base import BaseMarket
from download_ticks.models import FetchQuery, Interval, Kline
from download_ticks.utils import to_millis


class BinanceMarket(BaseMarket):
    """Binance ``/api/v3/klines``.

    Times are epoch milliseconds and both ``startTime`` and ``endTime``
    are inclusive on candle open time.
    """

    name = "binance"
    base_url = "https://api.binance.com/api/v3/klines"
    # Binance uses the same notation for every interval.
    interval_map = {interval: interval.value for interval in Interval}

    def base_params(self, query: FetchQuery) -> dict[str, Any]:
        return {
            "symbol": query.symbol.replace("/", "").replace("_", ""),
            "interval": self.venue_interval(query.interval),
            "limit": self.limit,
        }

    def range_params(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> dict[str, Any]:
        params = {}
        if start is not None:
            params["startTime"] = to_millis(start)
        if end is not None:
            params["endTime"] = to_millis(end)
        return params

    def parse_row(self, row: Any, interval: Interval) -> Kline:
        # [open time, open, high, low, close, volume, close time,
        #  quote volume, trades, taker base volume, taker quote volume, ignore]
        return Kline(
            open_time=int(row[0]),
            open_price=float(row[1]),
            high_price=float(row[2]),
            low_price=float(row[3]),
            close_price=float(row[4]),
            volume=float(row[5]),
            close_time=int(row[6]),
            quote_asset_volume=float(row[7]),
            number_of_trades=int(row[8]),
            taker_buy_base_volume=float(row[9]),
            taker_buy_quote_volume=float(row[10]),
        )

    def error_message(self, payload: Any) -> Optional[str]:
        if isinstance(payload, dict) and "msg" in payload:
            return f"{payload.get('code', '')} {payload['msg']}".strip()
        return None
