"""Base market interface for download-ticks."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from download_ticks.errors import ResponseFormatError, UnsupportedIntervalError
from download_ticks.models import FetchQuery, Interval, Kline
from download_ticks.utils import MAX_KLINES_PER_REQUEST, split_intervals


class BaseMarket(ABC):
    """Abstract base class for exchange kline endpoints.

    A market knows how to turn a FetchQuery into the query-string
    parameters of one or more REST requests, and how to turn each JSON
    response back into Kline objects. All HTTP is done by the caller.
    """

    name: str = ""
    base_url: str = ""
    interval_map: dict[Interval, str] = {}
    limit: int = MAX_KLINES_PER_REQUEST

    def supported_intervals(self) -> list[Interval]:
        """Intervals this market can serve, in canonical order."""
        return [i for i in Interval if i in self.interval_map]

    def venue_interval(self, interval: Interval) -> str:
        """Map an Interval to the exchange's own notation.

        Raises:
            UnsupportedIntervalError: If the market has no such interval.
        """
        try:
            return self.interval_map[interval]
        except KeyError:
            supported = ", ".join(i.value for i in self.supported_intervals())
            raise UnsupportedIntervalError(
                f"{self.name} does not support interval {interval.value}. "
                f"Supported: {supported}"
            ) from None

    def request_params(self, query: FetchQuery) -> list[dict[str, Any]]:
        """Build the parameters of every request needed for ``query``.

        A closed range is split into windows of at most ``limit`` candles;
        a half-open range or no range at all needs a single request.
        """
        base = self.base_params(query)

        if query.from_date and query.to_date:
            windows = split_intervals(query.from_date, query.to_date, query.interval, self.limit)
            return [{**base, **self.range_params(start, end)} for start, end in windows]

        return [{**base, **self.range_params(query.from_date, query.to_date)}]

    @abstractmethod
    def base_params(self, query: FetchQuery) -> dict[str, Any]:
        """Symbol and interval parameters shared by every request."""
        pass

    @abstractmethod
    def range_params(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
    ) -> dict[str, Any]:
        """Time-range parameters for one request.

        Args:
            start: Window start, or None for an open start.
            end: Window end, or None for an open end.
        """
        pass

    @abstractmethod
    def parse_row(self, row: Any, interval: Interval) -> Kline:
        """Convert one raw candle row into a Kline."""
        pass

    def error_message(self, payload: Any) -> Optional[str]:
        """Return the exchange's error message if ``payload`` is an error body."""
        return None

    def parse_klines(self, payload: Any, interval: Interval) -> list[Kline]:
        """Convert a decoded JSON response into klines.

        Raises:
            ResponseFormatError: If the payload or any row is malformed.
        """
        if not isinstance(payload, list):
            raise ResponseFormatError(
                f"Unexpected {self.name} response, expected a list of candles: {payload!r:.200}"
            )

        klines = []
        for row in payload:
            try:
                klines.append(self.parse_row(row, interval))
            except (IndexError, KeyError, TypeError, ValueError) as e:
                raise ResponseFormatError(
                    f"Malformed {self.name} candle {row!r:.200}: {e}"
                ) from e
        return klines
