"""Interval and Market enumerations."""

from datetime import timedelta
from enum import Enum


class Market(str, Enum):
    """Supported exchanges."""

    BINANCE = "binance"
    GATE = "gate"

    def __str__(self) -> str:
        return self.value


_DURATIONS = {
    "1s": timedelta(seconds=1),
    "1m": timedelta(minutes=1),
    "3m": timedelta(minutes=3),
    "5m": timedelta(minutes=5),
    "15m": timedelta(minutes=15),
    "30m": timedelta(minutes=30),
    "1h": timedelta(hours=1),
    "2h": timedelta(hours=2),
    "4h": timedelta(hours=4),
    "6h": timedelta(hours=6),
    "8h": timedelta(hours=8),
    "12h": timedelta(hours=12),
    "1d": timedelta(days=1),
    "3d": timedelta(days=3),
    "1w": timedelta(weeks=1),
    # Calendar months vary; 30 days is only used to size request windows.
    "1M": timedelta(days=30),
}


class Interval(str, Enum):
    """Kline intervals, valued by their exchange notation."""

    S1 = "1s"
    M1 = "1m"
    M3 = "3m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H2 = "2h"
    H4 = "4h"
    H6 = "6h"
    H8 = "8h"
    H12 = "12h"
    D1 = "1d"
    D3 = "3d"
    W1 = "1w"
    MM1 = "1M"

    def __str__(self) -> str:
        return self.value

    @property
    def duration(self) -> timedelta:
        """Length of one candle."""
        return _DURATIONS[self.value]

    @classmethod
    def parse(cls, value: str) -> "Interval":
        """Parse an interval from its notation (``1h``) or alias (``h1``).

        ``1M`` (month) and ``1m`` (minute) are told apart by case; aliases
        are case-insensitive (``MM1`` is a month, ``M1`` a minute).

        Raises:
            ValueError: If the value names no interval.
        """
        value = value.strip()
        for interval in cls:
            if value == interval.value:
                return interval
        lowered = value.lower()
        for interval in cls:
            if lowered == interval.name.lower():
                return interval
        for interval in cls:
            if interval is not cls.MM1 and lowered == interval.value:
                return interval
        raise ValueError(
            f"Invalid interval: {value}. Must be one of {[i.value for i in cls]}"
        )
