"""Date helpers and range splitting for paginated kline requests."""

from datetime import date, datetime, timedelta, timezone
from typing import Union

from download_ticks.errors import InvalidDatetimeError
from download_ticks.models import Interval
from download_ticks.models.kline import datetime_to_millis as to_millis
from download_ticks.models.kline import millis_to_datetime as from_millis

# Binance and Gate both return at most this many candles per request.
MAX_KLINES_PER_REQUEST = 1000

ONE_MILLISECOND = timedelta(milliseconds=1)


def parse_datetime(value: Union[str, int, datetime, date]) -> datetime:
    """Parse a user supplied date into a UTC datetime.

    Accepts RFC 3339 strings (``2019-01-01T00:00:00Z``), plain dates
    (``2019-01-01``), epoch milliseconds and datetime objects.

    Raises:
        InvalidDatetimeError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if isinstance(value, int) or text.isdigit():
                return from_millis(int(text))
            parsed = datetime.fromisoformat(text)
        except (ValueError, OverflowError):
            raise InvalidDatetimeError(
                f"Invalid given datetime: {value!r}. "
                "Use RFC 3339, e.g. 2019-01-01T00:00:00Z"
            ) from None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise InvalidDatetimeError(f"Invalid given datetime: {value!r} is out of range") from None


def split_intervals(
    start: datetime,
    end: datetime,
    interval: Interval,
    limit: int = MAX_KLINES_PER_REQUEST,
) -> list[tuple[datetime, datetime]]:
    """Split ``[start, end]`` into windows of at most ``limit`` candles.

    Windows are contiguous and do not overlap: each one ends a millisecond
    before the next one starts, so no candle is requested twice and none
    falls between two windows.

    Args:
        start: Start of the range.
        end: End of the range (inclusive).
        interval: Candle interval.
        limit: Maximum candles per window.

    Returns:
        List of ``(window_start, window_end)`` tuples.
    """
    if limit < 1:
        raise ValueError("limit must be positive")

    if start > end:
        return []

    span = interval.duration * limit
    windows = []
    current = start

    while True:
        window_end = min(current + span - ONE_MILLISECOND, end)
        windows.append((current, window_end))
        if window_end >= end:
            break
        current = current + span

    return windows
