"""Shared fixtures and fake HTTP sessions for download-ticks tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from download_ticks.models import Kline

MINUTE_MS = 60_000

# 2019-01-01T00:00:00Z
START_MS = 1546300800000
START = datetime(2019, 1, 1, tzinfo=timezone.utc)


def make_response(
    status: int = 200,
    payload: Any = None,
    headers: Optional[dict] = None,
    invalid_json: bool = False,
) -> MagicMock:
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.headers = headers or {}
    response.url = "https://example.test/klines"
    response.reason = "Reason"
    response.text = "" if payload is None else str(payload)
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


def binance_row(open_ms: int, step_ms: int = MINUTE_MS) -> list:
    """A Binance kline row with prices derived from its open time."""
    price = 3700 + (open_ms // step_ms) % 100
    return [
        open_ms,
        f"{price:.8f}",
        f"{price + 5:.8f}",
        f"{price - 5:.8f}",
        f"{price + 1:.8f}",
        "12.50000000",
        open_ms + step_ms - 1,
        "46250.00000000",
        42,
        "6.00000000",
        "22200.00000000",
        "0",
    ]


def make_kline(open_ms: int, step_ms: int = MINUTE_MS) -> Kline:
    """A Kline for the minute starting at ``open_ms``."""
    return Kline(
        open_time=open_ms,
        open_price=100.0,
        high_price=105.0,
        low_price=95.0,
        close_price=101.0,
        volume=10.0,
        close_time=open_ms + step_ms - 1,
    )


class FakeBinanceSession:
    """Serves one-minute candles the way Binance's klines endpoint does."""

    def __init__(self, now_ms: int = START_MS + 5000 * MINUTE_MS, step_ms: int = MINUTE_MS):
        self.now_ms = now_ms
        self.step_ms = step_ms
        self.calls: list[dict] = []
        self.closed = False

    def get(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None):
        params = dict(params or {})
        self.calls.append(params)

        step = self.step_ms
        limit = params.get("limit", 500)
        end = min(params.get("endTime", self.now_ms), self.now_ms)
        start = params.get("startTime")

        if start is None:
            first = (end // step) * step - (limit - 1) * step
        else:
            first = -(-start // step) * step

        rows = []
        t = first
        while t <= end and len(rows) < limit:
            rows.append(binance_row(t, step))
            t += step
        return make_response(200, rows)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_session():
    """A fake Binance session."""
    return FakeBinanceSession()
