"""Tests for download-ticks data models.

**Feature: download-ticks**
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from download_ticks.errors import InvalidDatetimeError
from download_ticks.models import FetchQuery, Interval, Kline, Market

from conftest import START, START_MS, make_kline


class TestInterval:
    """Interval notation, aliases and durations."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1m", Interval.M1),
            ("1M", Interval.MM1),
            ("m1", Interval.M1),
            ("M1", Interval.M1),
            ("mm1", Interval.MM1),
            ("MM1", Interval.MM1),
            ("h1", Interval.H1),
            ("1H", Interval.H1),
            ("12h", Interval.H12),
            ("w1", Interval.W1),
            (" 1d ", Interval.D1),
        ],
    )
    def test_parse(self, value: str, expected: Interval):
        assert Interval.parse(value) is expected

    @pytest.mark.parametrize("value", ["7m", "", "hourly", "1y"])
    def test_parse_invalid(self, value: str):
        with pytest.raises(ValueError):
            Interval.parse(value)

    def test_durations_increase(self):
        durations = [i.duration for i in Interval]
        assert durations == sorted(durations)

    def test_str_is_notation(self):
        assert str(Interval.H4) == "4h"
        assert str(Market.GATE) == "gate"

    @given(interval=st.sampled_from(list(Interval)))
    @settings(max_examples=20)
    def test_value_round_trip(self, interval: Interval):
        assert Interval.parse(interval.value) is interval
        assert Interval.parse(interval.name) is interval


class TestKline:
    """Kline timestamp handling and validation."""

    @pytest.mark.parametrize(
        "timestamp",
        [START_MS, START_MS * 1000, START_MS * 1_000_000, START, "2019-01-01T00:00:00Z"],
    )
    def test_timestamp_units(self, timestamp):
        kline = Kline(
            open_time=timestamp,
            open_price=1,
            high_price=1,
            low_price=1,
            close_price=1,
            volume=0,
            close_time=START + timedelta(minutes=1),
        )
        assert kline.open_time == START

    def test_serializes_millis(self):
        data = make_kline(START_MS).model_dump(mode="json")

        assert data["open_time"] == START_MS
        assert data["close_time"] == START_MS + 59_999
        assert data["open_price"] == 100.0
        assert data["number_of_trades"] == 0

    def test_naive_datetime_is_utc(self):
        naive = Kline(**{**make_kline(START_MS).model_dump(), "open_time": datetime(2019, 1, 1)})
        assert naive.open_time.tzinfo == timezone.utc

    def test_close_before_open_rejected(self):
        with pytest.raises(ValidationError):
            Kline(
                open_time=START_MS,
                open_price=1,
                high_price=1,
                low_price=1,
                close_price=1,
                volume=1,
                close_time=START_MS - 1,
            )

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Kline(
                open_time=START_MS,
                open_price=-1,
                high_price=1,
                low_price=1,
                close_price=1,
                volume=1,
                close_time=START_MS + 1,
            )

    def test_frozen(self):
        kline = make_kline(START_MS)
        with pytest.raises(ValidationError):
            kline.volume = 5


class TestFetchQuery:
    """FetchQuery validation."""

    def test_symbol_normalized(self):
        query = FetchQuery.build(symbol=" btcusdt ", interval=Interval.H1)
        assert query.symbol == "BTCUSDT"
        assert query.market is Market.BINANCE

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidDatetimeError):
            FetchQuery.build(
                symbol="BTCUSDT",
                interval=Interval.M1,
                from_date=START,
                to_date=START - timedelta(days=1),
            )

    def test_reversed_range_rejected_on_construction(self):
        with pytest.raises(InvalidDatetimeError):
            FetchQuery(
                symbol="BTCUSDT",
                interval=Interval.M1,
                from_date=START,
                to_date=START - timedelta(minutes=1),
            )

    def test_equal_range_allowed(self):
        query = FetchQuery.build(symbol="BTCUSDT", interval=Interval.M1, from_date=START, to_date=START)
        assert query.from_date == query.to_date

    def test_empty_symbol_rejected(self):
        with pytest.raises(ValidationError):
            FetchQuery.build(symbol="   ", interval=Interval.M1)

    def test_market_from_string(self):
        query = FetchQuery.build(market="gate", symbol="BTC_USDT", interval="1h")
        assert query.market is Market.GATE
        assert query.interval is Interval.H1

    def test_naive_dates_are_utc(self):
        query = FetchQuery.build(
            symbol="BTCUSDT",
            interval=Interval.D1,
            from_date=datetime(2019, 1, 1),
        )
        assert query.from_date == START

    def test_with_start(self):
        query = FetchQuery.build(symbol="BTCUSDT", interval=Interval.D1, from_date=START)
        later = START + timedelta(days=3)
        assert query.with_start(later).from_date == later
        assert query.from_date == START
