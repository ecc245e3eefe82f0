"""Kline (candlestick) data model."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

# Integer timestamps above these bounds are micro- and nanoseconds.
_MAX_MILLIS = 10**14
_MAX_MICROS = 10**17

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def millis_to_datetime(value: int) -> datetime:
    """Convert epoch milliseconds to a UTC datetime."""
    return _EPOCH + timedelta(milliseconds=value)


def timestamp_to_datetime(value: int) -> datetime:
    """Convert an epoch timestamp in ms, us or ns to a UTC datetime."""
    if value < _MAX_MILLIS:
        return millis_to_datetime(value)
    if value < _MAX_MICROS:
        return _EPOCH + timedelta(microseconds=value)
    return _EPOCH + timedelta(microseconds=value // 1_000)


def datetime_to_millis(value: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


class Kline(BaseModel):
    """Represents a single candlestick for one interval."""

    open_time: datetime = Field(..., description="Candle open time (UTC)")
    open_price: float = Field(..., ge=0, description="Opening price")
    high_price: float = Field(..., ge=0, description="High price")
    low_price: float = Field(..., ge=0, description="Low price")
    close_price: float = Field(..., ge=0, description="Closing price")
    volume: float = Field(..., ge=0, description="Base asset volume")
    close_time: datetime = Field(..., description="Candle close time (UTC)")
    quote_asset_volume: float = Field(default=0.0, ge=0, description="Quote asset volume")
    number_of_trades: int = Field(default=0, ge=0, description="Number of trades")
    taker_buy_base_volume: float = Field(default=0.0, ge=0, description="Taker buy base volume")
    taker_buy_quote_volume: float = Field(default=0.0, ge=0, description="Taker buy quote volume")

    model_config = {"frozen": True}

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return timestamp_to_datetime(value)
        return value

    @field_validator("open_time", "close_time")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_times(self) -> "Kline":
        if self.close_time < self.open_time:
            raise ValueError("close_time must not be before open_time")
        return self

    @field_serializer("open_time", "close_time")
    def _serialize_time(self, value: datetime) -> int:
        return datetime_to_millis(value)
