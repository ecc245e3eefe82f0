"""FetchQuery model describing one download request."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from download_ticks.errors import InvalidDatetimeError
from download_ticks.models.interval import Interval, Market


class FetchQuery(BaseModel):
    """What to download: market, symbol, interval and optional date range."""

    market: Market = Field(default=Market.BINANCE, description="Exchange to query")
    symbol: str = Field(..., min_length=1, description="Trading pair (e.g. BTCUSDT)")
    interval: Interval = Field(..., description="Kline interval")
    from_date: Optional[datetime] = Field(default=None, description="Range start (UTC)")
    to_date: Optional[datetime] = Field(default=None, description="Range end (UTC)")

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("symbol must not be empty")
        return value

    @field_validator("from_date", "to_date")
    @classmethod
    def _ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_range(self) -> "FetchQuery":
        # InvalidDatetimeError is not a ValueError, so pydantic re-raises it as is.
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise InvalidDatetimeError(
                f"Invalid given datetime: to-date {self.to_date.isoformat()} "
                f"is before from-date {self.from_date.isoformat()}"
            )
        return self

    @classmethod
    def build(cls, **kwargs) -> "FetchQuery":
        """Create a query from keyword arguments.

        Raises:
            InvalidDatetimeError: If ``to_date`` precedes ``from_date``.
            ValidationError: If any field is invalid.
        """
        return cls(**kwargs)

    def with_start(self, start: datetime) -> "FetchQuery":
        """Return a copy of this query starting at ``start``."""
        return self.model_copy(update={"from_date": start})
