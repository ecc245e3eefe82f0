"""Data models for download-ticks."""

from download_ticks.models.interval import Interval, Market
from download_ticks.models.kline import Kline
from download_ticks.models.query import FetchQuery

__all__ = [
    "FetchQuery",
    "Interval",
    "Kline",
    "Market",
]
