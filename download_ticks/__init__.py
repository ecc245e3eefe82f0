"""download-ticks - fetch historical candlestick data from crypto exchanges."""

__version__ = "0.3.0"
