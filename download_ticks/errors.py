"""Exception types raised by download-ticks."""


class DownloadTicksError(Exception):
    """Base class for all download-ticks errors."""


class InvalidDatetimeError(DownloadTicksError):
    """Raised when a date is unparsable or a date range is reversed."""


class UnsupportedIntervalError(DownloadTicksError):
    """Raised when a market does not offer the requested interval."""


class FetchError(DownloadTicksError):
    """Raised when an HTTP request fails after all retry attempts."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseFormatError(DownloadTicksError):
    """Raised when an exchange response cannot be decoded into klines."""


class DataFileError(DownloadTicksError):
    """Raised when a saved klines file cannot be read."""


class DataFileEmptyError(DataFileError):
    """Raised when a saved klines file holds no records."""


class ConfigError(DownloadTicksError):
    """Raised when the configuration file is invalid."""
