"""Custom click parameter types."""

from datetime import datetime

import click

from download_ticks.errors import InvalidDatetimeError
from download_ticks.models import Interval
from download_ticks.utils import parse_datetime


class IntervalType(click.ParamType):
    """Accepts ``1h`` style notation or ``h1`` style aliases."""

    name = "interval"

    def convert(self, value, param, ctx) -> Interval:
        if isinstance(value, Interval):
            return value
        try:
            return Interval.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)

    def get_metavar(self, param, ctx=None) -> str:
        return "[1s|1m|3m|5m|15m|30m|1h|2h|4h|6h|8h|12h|1d|3d|1w|1M]"


class DateTimeType(click.ParamType):
    """Accepts RFC 3339 datetimes, plain dates and epoch milliseconds (UTC)."""

    name = "datetime"

    def convert(self, value, param, ctx) -> datetime:
        if isinstance(value, datetime):
            return value
        try:
            return parse_datetime(value)
        except InvalidDatetimeError as e:
            self.fail(str(e), param, ctx)


INTERVAL = IntervalType()
DATETIME = DateTimeType()
