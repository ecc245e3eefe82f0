"""Paginated kline download loop."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import requests

from download_ticks.client import fetch_json
from download_ticks.config import HttpSettings
from download_ticks.errors import DataFileError
from download_ticks.markets import BaseMarket
from download_ticks.models import FetchQuery, Kline
from download_ticks.storage import merge_klines, read_klines, write_klines
from download_ticks.utils import ONE_MILLISECOND

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def drop_unfinished(klines: list[Kline], now: datetime) -> list[Kline]:
    """Klines whose close time has passed at ``now``."""
    finished = [k for k in klines if k.close_time < now]
    if len(finished) < len(klines):
        logger.debug("Skipping %d unfinished kline(s)", len(klines) - len(finished))
    return finished


class KlineDownloader:
    """Downloads klines for a query, one request window at a time.

    When an output file is given, previously saved klines are loaded
    first, the download resumes after the last saved candle, and the file
    is rewritten after every page so an interrupted run can be resumed.
    """

    def __init__(
        self,
        market: BaseMarket,
        session: requests.Session,
        http: Optional[HttpSettings] = None,
        output_file: Optional[Path] = None,
        on_progress: Optional[ProgressCallback] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """Initialize the downloader.

        Args:
            market: Endpoint adapter for the exchange.
            session: HTTP session used for every request.
            http: Retry, pause and timeout settings.
            output_file: JSON file to resume from and save into.
            on_progress: Called with (done, total) after each page.
            now: Clock used to close open-ended ranges.
        """
        self.market = market
        self.session = session
        self.http = http or HttpSettings()
        self.output_file = Path(output_file) if output_file else None
        self.on_progress = on_progress
        self._now = now

    def load_previous(self) -> list[Kline]:
        """Klines already saved in the output file, or an empty list."""
        if self.output_file is None or not self.output_file.exists():
            return []
        try:
            klines = read_klines(self.output_file)
        except (OSError, DataFileError) as e:
            logger.warning("Ignoring previous data in %s: %s", self.output_file, e)
            return []
        logger.info("Loaded %d previous klines from %s", len(klines), self.output_file)
        return klines

    def resume_query(
        self,
        query: FetchQuery,
        previous: list[Kline],
        now: Optional[datetime] = None,
    ) -> Optional[FetchQuery]:
        """Adjust ``query`` to start after the last saved candle.

        An open-ended query is closed at ``now`` (the downloader clock when
        not given).

        Returns:
            The query to run, or None when the saved data already covers it.
        """
        if query.from_date is None:
            return query

        if query.to_date is None:
            query = query.model_copy(update={"to_date": now or self._now()})

        if previous:
            resume_at = previous[-1].close_time + ONE_MILLISECOND
            if resume_at > query.from_date:
                logger.info(
                    "Start from last close time %s => %s",
                    previous[-1].close_time.isoformat(),
                    resume_at.isoformat(),
                )
                query = query.with_start(resume_at)

        if query.from_date > query.to_date:
            logger.info("Saved data already covers the requested range")
            return None
        return query

    def fetch_page(self, params: dict, query: FetchQuery) -> list[Kline]:
        """Fetch and parse a single request window."""
        payload = fetch_json(
            self.session,
            self.market.base_url,
            params=params,
            retries=self.http.retry_counter,
            pause=self.http.pause,
            timeout=self.http.timeout,
            error_message=self.market.error_message,
        )
        return self.market.parse_klines(payload, query.interval)

    def save(self, klines: list[Kline]) -> None:
        """Write klines to the output file, logging rather than raising on failure."""
        if self.output_file is None:
            return
        try:
            write_klines(self.output_file, klines)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.output_file, e)

    def download(self, query: FetchQuery) -> list[Kline]:
        """Download every kline for ``query``.

        Candles still in progress at the start of the run are left out,
        so a later run resuming after the last saved candle fetches them
        once they are complete.

        Returns:
            All klines (previously saved plus new), sorted by open time.
        """
        now = self._now()
        previous = self.load_previous()
        klines = previous

        resumed = self.resume_query(query, previous, now)
        if resumed is None:
            return klines

        pages = self.market.request_params(resumed)
        total = len(pages)
        logger.info(
            "Fetching %s %s klines from %s in %d request(s)",
            resumed.symbol,
            resumed.interval.value,
            self.market.name,
            total,
        )

        for done, params in enumerate(pages, start=1):
            page = self.fetch_page(params, resumed)
            logger.debug("Page %d/%d returned %d klines", done, total, len(page))
            page = drop_unfinished(page, now)
            klines = merge_klines(klines, page)
            self.save(klines)

            if self.on_progress:
                self.on_progress(done, total)

        logger.info("Downloaded %d new klines", len(klines) - len(previous))
        return klines
