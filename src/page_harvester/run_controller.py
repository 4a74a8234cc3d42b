"""
RunController module for coordinating a complete paginated download
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config_loader import RunConfig
from .http_client import APIResponse, HTTPClient, TransportError
from .output_sink import JsonFileSink, OutputSink, SavedPage, SinkError
from .pagination_engine import FieldNotFound, PaginationEngine, calculate_total_pages
from .run_observer import LoggingObserver, RunObserver


class ProbeError(Exception):
    """Raised when the first page cannot be fetched or has no usable total count"""


class PageFetchError(Exception):
    """Raised when a page request fails during iteration"""

    def __init__(self, page_num: int, message: str):
        self.page_num = page_num
        super().__init__(message)


class PageExtractError(Exception):
    """Raised when a page response lacks the configured data field"""

    def __init__(self, page_num: int, message: str):
        self.page_num = page_num
        super().__init__(message)


# Errors isolated to a single page; the loop moves on to the next page
RECOVERABLE_PAGE_ERRORS = (PageFetchError, PageExtractError, SinkError)


class RunStatus(str, Enum):
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class CancellationToken:
    """Cooperative cancellation flag with an interruptible wait"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> None:
        """Sleep for up to `seconds`, returning early if cancelled"""
        self._event.wait(seconds)


@dataclass
class RunProgress:
    """Loop state: current_page is 1-based and only moves forward"""
    total_count: int
    total_pages: int
    current_page: int = 1

    @property
    def finished(self) -> bool:
        return self.current_page > self.total_pages

    def advance(self) -> None:
        self.current_page += 1


@dataclass
class RunSummary:
    """Outcome of a run that was not aborted by a fatal error"""
    status: RunStatus
    total_count: int
    total_pages: int
    saved_pages: List[SavedPage] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None

    @property
    def pages_saved(self) -> int:
        return len(self.saved_pages)

    @property
    def pages_failed(self) -> int:
        return len(self.errors)

    @property
    def success_rate_percent(self) -> float:
        attempted = self.pages_saved + self.pages_failed
        if attempted == 0:
            return 100.0
        return (self.pages_saved / attempted) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'total_count': self.total_count,
            'total_pages': self.total_pages,
            'pages_saved': self.pages_saved,
            'pages_failed': self.pages_failed,
            'success_rate_percent': self.success_rate_percent,
            'saved_pages': [
                {'page_num': p.page_num, 'path': str(p.path), 'content_hash': p.content_hash,
                 'unchanged': p.unchanged}
                for p in self.saved_pages
            ],
            'errors': list(self.errors),
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat() if self.end_time else None
        }


class RunController:
    """
    High-level coordinator for a paginated download

    Orchestrates the complete process of:
    1. Probing page 1 to discover the total item count
    2. Planning the number of pages
    3. Fetching every page in order, pausing for the rate limit before each
    4. Handing each page's data to the output sink
    """

    def __init__(
        self,
        engine: PaginationEngine,
        sink: OutputSink,
        observer: Optional[RunObserver] = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel_token: Optional[CancellationToken] = None
    ):
        """
        Initialise RunController with dependency injection

        Args:
            engine: Builds requests and extracts response fields
            sink: Persists each page's data
            observer: Progress reporter, defaults to LoggingObserver
            sleep: Called with the rate-limit delay in seconds before each page
            cancel_token: Checked before each page and after each pause
        """
        self.engine = engine
        self.sink = sink
        self.observer = observer or LoggingObserver()
        self.sleep = sleep
        self.cancel_token = cancel_token
        self.logger = logging.getLogger(__name__)

    def probe(self) -> Tuple[APIResponse, int]:
        """
        Fetch page 1 and read the total count from it

        Returns:
            The probe response and the total item count

        Raises:
            ProbeError: On transport, decode or total-count extraction failure
        """
        try:
            response = self.engine.fetch_page(1)
        except TransportError as e:
            raise ProbeError(f"Probe request failed: {e}") from e

        try:
            total_count = self.engine.extract_total_count(response.raw_data)
        except FieldNotFound as e:
            raise ProbeError(f"Cannot determine total count: {e}") from e

        return response, total_count

    def run(self) -> RunSummary:
        """
        Execute the run

        Returns:
            RunSummary with status COMPLETED or CANCELLED

        Raises:
            ProbeError: If the probe fails; nothing is fetched or written afterwards
        """
        start_time = datetime.now(timezone.utc)
        probe_response, total_count = self.probe()

        total_pages = calculate_total_pages(total_count, self.engine.page_size)
        progress = RunProgress(total_count=total_count, total_pages=total_pages)
        self.observer.on_plan(total_count, total_pages)

        summary = RunSummary(
            status=RunStatus.COMPLETED,
            total_count=total_count,
            total_pages=total_pages,
            start_time=start_time
        )
        delay_seconds = self.engine.config.rate_limit.total_seconds()

        while not progress.finished:
            page_num = progress.current_page

            if self._cancelled():
                break

            self.observer.on_page_start(page_num, total_pages)
            self.sleep(delay_seconds)

            if self._cancelled():
                break

            # Page 1 was already fetched by the probe
            reused = probe_response if page_num == 1 else None
            probe_response = None

            try:
                saved = self._process_page(page_num, reused)
                summary.saved_pages.append(saved)
                self.observer.on_page_saved(page_num, saved.path)
            except RECOVERABLE_PAGE_ERRORS as page_error:
                summary.errors.append({
                    'type': type(page_error).__name__,
                    'message': str(page_error),
                    'page_num': page_num
                })
                self.observer.on_page_error(page_num, page_error)

            progress.advance()

        summary.end_time = datetime.now(timezone.utc)

        if progress.finished:
            self.observer.on_complete(str(self.sink.output_dir))
        else:
            summary.status = RunStatus.CANCELLED
            self.observer.on_cancelled(progress.current_page)

        self.logger.debug(
            f"Run finished with status {summary.status.value}: "
            f"{summary.pages_saved} saved, {summary.pages_failed} failed"
        )
        return summary

    def _cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled

    def _process_page(self, page_num: int, response: Optional[APIResponse]) -> SavedPage:
        if response is None:
            try:
                response = self.engine.fetch_page(page_num)
            except TransportError as e:
                raise PageFetchError(page_num, f"Error fetching page {page_num}: {e}") from e

        try:
            data = self.engine.extract_data(response.raw_data)
        except FieldNotFound as e:
            raise PageExtractError(page_num, f"Could not find data in page {page_num}: {e}") from e

        return self.sink.write(page_num, data)


def run_harvest(
    run_config: RunConfig,
    observer: Optional[RunObserver] = None,
    cancel_token: Optional[CancellationToken] = None,
    http_client: Optional[HTTPClient] = None
) -> RunSummary:
    """
    Wire up the HTTP client, engine and file sink for a RunConfig and run it

    The HTTP session is closed when the run ends, whatever the outcome.
    """
    endpoint = run_config.endpoint
    http_client = http_client or HTTPClient(
        timeout_seconds=endpoint.timeout_seconds,
        cache_config=run_config.cache
    )
    controller = RunController(
        engine=PaginationEngine(endpoint, http_client),
        sink=JsonFileSink(run_config.output_dir),
        observer=observer,
        sleep=cancel_token.wait if cancel_token else time.sleep,
        cancel_token=cancel_token
    )
    try:
        return controller.run()
    finally:
        http_client.close_connection()
