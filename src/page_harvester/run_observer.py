"""
Run observer interface for progress reporting
"""

import logging
from pathlib import Path
from typing import Optional, Protocol


class RunObserver(Protocol):
    """Receives progress events from the RunController"""

    def on_plan(self, total_count: int, total_pages: int) -> None: ...

    def on_page_start(self, page_num: int, total_pages: int) -> None: ...

    def on_page_saved(self, page_num: int, path: Path) -> None: ...

    def on_page_error(self, page_num: int, error: Exception) -> None: ...

    def on_complete(self, output_location: str) -> None: ...

    def on_cancelled(self, next_page: int) -> None: ...


class LoggingObserver:
    """Reports run progress through a logger"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def on_plan(self, total_count: int, total_pages: int) -> None:
        self.logger.info(f"Total items: {total_count}")
        self.logger.info(f"Total pages: {total_pages}")

    def on_page_start(self, page_num: int, total_pages: int) -> None:
        self.logger.info(f"Fetching page {page_num} of {total_pages}")

    def on_page_saved(self, page_num: int, path: Path) -> None:
        self.logger.info(f"Saved page {page_num} to {path}")

    def on_page_error(self, page_num: int, error: Exception) -> None:
        self.logger.error(f"Error processing page {page_num}: {error}")

    def on_complete(self, output_location: str) -> None:
        self.logger.info(f"Download complete! Files saved in '{output_location}'")

    def on_cancelled(self, next_page: int) -> None:
        self.logger.warning(f"Run cancelled before page {next_page}")
