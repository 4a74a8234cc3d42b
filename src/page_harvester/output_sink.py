"""
OutputSink module for persisting one JSON file per page
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from .file_hasher import FileHasher


class SinkError(Exception):
    """Raised when a page's data cannot be written"""

    def __init__(self, page_num: int, message: str):
        self.page_num = page_num
        super().__init__(message)


@dataclass(frozen=True)
class SavedPage:
    """Record of a written page artifact"""
    page_num: int
    path: Path
    content_hash: str
    unchanged: bool = False


class OutputSink(Protocol):
    """Persistence collaborator keyed by page number"""

    output_dir: Path

    def write(self, page_num: int, data: Any) -> SavedPage:
        ...


class JsonFileSink:
    """Writes pretty-printed JSON to page_<N>.json, overwriting existing files"""

    FILENAME_PATTERN = "page_{page_num}.json"

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.logger = logging.getLogger(__name__)

    def path_for(self, page_num: int) -> Path:
        return self.output_dir / self.FILENAME_PATTERN.format(page_num=page_num)

    def write(self, page_num: int, data: Any) -> SavedPage:
        """
        Serialise a page's data and write it to disk

        The output directory is created on first write, so a run that never
        reaches the write stage leaves the filesystem untouched.

        Args:
            page_num: 1-based page number used in the filename
            data: JSON value extracted from the response

        Returns:
            SavedPage with the file path and content hash

        Raises:
            SinkError: If serialisation or the file write fails
        """
        file_path = self.path_for(page_num)

        try:
            content = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise SinkError(page_num, f"Cannot serialise page {page_num}: {e}") from e

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            previous_hash = FileHasher.generate_file_hash(file_path) if file_path.exists() else None
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
            unchanged = FileHasher.compare_file_hashes(previous_hash, FileHasher.generate_file_hash(file_path))
        except OSError as e:
            raise SinkError(page_num, f"Cannot write {file_path}: {e}") from e

        if unchanged:
            self.logger.debug(f"Page {page_num} is identical to the existing {file_path}")
        else:
            self.logger.debug(f"Wrote {len(content)} characters to {file_path}")
        return SavedPage(
            page_num=page_num,
            path=file_path,
            content_hash=FileHasher.generate_content_hash(data),
            unchanged=unchanged
        )
