"""
PaginationEngine module: turns a page number into a request and a
response document into either a total count or a data slice
"""

import logging
from typing import Any, Dict

from .config_loader import EndpointConfig
from .http_client import APIRequest, APIResponse, HTTPClient
from .pagination_strategy import PaginationFactory, PaginationStrategy

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class FieldNotFound(Exception):
    """Raised when a configured field path does not resolve in a response"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Field '{path}' not found in response: {reason}")


def calculate_total_pages(total_count: int, page_size: int) -> int:
    """Ceiling division; zero items means zero pages"""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if total_count < 0:
        raise ValueError(f"total_count must not be negative, got {total_count}")
    return (total_count + page_size - 1) // page_size


def resolve_field(document: Any, path: str) -> Any:
    """
    Look up a top-level field by pointer-style path

    Only a single segment is supported: "data" and "/data" both name the
    top-level key "data". A path such as "results/items" is treated as the
    literal key "results/items" and does not traverse nested objects.

    Raises:
        FieldNotFound: If the document is not an object or lacks the key
    """
    key = path[1:] if path.startswith('/') else path
    if not isinstance(document, dict):
        raise FieldNotFound(path, f"response is a {type(document).__name__}, not an object")
    if key not in document:
        raise FieldNotFound(path, "key is missing")
    return document[key]


class PaginationEngine:
    """Builds page requests and extracts fields from page responses"""

    def __init__(self, config: EndpointConfig, http_client: HTTPClient):
        self.config = config
        self.http_client = http_client
        self.strategy: PaginationStrategy = PaginationFactory.create_strategy(
            config.pagination.pagination_type,
            config.pagination.page_size
        )
        self.logger = logging.getLogger(__name__)

    @property
    def page_size(self) -> int:
        return self.config.pagination.page_size

    def build_request(self, page_num: int) -> Dict[str, int]:
        """
        Compute query parameters for a 1-based page number

        Args:
            page_num: Page index, starting at 1

        Returns:
            Query parameters for the configured pagination variant
        """
        return self.strategy.get_page_params(page_num)

    def fetch_page(self, page_num: int) -> APIResponse:
        """
        Send the GET request for one page

        Raises:
            TransportError: Propagated from the HTTP client
        """
        api_request = APIRequest(
            url=self.config.base_url,
            parameters=self.build_request(page_num),
            headers=self.config.headers,
            method="GET"
        )
        return self.http_client.make_request(api_request)

    def extract_total_count(self, document: Any) -> int:
        """
        Read the total item count from a response document

        Args:
            document: Decoded JSON body

        Returns:
            Non-negative total item count

        Raises:
            FieldNotFound: If the field is missing or is not a non-negative 64-bit integer
        """
        path = self.config.pagination.total_count_path
        value = resolve_field(document, path)

        # bool is an int subclass; JSON true/false is not a count
        if isinstance(value, bool) or not isinstance(value, int):
            raise FieldNotFound(path, f"expected an integer, got {type(value).__name__}")
        if value < INT64_MIN or value > INT64_MAX:
            raise FieldNotFound(path, f"value {value} does not fit in 64 bits")
        if value < 0:
            raise FieldNotFound(path, f"total count must not be negative, got {value}")
        return value

    def extract_data(self, document: Any) -> Any:
        """
        Return the value at the configured data path verbatim

        Raises:
            FieldNotFound: If the data path does not resolve
        """
        return resolve_field(document, self.config.pagination.data_path)
