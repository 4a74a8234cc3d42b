"""
HTTPClient module for sending paginated GET requests
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

import requests
import requests_cache


class TransportError(Exception):
    """Raised when a request cannot be completed or its body cannot be used"""
    pass


class HTTPStatusError(TransportError):
    """Raised when the server answers with a non-2xx status"""

    def __init__(self, status_code: int, url: str, message: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(message or f"HTTP {status_code} returned by {url}")


class ResponseDecodeError(TransportError):
    """Raised when the response body is not valid JSON"""
    pass


@dataclass
class APIRequest:
    """Represents a single API request"""
    url: str
    parameters: Dict[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str = "GET"


@dataclass
class APIResponse:
    """Decoded JSON body plus transport metadata"""
    raw_data: Any
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    request_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class HTTPClient:
    """Thin requests wrapper; one call per request, no retries"""

    def __init__(self, timeout_seconds: float = 30.0, cache_config: Optional[Dict[str, Any]] = None):
        self.timeout_seconds = timeout_seconds
        self.cache_config = cache_config or {}
        self.session: Optional[requests.Session] = None
        self.logger = logging.getLogger(__name__)

    def _create_session(self) -> requests.Session:
        if self.cache_config.get('enabled'):
            cache_name = self.cache_config.get('cache_name', str(Path('.cache') / 'page_harvester'))
            expire_after = self.cache_config.get('expiration_seconds', 86400)
            self.logger.info(f"Request caching enabled with expiration of {expire_after} seconds")
            return requests_cache.CachedSession(cache_name, expire_after=expire_after)
        return requests.Session()

    def make_request(self, request: APIRequest) -> APIResponse:
        """
        Send a request and decode its JSON body

        Args:
            request: APIRequest object containing request details

        Returns:
            APIResponse object with the decoded document

        Raises:
            HTTPStatusError: For non-2xx responses
            ResponseDecodeError: If the body is not JSON
            TransportError: For connection, timeout and other request failures
        """
        if self.session is None:
            self.session = self._create_session()

        request_timestamp = datetime.now(timezone.utc)
        self.logger.debug(f"{request.method} {request.url} params={request.parameters}")

        try:
            response = self.session.request(
                request.method,
                request.url,
                params=request.parameters,
                headers=dict(request.headers),
                timeout=self.timeout_seconds
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {request.url} failed: {e}") from e

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise HTTPStatusError(response.status_code, request.url, str(e)) from e

        try:
            raw_data = response.json()
        except ValueError as e:
            raise ResponseDecodeError(f"Response from {request.url} is not valid JSON: {e}") from e

        return APIResponse(
            raw_data=raw_data,
            status_code=response.status_code,
            headers=dict(response.headers),
            metadata={
                'url': request.url,
                'method': request.method,
                'parameters': dict(request.parameters),
                'from_cache': getattr(response, 'from_cache', False)
            },
            request_timestamp=request_timestamp
        )

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
