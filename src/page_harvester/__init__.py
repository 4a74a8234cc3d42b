"""
Configurable paginated REST API harvester
Walks offset, cursor or page/pageSize pagination and saves each page's data as JSON
"""

from .config_loader import (
    ConfigLoader, ConfigurationError, EndpointConfig, PaginationConfig, RunConfig
)
from .http_client import (
    HTTPClient, APIRequest, APIResponse, TransportError, HTTPStatusError, ResponseDecodeError
)
from .pagination_strategy import PaginationFactory, PaginationType
from .pagination_engine import PaginationEngine, FieldNotFound, calculate_total_pages
from .output_sink import JsonFileSink, SavedPage, SinkError
from .file_hasher import FileHasher
from .run_observer import LoggingObserver
from .run_controller import (
    RunController, RunSummary, RunStatus, RunProgress, CancellationToken,
    ProbeError, PageFetchError, PageExtractError, run_harvest
)

__all__ = [
    'ConfigLoader',
    'ConfigurationError',
    'EndpointConfig',
    'PaginationConfig',
    'RunConfig',
    'HTTPClient',
    'APIRequest',
    'APIResponse',
    'TransportError',
    'HTTPStatusError',
    'ResponseDecodeError',
    'PaginationFactory',
    'PaginationType',
    'PaginationEngine',
    'FieldNotFound',
    'calculate_total_pages',
    'JsonFileSink',
    'SavedPage',
    'SinkError',
    'FileHasher',
    'LoggingObserver',
    'RunController',
    'RunSummary',
    'RunStatus',
    'RunProgress',
    'CancellationToken',
    'ProbeError',
    'PageFetchError',
    'PageExtractError',
    'run_harvest'
]
