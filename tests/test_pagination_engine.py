"""
Test suite for PaginationEngine component
Following AAA pattern and descriptive naming
"""

import pytest
from datetime import timedelta
from unittest.mock import Mock

from page_harvester.config_loader import EndpointConfig, PaginationConfig
from page_harvester.http_client import APIRequest, APIResponse, TransportError
from page_harvester.pagination_engine import (
    PaginationEngine, FieldNotFound, calculate_total_pages, resolve_field
)
from page_harvester.pagination_strategy import PaginationType


def make_endpoint(pagination_type=PaginationType.PAGE, page_size=100,
                  data_path='data', total_count_path='totalCount'):
    return EndpointConfig(
        base_url='https://api.test.com/items',
        headers={'Accept': 'application/json'},
        pagination=PaginationConfig(
            pagination_type=pagination_type,
            page_size=page_size,
            data_path=data_path,
            total_count_path=total_count_path
        ),
        rate_limit=timedelta(milliseconds=0)
    )


class TestCalculateTotalPages:
    """Test suite for total page calculation"""

    @pytest.mark.parametrize("total_count, page_size, expected", [
        (500, 250, 2),
        (501, 250, 3),
        (1, 250, 1),
        (0, 250, 0),
        (100, 1, 100),
    ])
    def test_calculate_total_pages_returns_ceiling(self, total_count, page_size, expected):
        """
        Test that total pages is the ceiling of total count over page size
        """
        # Act
        result = calculate_total_pages(total_count, page_size)

        # Assert
        assert result == expected

    def test_calculate_total_pages_with_zero_page_size_raises_value_error(self):
        """
        Test that a zero page size cannot be used for planning
        """
        # Act & Assert
        with pytest.raises(ValueError):
            calculate_total_pages(10, 0)


class TestResolveField:
    """Test suite for flat pointer-style field lookup"""

    def test_resolve_field_with_leading_slash_finds_top_level_key(self):
        """
        Test that '/data' and 'data' address the same top-level key
        """
        # Arrange
        document = {'data': [1, 2]}

        # Act & Assert
        assert resolve_field(document, '/data') == [1, 2]
        assert resolve_field(document, 'data') == [1, 2]

    def test_resolve_field_with_nested_path_does_not_traverse(self):
        """
        Test that a slash-separated path is not resolved through nested objects
        """
        # Arrange
        document = {'results': {'items': [1]}}

        # Act & Assert
        with pytest.raises(FieldNotFound):
            resolve_field(document, 'results/items')

    def test_resolve_field_with_non_object_document_raises_field_not_found(self):
        """
        Test that array responses cannot resolve a field
        """
        # Act & Assert
        with pytest.raises(FieldNotFound) as exc_info:
            resolve_field([1, 2, 3], 'data')

        assert "not an object" in str(exc_info.value)


class TestPaginationEngine:
    """Test suite for PaginationEngine request building and extraction"""

    def setup_method(self):
        """Set up test fixtures before each test method"""
        self.http_client = Mock()
        self.engine = PaginationEngine(make_endpoint(), self.http_client)

    def test_build_request_with_offset_variant_returns_offset_and_limit(self):
        """
        Test offset variant: page 3 of size 100 is offset 200, limit 100
        """
        # Arrange
        engine = PaginationEngine(make_endpoint(PaginationType.OFFSET, 100), self.http_client)

        # Act
        result = engine.build_request(3)

        # Assert
        assert result == {'offset': 200, 'limit': 100}

    def test_build_request_with_page_variant_returns_page_and_page_size(self):
        """
        Test page variant: page 3 of size 100 is page=3, pageSize=100
        """
        # Act
        result = self.engine.build_request(3)

        # Assert
        assert result == {'page': 3, 'pageSize': 100}

    def test_build_request_with_cursor_variant_returns_cursor_and_limit(self):
        """
        Test cursor variant uses the page number as cursor
        """
        # Arrange
        engine = PaginationEngine(make_endpoint(PaginationType.CURSOR, 10), self.http_client)

        # Act
        result = engine.build_request(2)

        # Assert
        assert result == {'cursor': 2, 'limit': 10}

    def test_fetch_page_sends_get_with_base_url_headers_and_params(self):
        """
        Test that fetch_page builds an APIRequest from the endpoint configuration
        """
        # Arrange
        expected_response = APIResponse(raw_data={'data': []}, status_code=200)
        self.http_client.make_request.return_value = expected_response

        # Act
        result = self.engine.fetch_page(2)

        # Assert
        assert result is expected_response
        sent_request = self.http_client.make_request.call_args[0][0]
        assert isinstance(sent_request, APIRequest)
        assert sent_request.url == 'https://api.test.com/items'
        assert sent_request.method == 'GET'
        assert sent_request.parameters == {'page': 2, 'pageSize': 100}
        assert dict(sent_request.headers) == {'Accept': 'application/json'}

    def test_fetch_page_propagates_transport_error(self):
        """
        Test that transport failures are not swallowed by the engine
        """
        # Arrange
        self.http_client.make_request.side_effect = TransportError("connection refused")

        # Act & Assert
        with pytest.raises(TransportError):
            self.engine.fetch_page(1)

    def test_extract_total_count_with_integer_field_returns_value(self):
        """
        Test that an integer total count field is returned as-is
        """
        # Arrange
        document = {'totalCount': 500, 'data': []}

        # Act
        result = self.engine.extract_total_count(document)

        # Assert
        assert result == 500

    @pytest.mark.parametrize("document", [
        {'data': []},
        {'totalCount': '500'},
        {'totalCount': 12.5},
        {'totalCount': True},
        {'totalCount': None},
        {'totalCount': -1},
        {'totalCount': 2 ** 63},
    ])
    def test_extract_total_count_with_missing_or_mistyped_field_raises_field_not_found(self, document):
        """
        Test that anything but a non-negative 64-bit integer raises FieldNotFound
        """
        # Act & Assert
        with pytest.raises(FieldNotFound) as exc_info:
            self.engine.extract_total_count(document)

        assert exc_info.value.path == 'totalCount'

    @pytest.mark.parametrize("value", [[{'id': 1}], {'id': 1}, 'scalar', 0, None])
    def test_extract_data_returns_value_verbatim(self, value):
        """
        Test that the data field is returned without validation whatever its type
        """
        # Arrange
        document = {'data': value, 'totalCount': 1}

        # Act
        result = self.engine.extract_data(document)

        # Assert
        assert result == value

    def test_extract_data_with_missing_field_raises_field_not_found(self):
        """
        Test that a missing data path raises FieldNotFound
        """
        # Arrange
        document = {'results': [], 'totalCount': 1}

        # Act & Assert
        with pytest.raises(FieldNotFound) as exc_info:
            self.engine.extract_data(document)

        assert exc_info.value.path == 'data'

    def test_extract_functions_do_not_modify_document(self):
        """
        Test that extraction leaves the response document untouched
        """
        # Arrange
        document = {'data': [{'id': 1}], 'totalCount': 1}
        snapshot = {'data': [{'id': 1}], 'totalCount': 1}

        # Act
        self.engine.extract_total_count(document)
        self.engine.extract_data(document)

        # Assert
        assert document == snapshot
