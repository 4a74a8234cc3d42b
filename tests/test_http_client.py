"""
Test suite for HTTPClient component
Following AAA pattern and descriptive naming
"""

import pytest
from unittest.mock import Mock, patch
import requests

from page_harvester.http_client import (
    HTTPClient, APIRequest, APIResponse, TransportError, HTTPStatusError, ResponseDecodeError
)


def make_request():
    return APIRequest(
        url='https://api.test.com/endpoint',
        parameters={'page': 1, 'pageSize': 10},
        headers={'Accept': 'application/json'},
        method='GET'
    )


def make_mock_response(status_code=200, json_data=None):
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.json.return_value = json_data if json_data is not None else {'data': []}
    mock_response.headers = {'Content-Type': 'application/json'}
    mock_response.raise_for_status.return_value = None
    mock_response.from_cache = False
    return mock_response


class TestHTTPClient:
    """Test suite for HTTPClient API communication functionality"""

    @patch('requests.Session')
    def test_make_request_with_successful_response_returns_api_response(self, mock_session_class):
        """
        Test that a 200 JSON response returns a populated APIResponse
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = make_mock_response(json_data={'data': [1], 'totalCount': 1})
        mock_session_class.return_value = mock_session
        http_client = HTTPClient(timeout_seconds=12)

        # Act
        result = http_client.make_request(make_request())

        # Assert
        assert isinstance(result, APIResponse)
        assert result.raw_data == {'data': [1], 'totalCount': 1}
        assert result.status_code == 200
        assert result.metadata['parameters'] == {'page': 1, 'pageSize': 10}
        mock_session.request.assert_called_once_with(
            'GET',
            'https://api.test.com/endpoint',
            params={'page': 1, 'pageSize': 10},
            headers={'Accept': 'application/json'},
            timeout=12
        )

    @patch('requests.Session')
    def test_make_request_reuses_session_between_calls(self, mock_session_class):
        """
        Test that the session is created once and reused
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = make_mock_response()
        mock_session_class.return_value = mock_session
        http_client = HTTPClient()

        # Act
        http_client.make_request(make_request())
        http_client.make_request(make_request())

        # Assert
        assert mock_session_class.call_count == 1
        assert mock_session.request.call_count == 2

    @patch('requests.Session')
    def test_make_request_with_server_error_raises_http_status_error_without_retry(self, mock_session_class):
        """
        Test that non-2xx responses raise HTTPStatusError and are not retried
        """
        # Arrange
        mock_response = make_mock_response(status_code=503)
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("503 Server Error")
        mock_session = Mock()
        mock_session.request.return_value = mock_response
        mock_session_class.return_value = mock_session
        http_client = HTTPClient()

        # Act & Assert
        with pytest.raises(HTTPStatusError) as exc_info:
            http_client.make_request(make_request())

        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value, TransportError)
        assert mock_session.request.call_count == 1

    @patch('requests.Session')
    def test_make_request_with_connection_error_raises_transport_error(self, mock_session_class):
        """
        Test that network-level failures are wrapped in TransportError
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.side_effect = requests.exceptions.ConnectionError("Connection refused")
        mock_session_class.return_value = mock_session
        http_client = HTTPClient()

        # Act & Assert
        with pytest.raises(TransportError) as exc_info:
            http_client.make_request(make_request())

        assert "Connection refused" in str(exc_info.value)

    @patch('requests.Session')
    def test_make_request_with_non_json_body_raises_response_decode_error(self, mock_session_class):
        """
        Test that a body that is not JSON raises ResponseDecodeError
        """
        # Arrange
        mock_response = make_mock_response()
        mock_response.json.side_effect = ValueError("Expecting value: line 1 column 1")
        mock_session = Mock()
        mock_session.request.return_value = mock_response
        mock_session_class.return_value = mock_session
        http_client = HTTPClient()

        # Act & Assert
        with pytest.raises(ResponseDecodeError):
            http_client.make_request(make_request())

    @patch('requests_cache.CachedSession')
    def test_make_request_with_cache_enabled_uses_cached_session(self, mock_cached_session_class):
        """
        Test that enabling the cache switches to a requests_cache session
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = make_mock_response()
        mock_cached_session_class.return_value = mock_session
        http_client = HTTPClient(cache_config={
            'enabled': True,
            'cache_name': 'test_cache',
            'expiration_seconds': 60
        })

        # Act
        http_client.make_request(make_request())

        # Assert
        mock_cached_session_class.assert_called_once_with('test_cache', expire_after=60)

    @patch('requests.Session')
    def test_close_connection_closes_and_clears_session(self, mock_session_class):
        """
        Test that close_connection releases the session
        """
        # Arrange
        mock_session = Mock()
        mock_session.request.return_value = make_mock_response()
        mock_session_class.return_value = mock_session
        http_client = HTTPClient()
        http_client.make_request(make_request())

        # Act
        http_client.close_connection()

        # Assert
        mock_session.close.assert_called_once()
        assert http_client.session is None

    def test_close_connection_without_session_does_nothing(self):
        """
        Test that closing an unused client is safe
        """
        # Arrange
        http_client = HTTPClient()

        # Act
        http_client.close_connection()

        # Assert
        assert http_client.session is None
