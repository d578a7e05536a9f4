"""
Unit tests for the REST client.
"""

from unittest.mock import MagicMock

import pytest
import requests

from admin_console.api_client import ApiClient
from admin_console.exceptions import (
    FetchError,
    NetworkError,
    NO_RESPONSE_MESSAGE,
    SERVER_ERROR_FALLBACK,
    ServerError,
)
from admin_console.serialization import FilePart, JsonPayload, MultipartPayload

BASE_URL = "http://api.test"


def _response(status_code=200, body=None, json_error=False, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = text
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return ApiClient(BASE_URL + "/", token_provider=lambda: "abc123", timeout=5, session=session)


class TestFetchWithToken:
    """Test cases for authenticated GETs."""

    def test_sends_bearer_token_and_timeout(self, client, session):
        session.get.return_value = _response(200, {'records': []})

        assert client.fetch_with_token("/api/properties") == {'records': []}

        args, kwargs = session.get.call_args
        assert args[0] == "http://api.test/api/properties"
        assert kwargs['headers']['Authorization'] == "Bearer abc123"
        assert kwargs['headers']['Content-Type'] == "application/json"
        assert kwargs['timeout'] == 5

    def test_no_token_no_authorization_header(self, session):
        client = ApiClient(BASE_URL, session=session)
        session.get.return_value = _response(200, {})

        client.fetch_with_token("api/users")

        assert 'Authorization' not in session.get.call_args.kwargs['headers']

    def test_non_ok_status_raises_fetch_error(self, client, session):
        session.get.return_value = _response(401, {'message': 'Unauthenticated.'})

        with pytest.raises(FetchError) as excinfo:
            client.fetch_with_token("/api/properties")

        assert excinfo.value.message == "Failed to fetch data"
        assert excinfo.value.status_code == 401

    def test_transport_failure_raises_fetch_error(self, client, session):
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchError):
            client.fetch_with_token("/api/properties")

    def test_absolute_url_passes_through(self, client):
        assert client.url("https://other.test/x") == "https://other.test/x"


class TestPost:
    """Test cases for form submission."""

    def test_multipart_payload_uses_files(self, client, session):
        session.post.return_value = _response(201, {'message': 'created'})
        payload = MultipartPayload([
            ('name', 'Azure Tower'),
            ('amenities[]', 'Pool'),
            ('images[]', FilePart('a.png', b'png', 'image/png')),
        ])

        response = client.post("/api/properties", payload)

        assert response.created
        kwargs = session.post.call_args.kwargs
        assert kwargs['files'] == [
            ('name', (None, 'Azure Tower')),
            ('amenities[]', (None, 'Pool')),
            ('images[]', ('a.png', b'png', 'image/png')),
        ]
        assert 'json' not in kwargs
        assert 'Content-Type' not in kwargs['headers']
        assert kwargs['headers']['Authorization'] == "Bearer abc123"

    def test_json_payload(self, client, session):
        session.post.return_value = _response(200, {'message': 'ok'})

        response = client.post("/api/users", JsonPayload({'name': 'Ana'}))

        assert response.status_code == 200
        assert not response.created
        kwargs = session.post.call_args.kwargs
        assert kwargs['json'] == {'name': 'Ana'}
        assert kwargs['headers']['Content-Type'] == "application/json"

    @pytest.mark.parametrize("exc", [requests.ConnectionError("refused"), requests.Timeout("slow")])
    def test_no_response_raises_network_error(self, client, session, exc):
        session.post.side_effect = exc

        with pytest.raises(NetworkError) as excinfo:
            client.post("/api/users", JsonPayload({}))

        assert excinfo.value.message == NO_RESPONSE_MESSAGE

    def test_server_message_kept_verbatim(self, client, session):
        session.post.return_value = _response(422, {'message': 'The email has already been taken.'})

        with pytest.raises(ServerError) as excinfo:
            client.post("/api/users", JsonPayload({}))

        assert excinfo.value.status_code == 422
        assert excinfo.value.message == "The email has already been taken."

    def test_server_error_without_json_body_uses_fallback(self, client, session):
        session.post.return_value = _response(500, json_error=True, text="<html>oops</html>")

        with pytest.raises(ServerError) as excinfo:
            client.post("/api/users", JsonPayload({}))

        assert excinfo.value.message == SERVER_ERROR_FALLBACK
        assert excinfo.value.body == "<html>oops</html>"

    def test_unsupported_payload_raises_type_error(self, client):
        with pytest.raises(TypeError):
            client.post("/api/users", {'name': 'Ana'})
