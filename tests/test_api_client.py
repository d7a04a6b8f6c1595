"""Tests for ApiClient and token acquisition."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from inventory_migration.exceptions import AuthError, TransportError
from inventory_migration.models.migration import SystemConfig
from inventory_migration.services.api_client import ApiClient, resource_name, unwrap_collection
from inventory_migration.services.auth import fetch_token, token_url


def _response(status_code=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text if text is not None else (json.dumps(body) if body is not None else "")
    response.json.side_effect = lambda: json.loads(response.text)
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestEnvelope:
    """Tests for collection envelope handling."""

    def test_resource_name_strips_query(self):
        assert resource_name("/api/application-inventory/application?size=2000") == "application"
        assert resource_name("/hub/tags") == "tags"

    def test_envelope_and_bare_array_are_equivalent(self):
        items = [{"id": 1}, {"id": 2}]

        assert unwrap_collection({"_embedded": {"application": items}}, "application") == items
        assert unwrap_collection(items, "application") == items

    def test_plain_object_is_left_alone(self):
        assert unwrap_collection({"id": 70}, "70") == {"id": 70}


class TestApiClient:
    """Tests for ApiClient requests."""

    def test_get_unwraps_envelope(self, session):
        session.request.return_value = _response(body={"_embedded": {"application": [{"id": 10}]}})
        client = ApiClient("https://source.example.com/", session=session)

        result = client.get("/api/application-inventory/application?size=2000")

        assert result == [{"id": 10}]
        method, url = session.request.call_args[0]
        assert method == "GET"
        assert url == "https://source.example.com/api/application-inventory/application?size=2000"

    def test_post_sends_json_body(self, session):
        session.request.return_value = _response(status_code=201, body={"id": 7, "name": "A"})
        client = ApiClient("https://dest.example.com", session=session)

        created = client.post("/hub/applications", {"id": 7, "name": "A"})

        assert created == {"id": 7, "name": "A"}
        assert json.loads(session.request.call_args[1]["data"]) == {"id": 7, "name": "A"}

    def test_non_2xx_raises(self, session):
        session.request.return_value = _response(status_code=409, text="conflict")
        client = ApiClient("https://dest.example.com", session=session)

        with pytest.raises(TransportError) as exc:
            client.post("/hub/tags", {"id": 1})

        assert exc.value.status_code == 409
        assert exc.value.method == "POST"

    def test_connection_error_raises(self, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")
        client = ApiClient("https://dest.example.com", session=session)

        with pytest.raises(TransportError):
            client.get("/hub/tags")

    def test_empty_body_is_empty_collection(self, session):
        session.request.return_value = _response(status_code=204)
        client = ApiClient("https://dest.example.com", session=session)

        assert client.get("/hub/tags") is None
        assert client.list_collection("/hub/tags") == []

    def test_delete_failure_can_be_ignored(self, session):
        session.request.return_value = _response(status_code=404, text="not found")
        client = ApiClient("https://dest.example.com", session=session)

        assert client.delete("/hub/tags/1", ignore_errors=True) is False
        with pytest.raises(TransportError):
            client.delete("/hub/tags/1")

    def test_session_carries_bearer_token(self):
        client = ApiClient("https://dest.example.com", token="abc")

        assert client._session.headers["Authorization"] == "Bearer abc"
        assert client._session.headers["Content-Type"] == "application/json"


class TestFetchToken:
    """Tests for the password grant."""

    def test_token_url(self):
        config = SystemConfig(url="https://sso.example.com", username="u", password="p")

        assert token_url(config) == "https://sso.example.com/auth/realms/tackle/protocol/openid-connect/token"

    def test_password_grant(self, session):
        session.post.return_value = _response(body={"access_token": "xyz"})
        config = SystemConfig(url="https://sso.example.com", username="u", password="p", realm="r")

        assert fetch_token(config, verify_ssl=False, session=session) == "xyz"
        args, kwargs = session.post.call_args
        assert args[0].endswith("/auth/realms/r/protocol/openid-connect/token")
        assert kwargs["data"] == {
            "grant_type": "password",
            "client_id": "tackle-ui",
            "username": "u",
            "password": "p",
        }
        assert kwargs["verify"] is False

    def test_preissued_token_skips_grant(self, session):
        config = SystemConfig(url="https://sso.example.com", username="u", token="given")

        assert fetch_token(config, session=session) == "given"
        session.post.assert_not_called()

    def test_no_credentials_means_no_token(self, session):
        assert fetch_token(SystemConfig(url="http://localhost:8080"), session=session) is None
        session.post.assert_not_called()

    def test_rejected_credentials_raise(self, session):
        session.post.return_value = _response(status_code=401, text="invalid_grant")
        config = SystemConfig(url="https://sso.example.com", username="u", password="bad")

        with pytest.raises(AuthError):
            fetch_token(config, session=session)

    def test_missing_access_token_raises(self, session):
        session.post.return_value = _response(body={"token_type": "bearer"})
        config = SystemConfig(url="https://sso.example.com", username="u", password="p")

        with pytest.raises(AuthError):
            fetch_token(config, session=session)
