"""
Unit tests for the BigCommerce transport. The HTTP session is mocked; no network.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from sell_through.client import BigCommerceClient
from sell_through.errors import UpstreamError


def _response(status_code=200, payload=None, content=b"[]", text="", json_error=None):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = content
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def client():
    return BigCommerceClient(store_hash="abc123", token="secret", base_url="https://api.test/")


def test_orders_url(client):
    assert client.orders_url == "https://api.test/stores/abc123/v2/orders"


def test_auth_headers(client):
    assert client.session.headers["X-Auth-Token"] == "secret"
    assert client.session.headers["Accept"] == "application/json"


def test_missing_credentials():
    with patch("sell_through.client.settings") as settings:
        settings.API_HASH = None
        settings.API_TOKEN = None
        with pytest.raises(ValueError, match="API_HASH"):
            BigCommerceClient(store_hash=None, token=None)


def test_get_json_returns_payload(client):
    with patch.object(client.session, "get", return_value=_response(payload=[{"id": 1}], content=b'[{"id": 1}]')) as get:
        assert client.get_json(client.orders_url, params={"page": 1}) == [{"id": 1}]

    get.assert_called_once_with(client.orders_url, params={"page": 1}, timeout=client.timeout)


def test_no_content_is_empty_list(client):
    with patch.object(client.session, "get", return_value=_response(status_code=204, content=b"")):
        assert client.get_json(client.orders_url) == []


def test_http_error_status(client):
    with patch.object(client.session, "get", return_value=_response(status_code=401, text="Unauthorized")):
        with pytest.raises(UpstreamError, match="HTTP 401") as exc_info:
            client.get_json(client.orders_url)

    assert exc_info.value.status_code == 401
    assert exc_info.value.url == client.orders_url


def test_transport_error(client):
    with patch.object(client.session, "get", side_effect=requests.exceptions.ConnectionError("refused")):
        with pytest.raises(UpstreamError, match="refused") as exc_info:
            client.get_json(client.orders_url)

    assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


def test_body_that_is_not_json(client):
    bad = _response(content=b"<html>", json_error=ValueError("Expecting value"))
    with patch.object(client.session, "get", return_value=bad):
        with pytest.raises(UpstreamError, match="not JSON"):
            client.get_json(client.orders_url)


def test_retry_adapter_is_mounted(client):
    adapter = client.session.get_adapter("https://api.test/")
    assert adapter.max_retries.total == client.session.get_adapter("http://x").max_retries.total
    assert 429 in adapter.max_retries.status_forcelist


def test_context_manager_closes_session():
    client = BigCommerceClient(store_hash="abc123", token="secret")
    with patch.object(client.session, "close") as close:
        with client:
            pass
    close.assert_called_once()
