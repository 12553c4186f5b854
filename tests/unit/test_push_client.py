"""Unit tests for the push notification client"""

import httpx
import pytest
from unittest.mock import AsyncMock, patch
from fundflow.domain.exceptions import NotificationDeliveryError
from fundflow.infrastructure.clients.push import PushClient

API_URL = "http://push.test/notifications"


def _response(status_code: int, json_body=None) -> httpx.Response:
    return httpx.Response(status_code, json=json_body or {}, request=httpx.Request("POST", API_URL))


def _client() -> PushClient:
    client = PushClient(api_url=API_URL, app_id="app", api_key="key")
    client.backoff_base = 0
    return client


async def test_send_posts_onesignal_payload():
    """Payload targets one player with localized headings and contents"""
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = _response(200, {"id": "n1"})

        result = await _client().send("player-1", {"en": "Hi"}, {"en": "Body"}, {"debt_id": "d1"})

    assert result == {"id": "n1"}
    url = mock_post.call_args.args[0]
    payload = mock_post.call_args.kwargs["json"]
    headers = mock_post.call_args.kwargs["headers"]
    assert url == API_URL
    assert payload["app_id"] == "app"
    assert payload["include_player_ids"] == ["player-1"]
    assert payload["headings"] == {"en": "Hi"}
    assert payload["data"] == {"debt_id": "d1"}
    assert headers["Authorization"] == "Basic key"


async def test_send_retries_server_errors():
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = [_response(503), _response(200, {"id": "n2"})]

        result = await _client().send("player-1", {}, {}, {})

    assert result == {"id": "n2"}
    assert mock_post.call_count == 2


async def test_send_client_error_fails_immediately():
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = _response(400)

        with pytest.raises(NotificationDeliveryError):
            await _client().send("player-1", {}, {}, {})

    assert mock_post.call_count == 1


async def test_send_gives_up_after_max_retries():
    client = _client()
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(NotificationDeliveryError):
            await client.send("player-1", {}, {}, {})

    assert mock_post.call_count == client.max_retries


async def test_send_without_credentials():
    with pytest.raises(NotificationDeliveryError):
        await PushClient(api_url=API_URL, app_id="", api_key="").send("player-1", {}, {}, {})
