"""Tests for the EmailJS sender (mocked HTTP)."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from pantry_watch.channels.emailjs import EMAILJS_API_URL, EmailJSSender


def _mock_client(response=None, error=None):
    instance = AsyncMock()
    if error is not None:
        instance.post.side_effect = error
    else:
        instance.post.return_value = response
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


def _response(status_code=200, text="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


@pytest.fixture
def sender():
    return EmailJSSender("service_1", "template_1", "user_1")


def test_requires_credentials():
    with pytest.raises(ValueError, match="EmailJS requires"):
        EmailJSSender("", "template_1", "user_1")


@pytest.mark.asyncio
async def test_send_success(sender):
    with patch("pantry_watch.channels.emailjs.httpx.AsyncClient") as MockClient:
        instance = _mock_client(_response())
        MockClient.return_value = instance

        ok = await sender.send("cook@example.com", "Product expired", "Milk has expired")

        assert ok is True
        instance.post.assert_called_once()
        args, kwargs = instance.post.call_args
        assert args[0] == EMAILJS_API_URL
        payload = kwargs["json"]
        assert payload["service_id"] == "service_1"
        assert payload["template_id"] == "template_1"
        assert payload["user_id"] == "user_1"
        assert payload["template_params"] == {
            "to_email": "cook@example.com",
            "subject": "Product expired",
            "message": "Milk has expired",
        }
        assert "accessToken" not in payload


@pytest.mark.asyncio
async def test_send_includes_access_token():
    sender = EmailJSSender("s", "t", "u", access_token="secret")
    with patch("pantry_watch.channels.emailjs.httpx.AsyncClient") as MockClient:
        instance = _mock_client(_response())
        MockClient.return_value = instance
        await sender.send("cook@example.com", "subject", "body")
        assert instance.post.call_args[1]["json"]["accessToken"] == "secret"


@pytest.mark.asyncio
async def test_send_rejected(sender):
    with patch("pantry_watch.channels.emailjs.httpx.AsyncClient") as MockClient:
        MockClient.return_value = _mock_client(_response(400, "The user ID is invalid"))
        ok = await sender.send("cook@example.com", "subject", "body")
        assert ok is False


@pytest.mark.asyncio
async def test_send_transport_error(sender):
    with patch("pantry_watch.channels.emailjs.httpx.AsyncClient") as MockClient:
        MockClient.return_value = _mock_client(error=httpx.ConnectTimeout("timed out"))
        ok = await sender.send("cook@example.com", "subject", "body")
        assert ok is False
