"""Tests for the dashboard HTTP client using httpx.MockTransport."""

import json

import httpx
import pytest

from smart_status.clients.base import EndpointError, NotAuthenticatedError
from smart_status.clients.http_api import DashboardApiClient


def _client(handler, token="tok-123"):
    return DashboardApiClient(
        base_url="https://dash.example.com/",
        token_provider=lambda: token,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestApproveBooking:
    @pytest.mark.asyncio
    async def test_sends_authenticated_patch(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        await _client(handler).approve_booking("bk-1")
        assert seen == {
            "method": "PATCH",
            "url": "https://dash.example.com/api/bookings",
            "auth": "Bearer tok-123",
            "body": {"booking_id": "bk-1", "action": "approve"},
        }

    @pytest.mark.asyncio
    async def test_non_2xx_raises_endpoint_error(self):
        client = _client(lambda request: httpx.Response(403, json={"error": "Forbidden"}))
        with pytest.raises(EndpointError) as excinfo:
            await client.approve_booking("bk-1")
        assert excinfo.value.status_code == 403
        assert excinfo.value.detail == {"error": "Forbidden"}

    @pytest.mark.asyncio
    async def test_transport_failure_raises_endpoint_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(EndpointError) as excinfo:
            await _client(handler).approve_booking("bk-1")
        assert excinfo.value.status_code is None

    @pytest.mark.asyncio
    async def test_missing_token_fails_before_sending(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        with pytest.raises(NotAuthenticatedError):
            await _client(handler, token=None).approve_booking("bk-1")
        assert calls == []


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_posts_message_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, text="created")

        await _client(handler).send_message("provider-1", "Booking Feedback", "Nice", "bk-1")
        assert seen["path"] == "/api/messages"
        assert seen["body"] == {
            "receiver_id": "provider-1",
            "subject": "Booking Feedback",
            "content": "Nice",
            "booking_id": "bk-1",
        }

    @pytest.mark.asyncio
    async def test_server_error_with_text_body(self):
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(EndpointError) as excinfo:
            await client.send_message("provider-1", "s", "c", "bk-1")
        assert excinfo.value.detail == "boom"
