"""
Unit tests for the MetaForge upstream client.
"""

import asyncio
import pytest
import httpx

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_chatbot.app.adapters.metaforge_client import MetaForgeClient, unwrap_envelope
from shared.errors import (
    UpstreamError,
    UpstreamHTTPError,
    UpstreamMalformed,
    UpstreamTimeout,
    UpstreamUnavailable,
)


BASE_URL = "https://upstream.test/api/arc-raiders"


class RecordingHandler:
    """MockTransport handler that records requests and replays a response factory."""

    def __init__(self, respond):
        self.respond = respond
        self.requests = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.respond(request)


def make_client(handler, timeout_ms: int = 5000) -> MetaForgeClient:
    return MetaForgeClient(BASE_URL, timeout_ms, transport=httpx.MockTransport(handler))


class TestUnwrapEnvelope:
    """Envelope unwrapping rules."""

    def test_unwraps_data(self):
        assert unwrap_envelope({"data": [1, 2], "cachedAt": 123}) == [1, 2]

    def test_empty_data_list_is_still_unwrapped(self):
        assert unwrap_envelope({"data": []}) == []

    def test_null_data_returns_body(self):
        body = {"data": None, "error": "nope"}
        assert unwrap_envelope(body) is body

    def test_bare_list_returned_verbatim(self):
        body = [{"name": "Wasp"}]
        assert unwrap_envelope(body) is body


class TestMetaForgeClient:
    """Test cases for MetaForgeClient."""

    @pytest.mark.asyncio
    async def test_fetch_unwraps_envelope(self):
        handler = RecordingHandler(
            lambda request: httpx.Response(200, json={"data": [{"name": "Rifle"}], "cachedAt": 1700000000})
        )
        client = make_client(handler)
        try:
            result = await client.fetch("/items")
        finally:
            await client.close()

        assert result == [{"name": "Rifle"}]
        assert len(handler.requests) == 1
        assert str(handler.requests[0].url) == f"{BASE_URL}/items"
        assert handler.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_fetch_without_unwrap_keeps_metadata(self):
        body = {"data": [{"name": "Trial", "is_active": True}], "activeWindowEnd": 1900000000}
        client = make_client(lambda request: httpx.Response(200, json=body))
        try:
            result = await client.fetch("/weekly-trials", unwrap=False)
        finally:
            await client.close()

        assert result == body

    @pytest.mark.asyncio
    async def test_fetch_returns_unenveloped_body(self):
        client = make_client(lambda request: httpx.Response(200, json=[{"name": "Wasp"}]))
        try:
            assert await client.fetch("/arcs") == [{"name": "Wasp"}]
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_non_2xx_raises_http_error(self):
        handler = RecordingHandler(lambda request: httpx.Response(503, text="down"))
        client = make_client(handler)
        try:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.fetch("/quests")
        finally:
            await client.close()

        assert exc_info.value.status == 503
        assert isinstance(exc_info.value, UpstreamError)
        # single attempt, no retry
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self):
        client = make_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
        try:
            with pytest.raises(UpstreamMalformed):
                await client.fetch("/quests")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_transport_timeout_raises_upstream_timeout(self):
        def respond(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        handler = RecordingHandler(respond)
        client = make_client(handler)
        try:
            with pytest.raises(UpstreamTimeout) as exc_info:
                await client.fetch("/events-schedule")
        finally:
            await client.close()

        assert exc_info.value.timeout_ms == 5000
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_slow_response_is_bounded(self):
        calls = []

        async def slow(request):
            calls.append(request)
            await asyncio.sleep(1.0)
            return httpx.Response(200, json=[])

        client = make_client(slow, timeout_ms=50)
        try:
            with pytest.raises(UpstreamTimeout):
                await client.fetch("/quests")
        finally:
            await client.close()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connect_error_raises_unavailable(self):
        def respond(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(respond)
        try:
            with pytest.raises(UpstreamUnavailable):
                await client.fetch("/quests")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_base_url_trailing_slash_is_trimmed(self):
        handler = RecordingHandler(lambda request: httpx.Response(200, json=[]))
        client = MetaForgeClient(BASE_URL + "/", transport=httpx.MockTransport(handler))
        try:
            await client.fetch("/quests")
        finally:
            await client.close()

        assert str(handler.requests[0].url) == f"{BASE_URL}/quests"

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = make_client(lambda request: httpx.Response(200, json=[]))
        await client.fetch("/quests")
        await client.close()
        await client.close()
