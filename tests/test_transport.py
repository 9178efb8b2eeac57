# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_okta_oauth

"""
Tests for the bounded HTTP helpers.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from coreason_okta_oauth.config import OktaStrategyConfig
from coreason_okta_oauth.exceptions import OversizedResponseError
from coreason_okta_oauth.transport import build_client, safe_fetch


def mock_stream_response(headers: dict[str, str], chunks: list[bytes]) -> MagicMock:
    async def content_stream() -> AsyncIterator[bytes]:
        for chunk in chunks:
            yield chunk

    response = MagicMock()
    response.headers = headers
    response.aiter_bytes = content_stream
    response.raise_for_status = MagicMock()
    return response


def patch_stream(client: httpx.AsyncClient, response: MagicMock) -> Any:
    @asynccontextmanager
    async def mock_stream(*_args: Any, **_kwargs: Any) -> AsyncGenerator[MagicMock, None]:
        yield response

    return patch.object(client, "stream", side_effect=mock_stream)


@pytest.mark.asyncio
async def test_build_client_uses_timeout(config_factory: Any) -> None:
    config: OktaStrategyConfig = config_factory(http_timeout=3.5)
    async with build_client(config) as client:
        assert client.timeout.connect == 3.5
        assert client.timeout.read == 3.5


@pytest.mark.asyncio
async def test_safe_fetch_returns_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"hello")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        body = await safe_fetch(client, "https://example.okta.com/x", headers={"X-Test": "1"}, content=b"payload")

    assert body == b"hello"
    assert seen[0].method == "POST"
    assert seen[0].headers["X-Test"] == "1"
    assert seen[0].content == b"payload"


@pytest.mark.asyncio
async def test_safe_fetch_raises_for_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await safe_fetch(client, "https://example.okta.com/x")


@pytest.mark.asyncio
async def test_safe_fetch_content_length_limit() -> None:
    client = httpx.AsyncClient()
    response = mock_stream_response({"Content-Length": str(2 * 1024 * 1024)}, [])

    with patch_stream(client, response), pytest.raises(OversizedResponseError, match="exceeds limit"):
        await safe_fetch(client, "https://example.okta.com/x", max_bytes=1_000_000)


@pytest.mark.asyncio
async def test_safe_fetch_chunked_limit_exceeded() -> None:
    """Many small chunks without Content-Length still hit the limit."""
    client = httpx.AsyncClient()
    response = mock_stream_response({}, [b"12345", b"67890", b"1"])

    with patch_stream(client, response), pytest.raises(OversizedResponseError, match="exceeds limit"):
        await safe_fetch(client, "https://example.okta.com/x", max_bytes=10)


@pytest.mark.asyncio
async def test_safe_fetch_exact_limit() -> None:
    client = httpx.AsyncClient()
    response = mock_stream_response({"Content-Length": "10"}, [b'{"a": 123}'])

    with patch_stream(client, response):
        assert await safe_fetch(client, "https://example.okta.com/x", max_bytes=10) == b'{"a": 123}'


@pytest.mark.asyncio
async def test_safe_fetch_ignores_invalid_content_length() -> None:
    client = httpx.AsyncClient()
    response = mock_stream_response({"Content-Length": "garbage"}, [b"ok"])

    with patch_stream(client, response):
        assert await safe_fetch(client, "https://example.okta.com/x") == b"ok"
