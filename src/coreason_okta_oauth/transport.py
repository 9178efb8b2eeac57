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
HTTP helpers shared by the token exchange and the profile fetch.
"""

import httpx
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from coreason_okta_oauth.config import OktaStrategyConfig
from coreason_okta_oauth.exceptions import OversizedResponseError
from coreason_okta_oauth.utils.logger import logger

DEFAULT_MAX_BYTES = 1_000_000


def build_client(config: OktaStrategyConfig) -> httpx.AsyncClient:
    """
    Creates an instrumented async client using the configured timeout.

    Args:
        config: The strategy configuration.

    Returns:
        httpx.AsyncClient: A new client. The caller owns it and must close it.
    """
    client = httpx.AsyncClient(timeout=config.http_timeout)
    # Instrument the client for distributed tracing
    HTTPXClientInstrumentor().instrument_client(client)
    return client


async def safe_fetch(
    client: httpx.AsyncClient,
    url: str,
    method: str = "POST",
    headers: dict[str, str] | None = None,
    content: str | bytes | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bytes:
    """
    Sends a request and reads the response body with a size cap.

    Args:
        client: The async HTTP client.
        url: The target URL.
        method: The HTTP method.
        headers: Request headers.
        content: Raw request body.
        max_bytes: Maximum accepted body size.

    Returns:
        bytes: The response body.

    Raises:
        httpx.HTTPError: On connection failures and non-2xx statuses.
        OversizedResponseError: If the body exceeds `max_bytes`.
    """
    async with client.stream(method, url, headers=headers, content=content) as response:
        response.raise_for_status()

        content_length = response.headers.get("Content-Length")
        if content_length:
            try:
                declared = int(content_length)
            except ValueError:
                declared = 0
            if declared > max_bytes:
                logger.warning(f"Rejected response from {url}: declared size {declared} exceeds limit")
                raise OversizedResponseError(f"Response size {declared} exceeds limit of {max_bytes} bytes")

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_bytes:
                logger.warning(f"Rejected response from {url}: body exceeds limit")
                raise OversizedResponseError(f"Response size exceeds limit of {max_bytes} bytes")

        return bytes(body)
