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
Authorization-code exchange against the Okta token endpoint.
"""

import base64
import json
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode

import httpx
from pydantic import SecretStr

from coreason_okta_oauth.config import OktaStrategyConfig
from coreason_okta_oauth.exceptions import TokenResponseParseError
from coreason_okta_oauth.models import TokenResponse
from coreason_okta_oauth.transport import DEFAULT_MAX_BYTES, safe_fetch
from coreason_okta_oauth.utils.logger import logger


class TokenExchanger(Protocol):
    """Exchanges an authorization code (or refresh token) for tokens."""

    async def __call__(
        self,
        client: httpx.AsyncClient,
        code: str,
        params: Mapping[str, Any] | None = None,
    ) -> TokenResponse: ...


def parse_token_body(body: str | bytes) -> dict[str, Any]:
    """
    Parses a token endpoint body as JSON, falling back to form-urlencoded.

    Some providers answer with `access_token=...&token_type=...` regardless of the
    Accept header, so the fallback is kept.

    Args:
        body: The response body. Bytes must be valid UTF-8.

    Returns:
        dict[str, Any]: The parsed fields.

    Raises:
        TokenResponseParseError: If the body is not UTF-8, or is neither a JSON object nor form-urlencoded.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TokenResponseParseError(f"Unable to decode token response: {e}") from e

    try:
        parsed = json.loads(body)
    except ValueError:
        try:
            pairs = parse_qsl(body, keep_blank_values=True, strict_parsing=True)
        except ValueError as e:
            raise TokenResponseParseError(f"Unable to parse token response: {e}") from e
        logger.debug("Token response is not JSON, parsed as form-urlencoded")
        return dict(pairs)

    if not isinstance(parsed, dict):
        raise TokenResponseParseError(f"Token response is not a JSON object: {type(parsed).__name__}")
    return parsed


def build_token_response(fields: dict[str, Any]) -> TokenResponse:
    """
    Splits parsed token fields into access token, refresh token and the remaining fields.

    Raises:
        TokenResponseParseError: If no usable access_token is present.
    """
    remaining = dict(fields)
    access_token = remaining.pop("access_token", None)
    refresh_token = remaining.pop("refresh_token", None)

    if not isinstance(access_token, str) or not access_token:
        raise TokenResponseParseError("Token response does not contain an access_token")
    if refresh_token is not None and not isinstance(refresh_token, str):
        raise TokenResponseParseError("Token response contains a non-string refresh_token")

    return TokenResponse(access_token=access_token, refresh_token=refresh_token, raw=remaining)


class BasicAuthTokenExchanger:
    """
    Posts the code to the token endpoint authenticating the client with HTTP Basic credentials.

    Attributes:
        client_id (str): The Okta application client ID.
        token_url (str): The token endpoint URL.
        legacy_basic_auth_prefix (bool): Emit `Basic: ` instead of `Basic `.
        max_bytes (int): Maximum accepted response size.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: SecretStr,
        token_url: str,
        legacy_basic_auth_prefix: bool = False,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url
        self.legacy_basic_auth_prefix = legacy_basic_auth_prefix
        self.max_bytes = max_bytes

    @classmethod
    def from_config(cls, config: OktaStrategyConfig) -> "BasicAuthTokenExchanger":
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            token_url=config.token_url,
            legacy_basic_auth_prefix=config.legacy_basic_auth_prefix,
            max_bytes=config.max_response_bytes,
        )

    def authorization_header(self) -> str:
        raw = f"{self.client_id}:{self._client_secret.get_secret_value()}".encode()
        credentials = base64.b64encode(raw).decode("ascii")
        prefix = "Basic: " if self.legacy_basic_auth_prefix else "Basic "
        return prefix + credentials

    async def __call__(
        self,
        client: httpx.AsyncClient,
        code: str,
        params: Mapping[str, Any] | None = None,
    ) -> TokenResponse:
        """
        Exchanges `code` for tokens.

        When `params["grant_type"]` is `refresh_token`, `code` is sent as `refresh_token`.

        Args:
            client: The async HTTP client.
            code: The authorization code or refresh token.
            params: Extra form parameters (grant_type, redirect_uri, ...). Not mutated.

        Returns:
            TokenResponse: The issued tokens.

        Raises:
            httpx.HTTPError: On transport failures and non-2xx statuses, unchanged.
            TokenResponseParseError: If the response cannot be parsed or has no access_token.
            OversizedResponseError: If the response is too large.
        """
        form = dict(params or {})
        code_param = "refresh_token" if form.get("grant_type") == "refresh_token" else "code"
        form[code_param] = code

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            "Authorization": self.authorization_header(),
        }

        body = await safe_fetch(
            client,
            self.token_url,
            method="POST",
            headers=headers,
            content=urlencode(form, doseq=True),
            max_bytes=self.max_bytes,
        )
        fields = parse_token_body(body)
        return build_token_response(fields)
