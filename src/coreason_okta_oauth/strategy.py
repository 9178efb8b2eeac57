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
OktaStrategy component: the Okta OAuth2 authorization-code adapter.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

import anyio
import httpx
from authlib.common.security import generate_token
from authlib.common.urls import add_params_to_uri
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from coreason_okta_oauth.config import OktaStrategyConfig
from coreason_okta_oauth.exceptions import InternalOAuthError, OktaOAuthError, OversizedResponseError
from coreason_okta_oauth.models import PROVIDER_NAME, TokenResponse, UserProfile
from coreason_okta_oauth.profile_mapper import ProfileMapper
from coreason_okta_oauth.token_exchange import BasicAuthTokenExchanger, TokenExchanger
from coreason_okta_oauth.transport import build_client, safe_fetch
from coreason_okta_oauth.utils.logger import logger

tracer = trace.get_tracer(__name__)

NONCE_LENGTH = 24

# verify(access_token, refresh_token, token_params, profile) -> user (sync or async)
VerifyCallback = Callable[[str, str | None, dict[str, Any], UserProfile], Any]


class OktaStrategy:
    """
    Authenticates users against an Okta tenant with the OAuth2 authorization-code flow.

    The hosting framework redirects to `create_authorization_url()`, then hands the
    returned code to `authenticate()`. The code exchange is pluggable through
    `token_exchanger`; the default authenticates the client with HTTP Basic credentials.

    Attributes:
        name (str): The strategy name, `tsokta`.
        config (OktaStrategyConfig): The strategy configuration.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: OktaStrategyConfig,
        verify: VerifyCallback,
        client: httpx.AsyncClient | None = None,
        token_exchanger: TokenExchanger | None = None,
    ) -> None:
        """
        Initialize the OktaStrategy.

        Args:
            config: The configuration object.
            verify: Called with the tokens and profile once a user is authenticated.
            client: External async client (optional). If not provided, one is created on first use and
                closed by `aclose()`.
            token_exchanger: Code exchange implementation. Defaults to `BasicAuthTokenExchanger`.
        """
        self.config = config
        self.verify = verify
        self._client = client
        self._internal_client = client is None
        self._token_exchanger = token_exchanger or BasicAuthTokenExchanger.from_config(config)
        self._userinfo_url = config.userinfo_url
        self._idp = config.idp
        self._state = config.state
        self.profile_mapper = ProfileMapper()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_client(self.config)
        return self._client

    async def __aenter__(self) -> "OktaStrategy":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._internal_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def authorization_params(self, options: Mapping[str, Any] | None = None) -> dict[str, str]:
        """
        Returns the Okta-specific parameters to add to the authorization request.

        Args:
            options: The current authorization-request options. Unused.

        Returns:
            dict[str, str]: `state` and a fresh `nonce` when state is enabled, `idp` when configured.
        """
        _ = options
        params: dict[str, str] = {}
        if self._state:
            params["state"] = "true"
            params["nonce"] = generate_token(NONCE_LENGTH)
        if self._idp:
            params["idp"] = self._idp
        return params

    def create_authorization_url(self, state: str | None = None, **extra: Any) -> str:
        """
        Builds the URL to redirect the user to.

        Args:
            state: Opaque anti-CSRF value issued by the hosting framework. Overrides the
                configured `state` flag's value when given.
            **extra: Additional query parameters. `client_id`, `response_type`, `redirect_uri`
                and `scope` replace the configured values.

        Returns:
            str: The authorization URL.
        """
        params: dict[str, Any] = self.authorization_params()
        configured_state = params.pop("state", None)

        client_id = extra.pop("client_id", self.config.client_id)
        response_type = extra.pop("response_type", self.config.response_type)
        redirect_uri = extra.pop("redirect_uri", self.config.callback_url)
        scope = extra.pop("scope", self.config.scope)
        params.update(extra)

        url = prepare_grant_uri(
            self.config.authorization_url,
            client_id,
            response_type,
            redirect_uri=redirect_uri,
            scope=scope,
            state=state if state is not None else configured_state,
        )
        extra_params = [(key, value) for key, value in params.items() if value is not None]
        return add_params_to_uri(url, extra_params) if extra_params else url

    async def exchange_code(self, code: str, params: Mapping[str, Any] | None = None) -> TokenResponse:
        """
        Exchanges an authorization code (or refresh token) for tokens.

        Args:
            code: The authorization code returned by Okta.
            params: Extra form parameters for the token request.

        Returns:
            TokenResponse: The issued tokens, `refresh_token` split out of `raw`.

        Raises:
            httpx.HTTPError: On transport failures, unchanged.
            TokenResponseParseError: If the token response cannot be parsed.
            OversizedResponseError: If the token response is too large.
        """
        with tracer.start_as_current_span("okta.exchange_code") as span:
            try:
                tokens = await self._token_exchanger(self.client, code, params)
            except (httpx.HTTPError, OktaOAuthError) as e:
                logger.warning(f"Token exchange with {self.config.token_url} failed: {type(e).__name__}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, type(e).__name__))
                raise

            logger.info("Token exchange succeeded")
            span.set_attribute("okta.refresh_token_issued", tokens.refresh_token is not None)
            span.set_status(Status(StatusCode.OK))
            return tokens

    async def refresh(self, refresh_token: str, params: Mapping[str, Any] | None = None) -> TokenResponse:
        """
        Exchanges a refresh token for a new access token.
        """
        refresh_params = dict(params or {})
        refresh_params["grant_type"] = "refresh_token"
        return await self.exchange_code(refresh_token, refresh_params)

    async def user_profile(self, access_token: str) -> UserProfile:
        """
        Retrieves the user profile from the Okta userinfo endpoint.

        See http://developer.okta.com/docs/api/resources/oidc.html#get-user-information

        Args:
            access_token: The access token obtained from the code exchange.

        Returns:
            UserProfile: The normalized profile.

        Raises:
            InternalOAuthError: If the request fails.
            ProfileParseError: If the response body is not UTF-8 encoded JSON object text.
        """
        with tracer.start_as_current_span("okta.user_profile") as span:
            headers = {"Authorization": f"Bearer {access_token}"}
            try:
                body = await safe_fetch(
                    self.client,
                    self._userinfo_url,
                    method="POST",
                    headers=headers,
                    content=b"",
                    max_bytes=self.config.max_response_bytes,
                )
            except (httpx.HTTPError, OversizedResponseError) as e:
                logger.error(f"Failed to fetch user profile from {self._userinfo_url}: {type(e).__name__}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, "failed to fetch user profile"))
                raise InternalOAuthError("failed to fetch user profile", e) from e

            try:
                profile = self.profile_mapper.map_userinfo(body)
            except OktaOAuthError as e:
                logger.warning("Okta userinfo response could not be parsed", exc_info=True)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            span.set_status(Status(StatusCode.OK))
            return profile

    async def authenticate(self, code: str, params: Mapping[str, Any] | None = None) -> Any:
        """
        Completes the callback leg: exchanges the code, fetches the profile and runs `verify`.

        Args:
            code: The authorization code returned by Okta.
            params: Extra token request parameters. `grant_type` and `redirect_uri` default
                to `authorization_code` and the configured callback URL.

        Returns:
            Any: Whatever `verify` returns (awaited if it is a coroutine).
        """
        exchange_params: dict[str, Any] = {
            "grant_type": "authorization_code",
            "redirect_uri": self.config.callback_url,
        }
        exchange_params.update(params or {})

        tokens = await self.exchange_code(code, exchange_params)
        profile = await self.user_profile(tokens.access_token)

        result = self.verify(tokens.access_token, tokens.refresh_token, tokens.raw, profile)
        if inspect.isawaitable(result):
            result = await result
        return result


class OktaStrategySync:
    """
    Sync facade for OktaStrategy, for threaded frameworks (Flask, Django).

    Every network call runs in its own event loop via `anyio.run` with a short-lived client,
    so one instance can be shared between threads.
    """

    name = PROVIDER_NAME

    def __init__(
        self,
        config: OktaStrategyConfig,
        verify: VerifyCallback,
        token_exchanger: TokenExchanger | None = None,
    ) -> None:
        self.config = config
        self.verify = verify
        self._token_exchanger = token_exchanger
        # Never touches the network, so it never creates a client
        self._strategy = OktaStrategy(config, verify, token_exchanger=token_exchanger)

    def authorization_params(self, options: Mapping[str, Any] | None = None) -> dict[str, str]:
        return self._strategy.authorization_params(options)

    def create_authorization_url(self, state: str | None = None, **extra: Any) -> str:
        return self._strategy.create_authorization_url(state, **extra)

    def _run(self, method: str, *args: Any) -> Any:
        async def runner() -> Any:
            async with OktaStrategy(self.config, self.verify, token_exchanger=self._token_exchanger) as strategy:
                return await getattr(strategy, method)(*args)

        return anyio.run(runner)

    def exchange_code(self, code: str, params: Mapping[str, Any] | None = None) -> TokenResponse:
        return self._run("exchange_code", code, params)  # type: ignore[no-any-return]

    def refresh(self, refresh_token: str, params: Mapping[str, Any] | None = None) -> TokenResponse:
        return self._run("refresh", refresh_token, params)  # type: ignore[no-any-return]

    def user_profile(self, access_token: str) -> UserProfile:
        return self._run("user_profile", access_token)  # type: ignore[no-any-return]

    def authenticate(self, code: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._run("authenticate", code, params)
