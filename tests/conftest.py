# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_okta_oauth

import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from coreason_okta_oauth.config import OktaStrategyConfig

AUDIENCE = "https://example.okta.com"

USERINFO: dict[str, str] = {
    "sub": "u1",
    "name": "Jane Doe",
    "preferred_username": "jane",
    "family_name": "Doe",
    "given_name": "Jane",
    "email": "jane@example.com",
}


@pytest.fixture(autouse=True)
def clean_okta_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps COREASON_OKTA_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("COREASON_OKTA_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config_factory() -> Callable[..., OktaStrategyConfig]:
    def factory(**overrides: Any) -> OktaStrategyConfig:
        values: dict[str, Any] = {
            "audience": AUDIENCE,
            "client_id": "client-123",
            "client_secret": "secret-456",
            "callback_url": "https://app.example.com/auth/okta/callback",
        }
        values.update(overrides)
        return OktaStrategyConfig(**values)

    return factory


@pytest.fixture
def config(config_factory: Callable[..., OktaStrategyConfig]) -> OktaStrategyConfig:
    return config_factory()


class RecordingHandler:
    """MockTransport handler that replays scripted responses and records requests."""

    def __init__(self, responses: dict[str, httpx.Response | Exception]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses[request.url.path]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def mock_http() -> Callable[[dict[str, httpx.Response | Exception]], tuple[httpx.AsyncClient, RecordingHandler]]:
    def factory(responses: dict[str, httpx.Response | Exception]) -> tuple[httpx.AsyncClient, RecordingHandler]:
        handler = RecordingHandler(responses)
        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), handler

    return factory


@pytest.fixture
def userinfo() -> dict[str, str]:
    return dict(USERINFO)
