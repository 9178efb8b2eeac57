# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_okta_oauth

import pytest
from pydantic import ValidationError

from coreason_okta_oauth.models import ProfileName, TokenResponse, UserProfile


def test_token_response_repr_redacts_tokens() -> None:
    tokens = TokenResponse(access_token="secret-at", refresh_token="secret-rt", raw={"token_type": "Bearer"})
    text = repr(tokens)
    assert "secret-at" not in text
    assert "secret-rt" not in text
    assert "token_type" in text
    assert str(tokens) == text


def test_token_response_is_frozen() -> None:
    tokens = TokenResponse(access_token="AT")
    with pytest.raises(ValidationError):
        tokens.access_token = "other"  # type: ignore[misc]


def test_user_profile_accepts_aliases() -> None:
    profile = UserProfile.model_validate(
        {
            "id": "u1",
            "displayName": "Jane Doe",
            "name": {"fullName": "Jane Doe", "givenName": "Jane"},
            "_raw": "{}",
            "_json": {},
        }
    )
    assert profile.display_name == "Jane Doe"
    assert profile.name == ProfileName(full_name="Jane Doe", given_name="Jane")
    assert profile.provider == "tsokta"


def test_user_profile_provider_is_fixed() -> None:
    with pytest.raises(ValidationError):
        UserProfile(provider="okta")  # type: ignore[arg-type]
