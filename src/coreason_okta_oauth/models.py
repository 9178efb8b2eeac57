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
Data models for the coreason-okta-oauth package.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PROVIDER_NAME = "tsokta"


class TokenResponse(BaseModel):
    """
    Result of an authorization-code (or refresh-token) exchange.

    Attributes:
        access_token (str): The access token issued by Okta.
        refresh_token (str | None): The refresh token, if issued.
        raw (dict[str, Any]): Every other field of the token response. Never contains `refresh_token`.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        # Tokens are credentials, keep them out of logs
        return f"TokenResponse(access_token='<REDACTED>', refresh_token=<REDACTED>, raw_keys={sorted(self.raw)!r})"

    def __str__(self) -> str:
        return self.__repr__()


class ProfileName(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    full_name: Any = Field(default=None, alias="fullName")
    family_name: Any = Field(default=None, alias="familyName")
    given_name: Any = Field(default=None, alias="givenName")


class ProfileEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: Any = None


class UserProfile(BaseModel):
    """
    Normalized user profile built from the Okta userinfo response.

    `model_dump(by_alias=True)` yields the passport-compatible record
    (`displayName`, `name.fullName`, `_raw`, `_json`, ...). Claim values are kept as Okta sent them.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "provider": PROVIDER_NAME,
                "id": "00u1abcd",
                "displayName": "Jane Doe",
                "username": "jane@example.com",
                "name": {"fullName": "Jane Doe", "familyName": "Doe", "givenName": "Jane"},
                "emails": [{"value": "jane@example.com"}],
            }
        },
    )

    provider: Literal["tsokta"] = PROVIDER_NAME
    id: Any = Field(default=None, description="The subject (`sub`) claim.")
    display_name: Any = Field(default=None, alias="displayName")
    username: Any = None
    name: ProfileName = Field(default_factory=ProfileName)
    emails: list[ProfileEmail] = Field(default_factory=list)
    raw_body: str = Field(default="", alias="_raw")
    raw_json: dict[str, Any] = Field(default_factory=dict, alias="_json")
