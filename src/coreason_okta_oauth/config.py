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
Configuration for the coreason-okta-oauth package.
"""

from typing import Annotated, Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

AUTHORIZE_PATH = "/oauth2/v1/authorize"
TOKEN_PATH = "/oauth2/v1/token"
USERINFO_PATH = "/oauth2/v1/userinfo"

# Option names used by passport-style integrations, matched case-insensitively.
_LEGACY_OPTION_NAMES = {
    "clientid": "client_id",
    "clientsecret": "client_secret",
    "callbackurl": "callback_url",
}


class OktaStrategyConfig(BaseSettings):
    """
    Configuration settings for the Okta OAuth2 strategy.

    The three endpoint URLs are derived from `audience` by plain concatenation.
    No URL validation is performed: a malformed audience shows up later as a
    transport failure.

    Attributes:
        audience (str): The Okta tenant base URL (e.g. https://example.okta.com).
        client_id (str): The Okta application client ID.
        client_secret (SecretStr): The Okta application client secret.
        callback_url (str): The redirect URL Okta returns the user to.
        idp (str | None): Optional upstream Identity Provider ID.
        scope (list[str] | None): Optional scopes to request.
        state (bool | None): Adds `state` and a `nonce` to the authorization request.
        legacy_basic_auth_prefix (bool): Send `Basic: <credentials>` instead of `Basic <credentials>`.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_OKTA_",
        case_sensitive=False,
        frozen=True,
    )

    audience: str
    client_id: str
    client_secret: SecretStr
    callback_url: str
    idp: str | None = None
    scope: Annotated[list[str] | None, NoDecode] = None
    state: bool | None = None
    response_type: Literal["code"] = "code"
    http_timeout: float = Field(default=10.0, description="Timeout in seconds for all Okta network operations.")
    max_response_bytes: int = Field(default=1_000_000, gt=0)
    legacy_basic_auth_prefix: bool = False

    def __init__(self, **values: Any) -> None:
        """
        Maps `clientID`, `clientSecret` and `callbackURL` onto their snake_case fields.

        Renaming happens before the settings sources are merged, so a value passed
        under a legacy name still takes precedence over the environment.
        """
        normalized: dict[str, Any] = {}
        for key, value in values.items():
            field_name = _LEGACY_OPTION_NAMES.get(key.lower())
            if field_name is None:
                normalized[key] = value
            elif field_name not in values:
                normalized[field_name] = value
        super().__init__(**normalized)

    @field_validator("scope", mode="before")
    @classmethod
    def split_scope(cls, v: Any) -> Any:
        """
        Accepts scopes as a list or as a space/comma separated string.
        """
        if isinstance(v, str):
            return [item for item in v.replace(",", " ").split() if item]
        return v

    @property
    def authorization_url(self) -> str:
        return self.audience + AUTHORIZE_PATH

    @property
    def token_url(self) -> str:
        return self.audience + TOKEN_PATH

    @property
    def userinfo_url(self) -> str:
        return self.audience + USERINFO_PATH
