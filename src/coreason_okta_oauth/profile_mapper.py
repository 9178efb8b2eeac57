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
ProfileMapper component for mapping Okta userinfo claims to a UserProfile.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict

from coreason_okta_oauth.exceptions import ProfileParseError
from coreason_okta_oauth.models import ProfileEmail, ProfileName, UserProfile
from coreason_okta_oauth.utils.logger import logger


class OktaUserinfoClaims(BaseModel):
    """
    The userinfo claims the profile is built from.
    Okta only returns the claims allowed by the granted scopes, so all are optional.
    Values are copied as sent, unknown claims are kept.
    """

    model_config = ConfigDict(extra="allow")

    sub: Any = None
    name: Any = None
    preferred_username: Any = None
    family_name: Any = None
    given_name: Any = None
    email: Any = None


class ProfileMapper:
    """
    Maps an Okta userinfo response body to the normalized UserProfile.
    """

    def decode_body(self, body: str | bytes) -> str:
        """
        Decodes the userinfo body as strict UTF-8.

        Raises:
            ProfileParseError: If the bytes are not valid UTF-8.
        """
        if isinstance(body, str):
            return body
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProfileParseError(f"Unable to decode user profile: {e}") from e

    def parse_body(self, body: str) -> dict[str, Any]:
        """
        Parses the userinfo body.

        Raises:
            ProfileParseError: If the body is not a JSON object.
        """
        try:
            parsed = json.loads(body)
        except ValueError as e:
            raise ProfileParseError(f"Unable to parse user profile: {e}") from e
        if not isinstance(parsed, dict):
            raise ProfileParseError(f"User profile is not a JSON object: {type(parsed).__name__}")
        return parsed

    def map_userinfo(self, body: str | bytes) -> UserProfile:
        """
        Transform a raw userinfo body into a UserProfile.

        Args:
            body: The response body as returned by the userinfo endpoint.

        Returns:
            UserProfile: The normalized profile, carrying the raw body and parsed JSON.

        Raises:
            ProfileParseError: If the body is not UTF-8 or not a JSON object.
        """
        raw_body = self.decode_body(body)
        raw_json = self.parse_body(raw_body)
        claims = OktaUserinfoClaims.model_validate(raw_json)

        profile = UserProfile(
            id=claims.sub,
            display_name=claims.name,
            username=claims.preferred_username,
            name=ProfileName(
                full_name=claims.name,
                family_name=claims.family_name,
                given_name=claims.given_name,
            ),
            emails=[ProfileEmail(value=claims.email)],
            raw_body=raw_body,
            raw_json=raw_json,
        )
        logger.debug("Mapped Okta userinfo to profile")
        return profile
