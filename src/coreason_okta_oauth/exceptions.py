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
Custom exceptions for the coreason-okta-oauth package.
"""


class OktaOAuthError(Exception):
    """Base exception for all coreason-okta-oauth errors."""


class InternalOAuthError(OktaOAuthError):
    """
    Raised when a request to the Okta authorization server fails at the transport level.

    The underlying exception is kept on `oauth_error` and chained as `__cause__`.
    """

    def __init__(self, message: str, oauth_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.oauth_error = oauth_error

    def __str__(self) -> str:
        message = super().__str__()
        if self.oauth_error is None:
            return message
        return f"{message}: {self.oauth_error}"


class TokenResponseParseError(OktaOAuthError):
    """Raised when the token endpoint body is neither JSON nor form-urlencoded, or carries no access_token."""


class ProfileParseError(OktaOAuthError):
    """Raised when the userinfo endpoint body is not a JSON object."""


class OversizedResponseError(OktaOAuthError):
    """Raised when an HTTP response is too large."""
