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
Okta OAuth2 authorization-code strategy: endpoint configuration, Basic-auth code exchange and userinfo profile mapping.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import OktaStrategyConfig
from .exceptions import (
    InternalOAuthError,
    OktaOAuthError,
    OversizedResponseError,
    ProfileParseError,
    TokenResponseParseError,
)
from .models import ProfileEmail, ProfileName, TokenResponse, UserProfile
from .strategy import OktaStrategy, OktaStrategySync
from .token_exchange import BasicAuthTokenExchanger, TokenExchanger

__all__ = [
    "BasicAuthTokenExchanger",
    "InternalOAuthError",
    "OktaOAuthError",
    "OktaStrategy",
    "OktaStrategyConfig",
    "OktaStrategySync",
    "OversizedResponseError",
    "ProfileEmail",
    "ProfileName",
    "ProfileParseError",
    "TokenExchanger",
    "TokenResponse",
    "TokenResponseParseError",
    "UserProfile",
]
