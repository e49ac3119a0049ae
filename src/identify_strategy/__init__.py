"""
Google OAuth2 identity strategy.

Exposes the strategy (GoogleStrategy), its provider client (GoogleOAuth,
GoogleOAuthConfig) and the request/result models.
"""

from identify_strategy.shared.errors import ConfigurationError, StrategyError
from identify_strategy.shared.google import GoogleStrategy
from identify_strategy.shared.models import (
    Auth,
    AuthError,
    Credentials,
    Extra,
    Failure,
    Info,
    RequestContext,
    StrategyOptions,
    Token,
)
from identify_strategy.shared.oauth import GoogleOAuth, GoogleOAuthConfig
from identify_strategy.shared.strategy import Strategy

__all__ = [
    "Auth",
    "AuthError",
    "ConfigurationError",
    "Credentials",
    "Extra",
    "Failure",
    "GoogleOAuth",
    "GoogleOAuthConfig",
    "GoogleStrategy",
    "Info",
    "RequestContext",
    "Strategy",
    "StrategyError",
    "StrategyOptions",
    "Token",
]
