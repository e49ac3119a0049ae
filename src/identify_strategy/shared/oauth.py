#    Copyright 2025 FAO
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.
#
#    Author: Carlo Cancellieri (ccancellieri@gmail.com)
#    Company: FAO, Viale delle Terme di Caracalla, 00100 Rome, Italy
#    Contact: copyright@fao.org - http://fao.org/contact-us/terms/en/

"""
Google OAuth2 client.

Thin wrapper around Authlib's httpx OAuth2Client exposing the three
operations the strategy needs: building the authorization URL, exchanging an
authorization code and issuing (authenticated) GET requests. Every call opens
its own client session, so one instance can serve concurrent attempts.

Configuration can be read from GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and
GOOGLE_HTTP_TIMEOUT.
"""

import logging
import os
from typing import Optional, Dict, Any

import httpx
from authlib.integrations.httpx_client import OAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from pydantic import BaseModel, Field

from identify_strategy.shared.errors import ConfigurationError
from identify_strategy.shared.models import Token

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://www.googleapis.com/oauth2/v4/token"
# userinfo_endpoint from https://accounts.google.com/.well-known/openid-configuration
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_TOKENINFO_URL = "https://www.googleapis.com/oauth2/v3/tokeninfo"


class GoogleOAuthConfig(BaseModel):
    client_id: str = Field(..., description="OAuth client id of this application.")
    client_secret: str = Field(..., description="OAuth client secret of this application.")
    authorize_url: str = GOOGLE_AUTHORIZE_URL
    token_url: str = GOOGLE_TOKEN_URL
    userinfo_url: str = GOOGLE_USERINFO_URL
    tokeninfo_url: str = GOOGLE_TOKENINFO_URL
    token_endpoint_auth_method: str = "client_secret_post"
    timeout: float = Field(10.0, description="Timeout in seconds for every provider call.")

    @classmethod
    def from_env(cls) -> "GoogleOAuthConfig":
        client_id = os.getenv("GOOGLE_CLIENT_ID")
        client_secret = os.getenv("GOOGLE_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ConfigurationError("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set.")

        try:
            timeout = float(os.getenv("GOOGLE_HTTP_TIMEOUT", "10"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid GOOGLE_HTTP_TIMEOUT: {e}") from e

        return cls(client_id=client_id, client_secret=client_secret, timeout=timeout)


class GoogleOAuth:

    def __init__(self, config: GoogleOAuthConfig, **client_kwargs: Any):
        """
        Args:
            config: Client credentials and provider endpoints.
            client_kwargs: Extra keyword arguments for the underlying httpx client
                (e.g. 'transport', 'verify', 'proxy').
        """
        self.config = config
        self.client_kwargs = client_kwargs

    @property
    def client_id(self) -> str:
        return self.config.client_id

    def client(self) -> OAuth2Client:
        session_kwargs: Dict[str, Any] = {"timeout": self.config.timeout}
        session_kwargs.update(self.client_kwargs)
        return OAuth2Client(
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            token_endpoint_auth_method=self.config.token_endpoint_auth_method,
            **session_kwargs,
        )

    def authorize_url(self, params: Dict[str, Any]) -> str:
        """
        Return the authorization endpoint URL the user-agent must be sent to.

        params must hold at least 'scope' and 'redirect_uri'; 'state' is only
        sent when present. No request is made.
        """
        params = dict(params)
        return prepare_grant_uri(
            self.config.authorize_url,
            client_id=self.config.client_id,
            response_type="code",
            redirect_uri=params.pop("redirect_uri", None),
            scope=params.pop("scope", None),
            state=params.pop("state", None),
            **params,
        )

    def get_token(self, code: str, redirect_uri: str) -> Token:
        """
        Exchange an authorization code at the token endpoint.

        Raises:
            authlib OAuthError: the provider answered with an error body.
            httpx.HTTPError: transport failure or a 5xx answer.
        """
        logger.debug(f"Exchanging authorization code at {self.config.token_url}")
        with self.client() as client:
            payload = client.fetch_token(
                self.config.token_url,
                grant_type="authorization_code",
                code=code,
                redirect_uri=redirect_uri,
            )
        return Token.from_response(payload)

    def get(self, url: str, token: Optional[Token] = None, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET url, with the token as bearer credentials when given. Not retried."""
        headers = {}
        if token is not None:
            headers["Authorization"] = f"{token.token_type} {token.access_token}"

        with self.client() as client:
            # the token is sent explicitly; Authlib must not check or refresh it
            return client.request("GET", url, params=params, headers=headers, withhold_token=True)
