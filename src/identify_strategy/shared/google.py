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
Google strategy.

Request phase: redirect to Google's authorization endpoint.
Callback phase, first matching case wins:
  1. 'code': exchange it at the token endpoint.
  2. 'access_token': a token obtained elsewhere (e.g. by a mobile app); it is
     trusted only after tokeninfo confirms it was issued to this client.
  3. otherwise: 'missing_code' error.
The user profile is then read from the userinfo endpoint.
"""

import logging
from typing import Any, Optional

import httpx
from authlib.integrations.base_client import OAuthError

from identify_strategy.shared.errors import StrategyError
from identify_strategy.shared.models import (
    AuthContext,
    Credentials,
    Extra,
    Info,
    Profile,
    StrategyOptions,
    Token,
)
from identify_strategy.shared.oauth import GoogleOAuth
from identify_strategy.shared.options import resolve_authorize_params
from identify_strategy.shared.strategy import Strategy
from identify_strategy.shared.token_verifier import check_access_token

logger = logging.getLogger(__name__)


class GoogleStrategy(Strategy):

    provider = "google"

    def __init__(self, oauth: GoogleOAuth, options: Optional[StrategyOptions] = None):
        super().__init__(options)
        self.oauth = oauth

    def handle_request(self, ctx: AuthContext) -> str:
        params = resolve_authorize_params(ctx, self.options)
        return self.oauth.authorize_url(params)

    def handle_callback(self, ctx: AuthContext) -> None:
        code = ctx.request.param("code")
        if code:
            token = self._exchange_code(code, ctx.request.callback_url)
            self._fetch_user(ctx, token)
            return

        access_token = ctx.request.param("access_token")
        if access_token:
            token = Token.new(access_token)
            if not check_access_token(self.oauth, token):
                raise StrategyError("token", "Token verification failed")
            self._fetch_user(ctx, token)
            return

        raise StrategyError("missing_code", "No code received")

    def handle_cleanup(self, ctx: AuthContext) -> None:
        ctx.token = None
        ctx.user = None

    def uid(self, ctx: AuthContext) -> Optional[Any]:
        uid_field = str(self.option(ctx, "uid_field"))
        return ctx.user.get(uid_field)

    def credentials(self, ctx: AuthContext) -> Credentials:
        token = ctx.token
        scope_string = token.other_params.get("scope") or ""
        if not isinstance(scope_string, str):
            scope_string = ""
        scopes = scope_string.split(",")

        return Credentials(
            expires=token.expires_at is not None,
            expires_at=token.expires_at,
            scopes=scopes,
            token_type=token.token_type,
            refresh_token=token.refresh_token,
            token=token.access_token,
        )

    def info(self, ctx: AuthContext) -> Info:
        user = ctx.user
        return Info(
            email=user.get("email"),
            first_name=user.get("given_name"),
            image=user.get("picture"),
            last_name=user.get("family_name"),
            name=user.get("name"),
            urls={
                "profile": user.get("profile"),
                "website": user.get("hd"),
            },
        )

    def extra(self, ctx: AuthContext) -> Extra:
        return Extra(raw_info={"token": ctx.token, "user": ctx.user.root})

    def _exchange_code(self, code: str, redirect_uri: str) -> Token:
        try:
            token = self.oauth.get_token(code, redirect_uri)
        except OAuthError as e:
            logger.warning(f"Google refused the authorization code: {e.error}")
            raise StrategyError(e.error, e.description) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google token exchange failed: {e}")
            raise StrategyError("OAuth2", str(e)) from e

        if token.access_token is None:
            error = token.other_params.get("error")
            logger.warning(f"Google token response without access token: {error}")
            raise StrategyError(error, token.other_params.get("error_description"))
        return token

    def _fetch_user(self, ctx: AuthContext, token: Token) -> None:
        try:
            response = self.oauth.get(self.oauth.config.userinfo_url, token=token)
        except httpx.HTTPError as e:
            logger.error(f"Google userinfo request failed: {e}")
            raise StrategyError("OAuth2", str(e)) from e

        if response.status_code == 401:
            raise StrategyError("token", "unauthorized")
        if not 200 <= response.status_code < 400:
            logger.warning(f"Google userinfo answered {response.status_code}")
            raise StrategyError("provider_error", f"Unexpected status code {response.status_code}")

        try:
            user = Profile(response.json())
        except ValueError as e:
            logger.error(f"Google userinfo returned an invalid body: {e}")
            raise StrategyError("OAuth2", f"Invalid userinfo response: {e}") from e

        ctx.token, ctx.user = token, user
