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

import logging

import httpx

from identify_strategy.shared.models import Token
from identify_strategy.shared.oauth import GoogleOAuth

logger = logging.getLogger(__name__)


def client_application_id(client_id: str) -> str:
    """Leading segment of a Google client id ('123-abc.apps...' -> '123')."""
    return client_id.split("-", 1)[0]


def check_access_token(oauth: GoogleOAuth, token: Token) -> bool:
    """
    Confirm that an externally supplied access token was issued to this client.

    Queries the tokeninfo endpoint and compares the 'aud' claim against the
    leading segment of the configured client id. Every failure, including
    transport errors, rejects the token.
    """
    if not oauth.client_id or not token.access_token:
        logger.warning("Token verification skipped: missing client id or access token.")
        return False

    try:
        response = oauth.get(
            oauth.config.tokeninfo_url,
            params={"access_token": token.access_token},
        )
    except httpx.HTTPError as e:
        logger.error(f"Token verification request failed: {e}")
        return False

    if response.status_code != 200:
        logger.warning(f"Token verification refused with status {response.status_code}")
        return False

    try:
        body = response.json()
    except ValueError as e:
        logger.warning(f"Token verification returned an invalid body: {e}")
        return False

    audience = body.get("aud") if isinstance(body, dict) else None
    if not isinstance(audience, str):
        logger.warning("Token verification response has no audience.")
        return False

    if not audience.startswith(client_application_id(oauth.client_id)):
        logger.warning(f"Token audience {audience} does not belong to this client.")
        return False

    logger.debug("Access token verified against tokeninfo.")
    return True
