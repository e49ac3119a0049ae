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

# tests/test_end_to_end.py
import httpx
import pytest

from identify_strategy import (
    Auth,
    AuthError,
    Failure,
    GoogleOAuth,
    GoogleOAuthConfig,
    GoogleStrategy,
    RequestContext,
)

CALLBACK_URL = "https://app.example.com/auth/google/callback"
CLIENT_ID = "123-abc.apps.googleusercontent.com"


class FakeGoogle:
    """Routes requests to canned token, tokeninfo and userinfo answers."""

    def __init__(self, config):
        self.config = config
        self.token_response = httpx.Response(200, json={
            "access_token": "T",
            "expires_at": 1700000000,
            "scope": "email,profile",
            "token_type": "Bearer",
        })
        self.tokeninfo_response = httpx.Response(200, json={"aud": "123-other"})
        self.userinfo_response = httpx.Response(200, json={"sub": "42", "email": "a@b.com", "name": "A B"})
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        if url == self.config.token_url:
            return self.token_response
        if url == self.config.tokeninfo_url:
            return self.tokeninfo_response
        if url == self.config.userinfo_url:
            return self.userinfo_response
        return httpx.Response(404)


@pytest.fixture
def config():
    return GoogleOAuthConfig(client_id=CLIENT_ID, client_secret="secret")


@pytest.fixture
def google(config):
    return FakeGoogle(config)


@pytest.fixture
def strategy(config, google):
    return GoogleStrategy(GoogleOAuth(config, transport=httpx.MockTransport(google)))


def test_code_flow(strategy, google):
    result = strategy.run_callback(RequestContext(params={"code": "abc123"}, callback_url=CALLBACK_URL))

    assert isinstance(result, Auth)
    assert result.uid == "42"
    assert result.credentials.expires is True
    assert result.credentials.expires_at == 1700000000
    assert result.credentials.scopes == ["email", "profile"]
    assert result.credentials.token == "T"
    assert result.info.email == "a@b.com"
    assert result.info.name == "A B"

    token_request, userinfo_request = google.requests
    assert token_request.method == "POST"
    assert userinfo_request.headers["Authorization"] == "Bearer T"


def test_code_flow_provider_error(strategy, google):
    google.token_response = httpx.Response(400, json={
        "error": "invalid_grant",
        "error_description": "Malformed auth code.",
    })

    result = strategy.run_callback(RequestContext(params={"code": "abc123"}, callback_url=CALLBACK_URL))

    assert isinstance(result, Failure)
    assert result.errors == [AuthError(kind="invalid_grant", message="Malformed auth code.")]


def test_access_token_flow(strategy, google):
    result = strategy.run_callback(RequestContext(params={"access_token": "XYZ"}, callback_url=CALLBACK_URL))

    assert isinstance(result, Auth)
    assert result.uid == "42"
    tokeninfo_request, userinfo_request = google.requests
    assert tokeninfo_request.url.params["access_token"] == "XYZ"
    assert userinfo_request.headers["Authorization"] == "Bearer XYZ"


def test_access_token_flow_foreign_audience(strategy, google):
    google.tokeninfo_response = httpx.Response(200, json={"aud": "999-other"})

    result = strategy.run_callback(RequestContext(params={"access_token": "XYZ"}, callback_url=CALLBACK_URL))

    assert isinstance(result, Failure)
    assert result.errors == [AuthError(kind="token", message="Token verification failed")]
    assert len(google.requests) == 1


def test_userinfo_unauthorized(strategy, google):
    google.userinfo_response = httpx.Response(401, json={"error": "invalid_token"})

    result = strategy.run_callback(RequestContext(params={"code": "abc123"}, callback_url=CALLBACK_URL))

    assert result.errors == [AuthError(kind="token", message="unauthorized")]
