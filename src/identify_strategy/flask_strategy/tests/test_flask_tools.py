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

# tests/test_flask_tools.py
from unittest.mock import MagicMock

import httpx
import pytest
from flask import Flask, jsonify

from identify_strategy.flask_strategy.tools import (
    abort_on_failure,
    build_request_context,
    redirect_to_provider,
)
from identify_strategy.shared.google import GoogleStrategy
from identify_strategy.shared.models import Failure, Token
from identify_strategy.shared.oauth import GoogleOAuth, GoogleOAuthConfig


@pytest.fixture
def oauth():
    oauth = GoogleOAuth(GoogleOAuthConfig(client_id="123-abc.apps.googleusercontent.com", client_secret="secret"))
    oauth.get_token = MagicMock(return_value=Token.from_response({"access_token": "T", "scope": "email"}))
    oauth.get = MagicMock(return_value=httpx.Response(200, json={"sub": "42", "email": "a@b.com"}))
    return oauth


@pytest.fixture
def app(oauth):
    strategy = GoogleStrategy(oauth)
    app = Flask(__name__)

    @app.route("/auth/google")
    def login():
        return redirect_to_provider(strategy, build_request_context())

    @app.route("/auth/google/callback", methods=["GET", "POST"], endpoint="auth_callback")
    def auth_callback():
        result = strategy.run_callback(build_request_context())
        if isinstance(result, Failure):
            abort_on_failure(result)
        return jsonify(uid=result.uid, email=result.info.email)

    return app


def test_login_redirects_to_google(app, oauth):
    response = app.test_client().get("/auth/google?scope=openid+email")

    assert response.status_code == 302
    location = response.headers["Location"]
    assert location.startswith(oauth.config.authorize_url)
    assert "redirect_uri=http%3A%2F%2Flocalhost%2Fauth%2Fgoogle%2Fcallback" in location


def test_callback_with_code(app, oauth):
    response = app.test_client().get("/auth/google/callback?code=abc123")

    assert response.status_code == 200
    assert response.get_json() == {"uid": "42", "email": "a@b.com"}
    oauth.get_token.assert_called_once_with("abc123", "http://localhost/auth/google/callback")


def test_callback_without_code(app):
    response = app.test_client().post("/auth/google/callback", data={})

    assert response.status_code == 400
    assert b"missing_code: No code received" in response.data


def test_form_values_win_over_query(app):
    with app.test_request_context("/auth/google/callback?code=from-query", method="POST", data={"code": "from-form"}):
        ctx = build_request_context(options={"hd": "b.com"})

    assert ctx.params == {"code": "from-form"}
    assert ctx.callback_url == "http://localhost/auth/google/callback"
    assert ctx.options == {"hd": "b.com"}
