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
FastAPI helpers for running a Strategy.

Usage:
    strategy = GoogleStrategy(GoogleOAuth(GoogleOAuthConfig.from_env()))

    @app.get("/auth/google")
    async def login(request: Request):
        ctx = await build_request_context(request)
        return redirect_to_provider(strategy, ctx)

    @app.get("/auth/google/callback", name="auth_callback")
    async def callback(request: Request):
        result = strategy.run_callback(await build_request_context(request))
        if isinstance(result, Failure):
            raise failure_exception(result)
        return {"uid": result.uid, "email": result.info.email}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse

from identify_strategy.shared.models import Failure, RequestContext
from identify_strategy.shared.strategy import Strategy

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def build_request_context(
    request: Request,
    callback_route: str = "auth_callback",
    options: Optional[Dict[str, Any]] = None,
) -> RequestContext:
    """
    Collect query and form parameters of the request; form values win.

    The callback URL is resolved from the named route 'callback_route'.
    """
    params: Dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        params.update({key: value for key, value in form.items() if isinstance(value, str)})

    return RequestContext(
        params=params,
        callback_url=str(request.url_for(callback_route)),
        options=options or {},
    )


def redirect_to_provider(strategy: Strategy, ctx: RequestContext) -> RedirectResponse:
    url = strategy.run_request(ctx)
    return RedirectResponse(url=url, status_code=302)


def failure_exception(failure: Failure) -> HTTPException:
    logger.info(f"Authentication with {failure.provider} failed: {[e.kind for e in failure.errors]}")
    return HTTPException(
        status_code=400,
        detail=[error.model_dump() for error in failure.errors],
    )
