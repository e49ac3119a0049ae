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
Flask helpers for running a Strategy.
"""

import logging
from typing import Any, Dict, Optional

from flask import abort, redirect, request, url_for

from identify_strategy.shared.models import Failure, RequestContext
from identify_strategy.shared.strategy import Strategy

logger = logging.getLogger(__name__)


def build_request_context(
    callback_endpoint: str = "auth_callback",
    options: Optional[Dict[str, Any]] = None,
) -> RequestContext:
    """Build a RequestContext from the current Flask request."""
    params: Dict[str, Any] = request.args.to_dict()
    params.update(request.form.to_dict())
    return RequestContext(
        params=params,
        callback_url=url_for(callback_endpoint, _external=True),
        options=options or {},
    )


def redirect_to_provider(strategy: Strategy, ctx: RequestContext):
    return redirect(strategy.run_request(ctx))


def abort_on_failure(failure: Failure):
    logger.info(f"Authentication with {failure.provider} failed: {[e.kind for e in failure.errors]}")
    abort(400, description="; ".join(f"{error.kind}: {error.message}" for error in failure.errors))
