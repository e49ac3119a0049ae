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
Option resolution for a strategy.

Options are looked up on the request first (per-request overrides supplied by
the host framework) and then on the strategy instance.
"""

from typing import Any, Dict, Optional

from identify_strategy.shared.models import AuthContext, StrategyOptions

AUTHORIZE_PARAMS = ("access_type", "prompt", "state")
OPTIONAL_AUTHORIZE_OPTIONS = ("hd", "approval_prompt", "access_type")


def option(ctx: AuthContext, options: StrategyOptions, key: str) -> Optional[Any]:
    overrides = ctx.request.options
    if key in overrides:
        return overrides[key]
    return getattr(options, key, None)


def _with_optional(params: Dict[str, Any], key: str, ctx: AuthContext, options: StrategyOptions) -> Dict[str, Any]:
    value = option(ctx, options, key)
    if value:
        params[key] = value
    return params


def _with_param(params: Dict[str, Any], key: str, ctx: AuthContext) -> Dict[str, Any]:
    value = ctx.request.param(key)
    if value:
        params[key] = value
    return params


def resolve_authorize_params(ctx: AuthContext, options: StrategyOptions) -> Dict[str, Any]:
    """
    Build the extra query parameters of the authorization URL.

    Later steps overwrite earlier ones: configured hints first, then the ones
    explicitly sent with the request, and redirect_uri always last.
    """
    params: Dict[str, Any] = {
        "scope": ctx.request.param("scope") or option(ctx, options, "default_scope"),
    }
    for key in OPTIONAL_AUTHORIZE_OPTIONS:
        params = _with_optional(params, key, ctx, options)
    for key in AUTHORIZE_PARAMS:
        params = _with_param(params, key, ctx)

    params["redirect_uri"] = ctx.request.callback_url
    return params
