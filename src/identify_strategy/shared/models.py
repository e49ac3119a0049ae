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

import time
from typing import Optional, Dict, Any, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, RootModel


class RequestContext(BaseModel):
    """
    Inbound request as seen by a strategy.

    The host framework builds one of these per request (see the FastAPI and
    Flask adapters) and never mutates it afterwards.
    """
    model_config = ConfigDict(frozen=True)

    params: Dict[str, Any] = Field(default_factory=dict, description="Query and body parameters of the request.")
    callback_url: str = Field(..., description="Absolute callback URL of this deployment.")
    options: Dict[str, Any] = Field(default_factory=dict, description="Per-request strategy option overrides.")

    def param(self, name: str) -> Optional[Any]:
        value = self.params.get(name)
        if value in (None, ""):
            return None
        return value


class StrategyOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid_field: str = Field("sub", description="Profile field holding the unique user id.")
    default_scope: str = Field("email", description="Scope requested when the request does not supply one.")
    hd: Optional[str] = Field(None, description="Hosted domain restriction.")
    approval_prompt: Optional[str] = None
    access_type: Optional[str] = None


class Token(BaseModel):
    access_token: Optional[str] = Field(None, description="The access token, None when the exchange was refused.")
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = Field(None, description="Expiration timestamp (Unix epoch).")
    token_type: str = "Bearer"
    other_params: Dict[str, Any] = Field(default_factory=dict, description="Provider specific response keys (scope, error, ...).")

    @classmethod
    def new(cls, access_token: str) -> "Token":
        return cls(access_token=access_token)

    @classmethod
    def from_response(cls, payload: Mapping[str, Any]) -> "Token":
        """
        Build a token from a token endpoint response body.

        expires_at wins over expires_in; expires_in is converted and dropped.
        Unknown keys end up in other_params.
        """
        data = dict(payload)
        access_token = data.pop("access_token", None)
        refresh_token = data.pop("refresh_token", None)
        token_type = data.pop("token_type", None)
        expires_in = data.pop("expires_in", None)
        expires_at = data.pop("expires_at", None)

        if expires_at is None and expires_in is not None:
            expires_at = int(time.time()) + int(expires_in)

        if not isinstance(token_type, str) or token_type.lower() in ("", "bearer"):
            token_type = "Bearer"

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=int(expires_at) if expires_at is not None else None,
            token_type=token_type,
            other_params=data,
        )


class Profile(RootModel[Dict[str, Any]]):
    """Raw user-info document. Fields are untyped and may be missing."""

    def get(self, key: str, default: Any = None) -> Any:
        return self.root.get(key, default)


class Credentials(BaseModel):
    expires: bool = False
    expires_at: Optional[int] = None
    scopes: List[str] = Field(default_factory=list)
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    token: Optional[str] = None
    secret: Optional[str] = None
    other: Dict[str, Any] = Field(default_factory=dict)


class Info(BaseModel):
    """Profile values are copied as received; their types are not checked."""

    email: Optional[Any] = None
    first_name: Optional[Any] = None
    last_name: Optional[Any] = None
    name: Optional[Any] = None
    nickname: Optional[Any] = None
    image: Optional[Any] = None
    description: Optional[Any] = None
    location: Optional[Any] = None
    phone: Optional[Any] = None
    urls: Dict[str, Optional[Any]] = Field(default_factory=dict)


class Extra(BaseModel):
    raw_info: Dict[str, Any] = Field(default_factory=dict, description="The raw token and user profile.")


class AuthError(BaseModel):
    kind: Optional[str] = Field(..., description="Error key, e.g. 'missing_code', 'token' or a provider error code.")
    message: Optional[str] = None


class Auth(BaseModel):
    provider: str
    strategy: str
    uid: Optional[Any] = Field(None, description="Unique user identifier, read from the configured uid field.")
    info: Info
    credentials: Credentials
    extra: Extra


class Failure(BaseModel):
    provider: str
    strategy: str
    errors: List[AuthError] = Field(..., min_length=1)


class AuthContext(BaseModel):
    """
    Per-attempt state threaded through the callback pipeline.

    token and user are only ever set together, once the profile has been
    fetched. errors is append-only.
    """
    request: RequestContext
    token: Optional[Token] = None
    user: Optional[Profile] = None
    errors: List[AuthError] = Field(default_factory=list)
