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
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Union

from identify_strategy.shared.errors import StrategyError
from identify_strategy.shared.models import (
    Auth,
    AuthContext,
    AuthError,
    Credentials,
    Extra,
    Failure,
    Info,
    RequestContext,
    StrategyOptions,
)
from identify_strategy.shared.options import option

logger = logging.getLogger(__name__)


class Strategy(ABC):
    """
    Abstract base class for identity provider strategies.

    A strategy runs in two phases: the request phase produces the URL the
    user-agent is redirected to, the callback phase turns the provider's
    answer into either an Auth or a Failure. Subclasses implement the handle_*
    hooks and the uid/credentials/info/extra projections; run_request and
    run_callback drive them.
    """

    provider: str = ""

    def __init__(self, options: Optional[StrategyOptions] = None):
        self.options = options if options is not None else StrategyOptions()

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def option(self, ctx: AuthContext, key: str) -> Optional[Any]:
        return option(ctx, self.options, key)

    def set_errors(self, ctx: AuthContext, errors: List[AuthError]) -> None:
        ctx.errors.extend(errors)

    @abstractmethod
    def handle_request(self, ctx: AuthContext) -> str:
        """Return the authorization URL for this request."""

    @abstractmethod
    def handle_callback(self, ctx: AuthContext) -> None:
        """
        Process the provider callback.

        Must either leave token and user set on the context or raise
        StrategyError.
        """

    @abstractmethod
    def handle_cleanup(self, ctx: AuthContext) -> None:
        pass

    @abstractmethod
    def uid(self, ctx: AuthContext) -> Optional[Any]:
        pass

    @abstractmethod
    def credentials(self, ctx: AuthContext) -> Credentials:
        pass

    @abstractmethod
    def info(self, ctx: AuthContext) -> Info:
        pass

    @abstractmethod
    def extra(self, ctx: AuthContext) -> Extra:
        pass

    def run_request(self, request: RequestContext) -> str:
        ctx = AuthContext(request=request)
        logger.debug(f"Request phase for {self.name}.")
        return self.handle_request(ctx)

    def run_callback(self, request: RequestContext) -> Union[Auth, Failure]:
        ctx = AuthContext(request=request)
        try:
            try:
                self.handle_callback(ctx)
            except StrategyError as e:
                logger.warning(f"{self.name} callback failed: {e}")
                self.set_errors(ctx, [AuthError(kind=e.kind, message=e.message)])

            if ctx.errors:
                return Failure(provider=self.provider, strategy=self.name, errors=list(ctx.errors))

            auth = self.auth(ctx)
            logger.info(f"{self.name} authenticated uid {auth.uid}.")
            return auth
        finally:
            self.handle_cleanup(ctx)

    def auth(self, ctx: AuthContext) -> Auth:
        if ctx.errors:
            raise RuntimeError("Cannot build an identity from a failed authentication attempt.")
        if ctx.token is None or ctx.user is None:
            raise RuntimeError("Cannot build an identity before token and profile are available.")

        return Auth(
            provider=self.provider,
            strategy=self.name,
            uid=self.uid(ctx),
            info=self.info(ctx),
            credentials=self.credentials(ctx),
            extra=self.extra(ctx),
        )
