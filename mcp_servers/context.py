"""Request-scoped context pipeline.

Extractors read the inbound HTTP request and augment a RequestContext.
combine() folds them left-to-right into one function. Absence of a
credential is never an error here; consumers check at the point of use.
"""

from dataclasses import dataclass, replace
from typing import Awaitable, Callable

from starlette.requests import Request

from .errors import MissingCredentialError
from .identity import Identity

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class RequestContext:
    """Credentials carried for a single request."""
    token: str | None = None
    identity: Identity | None = None

    def with_token(self, token: str) -> "RequestContext":
        return replace(self, token=token)

    def with_identity(self, identity: Identity) -> "RequestContext":
        return replace(self, identity=identity)

    def require_token(self) -> str:
        if not self.token:
            raise MissingCredentialError("missing auth")
        return self.token

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise MissingCredentialError("no identity was passed in the request context")
        return self.identity


Extractor = Callable[[RequestContext, Request], Awaitable[RequestContext]]


def combine(*extractors: Extractor) -> Extractor:
    """Compose extractors into one, applied in the given order."""

    async def run(ctx: RequestContext, request: Request) -> RequestContext:
        for extract in extractors:
            ctx = await extract(ctx, request)
        return ctx

    return run


async def bearer_token_from_request(ctx: RequestContext, request: Request) -> RequestContext:
    """Store the bearer token from the Authorization header, if well-formed."""
    auth = request.headers.get("Authorization", "")
    if len(auth) > len(BEARER_PREFIX) and auth.startswith(BEARER_PREFIX):
        return ctx.with_token(auth[len(BEARER_PREFIX):])
    return ctx
