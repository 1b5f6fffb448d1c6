"""
HTTP application hosting every enabled backend.

Each backend is mounted at /<name>/ as a stateless streamable-HTTP MCP
endpoint. Document backends also serve GET /<name>/.well-known/mcp/tools.
Backends whose configuration fails are logged and left out.
"""

import contextlib
from typing import AsyncIterator

from starlette.applications import Starlette
from starlette.routing import BaseRoute, Mount, Route

from . import notion, sqlite, whoami
from .backend import BackendFactory, BackendServer
from .config import POMERIUM_AUDIENCE, POMERIUM_JWKS_URL, env_by_prefix
from .context import Extractor, bearer_token_from_request, combine
from .identity import IdentityVerifier
from .logger import get_logger
from .tools import tools_endpoint

log = get_logger("server")

# The tools endpoint answers 405 itself; a narrower route would fall through
# to the backend mount
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def default_backends() -> list[tuple[str, BackendFactory]]:
    return [
        ("notion", notion.new_server),
        ("sqlite", sqlite.new_server),
        ("whoami", whoami.new_server),
    ]


def default_context_func() -> Extractor:
    verifier = IdentityVerifier(jwks_url=POMERIUM_JWKS_URL, audience=POMERIUM_AUDIENCE)
    return combine(bearer_token_from_request, verifier.identity_from_request)


def enable_backends(
    backends: list[tuple[str, BackendFactory]],
    context_func: Extractor | None,
) -> dict[str, BackendServer]:
    """Build each backend from its NAME_-prefixed environment."""
    enabled = {}
    for name, factory in backends:
        try:
            enabled[name] = factory(env_by_prefix(name.upper() + "_"), context_func)
        except Exception as e:
            log.error(f"Not enabling {name}: {e}")
            continue
        log.info(f"Enabled {name}")
    return enabled


def build_routes(enabled: dict[str, BackendServer]) -> list[BaseRoute]:
    routes: list[BaseRoute] = []
    for name, backend in enabled.items():
        if backend.provider is not None:
            routes.append(Route(
                f"/{name}/.well-known/mcp/tools",
                tools_endpoint(backend.provider),
                methods=ALL_METHODS,
            ))
        routes.append(Mount(f"/{name}", app=backend.mcp.streamable_http_app()))
    return routes


def build_app(
    backends: list[tuple[str, BackendFactory]] | None = None,
    context_func: Extractor | None = None,
) -> Starlette:
    """Assemble the Starlette application for the given backends."""
    if backends is None:
        backends = default_backends()
    if context_func is None:
        context_func = default_context_func()

    enabled = enable_backends(backends, context_func)
    routes = build_routes(enabled)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with contextlib.AsyncExitStack() as stack:
            for backend in enabled.values():
                if backend.shutdown is not None:
                    stack.push_async_callback(backend.shutdown)
                await stack.enter_async_context(backend.mcp.session_manager.run())
            log.info(f"Serving backends: {', '.join(enabled) or 'none'}")
            yield
            log.info("Shutting down backends...")

    return Starlette(routes=routes, lifespan=lifespan)
