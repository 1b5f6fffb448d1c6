"""What a backend factory hands to the server assembly."""

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from mcp.server.fastmcp import FastMCP

from .context import Extractor
from .documents import Provider


@dataclass
class BackendServer:
    mcp: FastMCP
    # Set for document backends; enables the tool discovery endpoint
    provider: Provider | None = None
    # Releases process-wide resources (connections, clients) on shutdown
    shutdown: Callable[[], Awaitable[None]] | None = None


class BackendFactory(Protocol):
    def __call__(self, env: dict[str, str], context_func: Extractor | None = None) -> BackendServer:
        ...
