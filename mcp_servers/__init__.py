"""
MCP servers - heterogeneous backends behind one tool-call surface.

Backends:
    notion - search(query) / fetch(id) over a Notion workspace
    sqlite - read-only queries over a SQLite database
    whoami - echo of the caller's verified identity

Every tool call carries a RequestContext built from the inbound HTTP
request: the bearer token from Authorization and the identity from a
signed Pomerium assertion.
"""

from .context import RequestContext, bearer_token_from_request, combine
from .documents import Document, Provider
from .server import build_app, default_backends
from .tools import ToolGateway, build_server, get_tools

__all__ = [
    "Document",
    "Provider",
    "RequestContext",
    "ToolGateway",
    "bearer_token_from_request",
    "build_app",
    "build_server",
    "combine",
    "default_backends",
    "get_tools",
]
