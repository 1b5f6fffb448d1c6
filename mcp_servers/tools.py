"""
Tool gateway: the search/fetch tool surface derived from a Provider.

Tools:
    search(query) -> {"results": [Document, ...]}
    fetch(id) -> Document

Argument and credential problems come back as tool results marked as errors.
Provider failures are raised as ProviderError for the transport to report.
"""

from dataclasses import asdict, dataclass
from typing import Annotated

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from .context import Extractor, RequestContext
from .documents import Provider
from .errors import ArgumentError, MissingCredentialError, ProviderError
from .logger import get_logger
from .results import error_result, json_result

log = get_logger("tools")

FETCH_DESCRIPTION = "Fetch a document by ID"
QUERY_DESCRIPTION = "The search query to execute"
ID_DESCRIPTION = "The ID of the document to fetch"


@dataclass(frozen=True)
class ToolParameter:
    type: str
    description: str
    required: bool


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: dict[str, ToolParameter]


def get_tools(provider: Provider) -> list[ToolDefinition]:
    """Return the tool definitions for a Provider."""
    return [
        ToolDefinition(
            name="search",
            description=provider.search_syntax(),
            parameters={"query": ToolParameter("string", QUERY_DESCRIPTION, True)},
        ),
        ToolDefinition(
            name="fetch",
            description=FETCH_DESCRIPTION,
            parameters={"id": ToolParameter("string", ID_DESCRIPTION, True)},
        ),
    ]


def _required_string(arguments: dict, name: str) -> str | None:
    value = arguments.get(name)
    if not isinstance(value, str) or not value:
        return None
    return value


class ToolGateway:
    """Adapts tool-call arguments and results to the Provider contract."""

    def __init__(self, provider: Provider):
        self.provider = provider

    async def search(self, ctx: RequestContext, arguments: dict) -> CallToolResult:
        query = _required_string(arguments, "query")
        if query is None:
            return error_result("Missing or empty 'query' argument")

        try:
            documents = await self.provider.search(ctx, query)
        except (ArgumentError, MissingCredentialError) as e:
            return error_result(str(e))
        except Exception as e:
            raise ProviderError(f"search: {e}") from e

        log.debug(f"search returned {len(documents)} documents")
        return json_result({"results": [doc.to_dict() for doc in documents]})

    async def fetch(self, ctx: RequestContext, arguments: dict) -> CallToolResult:
        id = _required_string(arguments, "id")
        if id is None:
            return error_result("Missing or empty 'id' argument")

        try:
            document = await self.provider.fetch(ctx, id)
        except (ArgumentError, MissingCredentialError) as e:
            return error_result(str(e))
        except Exception as e:
            raise ProviderError(f"fetch: {e}") from e

        return json_result(document.to_dict())


async def request_context(ctx: Context, context_func: Extractor | None) -> RequestContext:
    """Run the context pipeline over the HTTP request behind a tool call.

    Calls without an HTTP request (stdio) get an empty context.
    """
    request = ctx.request_context.request
    if context_func is None or request is None:
        return RequestContext()
    return await context_func(RequestContext(), request)


def build_server(name: str, provider: Provider, context_func: Extractor | None = None) -> FastMCP:
    """Build a stateless FastMCP server exposing search and fetch."""
    mcp = FastMCP(name, host="0.0.0.0", stateless_http=True, streamable_http_path="/")
    gateway = ToolGateway(provider)
    definitions = {d.name: d for d in get_tools(provider)}
    read_only = ToolAnnotations(readOnlyHint=True)

    async def search(
        query: Annotated[str, Field(description=QUERY_DESCRIPTION)],
        ctx: Context,
    ) -> CallToolResult:
        return await gateway.search(await request_context(ctx, context_func), {"query": query})

    async def fetch(
        id: Annotated[str, Field(description=ID_DESCRIPTION)],
        ctx: Context,
    ) -> CallToolResult:
        return await gateway.fetch(await request_context(ctx, context_func), {"id": id})

    mcp.add_tool(
        search,
        name="search",
        description=definitions["search"].description,
        annotations=read_only,
        structured_output=False,
    )
    mcp.add_tool(
        fetch,
        name="fetch",
        description=definitions["fetch"].description,
        annotations=read_only,
        structured_output=False,
    )
    return mcp


def tools_endpoint(provider: Provider):
    """Starlette endpoint serving the Provider's tool definitions as JSON.

    Answers 405 to anything but GET.
    """

    async def endpoint(request: Request) -> Response:
        if request.method != "GET":
            return PlainTextResponse("Method not allowed", status_code=405)
        return JSONResponse({"tools": [asdict(d) for d in get_tools(provider)]})

    return endpoint
