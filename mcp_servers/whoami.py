"""Identity echo backend: reports who the verified caller is."""

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, ToolAnnotations

from .backend import BackendServer
from .context import Extractor, RequestContext
from .errors import MissingCredentialError
from .results import error_result, json_result
from .tools import request_context


def whoami_result(ctx: RequestContext) -> CallToolResult:
    try:
        identity = ctx.require_identity()
    except MissingCredentialError as e:
        return error_result(str(e))
    return json_result({"name": identity.name, "email": identity.email})


def build_server(context_func: Extractor | None = None) -> FastMCP:
    mcp = FastMCP("pomerium-whoami", host="0.0.0.0", stateless_http=True, streamable_http_path="/")

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True), structured_output=False)
    async def whoami(ctx: Context) -> CallToolResult:
        """Returns the identity of the user making the request

        The result is JSON text with lowercase keys: {"name": ..., "email": ...}
        """
        return whoami_result(await request_context(ctx, context_func))

    return mcp


def new_server(env: dict[str, str], context_func: Extractor | None = None) -> BackendServer:
    return BackendServer(mcp=build_server(context_func))
