"""
Notion backend: a document Provider over the Notion REST API.

The HTTP client is shared by the whole process. The caller's token travels
with every call instead of being stored on the client, so one Provider
serves every request.
"""

import httpx

from .backend import BackendServer
from .blocks import ChildrenPage, parse_children_page
from .config import (
    HTTP_DEBUG,
    HTTP_TIMEOUT,
    NOTION_API_URL,
    NOTION_PAGE_SIZE,
    NOTION_VERSION,
)
from .context import Extractor, RequestContext
from .documents import Document, Provider
from .errors import ArgumentError
from .extraction import ContentExtractor
from .http import debug_event_hooks, request_json
from .logger import get_logger
from .tools import build_server

log = get_logger("notion")

SEARCH_SYNTAX = """Search Notion pages by title.

The query is matched against page titles the caller's integration has access to.
Plain words work best; no boolean operators or field filters are supported.
Only pages are returned (databases are skipped). Each result carries the page id
to pass to 'fetch', the page title and its URL.

Example: search("quarterly planning")"""

PAGE_FILTER = {"value": "page", "property": "object"}


class NotionClient:
    """Thin async wrapper over the Notion REST endpoints used here."""

    def __init__(
        self,
        base_url: str = NOTION_API_URL,
        version: str = NOTION_VERSION,
        page_size: int = NOTION_PAGE_SIZE,
        http: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.page_size = page_size
        self.http = http or httpx.AsyncClient(
            timeout=HTTP_TIMEOUT,
            event_hooks=debug_event_hooks(log) if HTTP_DEBUG else None,
        )

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Notion-Version": self.version,
        }

    async def get_page(self, token: str, page_id: str) -> dict:
        return await request_json(
            self.http, "GET", f"{self.base_url}/pages/{page_id}", headers=self._headers(token)
        )

    async def list_children(self, token: str, block_id: str, cursor: str | None = None) -> ChildrenPage:
        params = {"page_size": self.page_size}
        if cursor:
            params["start_cursor"] = cursor

        data = await request_json(
            self.http,
            "GET",
            f"{self.base_url}/blocks/{block_id}/children",
            params=params,
            headers=self._headers(token),
        )
        return parse_children_page(data)

    async def search(self, token: str, query: str) -> list[dict]:
        data = await request_json(
            self.http,
            "POST",
            f"{self.base_url}/search",
            json={"query": query, "filter": PAGE_FILTER},
            headers=self._headers(token),
        )
        return data.get("results", [])

    async def aclose(self) -> None:
        await self.http.aclose()


def page_title(page: dict) -> str:
    """Join the runs of a page's title property with single spaces."""
    for prop in (page.get("properties") or {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return " ".join(run.get("plain_text", "") for run in prop.get("title") or [])

    log.warning(f"page does not have a title property: {page.get('id', '')}")
    return ""


def page_to_document(page: dict) -> Document:
    title = page_title(page)
    return Document(id=page["id"], title=title, text=title, url=page.get("url"))


class NotionProvider(Provider):
    def __init__(self, client: NotionClient):
        self.client = client

    def search_syntax(self) -> str:
        return SEARCH_SYNTAX

    async def search(self, ctx: RequestContext, query: str) -> list[Document]:
        if not query:
            raise ArgumentError("query cannot be empty")
        token = ctx.require_token()

        log.debug(f"Searching for: {query}")
        documents = []
        for result in await self.client.search(token, query):
            if result.get("object") != "page":
                log.info(f"ignoring unsupported object type: {result.get('object')}")
                continue
            documents.append(page_to_document(result))
        return documents

    async def fetch(self, ctx: RequestContext, id: str) -> Document:
        token = ctx.require_token()

        page = await self.client.get_page(token, id)
        text = await ContentExtractor(self.client, token).extract(id)
        log.info(f"Fetched page {id}: {len(text)} chars")

        metadata = {
            key: page[key]
            for key in ("created_time", "last_edited_time")
            if page.get(key)
        }
        return Document(
            id=id,
            title=page_title(page),
            text=text,
            url=page.get("url"),
            metadata=metadata or None,
        )


def new_server(env: dict[str, str], context_func: Extractor | None = None) -> BackendServer:
    """Backend factory; reads NOTION_-prefixed settings."""
    client = NotionClient(base_url=env.get("API_URL", NOTION_API_URL))
    provider = NotionProvider(client)
    return BackendServer(
        mcp=build_server("Notion", provider, context_func),
        provider=provider,
        shutdown=client.aclose,
    )
