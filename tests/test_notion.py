"""
Unit tests for the Notion backend.
"""

import json

import httpx
import pytest

from fakes import FakeNotionClient, block, single_page
from mcp_servers.blocks import BlockType
from mcp_servers.context import RequestContext
from mcp_servers.errors import APIError, ArgumentError, MissingCredentialError
from mcp_servers.notion import NotionClient, NotionProvider, page_title, page_to_document


def page(id, title, **extra):
    return {
        "object": "page",
        "id": id,
        "url": f"https://www.notion.so/{id}",
        "properties": {
            "Name": {"type": "title", "title": [{"plain_text": t} for t in title.split()]},
            "Tags": {"type": "multi_select", "multi_select": []},
        },
        **extra,
    }


class TestPageTitle:
    def test_joins_runs_with_spaces(self):
        assert page_title(page("p", "Quarterly planning notes")) == "Quarterly planning notes"

    def test_missing_title_property(self, caplog):
        assert page_title({"id": "p", "properties": {}}) == ""
        assert "does not have a title property" in caplog.text

    def test_page_to_document(self):
        doc = page_to_document(page("p1", "Hello"))
        assert doc.id == "p1"
        assert doc.title == "Hello"
        assert doc.text == "Hello"
        assert doc.url == "https://www.notion.so/p1"


class TestProviderSearch:
    @pytest.mark.asyncio
    async def test_maps_pages_in_order_and_skips_others(self):
        client = FakeNotionClient(search_results=[
            page("p1", "First"),
            {"object": "database", "id": "d1"},
            page("p2", "Second"),
        ])

        docs = await NotionProvider(client).search(RequestContext(token="t"), "planning")

        assert [d.id for d in docs] == ["p1", "p2"]
        assert [d.title for d in docs] == ["First", "Second"]
        assert client.tokens == ["t"]

    @pytest.mark.asyncio
    async def test_empty_query_makes_no_call(self):
        client = FakeNotionClient()

        with pytest.raises(ArgumentError):
            await NotionProvider(client).search(RequestContext(token="t"), "")

        assert client.tokens == []

    @pytest.mark.asyncio
    async def test_requires_token(self):
        with pytest.raises(MissingCredentialError):
            await NotionProvider(FakeNotionClient()).search(RequestContext(), "q")


class TestProviderFetch:
    @pytest.mark.asyncio
    async def test_builds_document_from_page_and_blocks(self):
        client = FakeNotionClient(
            page=page("p1", "Roadmap", created_time="2024-01-01T00:00:00.000Z",
                      last_edited_time="2024-02-01T00:00:00.000Z"),
            pages={"p1": single_page(
                block("h", BlockType.HEADING_1, "Goals"),
                block("b", BlockType.BULLETED_LIST_ITEM, "Ship"),
            )},
        )

        doc = await NotionProvider(client).fetch(RequestContext(token="t"), "p1")

        assert doc.id == "p1"
        assert doc.title == "Roadmap"
        assert doc.text == "# Goals\n• Ship"
        assert doc.url == "https://www.notion.so/p1"
        assert doc.metadata == {
            "created_time": "2024-01-01T00:00:00.000Z",
            "last_edited_time": "2024-02-01T00:00:00.000Z",
        }

    @pytest.mark.asyncio
    async def test_fetch_is_repeatable(self):
        client = FakeNotionClient(
            page=page("p1", "Roadmap"),
            pages={"p1": single_page(block("a", BlockType.PARAGRAPH, "text"))},
        )
        provider = NotionProvider(client)
        ctx = RequestContext(token="t")

        assert await provider.fetch(ctx, "p1") == await provider.fetch(ctx, "p1")

    @pytest.mark.asyncio
    async def test_no_metadata_when_timestamps_absent(self):
        client = FakeNotionClient(page=page("p1", "Roadmap"))
        doc = await NotionProvider(client).fetch(RequestContext(token="t"), "p1")
        assert doc.metadata is None
        assert doc.text == ""

    @pytest.mark.asyncio
    async def test_requires_token(self):
        client = FakeNotionClient()

        with pytest.raises(MissingCredentialError):
            await NotionProvider(client).fetch(RequestContext(), "p1")

        assert client.calls == []


class TestNotionClient:
    @pytest.fixture
    def sent(self):
        return []

    @pytest.fixture
    def client(self, sent):
        def handler(request):
            sent.append(request)
            if request.url.path.endswith("/pages/missing"):
                return httpx.Response(404, json={
                    "object": "error",
                    "status": 404,
                    "code": "object_not_found",
                    "message": "Could not find page with ID: missing.",
                })
            if request.url.path.endswith("/children"):
                return httpx.Response(200, json={
                    "object": "list",
                    "results": [{"id": "b1", "type": "paragraph", "paragraph": {"rich_text": []}}],
                    "next_cursor": None,
                    "has_more": False,
                })
            if request.url.path.endswith("/search"):
                return httpx.Response(200, json={"results": [page("p1", "Hit")]})
            return httpx.Response(200, json=page("p1", "Hit"))

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return NotionClient(base_url="https://api.notion.test/v1", http=http)

    @pytest.mark.asyncio
    async def test_sends_auth_and_version_headers(self, client, sent):
        await client.get_page("secret", "p1")

        request = sent[0]
        assert request.url == "https://api.notion.test/v1/pages/p1"
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["Notion-Version"] == "2022-06-28"

    @pytest.mark.asyncio
    async def test_list_children_pagination_params(self, client, sent):
        first = await client.list_children("t", "blk")
        await client.list_children("t", "blk", cursor="cur-2")

        assert [b.id for b in first.blocks] == ["b1"]
        assert first.has_more is False
        assert sent[0].url.params.get("page_size") == "100"
        assert "start_cursor" not in sent[0].url.params
        assert sent[1].url.params.get("start_cursor") == "cur-2"

    @pytest.mark.asyncio
    async def test_search_filters_to_pages(self, client, sent):
        results = await client.search("t", "roadmap")

        body = json.loads(sent[0].content)
        assert sent[0].method == "POST"
        assert body == {"query": "roadmap", "filter": {"value": "page", "property": "object"}}
        assert [r["id"] for r in results] == ["p1"]

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        with pytest.raises(APIError) as exc_info:
            await client.get_page("t", "missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "object_not_found"
