"""
Content extraction: flattens a Notion block tree into one text document.

Traversal is depth-first and pre-order, one page of children at a time,
with no concurrent requests. Nested content of list-like and container
blocks is indented two spaces per level of splicing. A failed page request
aborts the whole extraction.
"""

from typing import Awaitable, Callable, Protocol

from .blocks import Block, BlockType, ChildrenPage

INDENT = "  "


class ChildrenSource(Protocol):
    async def list_children(self, token: str, block_id: str, cursor: str | None = None) -> ChildrenPage:
        ...


def indent_text(text: str) -> str:
    """Prefix every non-empty line with one indentation step."""
    return "\n".join(INDENT + line if line else line for line in text.split("\n"))


def _with_caption(text: str, caption: str) -> str:
    return f"{text} - {caption}" if caption else text


class ContentExtractor:
    """Renders the content under one block id, for one caller's token."""

    def __init__(self, client: ChildrenSource, token: str):
        self.client = client
        self.token = token

    async def extract(self, block_id: str) -> str:
        """Render all children of block_id, following pagination."""
        parts = []
        cursor = None

        while True:
            page = await self.client.list_children(self.token, block_id, cursor)
            for block in page.blocks:
                text = await self.render(block)
                if text:
                    parts.append(text)

            if not page.has_more or not page.next_cursor:
                break
            cursor = page.next_cursor

        return "\n".join(parts)

    async def render(self, block: Block) -> str:
        return await _RENDERERS[block.type](self, block)

    async def _children_text(self, block: Block) -> str:
        if block.children is not None:
            parts = []
            for child in block.children:
                text = await self.render(child)
                if text:
                    parts.append(text)
            return "\n".join(parts)
        if block.has_children:
            return await self.extract(block.id)
        return ""

    async def _with_children(self, head: str, block: Block, indent: bool) -> str:
        child_text = await self._children_text(block)
        if not child_text:
            return head
        if indent:
            child_text = indent_text(child_text)
        return f"{head}\n{child_text}" if head else child_text

    # -- renderers ------------------------------------------------------------

    async def _paragraph(self, block: Block) -> str:
        return await self._with_children(block.text, block, indent=False)

    async def _heading_1(self, block: Block) -> str:
        return await self._with_children("# " + block.text, block, indent=True)

    async def _heading_2(self, block: Block) -> str:
        return await self._with_children("## " + block.text, block, indent=True)

    async def _heading_3(self, block: Block) -> str:
        return await self._with_children("### " + block.text, block, indent=True)

    async def _bulleted(self, block: Block) -> str:
        return await self._with_children("• " + block.text, block, indent=True)

    async def _numbered(self, block: Block) -> str:
        return await self._with_children("1. " + block.text, block, indent=True)

    async def _to_do(self, block: Block) -> str:
        checkbox = "☑" if block.checked else "☐"
        return await self._with_children(f"{checkbox} {block.text}", block, indent=True)

    async def _toggle(self, block: Block) -> str:
        return await self._with_children("▶ " + block.text, block, indent=True)

    async def _callout(self, block: Block) -> str:
        return await self._with_children("💡 " + block.text, block, indent=True)

    async def _quote(self, block: Block) -> str:
        return await self._with_children("> " + block.text, block, indent=True)

    async def _code(self, block: Block) -> str:
        return f"```{block.language}\n{block.text}\n```"

    async def _divider(self, block: Block) -> str:
        return "---"

    async def _table(self, block: Block) -> str:
        return await self._children_text(block)

    async def _table_row(self, block: Block) -> str:
        return "| " + " | ".join(block.cells) + " |"

    async def _child_page(self, block: Block) -> str:
        return "📄 " + block.title

    async def _bookmark(self, block: Block) -> str:
        return _with_caption("🔗 " + block.url, block.caption)

    async def _embed(self, block: Block) -> str:
        return "🔗 " + block.url

    async def _image(self, block: Block) -> str:
        return _with_caption(_media("🖼 Image", block), block.caption)

    async def _video(self, block: Block) -> str:
        return _with_caption(_media("🎥 Video", block), block.caption)

    async def _file(self, block: Block) -> str:
        return _with_caption("📎 File", block.caption)

    async def _unsupported(self, block: Block) -> str:
        return await self._with_children("", block, indent=False)


def _media(label: str, block: Block) -> str:
    # only externally hosted media has a stable URL
    if block.external and block.url:
        return f"{label}: {block.url}"
    return label


_RENDERERS: dict[BlockType, Callable[[ContentExtractor, Block], Awaitable[str]]] = {
    BlockType.PARAGRAPH: ContentExtractor._paragraph,
    BlockType.HEADING_1: ContentExtractor._heading_1,
    BlockType.HEADING_2: ContentExtractor._heading_2,
    BlockType.HEADING_3: ContentExtractor._heading_3,
    BlockType.BULLETED_LIST_ITEM: ContentExtractor._bulleted,
    BlockType.NUMBERED_LIST_ITEM: ContentExtractor._numbered,
    BlockType.TO_DO: ContentExtractor._to_do,
    BlockType.TOGGLE: ContentExtractor._toggle,
    BlockType.CALLOUT: ContentExtractor._callout,
    BlockType.QUOTE: ContentExtractor._quote,
    BlockType.CODE: ContentExtractor._code,
    BlockType.DIVIDER: ContentExtractor._divider,
    BlockType.TABLE: ContentExtractor._table,
    BlockType.TABLE_ROW: ContentExtractor._table_row,
    BlockType.CHILD_PAGE: ContentExtractor._child_page,
    BlockType.BOOKMARK: ContentExtractor._bookmark,
    BlockType.EMBED: ContentExtractor._embed,
    BlockType.IMAGE: ContentExtractor._image,
    BlockType.VIDEO: ContentExtractor._video,
    BlockType.FILE: ContentExtractor._file,
    BlockType.UNSUPPORTED: ContentExtractor._unsupported,
}
