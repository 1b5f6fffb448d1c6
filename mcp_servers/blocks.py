"""Notion block model.

Blocks are the nodes of a page's content tree. BlockType is the closed set
of kinds the extraction engine renders; any other native kind parses to
BlockType.UNSUPPORTED.
"""

from dataclasses import dataclass, field
from enum import Enum


class BlockType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CALLOUT = "callout"
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    CHILD_PAGE = "child_page"
    BOOKMARK = "bookmark"
    EMBED = "embed"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, value: str) -> "BlockType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNSUPPORTED


@dataclass(frozen=True)
class Block:
    """A single content node, reduced to what rendering needs."""
    id: str
    type: BlockType
    text: str = ""
    has_children: bool = False
    children: tuple["Block", ...] | None = None
    checked: bool = False
    language: str = ""
    url: str = ""
    caption: str = ""
    cells: tuple[str, ...] = ()
    title: str = ""
    external: bool = False


@dataclass(frozen=True)
class ChildrenPage:
    """One page of a block's children listing."""
    blocks: list[Block] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


def rich_text(runs: list[dict] | None) -> str:
    """Concatenate the plain text of rich-text runs."""
    return "".join(run.get("plain_text", "") for run in runs or [])


def _media_url(body: dict) -> tuple[str, bool]:
    hosting = body.get("type", "")
    url = (body.get(hosting) or {}).get("url", "") if hosting else ""
    return url, hosting == "external"


def parse_block(data: dict) -> Block:
    """Build a Block from a Notion API block object."""
    native_type = data.get("type", "")
    block_type = BlockType.parse(native_type)
    body = data.get(native_type) or {}

    children = body.get("children")
    parsed_children = tuple(parse_block(c) for c in children) if children else None

    url, external = "", False
    if block_type in (BlockType.IMAGE, BlockType.VIDEO, BlockType.FILE):
        url, external = _media_url(body)
    elif block_type in (BlockType.BOOKMARK, BlockType.EMBED):
        url = body.get("url", "")

    return Block(
        id=data.get("id", ""),
        type=block_type,
        text=rich_text(body.get("rich_text")),
        has_children=bool(data.get("has_children")) or parsed_children is not None,
        children=parsed_children,
        checked=bool(body.get("checked")),
        language=body.get("language", ""),
        url=url,
        caption=rich_text(body.get("caption")),
        cells=tuple(rich_text(cell) for cell in body.get("cells") or []),
        title=body.get("title", "") if block_type == BlockType.CHILD_PAGE else "",
        external=external,
    )


def parse_children_page(data: dict) -> ChildrenPage:
    """Build a ChildrenPage from a Notion list response."""
    return ChildrenPage(
        blocks=[parse_block(b) for b in data.get("results", [])],
        next_cursor=data.get("next_cursor"),
        has_more=bool(data.get("has_more")),
    )
