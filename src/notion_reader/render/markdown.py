import logging
from typing import Callable, Dict, Iterable, List, Optional, Type

from notion_reader.api.models import (
    BulletedListItemBlock,
    CalloutBlock,
    ChildPageBlock,
    CodeBlock,
    Heading1Block,
    Heading2Block,
    Heading3Block,
    InvalidBlock,
    NotionBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    RichText,
    ToDoBlock,
    UnsupportedBlock,
)

logger = logging.getLogger(__name__)


class BlockRenderError(Exception):
    """Raised for a block that cannot be turned into Markdown."""

    pass


def format_rich_text(rich_text: Optional[Iterable[RichText]]) -> str:
    """Convert annotated text spans into inline Markdown.

    Decorations wrap each other in a fixed order: code, italic, bold,
    strikethrough, then the link around everything.
    """
    if not rich_text:
        return ""

    parts = []
    for span in rich_text:
        text = span.plain_text
        annotations = span.annotations

        if annotations.code:
            text = f"`{text}`"
        if annotations.italic:
            text = f"*{text}*"
        if annotations.bold:
            text = f"**{text}**"
        if annotations.strikethrough:
            text = f"~~{text}~~"
        if span.href:
            text = f"[{text}]({span.href})"

        parts.append(text)

    return "".join(parts)


class BlockRenderer:
    """Maps each block kind to a Markdown fragment.

    Numbered list items always render as ``1.``; Markdown viewers renumber
    consecutive items themselves.
    """

    def __init__(self):
        self._renderers: Dict[Type[NotionBlock], Callable[[NotionBlock], str]] = {
            ParagraphBlock: self._paragraph,
            Heading1Block: self._heading(1),
            Heading2Block: self._heading(2),
            Heading3Block: self._heading(3),
            BulletedListItemBlock: self._bulleted_list_item,
            NumberedListItemBlock: self._numbered_list_item,
            ToDoBlock: self._to_do,
            CodeBlock: self._code,
            QuoteBlock: self._quote,
            CalloutBlock: self._callout,
            ChildPageBlock: self._skip,
            UnsupportedBlock: self._skip,
            InvalidBlock: self._invalid,
        }

    def render(self, block: NotionBlock) -> str:
        """Render one block, substituting a placeholder if it fails."""
        try:
            renderer = self._renderers.get(type(block), self._skip)
            return renderer(block)
        except Exception as e:
            logger.warning(
                f"Could not convert block {block.id} ({block.type}) to Markdown: {e}"
            )
            return f"<!-- block conversion error: {block.type} -->\n"

    def render_blocks(self, blocks: List[NotionBlock]) -> str:
        return "".join(self.render(block) for block in blocks)

    def _paragraph(self, block: NotionBlock) -> str:
        return format_rich_text(block.content.rich_text) + "\n\n"

    def _heading(self, level: int) -> Callable[[NotionBlock], str]:
        prefix = "#" * level

        def render_heading(block: NotionBlock) -> str:
            return f"{prefix} {format_rich_text(block.content.rich_text)}\n\n"

        return render_heading

    def _bulleted_list_item(self, block: NotionBlock) -> str:
        return f"- {format_rich_text(block.content.rich_text)}\n"

    def _numbered_list_item(self, block: NotionBlock) -> str:
        return f"1. {format_rich_text(block.content.rich_text)}\n"

    def _to_do(self, block: NotionBlock) -> str:
        checkbox = "[x]" if block.content.checked else "[ ]"
        return f"{checkbox} {format_rich_text(block.content.rich_text)}\n"

    def _code(self, block: NotionBlock) -> str:
        language = block.content.language or ""
        code = format_rich_text(block.content.rich_text)
        return f"```{language}\n{code}\n```\n\n"

    def _quote(self, block: NotionBlock) -> str:
        return f"> {format_rich_text(block.content.rich_text)}\n\n"

    def _callout(self, block: NotionBlock) -> str:
        icon = block.content.icon
        emoji = ""
        if icon is not None and icon.type == "emoji":
            emoji = icon.emoji or ""
        return f"> {emoji} {format_rich_text(block.content.rich_text)}\n\n"

    def _invalid(self, block: NotionBlock) -> str:
        raise BlockRenderError(block.error)

    def _skip(self, block: NotionBlock) -> str:
        return ""
