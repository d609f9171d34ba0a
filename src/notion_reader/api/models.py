from typing import Any, Dict, Generic, List, Literal, Optional, Type, TypeVar, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, ValidationError

T = TypeVar("T")


class Annotations(BaseModel):
    model_config = ConfigDict(frozen=True)

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"


class RichText(BaseModel):
    model_config = ConfigDict(frozen=True)

    plain_text: str = ""
    annotations: Annotations = Field(default_factory=Annotations)
    href: Optional[str] = None


class BlockContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    rich_text: List[RichText] = Field(default_factory=list)
    color: Optional[str] = None


class ToDoContent(BlockContent):
    checked: bool = False


class CodeContent(BlockContent):
    language: Optional[str] = None


class Icon(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    emoji: Optional[str] = None


class CalloutContent(BlockContent):
    icon: Optional[Icon] = None


class ChildPageContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""


class NotionBlock(BaseModel):
    """One node of a page's content tree, tagged by its ``type``."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    has_children: bool = False

    @property
    def content(self) -> Any:
        """The kind-specific payload, stored under the attribute named by ``type``."""
        return getattr(self, self.type, None)


class ParagraphBlock(NotionBlock):
    type: Literal["paragraph"] = "paragraph"
    paragraph: BlockContent


class Heading1Block(NotionBlock):
    type: Literal["heading_1"] = "heading_1"
    heading_1: BlockContent


class Heading2Block(NotionBlock):
    type: Literal["heading_2"] = "heading_2"
    heading_2: BlockContent


class Heading3Block(NotionBlock):
    type: Literal["heading_3"] = "heading_3"
    heading_3: BlockContent


class BulletedListItemBlock(NotionBlock):
    type: Literal["bulleted_list_item"] = "bulleted_list_item"
    bulleted_list_item: BlockContent


class NumberedListItemBlock(NotionBlock):
    type: Literal["numbered_list_item"] = "numbered_list_item"
    numbered_list_item: BlockContent


class ToDoBlock(NotionBlock):
    type: Literal["to_do"] = "to_do"
    to_do: ToDoContent


class CodeBlock(NotionBlock):
    type: Literal["code"] = "code"
    code: CodeContent


class QuoteBlock(NotionBlock):
    type: Literal["quote"] = "quote"
    quote: BlockContent


class CalloutBlock(NotionBlock):
    type: Literal["callout"] = "callout"
    callout: CalloutContent


class ChildPageBlock(NotionBlock):
    type: Literal["child_page"] = "child_page"
    child_page: ChildPageContent


class UnsupportedBlock(NotionBlock):
    """A block whose kind this reader does not render."""

    pass


class InvalidBlock(NotionBlock):
    """A block of a known kind whose payload failed validation."""

    error: str


BLOCK_TYPES: Dict[str, Type[NotionBlock]] = {
    block_class.model_fields["type"].default: block_class
    for block_class in (
        ParagraphBlock,
        Heading1Block,
        Heading2Block,
        Heading3Block,
        BulletedListItemBlock,
        NumberedListItemBlock,
        ToDoBlock,
        CodeBlock,
        QuoteBlock,
        CalloutBlock,
        ChildPageBlock,
    )
}


def parse_block(raw: Dict[str, Any]) -> NotionBlock:
    """Parse a raw block object into its typed variant.

    Unknown kinds become UnsupportedBlock and malformed payloads of known
    kinds become InvalidBlock, so one bad block never fails a whole listing.
    A block without an id still raises ValidationError.
    """
    block_type = raw.get("type") or ""
    if not isinstance(block_type, str):
        block_type = str(block_type)
    has_children = bool(raw.get("has_children"))
    block_class = BLOCK_TYPES.get(block_type)

    if block_class is None:
        return UnsupportedBlock(
            id=raw.get("id"),
            type=block_type,
            has_children=has_children,
        )

    try:
        return block_class.model_validate({**raw, "has_children": has_children})
    except ValidationError as e:
        return InvalidBlock(
            id=raw.get("id"),
            type=block_type,
            has_children=has_children,
            error=str(e),
        )


class PropertyValue(BaseModel):
    # Pages carry a list of spans under "title"; database schemas carry {}.
    model_config = ConfigDict(frozen=True, extra="allow")

    id: Optional[str] = None
    type: str
    title: Union[List[RichText], Dict[str, Any], None] = None


class NotionObject(BaseModel):
    model_config = ConfigDict(frozen=True)

    object: str
    id: str
    created_time: Optional[datetime] = None
    last_edited_time: Optional[datetime] = None
    url: Optional[str] = None
    properties: Dict[str, PropertyValue] = Field(default_factory=dict)


class NotionPage(NotionObject):
    object: Literal["page"] = "page"


class NotionDatabase(NotionObject):
    object: Literal["database"] = "database"
    title: List[RichText] = Field(default_factory=list)


Resource = Union[NotionPage, NotionDatabase]


class PaginatedResult(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    results: List[T] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None


class ListResponse(BaseModel):
    """Envelope of a paginated list endpoint, as returned by the API."""

    model_config = ConfigDict(frozen=True)

    results: List[Dict[str, Any]]
    has_more: bool
    next_cursor: Optional[str] = None


class RetryConfig(BaseModel):
    """Backoff policy. Delays are in milliseconds."""

    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0)
    base_delay: int = Field(default=1000, ge=0)
    max_delay: int = Field(default=10000, ge=0)


class ChildPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str


class SearchResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    pages: List[NotionPage] = Field(default_factory=list)
    databases: List[NotionDatabase] = Field(default_factory=list)


class PageContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    blocks: List[NotionBlock]
