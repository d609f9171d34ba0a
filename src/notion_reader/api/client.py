from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar
from functools import partial
import asyncio
import logging

from notion_client import AsyncClient
from pydantic import BaseModel, ValidationError

from notion_reader.config import NotionConfig
from notion_reader.render.markdown import BlockRenderer
from notion_reader.render.title import extract_title
from .errors import (
    NotionReaderError,
    ObjectTypeMismatchError,
    RemoteCallError,
    ResponseValidationError,
)
from .models import (
    ChildPage,
    ChildPageBlock,
    ListResponse,
    NotionBlock,
    NotionDatabase,
    NotionPage,
    PageContent,
    PaginatedResult,
    RetryConfig,
    SearchResults,
    parse_block,
)
from .pagination import MAX_PAGE_SIZE, PaginationWalker
from .retry import RetryExecutor

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PAGE_URL_BASE = "https://www.notion.so/"


def page_url(object_id: str) -> str:
    """Public URL of a page: the id with its dashes removed."""
    return PAGE_URL_BASE + object_id.replace("-", "")


def _validate(model: Type[M], data: Any, label: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseValidationError(label, str(e)) from e


def _expect_object(response: Any, model: Type[M], expected: str, label: str) -> M:
    if not isinstance(response, dict):
        raise ResponseValidationError(label, f"expected an object, got {type(response).__name__}")
    actual = response.get("object")
    if actual != expected:
        raise ObjectTypeMismatchError(expected, actual, response.get("id", ""))
    return _validate(model, response, label)


class NotionReader:
    """Reads pages, blocks and search results from Notion.

    Every remote call runs through a RetryExecutor; listings are walked to
    the end with a PaginationWalker, one page at a time.
    """

    def __init__(
        self,
        client: Any,
        retry_config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.executor = RetryExecutor(retry_config, sleep=sleep)
        self.walker = PaginationWalker(self.executor)
        self.renderer = BlockRenderer()

    @classmethod
    def from_config(
        cls, config: NotionConfig, retry_config: Optional[RetryConfig] = None
    ) -> "NotionReader":
        return cls(AsyncClient(auth=config.api_key), retry_config)

    async def aclose(self):
        await self.client.aclose()

    async def __aenter__(self) -> "NotionReader":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def _attributed(self, call: Awaitable[Any], label: str) -> Any:
        """Await a remote call, tagging errors that are not ours with ``label``."""
        try:
            return await call
        except NotionReaderError:
            raise
        except Exception as e:
            raise RemoteCallError(label, e) from e

    async def _fetch_listing(
        self,
        call: Callable[..., Awaitable[Any]],
        label: str,
        parse: Callable[[Dict[str, Any]], Any],
        cursor: Optional[str],
        **params: Any,
    ) -> PaginatedResult:
        """Request one page of a listing endpoint and parse its items."""
        if cursor:
            params["start_cursor"] = cursor
        response = await call(page_size=MAX_PAGE_SIZE, **params)

        envelope = _validate(ListResponse, response, label)
        try:
            items = [parse(item) for item in envelope.results]
        except ValidationError as e:
            raise ResponseValidationError(label, str(e)) from e

        return PaginatedResult(
            results=items,
            has_more=envelope.has_more,
            next_cursor=envelope.next_cursor,
        )

    async def get_page(self, page_id: str) -> NotionPage:
        """Retrieve a page's metadata and properties."""
        label = f"get page ({page_id})"

        async def fetch() -> NotionPage:
            response = await self.client.pages.retrieve(page_id=page_id)
            return _expect_object(response, NotionPage, "page", label)

        return await self._attributed(self.executor.execute(fetch, label), label)

    async def get_database(self, database_id: str) -> NotionDatabase:
        """Retrieve a database's metadata and property schema."""
        label = f"get database ({database_id})"

        async def fetch() -> NotionDatabase:
            response = await self.client.databases.retrieve(database_id=database_id)
            return _expect_object(response, NotionDatabase, "database", label)

        return await self._attributed(self.executor.execute(fetch, label), label)

    async def get_all_blocks(self, block_id: str) -> List[NotionBlock]:
        """Get every direct child block, in page order."""
        label = f"list blocks ({block_id})"
        fetch_page = partial(
            self._fetch_listing,
            self.client.blocks.children.list,
            label,
            parse_block,
            block_id=block_id,
        )
        return await self._attributed(self.walker.collect_all(fetch_page, label), label)

    async def get_all_child_pages(self, page_id: str) -> List[ChildPage]:
        """List the sub-pages referenced from a page's blocks."""
        blocks = await self.get_all_blocks(page_id)
        return [
            ChildPage(id=block.id, title=block.child_page.title, url=page_url(block.id))
            for block in blocks
            if isinstance(block, ChildPageBlock)
        ]

    async def get_page_content(self, page_id: str) -> PageContent:
        """Retrieve a page's title and all of its direct blocks."""
        page = await self.get_page(page_id)
        blocks = await self.get_all_blocks(page_id)
        return PageContent(title=extract_title(page), blocks=blocks)

    async def get_page_as_markdown(self, page_id: str) -> str:
        """Render a page as Markdown, headed by its title when it has one."""
        content = await self.get_page_content(page_id)

        markdown = ""
        if content.title:
            markdown += f"# {content.title}\n\n"
        markdown += self.renderer.render_blocks(content.blocks)
        return markdown

    async def get_page_title(self, page_id: str) -> str:
        page = await self.get_page(page_id)
        return extract_title(page)

    async def search_workspace(self, query: str) -> SearchResults:
        """Search every page and database shared with the integration.

        Results are split by their ``object`` field; each list keeps the
        order the search returned.
        """
        label = f"search workspace ({query})"
        fetch_page = partial(
            self._fetch_listing, self.client.search, label, dict, query=query
        )
        items = await self._attributed(self.walker.collect_all(fetch_page, label), label)

        pages = []
        databases = []
        for item in items:
            kind = item.get("object")
            if kind == "page":
                pages.append(_validate(NotionPage, item, label))
            elif kind == "database":
                databases.append(_validate(NotionDatabase, item, label))
            else:
                logger.debug(f"{label}: skipping result {item.get('id')} of kind {kind}")
        return SearchResults(pages=pages, databases=databases)

    async def query_database(
        self, database_id: str, query: Optional[str] = None
    ) -> List[NotionPage]:
        """Get every page of a database, optionally filtered on its Title."""
        label = f"query database ({database_id})"
        params: Dict[str, Any] = {"database_id": database_id}
        if query:
            params["filter"] = {"property": "Title", "rich_text": {"contains": query}}

        fetch_page = partial(
            self._fetch_listing,
            self.client.databases.query,
            label,
            partial(_validate, NotionPage, label=label),
            **params,
        )
        return await self._attributed(self.walker.collect_all(fetch_page, label), label)
