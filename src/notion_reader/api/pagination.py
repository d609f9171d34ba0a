"""Cursor-driven collection of paginated Notion listings."""

import logging
from functools import partial
from typing import Awaitable, Callable, List, Optional, TypeVar

from .errors import ResponseValidationError
from .models import PaginatedResult
from .retry import RetryExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest page the Notion API will return.
MAX_PAGE_SIZE = 100


class PaginationWalker:
    def __init__(self, executor: RetryExecutor):
        self.executor = executor

    async def collect_all(
        self,
        fetch_page: Callable[[Optional[str]], Awaitable[PaginatedResult[T]]],
        label: str,
    ) -> List[T]:
        """Follow ``next_cursor`` until the listing reports no more results.

        Each page is requested through the retry executor, one at a time.
        Items keep the order the API returned them in.
        """
        items: List[T] = []
        cursor: Optional[str] = None
        has_more = True
        pages = 0

        while has_more:
            result = await self.executor.execute(partial(fetch_page, cursor), label)
            pages += 1
            items.extend(result.results)

            has_more = result.has_more
            cursor = result.next_cursor

            if has_more and not cursor:
                raise ResponseValidationError(
                    label, "has_more is set but next_cursor is missing"
                )

        logger.debug(f"{label}: collected {len(items)} items from {pages} pages")
        return items
