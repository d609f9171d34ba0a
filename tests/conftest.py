"""
Common test fixtures for the Notion reader project.
"""

import pytest
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from notion_reader.api.client import NotionReader
from notion_reader.api.models import RetryConfig


class FakeAPIError(Exception):
    """Stands in for notion_client's APIResponseError."""

    def __init__(self, status: int, code: str = ""):
        super().__init__(f"HTTP {status} {code}".strip())
        self.status = status
        self.code = code


class FakeEndpoint:
    """Async callable that replays scripted responses and records its calls."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeNotionClient:
    """Mirrors the parts of notion_client.AsyncClient the reader uses."""

    def __init__(self):
        self.pages = SimpleNamespace(retrieve=FakeEndpoint())
        self.databases = SimpleNamespace(retrieve=FakeEndpoint(), query=FakeEndpoint())
        self.blocks = SimpleNamespace(children=SimpleNamespace(list=FakeEndpoint()))
        self.search = FakeEndpoint()
        self.closed = False

    async def aclose(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float):
        self.delays.append(seconds)


def make_rich_text(text: str, href: Optional[str] = None, **annotations) -> Dict:
    return {
        "type": "text",
        "text": {"content": text, "link": {"url": href} if href else None},
        "annotations": {
            "bold": False,
            "italic": False,
            "strikethrough": False,
            "underline": False,
            "code": False,
            "color": "default",
            **annotations,
        },
        "plain_text": text,
        "href": href,
    }


def make_block(block_type: str, text: str = "", block_id: str = "block-1", **payload) -> Dict:
    content = {"rich_text": [make_rich_text(text)] if text else [], "color": "default"}
    content.update(payload)
    return {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": False,
        block_type: content,
    }


def make_child_page(block_id: str, title: str) -> Dict:
    return {
        "object": "block",
        "id": block_id,
        "type": "child_page",
        "has_children": True,
        "child_page": {"title": title},
    }


def make_page(page_id: str, title: Optional[List[str]] = None) -> Dict:
    properties = {
        "Status": {"id": "a%3Bc", "type": "select", "select": None},
    }
    if title is not None:
        properties["Name"] = {
            "id": "title",
            "type": "title",
            "title": [make_rich_text(part) for part in title],
        }
    return {
        "object": "page",
        "id": page_id,
        "created_time": "2024-03-28T09:00:00.000Z",
        "last_edited_time": "2024-03-29T10:30:00.000Z",
        "url": f"https://www.notion.so/{page_id.replace('-', '')}",
        "properties": properties,
    }


def make_database(database_id: str, title: str) -> Dict:
    return {
        "object": "database",
        "id": database_id,
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": "2024-01-02T00:00:00.000Z",
        "title": [make_rich_text(title)],
        "properties": {
            "Name": {"id": "title", "name": "Name", "type": "title", "title": {}},
        },
    }


def make_listing(results: List[Dict], next_cursor: Optional[str] = None) -> Dict:
    return {
        "object": "list",
        "results": results,
        "has_more": next_cursor is not None,
        "next_cursor": next_cursor,
    }


@pytest.fixture
def sleep():
    """Fixture recording backoff waits instead of sleeping."""
    return SleepRecorder()


@pytest.fixture
def retry_config():
    return RetryConfig(max_retries=3, base_delay=1000, max_delay=8000)


@pytest.fixture
def fake_client():
    """Fixture providing an in-memory Notion client."""
    return FakeNotionClient()


@pytest.fixture
def reader(fake_client, retry_config, sleep):
    """Fixture providing a NotionReader wired to the fake client."""
    return NotionReader(fake_client, retry_config, sleep=sleep)
