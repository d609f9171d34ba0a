"""
Tests for title extraction.
"""

from conftest import make_database, make_page, make_rich_text
from notion_reader.api.models import NotionDatabase, NotionPage
from notion_reader.render.title import display_title, extract_title


def test_title_concatenates_spans():
    page = NotionPage.model_validate(make_page("p1", ["Hello", " World"]))
    assert extract_title(page) == "Hello World"


def test_title_property_name_does_not_matter():
    raw = make_page("p1")
    raw["properties"]["Task"] = {
        "id": "title",
        "type": "title",
        "title": [make_rich_text("Ship it")],
    }
    assert extract_title(NotionPage.model_validate(raw)) == "Ship it"


def test_no_title_property():
    page = NotionPage.model_validate(make_page("p1"))
    assert extract_title(page) == ""


def test_no_properties():
    page = NotionPage.model_validate({"object": "page", "id": "p1"})
    assert extract_title(page) == ""


def test_empty_title():
    page = NotionPage.model_validate(make_page("p1", []))
    assert extract_title(page) == ""


def test_database_schema_title_has_no_text():
    database = NotionDatabase.model_validate(make_database("d1", "Tasks"))
    assert extract_title(database) == ""
    assert display_title(database) == "Tasks"


def test_display_title_prefers_title_property():
    page = NotionPage.model_validate(make_page("p1", ["Plan"]))
    assert display_title(page) == "Plan"
