"""
Tests for the command-line front end.
"""

import pytest

from conftest import FakeAPIError, make_block, make_child_page, make_listing, make_page
from notion_reader import main as cli
from notion_reader.api.client import NotionReader


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in ("NOTION_API_KEY", "NOTION_TOKEN", "NOTION_ROOT_PAGE_ID"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.setenv("NOTION_API_KEY", "secret_cli")
    monkeypatch.chdir(tmp_path)
    return ["--env-file", str(tmp_path / "missing.env")]


@pytest.fixture
def patched_reader(monkeypatch, fake_client, retry_config, sleep):
    """Make the CLI build readers around the fake client."""

    def from_config(config, retry_config_=None):
        return NotionReader(fake_client, retry_config, sleep=sleep)

    monkeypatch.setattr(NotionReader, "from_config", from_config)
    return fake_client


def test_setup_writes_template(tmp_path, capsys):
    target = tmp_path / ".env.example"

    assert cli.main(["setup", "--path", str(target)]) == 0
    assert target.exists()
    assert "Created" in capsys.readouterr().out


def test_root_requires_root_page(env, capsys):
    assert cli.main(env + ["root"]) == 1
    out = capsys.readouterr().out
    assert "NOTION_ROOT_PAGE_ID" in out


def test_warnings_are_shown_once(env, capsys):
    session = cli.CliSession(env[1])
    session.load()
    session.load()

    out = capsys.readouterr().out
    assert out.count("Config warnings:") == 1


def test_markdown_to_file(env, patched_reader, tmp_path, capsys):
    patched_reader.pages.retrieve.responses = [make_page("page-1", ["Notes"])]
    patched_reader.blocks.children.list.responses = [
        make_listing([make_block("paragraph", "Hello", "b1")])
    ]
    output = tmp_path / "notes.md"

    assert cli.main(env + ["markdown", "page-1", str(output)]) == 0
    assert output.read_text(encoding="utf-8") == "# Notes\n\nHello\n\n"
    assert patched_reader.closed


def test_children_lists_pages(env, patched_reader, capsys):
    patched_reader.blocks.children.list.responses = [
        make_listing([make_child_page("abc-123", "Notes")])
    ]

    assert cli.main(env + ["children", "page-1"]) == 0
    out = capsys.readouterr().out
    assert "Child pages: 1" in out
    assert "https://www.notion.so/abc123" in out


def test_missing_page_exits_with_status_one(env, patched_reader, capsys):
    patched_reader.pages.retrieve.responses = [FakeAPIError(404, "object_not_found")]

    assert cli.main(env + ["get", "page-1"]) == 1
    out = capsys.readouterr().out
    assert "get page (page-1)" in out
    assert "object_not_found" in out


def test_get_fetches_page_once(env, patched_reader, capsys):
    patched_reader.pages.retrieve.responses = [make_page("page-1", ["Plan"])]

    assert cli.main(env + ["get", "page-1"]) == 0
    assert "Title: Plan" in capsys.readouterr().out
    assert len(patched_reader.pages.retrieve.calls) == 1


def test_errors_exit_with_status_one(env, patched_reader, capsys):
    patched_reader.pages.retrieve.responses = [FakeAPIError(500)] * 4

    assert cli.main(env + ["get", "page-1"]) == 1
    assert "get page (page-1)" in capsys.readouterr().out
