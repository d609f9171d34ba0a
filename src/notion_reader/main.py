from notion_reader.api.client import NotionReader, page_url
from notion_reader.api.errors import NotionReaderError
from notion_reader.api.models import RetryConfig
from notion_reader.config import ConfigResult, create_env_template, load_config
from notion_reader.render.title import display_title, extract_title
from pathlib import Path
from typing import List, Optional
import argparse
import asyncio
import logging
import sys

CLI_RETRY_CONFIG = RetryConfig(max_retries=3, base_delay=1000, max_delay=8000)

PREVIEW_CHARS = 2000


class CliSession:
    """State for one CLI run: config warnings are printed at most once."""

    def __init__(self, env_file: Optional[str] = None):
        self.env_file = env_file
        self.warnings_shown = False

    def load(self) -> ConfigResult:
        result = load_config(self.env_file)
        if result.warnings and not self.warnings_shown:
            print("Config warnings:")
            for warning in result.warnings:
                print(f"  {warning}")
            print()
            self.warnings_shown = True
        return result

    def create_reader(self) -> NotionReader:
        return NotionReader.from_config(self.load().config, CLI_RETRY_CONFIG)


def setup_command(session: CliSession, args: argparse.Namespace):
    """Write a .env template and explain the next steps."""
    print("Notion reader setup")
    if create_env_template(args.path):
        print(f"Created {args.path}")
        print("Copy it to .env and fill in your API key.")
    else:
        print(f"{args.path} already exists")

    print("\nNext steps:")
    print("1. create a .env file with NOTION_API_KEY")
    print("2. run `notion-reader test` to check the connection")


async def test_command(session: CliSession, args: argparse.Namespace):
    """Check that the configured credentials can reach the API."""
    print("Testing connection...")
    result = session.load()
    print(f"Config loaded from {result.source}")

    async with NotionReader.from_config(result.config, CLI_RETRY_CONFIG) as reader:
        found = await reader.search_workspace("test")

    total = len(found.pages) + len(found.databases)
    print(f"API connection ok ({total} search results)")
    print("\nTry:")
    print('  notion-reader search "query"')
    print("  notion-reader root-children")
    print("  notion-reader markdown <PAGE_ID>")


async def get_command(session: CliSession, args: argparse.Namespace):
    """Print a page's title, URL and timestamps."""
    print(f"Fetching page {args.page_id}...")
    async with session.create_reader() as reader:
        page = await reader.get_page(args.page_id)

    print(f"Title: {extract_title(page)}")
    print(f"URL: {page_url(args.page_id)}")
    print(f"Created: {page.created_time}")
    print(f"Last edited: {page.last_edited_time}")


async def search_command(session: CliSession, args: argparse.Namespace):
    """Search the workspace and list the first matches."""
    print(f"Searching for '{args.query}'...")
    async with session.create_reader() as reader:
        results = await reader.search_workspace(args.query)

    print(f"Pages: {len(results.pages)}")
    print(f"Databases: {len(results.databases)}")

    if results.pages:
        print("\nPages:")
        for page in results.pages[:10]:
            print(f"- {display_title(page) or page.id} ({page.id})")
            print(f"  {page_url(page.id)}")
        if len(results.pages) > 10:
            print(f"  ... {len(results.pages) - 10} more")

    if results.databases:
        print("\nDatabases:")
        for database in results.databases[:5]:
            print(f"- {display_title(database) or database.id} ({database.id})")
        if len(results.databases) > 5:
            print(f"  ... {len(results.databases) - 5} more")


async def list_children(session: CliSession, page_id: str):
    print(f"Listing child pages of {page_id}...")
    async with session.create_reader() as reader:
        children = await reader.get_all_child_pages(page_id)

    print(f"Child pages: {len(children)}")
    for child in children:
        print(f"- {child.title} ({child.id})")
        print(f"  {child.url}")


async def children_command(session: CliSession, args: argparse.Namespace):
    await list_children(session, args.page_id)


def _root_page_id(session: CliSession) -> Optional[str]:
    root_page_id = session.load().config.root_page_id
    if not root_page_id:
        print("No root page configured.")
        print("Set the NOTION_ROOT_PAGE_ID environment variable.")
    return root_page_id


async def root_command(session: CliSession, args: argparse.Namespace):
    root_page_id = _root_page_id(session)
    if not root_page_id:
        return 1
    args.page_id = root_page_id
    await get_command(session, args)


async def root_children_command(session: CliSession, args: argparse.Namespace):
    root_page_id = _root_page_id(session)
    if not root_page_id:
        return 1
    await list_children(session, root_page_id)


async def markdown_command(session: CliSession, args: argparse.Namespace):
    """Convert a page to Markdown and save or preview it."""
    print(f"Converting page {args.page_id} to Markdown...")
    async with session.create_reader() as reader:
        markdown = await reader.get_page_as_markdown(args.page_id)

    if args.output_file:
        Path(args.output_file).write_text(markdown, encoding="utf-8")
        print(f"Saved Markdown to {args.output_file}")
        print(f"Size: {len(markdown.encode('utf-8')) / 1024:.2f} KB")
        return

    print("---")
    print(markdown[:PREVIEW_CHARS])
    if len(markdown) > PREVIEW_CHARS:
        print(f"\n... (truncated, {len(markdown) - PREVIEW_CHARS} more characters)")
    print("---")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-reader",
        description="Read Notion pages, search the workspace and export Markdown.",
    )
    parser.add_argument("--env-file", help="path to a .env file with NOTION_API_KEY")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    setup = commands.add_parser("setup", help="write a .env template")
    setup.add_argument("--path", default=".env.example")
    setup.set_defaults(handler=setup_command)

    commands.add_parser("test", help="check the API connection").set_defaults(
        handler=test_command
    )

    get = commands.add_parser("get", help="show a page's details")
    get.add_argument("page_id")
    get.set_defaults(handler=get_command)

    search = commands.add_parser("search", help="search the whole workspace")
    search.add_argument("query")
    search.set_defaults(handler=search_command)

    children = commands.add_parser("children", help="list a page's child pages")
    children.add_argument("page_id")
    children.set_defaults(handler=children_command)

    commands.add_parser("root", help="show the root page's details").set_defaults(
        handler=root_command
    )
    commands.add_parser(
        "root-children", help="list the root page's child pages"
    ).set_defaults(handler=root_children_command)

    markdown = commands.add_parser("markdown", help="export a page as Markdown")
    markdown.add_argument("page_id")
    markdown.add_argument("output_file", nargs="?")
    markdown.set_defaults(handler=markdown_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    session = CliSession(args.env_file)

    try:
        result = args.handler(session, args)
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
    except NotionReaderError as e:
        print(f"Error: {e}")
        return 1

    return result or 0


if __name__ == "__main__":
    sys.exit(main())
