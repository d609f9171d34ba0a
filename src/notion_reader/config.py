from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import os
import re

from notion_reader.api.errors import ConfigError

ENV_TEMPLATE = """# Notion API settings
# Create an integration token at https://www.notion.so/my-integrations
NOTION_API_KEY=your_notion_integration_token_here

# Root page id (optional)
# The trailing 32 characters of the page URL
NOTION_ROOT_PAGE_ID=your_root_page_id_here

# Keep this file out of version control.
# In production set the variables in the environment directly.
"""


class NotionConfig(BaseModel):
    api_key: str
    root_page_id: Optional[str] = None


class ConfigResult(BaseModel):
    config: NotionConfig
    source: str
    warnings: List[str] = Field(default_factory=list)


def _read_tools_value(content: str, *labels: str) -> Optional[str]:
    for label in labels:
        match = re.search(rf"{re.escape(label)}:\s*([^\s\[]+)", content)
        # Placeholders such as "[REDACTED]" never match.
        if match:
            return match.group(1)
    return None


def load_config(
    env_file: Optional[str] = None, tools_path: Optional[str] = None
) -> ConfigResult:
    """Resolve Notion credentials.

    Environment variables (optionally loaded from a .env file) take
    precedence. A TOOLS.md file is the fallback, and using it adds a
    security warning to the result.
    """
    load_dotenv(env_file)

    api_key = os.getenv("NOTION_API_KEY") or os.getenv("NOTION_TOKEN")
    root_page_id = os.getenv("NOTION_ROOT_PAGE_ID")

    if api_key:
        warnings = []
        if not root_page_id:
            warnings.append("NOTION_ROOT_PAGE_ID is not set (optional)")
        return ConfigResult(
            config=NotionConfig(api_key=api_key, root_page_id=root_page_id),
            source="env",
            warnings=warnings,
        )

    path = Path(tools_path) if tools_path else Path.cwd() / "TOOLS.md"
    warnings = [
        f"Security warning: NOTION_API_KEY is not set, reading credentials from {path.name}"
    ]

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(_config_help(f"could not read {path}: {e}")) from e

    api_key = _read_tools_value(content, "API Secret")
    if not api_key:
        raise ConfigError(_config_help(f"no API Secret found in {path}"))

    warnings.append("Recommended: set NOTION_API_KEY=your_key_here in a .env file")
    return ConfigResult(
        config=NotionConfig(
            api_key=api_key,
            root_page_id=_read_tools_value(content, "親ページID", "Root Page ID"),
        ),
        source="tools.md",
        warnings=warnings,
    )


def _config_help(reason: str) -> str:
    return (
        f"Could not load Notion settings: {reason}\n\n"
        "To fix:\n"
        "1. export NOTION_API_KEY=your_key_here\n"
        "2. or add NOTION_API_KEY=your_key_here to a .env file\n"
        "3. or put an 'API Secret: <key>' line in TOOLS.md"
    )


def create_env_template(path: str = ".env.example") -> bool:
    """Write a .env template. Returns False if the file already exists."""
    target = Path(path)
    if target.exists():
        return False
    target.write_text(ENV_TEMPLATE, encoding="utf-8")
    return True
