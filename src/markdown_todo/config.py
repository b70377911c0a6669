"""
Workspace-level keyword settings.

Settings live in a YAML file at the workspace root (or wherever
MARKDOWN_TODO_CONFIG points) using the same shape as document front matter:

    markdown-todo.keywords:
      - keyword: TODO
        color: "#C05430"
      - keyword: DONE
        color: "#008020"
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from markdown_todo.metadata import extract_keyword_items

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MARKDOWN_TODO_CONFIG"
CONFIG_FILENAMES = (".markdown-todo.yaml", ".markdown-todo.yml")


@dataclass
class WorkspaceSettings:
    """Keyword settings of one workspace."""
    root: Path
    config_path: Path | None = None
    keywords: Any = None  # Raw, unvalidated definitions; None when not configured

    def exists(self) -> bool:
        """Check if a settings file was found."""
        return self.config_path is not None


def find_config_file(root: Path) -> Path | None:
    """
    Locate the settings file.

    Checks:
    1. MARKDOWN_TODO_CONFIG environment variable
    2. .markdown-todo.yaml / .markdown-todo.yml in the workspace root
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.is_absolute():
            path = root / path
        return path if path.is_file() else None

    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_workspace_settings(root: str | Path) -> WorkspaceSettings:
    """
    Read workspace keyword settings.

    An unreadable or malformed file is logged and treated as absent, so the
    built-in keywords apply.
    """
    root = Path(root)
    settings = WorkspaceSettings(root=root)
    config_path = find_config_file(root)
    if config_path is None:
        return settings

    settings.config_path = config_path
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Cannot read %s: %s", config_path, e)
        return settings

    if isinstance(data, dict):
        settings.keywords = extract_keyword_items(data)
    return settings
