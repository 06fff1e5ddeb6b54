"""
Configuration for commanderv.

Settings are a plain key/value mapping: the defaults below, overlaid by an
optional ``v.config.json`` at the workspace root, overlaid by CLI flags.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .core import ConfigFileError

LOCAL_CONFIG_NAME = "v.config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "orderFilesBy": "treeOrder",
    "ignoreFile": ".gitignore",
    "ignoreSyntax": "literal",
    "projectTreeDepth": 3,
    "pruneProjectTree": False,
    "includeProjectTree": True,
    "commentAtFileBegin": "// Begin file: $file",
    "commentAtFileEnd": "// End file: $file",
    "includeSeparator": True,
    "separatorCharacter": "-",
    "separatorLength": 80,
    "wrapInCodeBlock": False,
}


def merge_configurations(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay *override* on *base*; neither input is modified."""
    return {**base, **override}


def load_local_config(root: Path, name: str = LOCAL_CONFIG_NAME) -> Dict[str, Any]:
    config_path = Path(root) / name
    if not config_path.exists():
        return {}
    if not config_path.is_file():
        raise ConfigFileError(f"'{config_path}' is not a file")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(f"Could not read config file '{config_path}': {e}")
    except json.JSONDecodeError as e:
        raise ConfigFileError(f"Config file '{config_path}' is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file '{config_path}' must hold a JSON object")
    return data


def load_config(root: Path, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Defaults merged with the local config (or an explicit *config_path*)."""
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigFileError(f"Config file '{config_path}' does not exist")
        local = load_local_config(config_path.parent, config_path.name)
    else:
        local = load_local_config(root)
    return merge_configurations(DEFAULT_CONFIG, local)
