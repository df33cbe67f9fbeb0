from __future__ import annotations

import copy
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import DocumentError

DEFAULT_DOCUMENT: dict[str, Any] = {
    "openapi": "3.1.0",
    "info": {
        "title": "Example MCP API",
        "description": "Example MCP API description",
        "version": "1.0.0",
        "termsOfService": "https://redocly.com/subscription-agreement/",
        "contact": {
            "email": "example@example.com",
            "url": "https://example.com",
        },
    },
    "paths": {},
    "components": {
        "securitySchemes": {},
    },
    "security": [],
}


def default_document() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_DOCUMENT)


def load_document(path: Path) -> Optional[dict[str, Any]]:
    """
    Read the YAML document at `path`.
    Returns None when the file does not exist.
    """
    if not path.exists():
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise DocumentError(f"Cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentError(f"{path} does not contain a YAML mapping")
    return data


def dump_document(document: dict[str, Any]) -> str:
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)


def save_document(path: Path, document: dict[str, Any]) -> None:
    """
    Rewrite the whole document. The text goes to a temp file beside `path`
    first and is then renamed over it.
    """
    try:
        text = dump_document(document)
    except yaml.YAMLError as e:
        raise DocumentError(f"Cannot serialize document for {path}: {e}") from e

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DocumentError(f"Cannot write {path}: {e}") from e
