from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping, Optional

from ..core.document import default_document

EXTENSION_KEY = "x-mcp"

# Fields curated by hand in the document; the server never reports them.
LOCAL_TOOL_FIELDS = ("tags", "security")


def ensure_server(document: dict[str, Any], server_url: str) -> list[dict[str, Any]]:
    """Append {url: server_url} to `servers` unless an entry already has it."""
    servers = document.get("servers") or []
    document["servers"] = servers

    if not any(isinstance(s, Mapping) and s.get("url") == server_url for s in servers):
        servers.append({"url": server_url})
    return servers


def ensure_extension(document: dict[str, Any]) -> dict[str, Any]:
    block = document.get(EXTENSION_KEY)
    if not isinstance(block, dict):
        block = {}
        document[EXTENSION_KEY] = block
    return block


def _index_by_name(tools: Optional[Iterable[Any]]) -> dict[str, Mapping[str, Any]]:
    index: dict[str, Mapping[str, Any]] = {}
    for tool in tools or []:
        if isinstance(tool, Mapping) and "name" in tool:
            index[tool["name"]] = tool
    return index


def merge_tools(
    prior_tools: Optional[Iterable[Any]],
    fetched_tools: Iterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """
    Build the new tool list from the fetched tools, in fetch order.

    A tool that was already documented keeps its local `tags` / `security`
    from the prior entry; tools no longer reported by the server are dropped.
    """
    prior = _index_by_name(prior_tools)

    merged: list[dict[str, Any]] = []
    for tool in fetched_tools:
        entry = dict(tool)
        existing = prior.get(entry.get("name"))
        if existing is not None:
            for key in LOCAL_TOOL_FIELDS:
                if key in existing:
                    entry[key] = copy.deepcopy(existing[key])
        merged.append(entry)
    return merged


def reconcile(
    existing: Optional[Mapping[str, Any]],
    server_url: str,
    fetched_tools: Iterable[Mapping[str, Any]],
    fetched_capabilities: Any,
) -> dict[str, Any]:
    """
    Merge one fetch into the document and return the result.

    Without an existing document the default skeleton is used. The input
    mapping is not modified.
    """
    document = default_document() if existing is None else copy.deepcopy(dict(existing))

    ensure_server(document, server_url)
    block = ensure_extension(document)

    merged = merge_tools(block.get("tools"), fetched_tools)
    block["capabilities"] = copy.deepcopy(fetched_capabilities)
    block["tools"] = merged
    return document
