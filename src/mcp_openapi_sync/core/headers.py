from __future__ import annotations

from typing import Iterable, Mapping, Optional

from .log import get_logger

logger = get_logger("headers")

HEADER_SEPARATOR = ": "

DEFAULT_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


def parse_headers(values: Optional[Iterable[object]]) -> dict[str, str]:
    """
    Turn repeated "Key: Value" flags into a header mapping.
    Entries without a separator, key or value are dropped.
    """
    headers: dict[str, str] = {}
    for raw in values or ():
        if not isinstance(raw, str):
            continue

        key, sep, value = raw.partition(HEADER_SEPARATOR)
        if not sep or not key or not value:
            logger.debug("ignoring malformed header %r", raw)
            continue

        headers[key] = value
    return headers


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(k.lower() == lowered for k in headers)


def merge_request_headers(existing: Mapping[str, str], extra: Mapping[str, str]) -> dict[str, str]:
    """
    Overlay the caller's headers on a request's own headers, then fill in
    Accept / Content-Type only where neither side set them.
    """
    merged: dict[str, str] = {}
    for source in (existing, extra):
        for key, value in source.items():
            for k in [k for k in merged if k.lower() == key.lower()]:
                del merged[k]
            merged[key] = value

    for key, value in DEFAULT_HEADERS.items():
        if not _has_header(merged, key):
            merged[key] = value
    return merged
