from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import anyio
import httpx
from mcp import ClientSession, types
from mcp.client.streamable_http import streamable_http_client

from ..core.errors import ConfigurationError, ConnectionFailure, ProtocolFailure
from ..core.headers import merge_request_headers
from ..core.log import get_logger

logger = get_logger("fetcher")

CLIENT_NAME = "generate-x-mcp"
CLIENT_VERSION = "1.0.0"

# Phases before this point are connection problems, the rest protocol problems.
_CONNECT_PHASES = ("stream_open", "initialize", "settle")


@dataclass(frozen=True)
class FetchResult:
    tools: list[dict[str, Any]] = field(default_factory=list)
    capabilities: dict[str, Any] = field(default_factory=dict)


def validate_server_url(server_url: str) -> str:
    parsed = urlparse(server_url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Server URL must be an absolute http(s) URL, got {server_url!r}")
    return server_url


def _dump_model(model: Any) -> dict[str, Any]:
    if model is None:
        return {}
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _header_hook(extra: Mapping[str, str]):
    """httpx request hook that applies the caller's headers and defaults."""

    async def _inject(request: httpx.Request) -> None:
        merged = merge_request_headers(dict(request.headers), extra)
        for key, value in merged.items():
            request.headers[key] = value

    return _inject


def _unwrap_group(exc: BaseException) -> BaseException:
    """Task groups wrap a single transport error; report the error itself."""
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return exc


async def _list_all_tools(session: ClientSession) -> list[types.Tool]:
    tools: list[types.Tool] = []
    cursor: Optional[str] = None
    while True:
        result = await session.list_tools(cursor=cursor) if cursor else await session.list_tools()
        tools.extend(result.tools)
        cursor = result.nextCursor
        if not cursor:
            return tools
        logger.debug("tools/list has more pages, cursor=%s", cursor)


async def fetch_capabilities(
    server_url: str,
    headers: Optional[Mapping[str, str]] = None,
    *,
    timeout: float = 30.0,
    settle_delay: float = 0.0,
) -> FetchResult:
    """
    Connect to an MCP server over streamable HTTP, list its tools and read
    the capabilities it declared during initialize.

    The session counts as ready once initialize has been acknowledged;
    `settle_delay` adds an extra fixed wait after that for servers that
    need it. Every context is closed on the way out, including on errors.
    """
    validate_server_url(server_url)
    extra = dict(headers or {})

    phase = "stream_open"
    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            event_hooks={"request": [_header_hook(extra)]},
        ) as http_client:
            logger.info("connecting to %s", server_url)
            async with streamable_http_client(server_url, http_client=http_client) as (
                read_stream,
                write_stream,
                _get_session_id,
            ):
                client_info = types.Implementation(name=CLIENT_NAME, version=CLIENT_VERSION)
                async with ClientSession(read_stream, write_stream, client_info=client_info) as session:
                    phase = "initialize"
                    init = await session.initialize()
                    logger.info(
                        "connected to %s %s (protocol %s)",
                        init.serverInfo.name,
                        init.serverInfo.version,
                        init.protocolVersion,
                    )

                    if settle_delay > 0:
                        phase = "settle"
                        logger.debug("waiting %.2fs before reading", settle_delay)
                        await anyio.sleep(settle_delay)

                    phase = "list_tools"
                    tools = await _list_all_tools(session)
                    logger.info("server reported %d tool(s)", len(tools))

                    phase = "capabilities"
                    capabilities = _dump_model(init.capabilities)

                    return FetchResult(
                        tools=[_dump_model(t) for t in tools],
                        capabilities=capabilities,
                    )
    except Exception as e:  # noqa: BLE001
        cause = _unwrap_group(e)
        detail = f"phase={phase} error_type={type(cause).__name__}: {cause}"
        if phase in _CONNECT_PHASES:
            raise ConnectionFailure(f"Cannot connect to {server_url}: {detail}") from cause
        raise ProtocolFailure(f"Request to {server_url} failed: {detail}") from cause
