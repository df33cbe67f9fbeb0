from __future__ import annotations

import argparse
import functools
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence

import anyio

from .core.config import load_settings
from .core.document import load_document, save_document
from .core.errors import SyncError
from .core.headers import parse_headers
from .core.log import configure_logging, get_logger
from .stages.fetcher import fetch_capabilities, validate_server_url
from .stages.reconciler import reconcile

logger = get_logger("cli")

CREATED_HINT = "⚠️ Please update the file with more information."


@dataclass(frozen=True)
class SyncOutcome:
    path: Path
    created: bool
    document: dict[str, Any]


def build_parser() -> argparse.ArgumentParser:
    """Flags left unset fall back to the MCP_OPENAPI_SYNC_* settings."""
    parser = argparse.ArgumentParser(
        prog="mcp-openapi-sync",
        description="Merge the tool listing of an MCP server into an OpenAPI document.",
    )
    parser.add_argument(
        "-f",
        "--openapi-file",
        default="openapi.yaml",
        help="Path to the OpenAPI specification file (default: %(default)s)",
    )
    parser.add_argument("-s", "--server-url", required=True, help="URL of the MCP server")
    parser.add_argument(
        "-H",
        "--header",
        dest="headers",
        action="extend",
        nargs="+",
        default=[],
        metavar="'KEY: VALUE'",
        help="Header to pass to the MCP server (repeatable)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="HTTP timeout in seconds (default: MCP_OPENAPI_SYNC_TIMEOUT or 30)",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        help="Extra wait in seconds after the handshake, before reading (default: MCP_OPENAPI_SYNC_SETTLE_DELAY or 0)",
    )
    parser.add_argument("--log-level", help="Logging level (default: MCP_OPENAPI_SYNC_LOG_LEVEL or WARNING)")
    return parser


def sync_document(
    openapi_file: str,
    server_url: str,
    header_values: Optional[List[str]] = None,
    *,
    timeout: float = 30.0,
    settle_delay: float = 0.0,
) -> SyncOutcome:
    """Fetch tools from the server and merge them into the document on disk."""
    validate_server_url(server_url)
    headers = parse_headers(header_values)

    result = anyio.run(
        functools.partial(
            fetch_capabilities,
            server_url,
            headers,
            timeout=timeout,
            settle_delay=settle_delay,
        )
    )

    path = Path(openapi_file).resolve()
    existing = load_document(path)
    document = reconcile(existing, server_url, result.tools, result.capabilities)

    print("capabilities", json.dumps(result.capabilities, indent=2, ensure_ascii=False))

    save_document(path, document)
    return SyncOutcome(path=path, created=existing is None, document=document)


def _pick(flag: Any, setting: Any) -> Any:
    return setting if flag is None else flag


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except SyncError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    configure_logging(_pick(args.log_level, settings.log_level))

    try:
        outcome = sync_document(
            args.openapi_file,
            args.server_url,
            args.headers,
            timeout=_pick(args.timeout, settings.timeout_s),
            settle_delay=_pick(args.settle_delay, settings.settle_delay_s),
        )
    except SyncError as e:
        logger.error("%s", e)
        return 1
    except Exception:
        logger.exception("unexpected failure")
        return 1

    if outcome.created:
        print(f"Successfully created {outcome.path}")
        print(CREATED_HINT)
    else:
        print(f"Successfully updated {outcome.path}")
    return 0
