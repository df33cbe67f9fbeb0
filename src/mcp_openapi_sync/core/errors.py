from __future__ import annotations


class SyncError(Exception):
    """Base class for every failure that aborts a sync run."""


class ConfigurationError(SyncError):
    """Missing or invalid input, detected before any I/O."""


class ConnectionFailure(SyncError):
    """The MCP server could not be reached or the handshake failed."""


class ProtocolFailure(SyncError):
    """Listing tools or reading capabilities failed."""


class DocumentError(SyncError):
    """The document could not be read, parsed or written."""
