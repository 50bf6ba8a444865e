"""Typed error hierarchy for the Exa MCP server.

Every error carries a machine-readable `code` so tool handlers never need to
parse exception messages. Only `UpstreamError` is ever surfaced to the MCP
caller; the conversion and rendering errors are recovered locally.
"""

from __future__ import annotations

from typing import Optional


class ExaMCPError(Exception):
    """Base for all server errors."""
    code: str = "exa_mcp_error"
    retriable: bool = False

    def __init__(self, message: str, *, code: Optional[str] = None, retriable: Optional[bool] = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        if retriable is not None:
            self.retriable = retriable


class UpstreamError(ExaMCPError):
    """The content API returned a non-success status or a malformed body."""
    code = "upstream_error"
    retriable = True

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code

    @property
    def status_label(self) -> str:
        return str(self.status_code) if self.status_code is not None else "unknown"


class ConversionUnavailable(ExaMCPError):
    """No markdown conversion backend is configured."""
    code = "conversion_unavailable"
    retriable = False


class ConversionFailed(ExaMCPError):
    """The conversion backend was called but did not produce markdown."""
    code = "conversion_failed"
    retriable = False


class ItemRenderError(ExaMCPError):
    """Formatting a single result item failed."""
    code = "item_render_error"
    retriable = False

    def __init__(self, item_id: Optional[str], cause: BaseException):
        super().__init__(f"Failed to render result {item_id or '<unknown>'}: {cause}")
        self.item_id = item_id
        self.cause = cause
