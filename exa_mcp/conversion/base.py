"""Base backend interface and factory for markdown conversion.

Every backend must implement `MarkdownBackend`. The factory function
`create_backend()` returns the right one by name; `create_backend_from_config()`
reads settings and resolves the "auto" choice.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from exa_mcp.errors import ConversionUnavailable

logger = logging.getLogger(__name__)


class MarkdownBackend(ABC):
    """Abstract interface that every conversion backend must satisfy."""

    name: str = "backend"

    @property
    def available(self) -> bool:
        """Whether a call can be attempted at all."""
        return True

    @abstractmethod
    async def to_markdown(
        self,
        name: str,
        content: bytes,
        mime_type: str,
    ) -> Optional[List[Dict[str, Any]]]:
        """Convert one named document.

        Args:
            name: Document name sent to the backend (e.g. the source URL).
            content: Raw document bytes.
            mime_type: MIME type of `content`.

        Returns:
            A list of ``{"format": ..., "data": ...}`` records, or None.
        """
        ...


class NullBackend(MarkdownBackend):
    """Stands in when no conversion service is deployed."""

    name = "none"

    @property
    def available(self) -> bool:
        return False

    async def to_markdown(self, name: str, content: bytes, mime_type: str) -> Optional[List[Dict[str, Any]]]:
        raise ConversionUnavailable("No markdown conversion backend configured")


def create_backend(backend_name: str = "none", **kwargs) -> MarkdownBackend:
    """Factory: create a conversion backend by name.

    Args:
        backend_name: "cloudflare", "local" or "none"
        **kwargs: Forwarded to the backend constructor (account_id, api_token, ...)

    Returns:
        A MarkdownBackend instance.
    """
    name = (backend_name or "none").lower().strip()

    if name == "cloudflare":
        from exa_mcp.conversion.cloudflare import CloudflareBackend
        return CloudflareBackend(**kwargs)
    elif name == "local":
        from exa_mcp.conversion.local import LocalBackend
        return LocalBackend()
    elif name in ("none", "null", "off"):
        return NullBackend()
    else:
        raise ValueError(f"Unknown markdown backend: {backend_name!r} (expected cloudflare, local, or none)")


def create_backend_from_config(settings) -> MarkdownBackend:
    """Build a MarkdownBackend from app settings."""
    choice = (settings.markdown_backend or "auto").lower().strip()
    if choice == "auto":
        choice = "cloudflare" if settings.has_cloudflare_credentials() else "none"
        logger.debug(f"Markdown backend 'auto' resolved to '{choice}'")

    if choice == "cloudflare":
        return create_backend(
            "cloudflare",
            account_id=settings.cloudflare_account_id,
            api_token=settings.cloudflare_api_token,
            timeout_s=settings.conversion_timeout,
        )
    return create_backend(choice)
