"""Markdown conversion backends and the gateway in front of them.

Usage:
    from exa_mcp.conversion import MarkdownGateway, create_backend_from_config

    gateway = MarkdownGateway(create_backend_from_config(settings))
    outcome = await gateway.convert(b"<p>hi</p>", "text/html")
"""

from exa_mcp.conversion.base import (
    MarkdownBackend,
    NullBackend,
    create_backend,
    create_backend_from_config,
)
from exa_mcp.conversion.gateway import MarkdownGateway

__all__ = [
    "MarkdownBackend",
    "NullBackend",
    "MarkdownGateway",
    "create_backend",
    "create_backend_from_config",
]
