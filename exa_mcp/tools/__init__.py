"""MCP tool handlers and the tool catalog.

Handlers take a `ToolContext` and return a `ToolResponse`; they never raise.
"""

from exa_mcp.tools.catalog import TOOL_CATALOG, parse_enabled_tools, resolve_active_tools

__all__ = [
    "TOOL_CATALOG",
    "parse_enabled_tools",
    "resolve_active_tools",
]
