"""Exa search and content tools for MCP hosts, with LLM-ready markdown output."""

__version__ = "3.1.3"
