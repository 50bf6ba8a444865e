"""Shared plumbing for tool handlers: response shape and per-call context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from exa_mcp.config import Settings
from exa_mcp.conversion.gateway import MarkdownGateway
from exa_mcp.errors import UpstreamError
from exa_mcp.exa_client import ExaClient


@dataclass(frozen=True)
class ToolResponse:
    """What a handler hands back to the MCP layer."""
    text: str
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResponse":
        return cls(text=text)

    @classmethod
    def failure(cls, text: str) -> "ToolResponse":
        return cls(text=text, is_error=True)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            payload["isError"] = True
        return payload


def error_response(label: str, exc: BaseException) -> ToolResponse:
    """Format a handler failure; upstream errors carry their status code."""
    if isinstance(exc, UpstreamError):
        return ToolResponse.failure(f"{label} error ({exc.status_label}): {exc}")
    return ToolResponse.failure(f"{label} error: {exc}")


def _default_client_factory(settings: Settings) -> Callable[[str], ExaClient]:
    def factory(integration: str) -> ExaClient:
        return ExaClient.from_settings(settings, integration=integration)
    return factory


@dataclass
class ToolContext:
    """Dependencies handed to every handler.

    A fresh ExaClient is opened per call; the gateway is stateless and shared.
    """
    settings: Settings
    gateway: MarkdownGateway = field(default_factory=MarkdownGateway)
    client_factory: Optional[Callable[[str], ExaClient]] = None

    def open_client(self, integration: str) -> ExaClient:
        factory = self.client_factory or _default_client_factory(self.settings)
        return factory(integration)
