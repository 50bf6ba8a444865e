"""Core type primitives for the normalization pipeline and tool activation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Conversion outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Converted:
    """The backend produced markdown."""
    markdown: str


@dataclass(frozen=True)
class Unavailable:
    """No conversion backend is configured; nothing was attempted."""


@dataclass(frozen=True)
class Failed:
    """The backend was called and the attempt is final."""
    reason: str


ConversionOutcome = Union[Converted, Unavailable, Failed]


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NormalizedContent:
    """Per-item output of the normalizer."""
    markdown: str
    used_fallback: bool


@dataclass(frozen=True)
class AggregatedDocument:
    """Capped, ordered markdown document built from a result list."""
    markdown: str
    rendered: int = 0
    omitted: int = 0
    degraded: int = 0

    def __str__(self):
        return self.markdown


# ---------------------------------------------------------------------------
# Tool activation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ToolCapability:
    """Static catalog entry for one MCP tool."""
    id: str
    display_name: str
    description: str
    enabled_by_default: bool = False


@dataclass(frozen=True)
class ActivationConfig:
    """Tool selection derived once from settings."""
    explicit_enabled_ids: Optional[Tuple[str, ...]] = None
    debug: bool = False
