"""Markdown conversion gateway.

Wraps a `MarkdownBackend` and turns every possible result of calling it into
a `ConversionOutcome`. Callers never see backend exceptions; one attempt per
document, no retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from exa_mcp.conversion.base import MarkdownBackend, NullBackend
from exa_mcp.core_types import ConversionOutcome, Converted, Failed, Unavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 20.0


class MarkdownGateway:
    """Capability-gated front for the optional conversion service."""

    def __init__(self, backend: Optional[MarkdownBackend] = None, timeout_s: float = DEFAULT_TIMEOUT_S):
        self.backend = backend or NullBackend()
        self.timeout_s = timeout_s

    @property
    def available(self) -> bool:
        return self.backend.available

    async def convert(self, content: bytes, mime_type: str, name: str = "content") -> ConversionOutcome:
        """Convert one document, never raising (cancellation excepted)."""
        if not self.available:
            return Unavailable()

        try:
            records = await asyncio.wait_for(
                self.backend.to_markdown(name, content, mime_type),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Markdown conversion of {name} timed out after {self.timeout_s}s")
            return Failed(f"timed out after {self.timeout_s}s")
        except Exception as e:
            logger.warning(f"Markdown conversion of {name} failed: {e}")
            return Failed(str(e) or e.__class__.__name__)

        outcome = outcome_from_records(records)
        if isinstance(outcome, Failed):
            logger.info(f"Markdown conversion of {name} rejected: {outcome.reason}")
        return outcome


def outcome_from_records(records: Any) -> ConversionOutcome:
    """Validate a backend response; anything off-shape is a failure."""
    if not isinstance(records, list) or not records:
        return Failed("empty response")

    first = records[0]
    if not isinstance(first, dict):
        return Failed("malformed record")

    fmt = first.get("format")
    if fmt != "markdown":
        return Failed(f"unexpected format {fmt!r}")

    data = first.get("data")
    if not isinstance(data, str) or not data.strip():
        return Failed("empty markdown")

    return Converted(data)
