"""
Content normalization for exa-mcp
Turns raw upstream content (HTML, text or JSON) into markdown, degrading to the
cleaned input whenever the conversion backend is missing or misbehaves
"""
import asyncio
import json
import logging
import re
from typing import Any, Optional

from exa_mcp.cleaner import clean
from exa_mcp.conversion.gateway import MarkdownGateway
from exa_mcp.core_types import Converted, NormalizedContent

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_LIMIT = 200
ELLIPSIS = "..."

_MARKER_RE = re.compile(r'[#*`]')
_NEWLINE_RUN_RE = re.compile(r'[ \t]*(?:\r?\n[ \t]*)+')


def is_html_mime(mime_hint: Optional[str]) -> bool:
    return 'html' in (mime_hint or '').lower()


async def normalize(
    text: Optional[str],
    mime_hint: str = "text/html",
    gateway: Optional[MarkdownGateway] = None,
    name: str = "content",
) -> NormalizedContent:
    """Produce markdown for one content item.

    Args:
        text: Raw content; may be HTML, plain text, empty or None
        mime_hint: MIME type of `text` ("text/html" triggers cleaning)
        gateway: Conversion gateway; a gateway without backend is used if omitted
        name: Document name handed to the backend (e.g. the source URL)

    Returns:
        NormalizedContent whose markdown is non-empty whenever `text` is
    """
    if text is None:
        return NormalizedContent(markdown="", used_fallback=True)
    if not text.strip():
        return NormalizedContent(markdown=text, used_fallback=True)

    gateway = gateway or MarkdownGateway()

    # Cleaning is CPU bound on large pages; run it off the event loop
    processed = await asyncio.to_thread(clean, text) if is_html_mime(mime_hint) else text
    if not processed.strip():
        # Cleaning removed everything; the raw text is still better than nothing
        processed = text

    outcome = await gateway.convert(processed.encode('utf-8'), mime_hint, name=name)
    if isinstance(outcome, Converted):
        return NormalizedContent(markdown=outcome.markdown, used_fallback=False)

    logger.debug(f"Using fallback content for {name}: {outcome}")
    return NormalizedContent(markdown=processed, used_fallback=True)


async def normalize_json(
    data: Any,
    gateway: Optional[MarkdownGateway] = None,
    name: str = "content",
) -> NormalizedContent:
    """Normalize structured data by way of its indented JSON text."""
    json_text = data if isinstance(data, str) else json.dumps(data, indent=2, default=str, ensure_ascii=False)
    return await normalize(json_text, "text/plain", gateway=gateway, name=name)


def strip_markdown(markdown: Optional[str]) -> str:
    """Drop emphasis/heading/code markers and fold lines into one."""
    if not markdown:
        return ""
    flat = _MARKER_RE.sub('', markdown)
    flat = _NEWLINE_RUN_RE.sub(' ', flat)
    return flat.strip()


def summarize(markdown: Optional[str], limit: int = DEFAULT_SUMMARY_LIMIT) -> str:
    """Plain-text preview of at most `limit` characters plus an ellipsis.

    The ellipsis is appended only when the stripped text is longer than
    `limit`; text of exactly `limit` characters is returned whole.
    """
    limit = max(int(limit), 0)
    flat = strip_markdown(markdown)
    if len(flat) <= limit:
        return flat
    return flat[:limit].rstrip() + ELLIPSIS
