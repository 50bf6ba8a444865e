"""
Result aggregation for exa-mcp
Builds one bounded, ordered markdown document from a list of search results
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence, Tuple

from exa_mcp.conversion.gateway import MarkdownGateway
from exa_mcp.errors import ItemRenderError
from exa_mcp.markdown import DEFAULT_SUMMARY_LIMIT, ELLIPSIS, normalize, summarize
from exa_mcp.models import ContentItem
from exa_mcp.core_types import AggregatedDocument

logger = logging.getLogger(__name__)

MAX_DISPLAY_RESULTS = 10
FALLBACK_SNIPPET_CHARS = 200


def no_results_message(query: str) -> str:
    return f'No search results found for "{query}".'


def format_published_date(value: Optional[str]) -> Optional[str]:
    """Render an ISO timestamp as e.g. "Mar 5, 2024"; unparseable input is kept as-is."""
    if not value:
        return None
    raw = value.strip()
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw or None
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


async def render_item(
    item: ContentItem,
    gateway: Optional[MarkdownGateway] = None,
    summary_limit: int = DEFAULT_SUMMARY_LIMIT,
) -> str:
    """Render one result section; any failure is raised as ItemRenderError."""
    try:
        normalized = await normalize(item.text, "text/html", gateway=gateway, name=item.url or "content")
        preview = summarize(normalized.markdown, summary_limit)

        lines = [f"### [{item.display_title}]({item.url or ''})\n"]
        if item.author:
            lines.append(f"**Author:** {item.author}  \n")
        published = format_published_date(item.published_date)
        if published:
            lines.append(f"**Published:** {published}  \n")
        lines.append(f"{preview}\n\n")
        return "".join(lines)
    except Exception as e:
        raise ItemRenderError(getattr(item, "id", None), e) from e


def render_minimal(item: ContentItem) -> str:
    """Title/link plus a hard slice of raw text; must not fail."""
    title = getattr(item, "title", None) or getattr(item, "url", None) or "Untitled"
    url = getattr(item, "url", None) or ""
    raw = getattr(item, "text", None)
    raw = raw if isinstance(raw, str) else ""
    snippet = raw[:FALLBACK_SNIPPET_CHARS]
    if len(raw) > FALLBACK_SNIPPET_CHARS:
        snippet += ELLIPSIS
    return f"### [{title}]({url})\n{snippet}\n\n"


async def _render_isolated(
    item: ContentItem,
    gateway: Optional[MarkdownGateway],
    summary_limit: int,
) -> Tuple[str, bool]:
    try:
        return await render_item(item, gateway, summary_limit), False
    except ItemRenderError as e:
        logger.error(f"Error processing result {e.item_id}: {e.cause}")
        return render_minimal(item), True


async def aggregate(
    items: Optional[Sequence[ContentItem]],
    query: str,
    gateway: Optional[MarkdownGateway] = None,
    summary_limit: int = DEFAULT_SUMMARY_LIMIT,
    max_results: int = MAX_DISPLAY_RESULTS,
) -> AggregatedDocument:
    """Compose search results into one markdown document.

    Args:
        items: Results in upstream relevance order (never re-sorted)
        query: The original search query, echoed in the header
        gateway: Conversion gateway used to normalize each result
        summary_limit: Preview length per result
        max_results: Display cap; the remainder is reported as a count

    Returns:
        AggregatedDocument with the markdown and rendering counts
    """
    items = list(items or [])
    if not items:
        return AggregatedDocument(markdown=no_results_message(query))

    shown = items[:max_results]
    omitted = len(items) - len(shown)

    # Each item is normalized concurrently; gather keeps input order.
    sections = await asyncio.gather(
        *(_render_isolated(item, gateway, summary_limit) for item in shown)
    )

    parts = [f'## Search Results for "{query}"\n\n']
    parts.extend(text for text, _ in sections)
    if omitted > 0:
        parts.append(f"*And {omitted} more results...*\n\n")

    degraded = sum(1 for _, failed in sections if failed)
    if degraded:
        logger.warning(f"{degraded} of {len(shown)} results fell back to minimal rendering")

    return AggregatedDocument(
        markdown="".join(parts),
        rendered=len(shown),
        omitted=omitted,
        degraded=degraded,
    )
