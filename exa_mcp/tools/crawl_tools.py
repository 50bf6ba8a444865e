"""Crawling tool: fetch one URL through Exa and return clean markdown."""

from typing import Optional

from exa_mcp.markdown import normalize, normalize_json
from exa_mcp.models import ContentsOptions, ContentsRequest, TextOptions
from exa_mcp.observability import RequestLogger
from exa_mcp.tools.base import ToolContext, ToolResponse, error_response
from exa_mcp.tools.catalog import CRAWLING

NO_CONTENT_MESSAGE = "No content found for the provided URL."


async def crawl(ctx: ToolContext, url: str, max_characters: Optional[int] = None) -> ToolResponse:
    """Crawl a single URL with live crawling preferred.

    Args:
        ctx: Tool context
        url: The URL to crawl
        max_characters: Maximum characters of text to extract (default: 3000)

    Returns:
        ToolResponse with the page as markdown, or the raw response rendered
        as JSON when the page yielded no text
    """
    request_log = RequestLogger(CRAWLING)
    request_log.start(url)

    try:
        request = ContentsRequest(
            ids=[url],
            contents=ContentsOptions(
                text=TextOptions(max_characters=max_characters or ctx.settings.default_max_characters),
                livecrawl="preferred",
            ),
        )
        async with ctx.open_client("crawling-mcp") as client:
            request_log.log("Sending crawl request to Exa API")
            response = await client.contents(request)

        if not response.results:
            request_log.log("Warning: Empty or invalid response from Exa API")
            request_log.complete()
            return ToolResponse.success(NO_CONTENT_MESSAGE)

        page = response.results[0]
        if not (page.text or "").strip():
            request_log.log("No text content found, rendering raw response")
            rendered = await normalize_json(
                response.model_dump(by_alias=True, exclude_none=True),
                gateway=ctx.gateway,
                name=url,
            )
            request_log.complete()
            return ToolResponse.success(rendered.markdown)

        normalized = await normalize(page.text, "text/html", gateway=ctx.gateway, name=url)
        if normalized.used_fallback:
            request_log.log("Markdown conversion unavailable or failed, using cleaned text")
        else:
            request_log.log("Successfully converted content to markdown")
        request_log.complete()
        return ToolResponse.success(normalized.markdown)
    except Exception as e:
        request_log.error(e)
        return error_response("Crawling", e)
