"""Search tools: web, deep, company and LinkedIn search.

All four issue one /search call and render the results through the
aggregator, so they share `_run_search`.
"""

from typing import Callable, Optional

from exa_mcp.aggregate import aggregate
from exa_mcp.models import ContentsOptions, ContextOptions, SearchRequest
from exa_mcp.observability import RequestLogger
from exa_mcp.tools.base import ToolContext, ToolResponse, error_response
from exa_mcp.tools.catalog import COMPANY_RESEARCH, DEEP_SEARCH, LINKEDIN_SEARCH, WEB_SEARCH


async def _run_search(
    ctx: ToolContext,
    tool_name: str,
    integration: str,
    build_request: Callable[[], SearchRequest],
    display_query: str,
) -> ToolResponse:
    request_log = RequestLogger(tool_name)
    request_log.start(display_query)

    try:
        request = build_request()
        async with ctx.open_client(integration) as client:
            request_log.log("Sending request to Exa API")
            response = await client.search(request)

        request_log.log(f"Received {len(response.results)} search results")
        document = await aggregate(response.results, display_query, gateway=ctx.gateway)
        request_log.debug(
            f"Rendered {document.rendered} results "
            f"({document.omitted} omitted, {document.degraded} degraded)"
        )
        request_log.complete()
        return ToolResponse.success(document.markdown)
    except Exception as e:
        request_log.error(e)
        return error_response("Search", e)


async def web_search(
    ctx: ToolContext,
    query: str,
    num_results: Optional[int] = None,
    livecrawl: Optional[str] = None,
    search_type: Optional[str] = None,
    context_max_characters: Optional[int] = None,
) -> ToolResponse:
    """Real-time web search with text contents for every result."""
    settings = ctx.settings
    return await _run_search(
        ctx,
        WEB_SEARCH,
        "web-search-mcp",
        lambda: SearchRequest(
            query=query,
            type=search_type or "auto",
            num_results=num_results or settings.default_num_results,
            contents=ContentsOptions(
                text=True,
                context=ContextOptions(
                    max_characters=context_max_characters or settings.default_context_max_characters,
                ),
                livecrawl=livecrawl or "fallback",
            ),
        ),
        query,
    )


async def deep_search(ctx: ToolContext, query: str, num_results: Optional[int] = None) -> ToolResponse:
    """Deep search: query expansion on the Exa side, summaries per result."""
    return await _run_search(
        ctx,
        DEEP_SEARCH,
        "deep-search-mcp",
        lambda: SearchRequest(
            query=query,
            type="deep",
            num_results=num_results or ctx.settings.default_num_results,
            contents=ContentsOptions(text=True, summary=True, livecrawl="fallback"),
        ),
        query,
    )


async def company_research(ctx: ToolContext, company_name: str, num_results: Optional[int] = None) -> ToolResponse:
    """Search restricted to Exa's company category."""
    return await _run_search(
        ctx,
        COMPANY_RESEARCH,
        "company-research-mcp",
        lambda: SearchRequest(
            query=f"{company_name} company",
            num_results=num_results or 5,
            category="company",
            contents=ContentsOptions(text=True, livecrawl="fallback"),
        ),
        company_name,
    )


async def linkedin_search(ctx: ToolContext, query: str, num_results: Optional[int] = None) -> ToolResponse:
    """Search LinkedIn profiles and company pages."""
    return await _run_search(
        ctx,
        LINKEDIN_SEARCH,
        "linkedin-search-mcp",
        lambda: SearchRequest(
            query=f"{query} LinkedIn",
            num_results=num_results or 5,
            include_domains=["linkedin.com"],
            contents=ContentsOptions(text=True, livecrawl="fallback"),
        ),
        query,
    )
