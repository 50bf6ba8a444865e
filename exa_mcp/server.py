"""
Exa MCP Server
==============

Exposes Exa search and content tools to any MCP-compatible host. Every tool
returns markdown sized for an LLM context window.

Tools (default-enabled marked *):
  - web_search_exa *: real-time web search, results aggregated to markdown
  - get_code_context_exa *: code snippets and docs from open source repos
  - deep_search_exa: deep search with query expansion
  - crawling_exa: fetch one URL and convert it to markdown
  - deep_researcher_start / deep_researcher_check: long-running research
  - linkedin_search_exa: LinkedIn profiles and companies
  - company_research_exa: company and organization research

Resources:
  - exa://tools/list: the tool catalog as JSON, with each tool's enabled state

Env/config:
  - EXA_API_KEY              Exa API key
  - ENABLED_TOOLS            comma-separated tool ids (overrides defaults)
  - DEBUG                    verbose logging
  - MARKDOWN_BACKEND         auto | cloudflare | local | none
  - CLOUDFLARE_ACCOUNT_ID / CLOUDFLARE_API_TOKEN   Workers AI toMarkdown
  - MCP_TRANSPORT            stdio (default) | sse | streamable-http
"""

import json
import logging
from typing import Annotated, Callable, Dict, FrozenSet, List, Literal, Optional, Union

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from exa_mcp import __version__, config
from exa_mcp.config import Settings, configure_logging
from exa_mcp.conversion import MarkdownGateway, create_backend_from_config
from exa_mcp.tools import catalog
from exa_mcp.tools.base import ToolContext, ToolResponse
from exa_mcp.tools.code_tools import code_context
from exa_mcp.tools.crawl_tools import crawl
from exa_mcp.tools.research_tools import research_check, research_start
from exa_mcp.tools.search_tools import company_research, deep_search, linkedin_search, web_search

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)


def _unwrap(response: ToolResponse) -> str:
    """Map a handler response onto the MCP result; errors become isError results."""
    if response.is_error:
        raise ToolError(response.text)
    return response.text


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def _register_web_search(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.WEB_SEARCH,
        description=(
            "Search the web using Exa AI - performs real-time web searches and can scrape content "
            "from specific URLs. Supports configurable result counts and returns the content from "
            "the most relevant websites as clean markdown."
        ),
        annotations=READ_ONLY,
    )
    async def web_search_exa(
        query: Annotated[str, Field(description="Websearch query")],
        numResults: Annotated[Optional[int], Field(description="Number of search results to return (default: 8)")] = None,
        livecrawl: Annotated[
            Optional[Literal["fallback", "preferred"]],
            Field(description="Live crawl mode - 'fallback': live crawl when cached content is unavailable, 'preferred': prioritize live crawling"),
        ] = None,
        type: Annotated[
            Optional[Literal["auto", "fast", "deep"]],
            Field(description="Search type - 'auto' (default), 'fast' or 'deep'"),
        ] = None,
        contextMaxCharacters: Annotated[
            Optional[int],
            Field(description="Maximum characters for the LLM context string (default: 10000)"),
        ] = None,
    ) -> str:
        return _unwrap(await web_search(ctx, query, numResults, livecrawl, type, contextMaxCharacters))


def _register_deep_search(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.DEEP_SEARCH,
        description="Deep web search using Exa AI - expands the query and returns high-quality summaries of the best results.",
        annotations=READ_ONLY,
    )
    async def deep_search_exa(
        query: Annotated[str, Field(description="Search query")],
        numResults: Annotated[Optional[int], Field(description="Number of results to return (default: 8)")] = None,
    ) -> str:
        return _unwrap(await deep_search(ctx, query, numResults))


def _register_company_research(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.COMPANY_RESEARCH,
        description="Research companies using Exa AI - finds company websites, news and business information.",
        annotations=READ_ONLY,
    )
    async def company_research_exa(
        companyName: Annotated[str, Field(description="Name of the company to research")],
        numResults: Annotated[Optional[int], Field(description="Number of results to return (default: 5)")] = None,
    ) -> str:
        return _unwrap(await company_research(ctx, companyName, numResults))


def _register_crawling(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.CRAWLING,
        description=(
            "Extract and crawl content from specific URLs using Exa AI - retrieves full text content "
            "from web pages, automatically converted to clean markdown. Ideal for known URLs."
        ),
        annotations=READ_ONLY,
    )
    async def crawling_exa(
        url: Annotated[str, Field(description="URL to crawl and extract content from")],
        maxCharacters: Annotated[Optional[int], Field(description="Maximum characters to extract (default: 3000)")] = None,
    ) -> str:
        return _unwrap(await crawl(ctx, url, maxCharacters))


def _register_linkedin_search(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.LINKEDIN_SEARCH,
        description="Search LinkedIn profiles and company pages using Exa AI.",
        annotations=READ_ONLY,
    )
    async def linkedin_search_exa(
        query: Annotated[str, Field(description="Person, role or company to look up on LinkedIn")],
        numResults: Annotated[Optional[int], Field(description="Number of results to return (default: 5)")] = None,
    ) -> str:
        return _unwrap(await linkedin_search(ctx, query, numResults))


def _register_research_start(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.DEEP_RESEARCHER_START,
        description=(
            "Start a comprehensive AI research task. Returns a task ID; poll it with "
            f"{catalog.DEEP_RESEARCHER_CHECK} until the report is ready."
        ),
        annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True),
    )
    async def deep_researcher_start(
        instructions: Annotated[str, Field(description="What to research, in as much detail as possible")],
        model: Annotated[
            Optional[Literal["exa-research", "exa-research-pro"]],
            Field(description="'exa-research' (default) or the slower, more thorough 'exa-research-pro'"),
        ] = None,
    ) -> str:
        return _unwrap(await research_start(ctx, instructions, model))


def _register_research_check(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.DEEP_RESEARCHER_CHECK,
        description="Check the status of a research task and retrieve its report once completed.",
        annotations=READ_ONLY,
    )
    async def deep_researcher_check(
        taskId: Annotated[str, Field(description=f"Task ID returned by {catalog.DEEP_RESEARCHER_START}")],
    ) -> str:
        return _unwrap(await research_check(ctx, taskId))


def _register_code_context(mcp: FastMCP, ctx: ToolContext) -> None:
    @mcp.tool(
        name=catalog.CODE_CONTEXT,
        description=(
            "Search for code snippets, examples and documentation from open source repositories. "
            "Use for any programming question about libraries, APIs or SDKs."
        ),
        annotations=READ_ONLY,
    )
    async def get_code_context_exa(
        query: Annotated[str, Field(description="Programming question or topic, e.g. 'React useState hook examples'")],
        tokensNum: Annotated[
            Union[Literal["dynamic"], Annotated[int, Field(ge=1000, le=50000)], None],
            Field(description="'dynamic' (default) or a token budget between 1000 and 50000"),
        ] = None,
    ) -> str:
        return _unwrap(await code_context(ctx, query, tokensNum))


# Registration order follows the catalog.
REGISTRARS: Dict[str, Callable[[FastMCP, ToolContext], None]] = {
    catalog.WEB_SEARCH: _register_web_search,
    catalog.DEEP_SEARCH: _register_deep_search,
    catalog.COMPANY_RESEARCH: _register_company_research,
    catalog.CRAWLING: _register_crawling,
    catalog.LINKEDIN_SEARCH: _register_linkedin_search,
    catalog.DEEP_RESEARCHER_START: _register_research_start,
    catalog.DEEP_RESEARCHER_CHECK: _register_research_check,
    catalog.CODE_CONTEXT: _register_code_context,
}


def register_tools(mcp: FastMCP, ctx: ToolContext, active: FrozenSet[str]) -> List[str]:
    """Register every active tool that has a handler; return their ids."""
    registered = []
    for tool_id, registrar in REGISTRARS.items():
        if tool_id in active:
            registrar(mcp, ctx)
            registered.append(tool_id)

    unknown = sorted(active - set(REGISTRARS))
    if unknown:
        logger.warning(f"Ignoring unknown tool ids in ENABLED_TOOLS: {', '.join(unknown)}")
    return registered


TOOLS_LIST_URI = "exa://tools/list"


def tools_list_json(registered: List[str]) -> str:
    """The catalog as JSON, each entry flagged with whether it is registered."""
    return json.dumps(
        [
            {
                "id": tool_id,
                "name": cap.display_name,
                "description": cap.description,
                "enabled": tool_id in registered,
            }
            for tool_id, cap in catalog.TOOL_CATALOG.items()
        ],
        indent=2,
    )


def _register_tools_resource(mcp: FastMCP, registered: List[str]) -> None:
    @mcp.resource(
        TOOLS_LIST_URI,
        name="tools_list",
        description="List of available Exa tools and their descriptions",
        mime_type="application/json",
    )
    def tools_list() -> str:
        return tools_list_json(registered)


def build_server(settings: Optional[Settings] = None, ctx: Optional[ToolContext] = None) -> FastMCP:
    """Create the FastMCP server with the tools this deployment enables."""
    settings = settings or config.settings
    activation = settings.build_activation_config()

    if activation.debug:
        logger.debug("Starting Exa MCP Server in debug mode")
        if activation.explicit_enabled_ids:
            logger.debug(f"Enabled tools from config: {', '.join(activation.explicit_enabled_ids)}")

    if ctx is None:
        gateway = MarkdownGateway(
            create_backend_from_config(settings),
            timeout_s=settings.conversion_timeout,
        )
        ctx = ToolContext(settings=settings, gateway=gateway)
    logger.info(
        f"Markdown conversion backend: {ctx.gateway.backend.name} "
        f"({'available' if ctx.gateway.available else 'unavailable, using cleaned text'})"
    )

    mcp = FastMCP("exa-search-server")
    active = catalog.resolve_active_tools(catalog.TOOL_CATALOG, activation.explicit_enabled_ids)
    registered = register_tools(mcp, ctx, active)
    _register_tools_resource(mcp, registered)

    if activation.debug:
        logger.debug(f"Registered {len(registered)} tools: {', '.join(registered)}")
    logger.info(f"Exa MCP Server {__version__} ready with {len(registered)} tools")
    return mcp


def main() -> None:
    settings = config.settings
    configure_logging(settings.debug)
    if not settings.exa_api_key:
        logger.warning("EXA_API_KEY is not set; Exa API calls will be rejected")
    mcp = build_server(settings)
    mcp.run(transport=settings.mcp_transport)


if __name__ == "__main__":
    main()
