"""Static tool catalog and activation resolution.

The catalog is built once at import time and exposed as a read-only mapping.
`resolve_active_tools()` is pure: callers pass the catalog in explicitly.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union

from exa_mcp.core_types import ToolCapability

WEB_SEARCH = "web_search_exa"
CODE_CONTEXT = "get_code_context_exa"
DEEP_SEARCH = "deep_search_exa"
CRAWLING = "crawling_exa"
DEEP_RESEARCHER_START = "deep_researcher_start"
DEEP_RESEARCHER_CHECK = "deep_researcher_check"
LINKEDIN_SEARCH = "linkedin_search_exa"
COMPANY_RESEARCH = "company_research_exa"


def _build_catalog(capabilities: Iterable[ToolCapability]) -> Mapping[str, ToolCapability]:
    return MappingProxyType({cap.id: cap for cap in capabilities})


TOOL_CATALOG: Mapping[str, ToolCapability] = _build_catalog([
    ToolCapability(
        id=WEB_SEARCH,
        display_name="Web Search (Exa)",
        description="Real-time web search using Exa AI",
        enabled_by_default=True,
    ),
    ToolCapability(
        id=CODE_CONTEXT,
        display_name="Code Context Search",
        description="Search for code snippets, examples, and documentation from open source repositories",
        enabled_by_default=True,
    ),
    ToolCapability(
        id=DEEP_SEARCH,
        display_name="Deep Search (Exa)",
        description="Advanced web search with query expansion and high-quality summaries",
    ),
    ToolCapability(
        id=CRAWLING,
        display_name="Web Crawling",
        description="Extract content from specific URLs",
    ),
    ToolCapability(
        id=DEEP_RESEARCHER_START,
        display_name="Deep Researcher Start",
        description="Start a comprehensive AI research task",
    ),
    ToolCapability(
        id=DEEP_RESEARCHER_CHECK,
        display_name="Deep Researcher Check",
        description="Check status and retrieve results of research task",
    ),
    ToolCapability(
        id=LINKEDIN_SEARCH,
        display_name="LinkedIn Search",
        description="Search LinkedIn profiles and companies",
    ),
    ToolCapability(
        id=COMPANY_RESEARCH,
        display_name="Company Research",
        description="Research companies and organizations",
    ),
])


def parse_enabled_tools(value: Union[str, Sequence[str], None]) -> Optional[List[str]]:
    """Normalize an ENABLED_TOOLS value into an ordered list of ids.

    Accepts a comma-separated string or a list. Entries are trimmed and
    blanks dropped. Returns None when nothing usable was given.
    """
    if value is None:
        return None
    if isinstance(value, str):
        raw = value.split(",")
    else:
        raw = list(value)
    tools = [str(t).strip() for t in raw if t is not None and str(t).strip()]
    return tools or None


def resolve_active_tools(
    catalog: Mapping[str, ToolCapability],
    explicit_list: Optional[Sequence[str]] = None,
) -> FrozenSet[str]:
    """Decide which tool ids are active.

    A non-empty explicit list wins outright and is not validated against the
    catalog. Otherwise every default-enabled catalog entry is active.
    """
    requested = parse_enabled_tools(explicit_list)
    if requested:
        return frozenset(requested)
    return frozenset(cap_id for cap_id, cap in catalog.items() if cap.enabled_by_default)
