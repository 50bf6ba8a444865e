"""
Pydantic models for Exa API requests and responses
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ExaModel(BaseModel):
    """Wire models use Exa's camelCase names; Python code uses snake_case."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# Request Models
class TextOptions(_ExaModel):
    """Options for the text content block"""
    max_characters: Optional[int] = Field(default=None, alias="maxCharacters", ge=1)


class ContextOptions(_ExaModel):
    """Options for the LLM context string"""
    max_characters: int = Field(default=10000, alias="maxCharacters", ge=1)


class ContentsOptions(_ExaModel):
    """Which content to return with each result"""
    text: Union[bool, TextOptions] = True
    context: Optional[ContextOptions] = None
    summary: Optional[bool] = None
    livecrawl: Optional[Literal["fallback", "preferred", "always", "never"]] = None


class SearchRequest(_ExaModel):
    """Search request"""
    query: str
    type: Literal["auto", "fast", "deep", "neural", "keyword"] = "auto"
    num_results: int = Field(default=8, alias="numResults", ge=1, le=100)
    category: Optional[str] = None
    include_domains: Optional[List[str]] = Field(default=None, alias="includeDomains")
    contents: ContentsOptions = ContentsOptions()


class ContentsRequest(_ExaModel):
    """Crawl request for known URLs"""
    ids: List[str] = Field(..., min_length=1)
    contents: ContentsOptions = ContentsOptions()

    def to_payload(self) -> Dict[str, Any]:
        # /contents takes its content options at the top level
        payload = {"ids": self.ids}
        payload.update(self.contents.to_payload())
        return payload


class CodeContextRequest(_ExaModel):
    """Code context request"""
    query: str
    tokens_num: Union[Literal["dynamic"], int] = Field(default="dynamic", alias="tokensNum")


class ResearchRequest(_ExaModel):
    """Deep research task request"""
    instructions: str
    model: Literal["exa-research", "exa-research-pro"] = "exa-research"


# Response Models
class ContentItem(_ExaModel):
    """One upstream result; text is untrusted and may be HTML or missing"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    author: Optional[str] = None
    text: Optional[str] = None
    summary: Optional[str] = None
    score: Optional[float] = None

    @property
    def display_title(self) -> str:
        return (self.title or "").strip() or self.url or "Untitled"


class SearchResponse(_ExaModel):
    """Search or contents response"""
    request_id: Optional[str] = Field(default=None, alias="requestId")
    results: List[ContentItem] = []
    context: Optional[str] = None


class CodeContextResponse(_ExaModel):
    """Code context response"""
    request_id: Optional[str] = Field(default=None, alias="requestId")
    query: Optional[str] = None
    response: str = ""
    results_count: Optional[int] = Field(default=None, alias="resultsCount")


class ResearchTask(_ExaModel):
    """Deep research task state"""
    research_id: str = Field(..., alias="researchId")
    status: str = "pending"
    instructions: Optional[str] = None
    model: Optional[str] = None
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in ("completed", "failed", "canceled")
