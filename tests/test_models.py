"""Unit tests for exa_mcp.models: Exa wire payloads."""

import pytest
from pydantic import ValidationError

from exa_mcp.models import (
    CodeContextRequest,
    ContentItem,
    ContentsOptions,
    ContentsRequest,
    ContextOptions,
    ResearchTask,
    SearchRequest,
    SearchResponse,
    TextOptions,
)


class TestSearchRequest:
    def test_payload_uses_camel_case(self):
        request = SearchRequest(
            query="llm agents",
            num_results=5,
            include_domains=["linkedin.com"],
            contents=ContentsOptions(text=True, context=ContextOptions(max_characters=500), livecrawl="fallback"),
        )
        assert request.to_payload() == {
            "query": "llm agents",
            "type": "auto",
            "numResults": 5,
            "includeDomains": ["linkedin.com"],
            "contents": {"text": True, "context": {"maxCharacters": 500}, "livecrawl": "fallback"},
        }

    def test_num_results_bounds(self):
        with pytest.raises(ValidationError):
            SearchRequest(query="q", num_results=0)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            SearchRequest(query="q", type="semantic")


class TestContentsRequest:
    def test_flattens_contents(self):
        request = ContentsRequest(
            ids=["https://example.com"],
            contents=ContentsOptions(text=TextOptions(max_characters=3000), livecrawl="preferred"),
        )
        assert request.to_payload() == {
            "ids": ["https://example.com"],
            "text": {"maxCharacters": 3000},
            "livecrawl": "preferred",
        }

    def test_requires_an_id(self):
        with pytest.raises(ValidationError):
            ContentsRequest(ids=[])


class TestCodeContextRequest:
    def test_dynamic_default(self):
        assert CodeContextRequest(query="q").to_payload() == {"query": "q", "tokensNum": "dynamic"}

    def test_token_budget(self):
        assert CodeContextRequest(query="q", tokens_num=5000).to_payload()["tokensNum"] == 5000


class TestResponses:
    def test_content_item_from_wire(self):
        item = ContentItem.model_validate({
            "id": "x",
            "title": "T",
            "url": "https://t.test",
            "publishedDate": "2024-01-01",
            "image": "ignored extra field",
        })
        assert item.published_date == "2024-01-01"
        assert item.text is None

    def test_display_title_fallbacks(self):
        assert ContentItem(title="  ", url="https://u.test").display_title == "https://u.test"
        assert ContentItem().display_title == "Untitled"

    def test_search_response_defaults(self):
        response = SearchResponse.model_validate({"requestId": "r1"})
        assert response.results == []

    @pytest.mark.parametrize("status,finished", [
        ("pending", False),
        ("running", False),
        ("completed", True),
        ("failed", True),
        ("canceled", True),
    ])
    def test_research_task_finished(self, status, finished):
        task = ResearchTask.model_validate({"researchId": "t1", "status": status})
        assert task.is_finished is finished
