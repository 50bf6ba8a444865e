"""Shared fixtures and markers for the exa-mcp test suite."""

from typing import Any, Dict, List, Optional

import pytest

from exa_mcp.config import Settings
from exa_mcp.conversion.base import MarkdownBackend
from exa_mcp.conversion.gateway import MarkdownGateway
from exa_mcp.models import ContentItem


def pytest_configure(config):
    config.addinivalue_line("markers", "remote: marks tests that hit the live Exa API (deselect with '-m \"not remote\"')")


class RecordingBackend(MarkdownBackend):
    """Backend double that returns canned records and remembers its calls."""

    name = "recording"

    def __init__(self, records: Any = None, error: Optional[BaseException] = None, available: bool = True):
        self.records = records
        self.error = error
        self._available = available
        self.calls: List[Dict[str, Any]] = []

    @property
    def available(self) -> bool:
        return self._available

    async def to_markdown(self, name: str, content: bytes, mime_type: str):
        self.calls.append({"name": name, "content": content, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        return self.records


@pytest.fixture
def settings():
    return Settings(_env_file=None, exa_api_key="test-key")


@pytest.fixture
def null_gateway():
    return MarkdownGateway()


@pytest.fixture
def markdown_backend():
    return RecordingBackend(records=[{"format": "markdown", "data": "# Converted\n\nBody text"}])


@pytest.fixture
def converting_gateway(markdown_backend):
    return MarkdownGateway(markdown_backend)


def make_items(count: int, **overrides) -> List[ContentItem]:
    items = []
    for i in range(count):
        fields = {
            "id": f"result-{i}",
            "title": f"Result {i}",
            "url": f"https://example.com/{i}",
            "text": f"<p>Body of result {i}</p>",
        }
        fields.update(overrides)
        items.append(ContentItem(**fields))
    return items
