"""HTTP client for the Exa content API.

All outbound search, crawl, code-context and research calls go through this
client. Uses httpx with bounded timeouts; every failure surfaces as an
`UpstreamError` carrying the HTTP status when there was one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from exa_mcp.errors import UpstreamError
from exa_mcp.models import (
    CodeContextRequest,
    CodeContextResponse,
    ContentItem,
    ContentsRequest,
    ResearchRequest,
    ResearchTask,
    SearchRequest,
    SearchResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.exa.ai"
DEFAULT_TIMEOUT_S = 25.0


class ExaClient:
    """Async client for the Exa REST API. Use as an async context manager."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        integration: str = "exa-mcp",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.integration = integration
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings, integration: str = "exa-mcp") -> "ExaClient":
        return cls(
            api_key=settings.exa_api_key,
            base_url=settings.exa_base_url,
            timeout_s=settings.exa_timeout,
            integration=integration,
        )

    async def __aenter__(self) -> "ExaClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_s, connect=5.0),
                headers={
                    "accept": "application/json",
                    "content-type": "application/json",
                    "x-api-key": self.api_key or "",
                    "x-exa-integration": self.integration,
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, json=payload)
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"Request to {path} timed out after {self.timeout_s}s") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Request to {path} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise UpstreamError(_error_message(resp), status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamError("Malformed response body (not JSON)", status_code=resp.status_code) from exc
        if not isinstance(body, dict):
            raise UpstreamError("Malformed response body (expected an object)", status_code=resp.status_code)
        return body

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def search(self, request: SearchRequest) -> SearchResponse:
        """POST /search. Results keep upstream relevance order."""
        body = await self._request("POST", "/search", request.to_payload())
        return _parse_search(body)

    async def contents(self, request: ContentsRequest) -> SearchResponse:
        """POST /contents for known URLs."""
        body = await self._request("POST", "/contents", request.to_payload())
        return _parse_search(body)

    async def code_context(self, request: CodeContextRequest) -> CodeContextResponse:
        """POST /context for code snippets and documentation."""
        body = await self._request("POST", "/context", request.to_payload())
        return _parse(CodeContextResponse, body)

    async def start_research(self, request: ResearchRequest) -> ResearchTask:
        """POST /research/v1 to create a research task."""
        body = await self._request("POST", "/research/v1", request.to_payload())
        return _parse(ResearchTask, body)

    async def get_research(self, research_id: str) -> ResearchTask:
        """GET /research/v1/{id} for task status and output."""
        body = await self._request("GET", f"/research/v1/{research_id}")
        return _parse(ResearchTask, body)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error_message(resp: httpx.Response) -> str:
    """Prefer the API's own message, then the body text, then the reason phrase."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error", "detail"):
            if isinstance(data.get(key), str) and data[key]:
                return data[key]
    text = (resp.text or "").strip()
    return text[:200] if text else (resp.reason_phrase or "Request failed")


# Wire fields kept, as text, when a result fails validation.
_RESULT_TEXT_FIELDS = ("id", "title", "url", "publishedDate", "author", "text", "summary")


def _parse_search(body: Dict[str, Any]) -> SearchResponse:
    """Validate each result on its own so one bad entry never fails the batch."""
    results = body.get("results")
    if results is not None and not isinstance(results, list):
        raise UpstreamError("Malformed response body (results is not a list)")

    response = _parse(SearchResponse, {**body, "results": []})
    response.results = [_parse_result(entry) for entry in results or []]
    return response


def _parse_result(entry: Any) -> ContentItem:
    if not isinstance(entry, dict):
        logger.warning(f"Non-object search result coerced to text: {str(entry)[:80]!r}")
        return ContentItem(text=None if entry is None else str(entry))
    try:
        return ContentItem.model_validate(entry)
    except ValidationError as exc:
        logger.warning(
            f"Search result {str(entry.get('id'))[:80]!r} failed validation "
            f"({exc.error_count()} error(s)); coercing its fields to text"
        )
    return ContentItem.model_validate({
        key: entry[key] if isinstance(entry[key], str) else str(entry[key])
        for key in _RESULT_TEXT_FIELDS
        if entry.get(key) is not None
    })


def _parse(model, body: Dict[str, Any]):
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise UpstreamError(f"Malformed response body: {exc.error_count()} validation error(s)") from exc
