"""Cloudflare Workers AI conversion backend.

Calls the ``ai/tomarkdown`` REST endpoint with a multipart upload and returns
its ``result`` records untouched; shape validation belongs to the gateway.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from exa_mcp.conversion.base import MarkdownBackend
from exa_mcp.errors import ConversionFailed

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.cloudflare.com/client/v4"
DEFAULT_TIMEOUT_S = 20.0


class CloudflareBackend(MarkdownBackend):
    """Backend for Cloudflare's toMarkdown document conversion."""

    name = "cloudflare"

    def __init__(
        self,
        account_id: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        api_base: str = DEFAULT_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_id = account_id
        self.api_token = api_token
        self.timeout_s = timeout_s
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self.account_id and self.api_token)

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/accounts/{self.account_id}/ai/tomarkdown"

    async def to_markdown(self, name: str, content: bytes, mime_type: str) -> Optional[List[Dict[str, Any]]]:
        """Upload one document and return the conversion records."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s, connect=5.0),
            transport=self._transport,
        ) as client:
            resp = await client.post(
                self.endpoint,
                headers={"Authorization": f"Bearer {self.api_token}"},
                files=[("files", (name, content, mime_type))],
            )

        if resp.status_code != 200:
            raise ConversionFailed(f"toMarkdown returned {resp.status_code}: {resp.text[:200]}")

        body = resp.json()
        if not isinstance(body, dict) or not body.get("success", False):
            errors = body.get("errors") if isinstance(body, dict) else None
            raise ConversionFailed(f"toMarkdown reported failure: {errors or body!r}"[:300])

        result = body.get("result")
        logger.debug(f"toMarkdown returned {len(result) if isinstance(result, list) else 0} record(s) for {name}")
        return result
