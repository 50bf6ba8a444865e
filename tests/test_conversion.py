"""Unit tests for the markdown conversion gateway and its backends."""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from conftest import RecordingBackend
from exa_mcp.config import Settings
from exa_mcp.conversion import MarkdownGateway, NullBackend, create_backend, create_backend_from_config
from exa_mcp.conversion.cloudflare import CloudflareBackend
from exa_mcp.conversion.gateway import outcome_from_records
from exa_mcp.conversion.local import LocalBackend, SoupMarkdownConverter
from exa_mcp.core_types import Converted, Failed, Unavailable
from exa_mcp.errors import ConversionFailed, ConversionUnavailable


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class TestGatewayConvert:
    @pytest.mark.asyncio
    async def test_no_backend_is_unavailable(self):
        gateway = MarkdownGateway()
        assert gateway.available is False
        assert await gateway.convert(b"<p>x</p>", "text/html") == Unavailable()

    @pytest.mark.asyncio
    async def test_unavailable_backend_is_not_called(self):
        backend = RecordingBackend(records=[{"format": "markdown", "data": "x"}], available=False)
        outcome = await MarkdownGateway(backend).convert(b"x", "text/plain")
        assert outcome == Unavailable()
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_converted(self):
        backend = RecordingBackend(records=[{"format": "markdown", "data": "# Title"}])
        outcome = await MarkdownGateway(backend).convert(b"<h1>Title</h1>", "text/html", name="page.html")
        assert outcome == Converted("# Title")
        assert backend.calls == [{"name": "page.html", "content": b"<h1>Title</h1>", "mime_type": "text/html"}]

    @pytest.mark.asyncio
    async def test_backend_exception_is_failed(self):
        backend = RecordingBackend(error=RuntimeError("service down"))
        outcome = await MarkdownGateway(backend).convert(b"x", "text/html")
        assert isinstance(outcome, Failed)
        assert "service down" in outcome.reason

    @pytest.mark.asyncio
    async def test_timeout_is_failed(self):
        class SlowBackend(RecordingBackend):
            async def to_markdown(self, name, content, mime_type):
                await asyncio.sleep(5)
                return [{"format": "markdown", "data": "late"}]

        outcome = await MarkdownGateway(SlowBackend(), timeout_s=0.01).convert(b"x", "text/html")
        assert isinstance(outcome, Failed)
        assert "timed out" in outcome.reason

    @pytest.mark.asyncio
    async def test_off_shape_response_is_failed(self):
        backend = RecordingBackend(records=[{"format": "html", "data": "<p>x</p>"}])
        outcome = await MarkdownGateway(backend).convert(b"x", "text/html")
        assert isinstance(outcome, Failed)


class TestOutcomeFromRecords:
    @pytest.mark.parametrize("records", [
        None,
        [],
        {"format": "markdown", "data": "x"},
        ["not a dict"],
        [{"format": "text", "data": "x"}],
        [{"format": "markdown"}],
        [{"format": "markdown", "data": ""}],
        [{"format": "markdown", "data": "  \n "}],
        [{"format": "markdown", "data": 42}],
    ])
    def test_rejects(self, records):
        assert isinstance(outcome_from_records(records), Failed)

    def test_uses_first_record(self):
        records = [
            {"format": "markdown", "data": "first"},
            {"format": "markdown", "data": "second"},
        ]
        assert outcome_from_records(records) == Converted("first")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

class TestBackendFactory:
    def test_none_variants(self):
        for name in ("none", "null", "OFF", ""):
            assert isinstance(create_backend(name), NullBackend)

    def test_local(self):
        assert isinstance(create_backend("local"), LocalBackend)

    def test_cloudflare(self):
        backend = create_backend("cloudflare", account_id="acc", api_token="tok")
        assert isinstance(backend, CloudflareBackend)
        assert backend.available

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown markdown backend"):
            create_backend("pandoc")

    def test_auto_without_credentials(self):
        settings = Settings(_env_file=None)
        assert isinstance(create_backend_from_config(settings), NullBackend)

    def test_auto_with_credentials(self):
        settings = Settings(_env_file=None, cloudflare_account_id="acc", cloudflare_api_token="tok")
        backend = create_backend_from_config(settings)
        assert isinstance(backend, CloudflareBackend)
        assert backend.timeout_s == settings.conversion_timeout

    def test_explicit_local(self):
        settings = Settings(_env_file=None, markdown_backend="local")
        assert isinstance(create_backend_from_config(settings), LocalBackend)

    @pytest.mark.asyncio
    async def test_null_backend_raises(self):
        with pytest.raises(ConversionUnavailable):
            await NullBackend().to_markdown("x", b"x", "text/plain")


# ---------------------------------------------------------------------------
# Cloudflare backend
# ---------------------------------------------------------------------------

def _cloudflare(handler) -> CloudflareBackend:
    return CloudflareBackend(
        account_id="acc-1",
        api_token="secret",
        transport=httpx.MockTransport(handler),
    )


class TestCloudflareBackend:
    def test_unavailable_without_token(self):
        assert CloudflareBackend(account_id="acc").available is False

    def test_endpoint(self):
        backend = CloudflareBackend(account_id="acc-1", api_token="t", api_base="https://cf.test/v4/")
        assert backend.endpoint == "https://cf.test/v4/accounts/acc-1/ai/tomarkdown"

    @pytest.mark.asyncio
    async def test_uploads_document(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            return httpx.Response(200, json={
                "success": True,
                "result": [{"name": "page", "format": "markdown", "data": "# Hi"}],
            })

        records = await _cloudflare(handler).to_markdown("page", b"<h1>Hi</h1>", "text/html")
        assert records == [{"name": "page", "format": "markdown", "data": "# Hi"}]
        assert seen["auth"] == "Bearer secret"
        assert seen["url"].endswith("/accounts/acc-1/ai/tomarkdown")
        assert b"<h1>Hi</h1>" in seen["body"]

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        backend = _cloudflare(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(ConversionFailed, match="500"):
            await backend.to_markdown("page", b"x", "text/html")

    @pytest.mark.asyncio
    async def test_unsuccessful_body_raises(self):
        body = {"success": False, "errors": [{"message": "bad file"}]}
        backend = _cloudflare(lambda request: httpx.Response(200, content=json.dumps(body)))
        with pytest.raises(ConversionFailed, match="bad file"):
            await backend.to_markdown("page", b"x", "text/html")

    @pytest.mark.asyncio
    async def test_gateway_maps_failure(self):
        backend = _cloudflare(lambda request: httpx.Response(503, text="unavailable"))
        outcome = await MarkdownGateway(backend).convert(b"x", "text/html")
        assert isinstance(outcome, Failed)


# ---------------------------------------------------------------------------
# Local backend
# ---------------------------------------------------------------------------

class TestSoupMarkdownConverter:
    def setup_method(self):
        self.converter = SoupMarkdownConverter()

    def test_headings_and_paragraphs(self):
        md = self.converter.convert("<h1>Title</h1><p>First <strong>bold</strong> para.</p><h3>Sub</h3>")
        assert md == "# Title\n\nFirst **bold** para.\n\n### Sub"

    def test_links(self):
        md = self.converter.convert('<p>See <a href="https://exa.ai">Exa</a> or <a href="#top">top</a></p>')
        assert md == "See [Exa](https://exa.ai) or top"

    def test_lists(self):
        md = self.converter.convert("<ul><li>one</li><li>two</li></ul><ol><li>a</li><li>b</li></ol>")
        assert "- one\n- two" in md
        assert "1. a\n2. b" in md

    def test_code_block(self):
        md = self.converter.convert("<pre>def f():\n    return 1</pre>")
        assert md == "```\ndef f():\n    return 1\n```"

    def test_table_with_header(self):
        md = self.converter.convert("<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>")
        assert md == "| A | B |\n| --- | --- |\n| 1 | 2 |"

    def test_drops_scripts_and_images(self):
        md = self.converter.convert('<p>Text</p><script>x()</script><img src="a.png" alt="A">')
        assert md == "Text"

    def test_keeps_images_when_asked(self):
        md = SoupMarkdownConverter(ignore_images=False).convert('<img src="a.png" alt="Chart">')
        assert md == "![Chart](a.png)"

    def test_empty(self):
        assert self.converter.convert("   ") == ""


class TestLocalBackend:
    @pytest.mark.asyncio
    async def test_html_record(self):
        records = await LocalBackend().to_markdown("doc", b"<h2>Hello</h2>", "text/html")
        assert records == [{"name": "doc", "mimeType": "text/html", "format": "markdown", "data": "## Hello"}]

    @pytest.mark.asyncio
    async def test_plain_text_passes_through(self):
        records = await LocalBackend().to_markdown("doc", b"  plain *text*  ", "text/plain")
        assert records[0]["data"] == "plain *text*"

    @pytest.mark.asyncio
    async def test_through_gateway(self):
        outcome = await MarkdownGateway(LocalBackend()).convert(b"<p>Hi</p>", "text/html")
        assert outcome == Converted("Hi")

    @pytest.mark.asyncio
    async def test_conversion_runs_off_the_event_loop(self):
        with patch("exa_mcp.conversion.local.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            records = await LocalBackend().to_markdown("doc", b"<p>Hi</p>", "text/html")
        assert records[0]["data"] == "Hi"
        assert to_thread.call_count == 1
