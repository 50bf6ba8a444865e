"""Unit tests for exa_mcp.markdown: normalization and summaries."""

import asyncio
import json
from unittest.mock import patch

import pytest

from conftest import RecordingBackend
from exa_mcp.conversion import MarkdownGateway
from exa_mcp.markdown import ELLIPSIS, is_html_mime, normalize, normalize_json, strip_markdown, summarize


class TestNormalize:
    @pytest.mark.asyncio
    async def test_none_input(self):
        result = await normalize(None)
        assert result.markdown == ""
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_whitespace_only_input_is_returned(self, converting_gateway, markdown_backend):
        result = await normalize("   \n", gateway=converting_gateway)
        assert result.markdown == "   \n"
        assert result.used_fallback is True
        assert markdown_backend.calls == []

    @pytest.mark.asyncio
    async def test_converted(self, converting_gateway):
        result = await normalize("<h1>Converted</h1><p>Body text</p>", gateway=converting_gateway)
        assert result.markdown == "# Converted\n\nBody text"
        assert result.used_fallback is False

    @pytest.mark.asyncio
    async def test_html_is_cleaned_before_conversion(self, converting_gateway, markdown_backend):
        await normalize("<nav>menu</nav><p>Story</p><script>x()</script>", gateway=converting_gateway, name="u")
        call = markdown_backend.calls[0]
        assert call["content"] == b"<p>Story</p>"
        assert call["mime_type"] == "text/html"
        assert call["name"] == "u"

    @pytest.mark.asyncio
    async def test_plain_text_is_not_cleaned(self, converting_gateway, markdown_backend):
        text = "<nav>literally</nav>"
        await normalize(text, "text/plain", gateway=converting_gateway)
        assert markdown_backend.calls[0]["content"] == text.encode("utf-8")

    @pytest.mark.asyncio
    async def test_fallback_without_backend(self, null_gateway):
        result = await normalize("<footer>f</footer><p>Story</p>", gateway=null_gateway)
        assert result.markdown == "<p>Story</p>"
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_fallback_on_failed_conversion(self):
        gateway = MarkdownGateway(RecordingBackend(error=RuntimeError("down")))
        result = await normalize("<p>Story</p>", gateway=gateway)
        assert result.markdown == "<p>Story</p>"
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_fallback_on_empty_conversion(self):
        gateway = MarkdownGateway(RecordingBackend(records=[{"format": "markdown", "data": ""}]))
        result = await normalize("<p>Story</p>", gateway=gateway)
        assert result.markdown == "<p>Story</p>"
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_fully_cleaned_input_keeps_original(self):
        html = "<script>only()</script>"
        result = await normalize(html)
        assert result.markdown == html
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_default_gateway(self):
        result = await normalize("plain words", "text/plain")
        assert result.markdown == "plain words"
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_html_cleaning_runs_in_a_worker_thread(self, null_gateway):
        html = '<div class="ad">' * 5000 + "<p>Story</p>"
        with patch("exa_mcp.markdown.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            result = await normalize(html, gateway=null_gateway)
        assert to_thread.call_count == 1
        assert result.markdown.endswith("<p>Story</p>")

    @pytest.mark.asyncio
    async def test_plain_text_skips_the_worker_thread(self, null_gateway):
        with patch("exa_mcp.markdown.asyncio.to_thread", wraps=asyncio.to_thread) as to_thread:
            await normalize("words", "text/plain", gateway=null_gateway)
        assert to_thread.call_count == 0


class TestNormalizeJson:
    @pytest.mark.asyncio
    async def test_dict_is_indented_json(self, null_gateway):
        data = {"results": [], "requestId": "abc"}
        result = await normalize_json(data, gateway=null_gateway)
        assert result.markdown == json.dumps(data, indent=2)
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_sent_as_plain_text(self, converting_gateway, markdown_backend):
        await normalize_json({"a": 1}, gateway=converting_gateway)
        assert markdown_backend.calls[0]["mime_type"] == "text/plain"

    @pytest.mark.asyncio
    async def test_string_passes_through(self, null_gateway):
        result = await normalize_json('{"a": 1}', gateway=null_gateway)
        assert result.markdown == '{"a": 1}'


class TestSummaries:
    def test_strip_markdown(self):
        assert strip_markdown("# Title\n\n**Bold** and `code`\n- [x] item") == "Title Bold and code - [x] item"

    def test_strip_markdown_empty(self):
        assert strip_markdown(None) == ""
        assert strip_markdown("") == ""

    def test_short_text_untouched(self):
        assert summarize("A short note.") == "A short note."

    def test_exact_limit_has_no_ellipsis(self):
        text = "x" * 200
        assert summarize(text) == text

    def test_long_text_truncated(self):
        text = "word " * 100
        summary = summarize(text)
        assert summary.endswith(ELLIPSIS)
        assert len(summary) <= 200 + len(ELLIPSIS)

    def test_custom_limit(self):
        assert summarize("abcdefghij", limit=4) == "abcd..."

    def test_markers_removed_before_measuring(self):
        text = "## " + "y" * 200
        assert summarize(text) == "y" * 200

    def test_newlines_become_spaces(self):
        assert summarize("line one\nline two\n\nline three") == "line one line two line three"

    @pytest.mark.parametrize("text", ["", "a", "# h\n" * 80, "`" * 500, "para\n\n" * 60])
    def test_length_bound(self, text):
        assert len(summarize(text, limit=50)) <= 50 + len(ELLIPSIS)

    def test_negative_limit(self):
        assert summarize("abc", limit=-5) == ELLIPSIS


class TestMimeHint:
    def test_html(self):
        assert is_html_mime("text/html")
        assert is_html_mime("application/xhtml+xml")
        assert is_html_mime("TEXT/HTML; charset=utf-8")

    def test_not_html(self):
        assert not is_html_mime("text/plain")
        assert not is_html_mime(None)
