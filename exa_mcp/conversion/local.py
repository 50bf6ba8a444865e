"""
In-process HTML to markdown backend built on BeautifulSoup.

Opt-in alternative to the Cloudflare service (MARKDOWN_BACKEND=local) for
deployments without Workers AI credentials.
"""
import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from exa_mcp.conversion.base import MarkdownBackend

logger = logging.getLogger(__name__)

_BLOCK_SKIP_TAGS = ['script', 'style', 'noscript', 'iframe', 'object', 'embed', 'form', 'button', 'select', 'textarea']
_FENCE_RE = re.compile(r'(```\n.*?\n```)', re.DOTALL)


class SoupMarkdownConverter:
    """Walk a parsed document and emit markdown."""

    def __init__(self, ignore_images: bool = True):
        self.ignore_images = ignore_images

    def convert(self, html: str) -> str:
        if not html or not html.strip():
            return ""

        soup = BeautifulSoup(html, 'html.parser')
        for tag_name in _BLOCK_SKIP_TAGS:
            for tag in soup.find_all(tag_name):
                tag.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        return self._tidy(self._render(soup))

    def _render(self, element) -> str:
        if isinstance(element, NavigableString):
            return re.sub(r'\s+', ' ', str(element))
        if not isinstance(element, Tag):
            return ""

        tag = element.name.lower()

        if tag in ('h1', 'h2', 'h3', 'h4', 'h5', 'h6'):
            return f"\n\n{'#' * int(tag[1])} {self._text(element)}\n\n"
        if tag == 'p':
            return f"\n\n{self._children(element).strip()}\n\n"
        if tag == 'br':
            return "\n"
        if tag in ('strong', 'b'):
            inner = self._children(element).strip()
            return f"**{inner}**" if inner else ""
        if tag in ('em', 'i'):
            inner = self._children(element).strip()
            return f"*{inner}*" if inner else ""
        if tag == 'a':
            text = self._text(element)
            href = element.get('href', '')
            if not href or not text or href.startswith('#') or href.startswith('javascript:'):
                return text
            return f"[{text}]({href})"
        if tag == 'img':
            if self.ignore_images or not element.get('src'):
                return ""
            return f"![{element.get('alt', 'Image')}]({element['src']})"
        if tag in ('ul', 'ol'):
            return self._list(element, ordered=(tag == 'ol'))
        if tag == 'blockquote':
            lines = self._children(element).strip().split('\n')
            return "\n\n" + '\n'.join(f"> {line.strip()}" for line in lines if line.strip()) + "\n\n"
        if tag == 'pre':
            return f"\n\n```\n{element.get_text().strip(chr(10))}\n```\n\n"
        if tag in ('code', 'tt'):
            return f"`{self._text(element)}`"
        if tag == 'table':
            return self._table(element)

        return self._children(element)

    def _children(self, element) -> str:
        return ''.join(self._render(child) for child in element.children)

    def _text(self, element) -> str:
        return ' '.join(element.get_text(' ').split())

    def _list(self, element, ordered: bool) -> str:
        lines = []
        for index, li in enumerate(element.find_all('li', recursive=False), start=1):
            content = ' '.join(self._children(li).split())
            if not content:
                continue
            marker = f"{index}." if ordered else "-"
            lines.append(f"{marker} {content}")
        return "\n\n" + '\n'.join(lines) + "\n\n" if lines else ""

    def _table(self, element) -> str:
        rows = element.find_all('tr')
        if not rows:
            return self._children(element)

        rendered = []
        for row in rows:
            cells = [self._text(cell) for cell in row.find_all(['td', 'th'], recursive=False)]
            if cells:
                rendered.append("| " + " | ".join(cells) + " |")
        if not rendered:
            return ""

        header_cells = rows[0].find_all('th', recursive=False)
        if header_cells:
            rendered.insert(1, "| " + " | ".join(["---"] * len(header_cells)) + " |")
        return "\n\n" + '\n'.join(rendered) + "\n\n"

    def _tidy(self, markdown: str) -> str:
        # Fenced blocks keep their indentation; only the prose between them is tidied.
        parts = _FENCE_RE.split(markdown)
        return ''.join(
            part if index % 2 else self._tidy_prose(part)
            for index, part in enumerate(parts)
        ).strip()

    def _tidy_prose(self, markdown: str) -> str:
        markdown = re.sub(r'[ \t]+\n', '\n', markdown)
        markdown = re.sub(r'\n[ \t]+', '\n', markdown)
        markdown = re.sub(r'[ \t]{2,}', ' ', markdown)
        return re.sub(r'\n{3,}', '\n\n', markdown)


class LocalBackend(MarkdownBackend):
    """Converts HTML in-process; other text passes through unchanged."""

    name = "local"

    def __init__(self, converter: Optional[SoupMarkdownConverter] = None):
        self.converter = converter or SoupMarkdownConverter()

    async def to_markdown(self, name: str, content: bytes, mime_type: str) -> Optional[List[Dict[str, Any]]]:
        text = content.decode('utf-8', errors='replace')
        if 'html' in (mime_type or '').lower():
            # bs4 parsing is CPU bound; keep it off the event loop
            data = await asyncio.to_thread(self.converter.convert, text)
        else:
            data = text.strip()
        return [{"name": name, "mimeType": mime_type, "format": "markdown", "data": data}]
