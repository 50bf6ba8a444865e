"""
Heuristic HTML cleanup applied before markdown conversion.

This is a pattern-based pass, not a DOM transform. Rules only target reserved
semantic tags (script, nav, footer, ...) or whole class/id tokens (ad, share,
social, ...) so that article content is never stripped for living inside a
generic container.

Every scan is bounded by the next '<' or '>' and close tags are paired in one
pass per tag, so cleaning stays linear in the size of untrusted input.
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Iterator, Optional, Sequence

logger = logging.getLogger(__name__)

VOID_TAGS = frozenset({
    'area', 'br', 'col', 'embed', 'hr', 'img', 'input', 'link',
    'meta', 'param', 'source', 'track', 'wbr',
})

# Elements that may be dropped when their class/id carries a noise token.
# html, body, main and article are never candidates.
_REMOVABLE_TAGS = r'div|section|aside|span|ul|ol|li|iframe|ins|figure|a|img|button|form'

_AD_TOKENS = r'ad|ads|advert|adverts|advertisement|advertising|adsbygoogle|sponsored'
_SOCIAL_TOKENS = r'share|sharing|social|share-buttons|sharethis'

# Token bounds: letters and digits only, so "ad-slot" and "ad_unit" match
# while "header", "shadow" and "shared" do not.
_TOKEN_START = r'(?<![a-z0-9])'
_TOKEN_END = r'(?![a-z0-9])'

_ATTR_RE = re.compile(
    r'(?<![\w-])(?P<name>[\w-]+)\s*=\s*(?:"(?P<dq>[^"]*)"|\'(?P<sq>[^\']*)\')'
)


def _opener(tags: str) -> re.Pattern:
    return re.compile(rf'<(?P<tag>{tags})(?![\w-])[^<>]*>', re.IGNORECASE)


def _token_re(tokens: str) -> re.Pattern:
    return re.compile(rf'{_TOKEN_START}(?:{tokens}){_TOKEN_END}', re.IGNORECASE)


def _attr_values(tag_text: str, names: Sequence[str]) -> Iterator[str]:
    """Yield the quoted values of the named attributes in one start tag."""
    for match in _ATTR_RE.finditer(tag_text):
        if match.group('name').lower() in names:
            yield match.group('dq') if match.group('dq') is not None else match.group('sq')


def _attr_has_token(names: Sequence[str], tokens: str) -> Callable[[re.Match], bool]:
    token_re = _token_re(tokens)

    def accept(match: re.Match) -> bool:
        return any(token_re.search(value) for value in _attr_values(match.group(0), names))
    return accept


@dataclass(frozen=True)
class CleaningRule:
    """One named removal rule.

    Balanced rules remove from the opening tag through its matching close
    tag; plain rules substitute every match with nothing. `accept` narrows
    which matches are removed. Non-nested rules close at the first close tag,
    as raw-text elements like script do.
    """
    name: str
    pattern: re.Pattern
    balanced: bool = False
    nested: bool = True
    accept: Optional[Callable[[re.Match], bool]] = None

    def apply(self, html: str) -> str:
        if self.balanced:
            return _remove_elements(html, self.pattern, self.accept, self.nested)
        if self.accept is None:
            return self.pattern.sub('', html)
        accept = self.accept
        return self.pattern.sub(lambda m: '' if accept(m) else m.group(0), html)


DEFAULT_RULES: Sequence[CleaningRule] = (
    CleaningRule('raw_text_blocks', _opener('script|style|noscript'), balanced=True, nested=False),
    CleaningRule('landmarks', _opener('nav|header|footer'), balanced=True),
    CleaningRule('ads', _opener(_REMOVABLE_TAGS), balanced=True, accept=_attr_has_token(('class', 'id'), _AD_TOKENS)),
    CleaningRule('social', _opener(_REMOVABLE_TAGS), balanced=True, accept=_attr_has_token(('class', 'id'), _SOCIAL_TOKENS)),
    CleaningRule('logo_images', _opener('img'), accept=_attr_has_token(('alt',), r'logos?')),
    CleaningRule('icon_images', _opener('img'), accept=_attr_has_token(('class',), r'icons?')),
)

_HSPACE_RE = re.compile(r'[ \t\f\v\xa0]+')
_TRAILING_SPACE_RE = re.compile(r' *\n *')
_BLANK_LINES_RE = re.compile(r'\n{2,}')


def clean(html: Optional[str], rules: Sequence[CleaningRule] = DEFAULT_RULES) -> str:
    """Strip noisy substructures from HTML and normalize whitespace.

    Never raises: if a rule fails the input is kept as-is for that rule.
    """
    if html is None:
        return ''
    if not isinstance(html, str):
        html = str(html)

    cleaned = html
    for rule in rules:
        try:
            cleaned = rule.apply(cleaned)
        except Exception as e:
            logger.warning(f"Cleaning rule '{rule.name}' failed, skipping: {e}")

    return normalize_whitespace(cleaned)


def normalize_whitespace(text: str) -> str:
    """Collapse horizontal runs to one space and blank-line runs to one separator."""
    if not text:
        return ''
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = _HSPACE_RE.sub(' ', text)
    text = _TRAILING_SPACE_RE.sub('\n', text)
    text = _BLANK_LINES_RE.sub('\n\n', text)
    return text.strip()




@lru_cache(maxsize=64)
def _tag_pattern(tag: str) -> re.Pattern:
    return re.compile(rf'<(/?){re.escape(tag)}(?![\w-])[^<>]*>', re.IGNORECASE)


def _pair_tags(html: str, tag: str, nested: bool) -> Dict[int, int]:
    """Map each opening tag offset to the end offset of its close tag.

    Openers without a close tag are absent from the map.
    """
    pairs: Dict[int, int] = {}
    pending = []
    for match in _tag_pattern(tag).finditer(html):
        if not match.group(1):
            if not match.group(0).endswith('/>'):
                pending.append(match.start())
        elif pending:
            if nested:
                pairs[pending.pop()] = match.end()
            else:
                for start in pending:
                    pairs[start] = match.end()
                pending.clear()
    return pairs


def _remove_elements(
    html: str,
    opener: re.Pattern,
    accept: Optional[Callable[[re.Match], bool]] = None,
    nested: bool = True,
) -> str:
    parts = []
    pos = 0
    search_from = 0
    pairs_by_tag: Dict[str, Dict[int, int]] = {}
    while True:
        match = opener.search(html, search_from)
        if not match:
            break
        search_from = match.end()
        if accept is not None and not accept(match):
            continue

        tag = match.group('tag').lower()
        if tag in VOID_TAGS or match.group(0).endswith('/>'):
            end = match.end()
        else:
            if tag not in pairs_by_tag:
                pairs_by_tag[tag] = _pair_tags(html, tag, nested)
            end = pairs_by_tag[tag].get(match.start())
            if end is None:
                # Unterminated element: leave it alone.
                continue
        parts.append(html[pos:match.start()])
        pos = search_from = end
    parts.append(html[pos:])
    return ''.join(parts)
