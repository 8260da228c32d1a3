"""Markdown-lite formatting for bot messages.

Supports bold, italic, links, ``#``/``##``/``###`` headers, bullet and
numbered lists. Every line is HTML-escaped before the formatting passes
run, so the only tags in the output are the ones produced here.
"""

import html
import re
from typing import List, Optional
from urllib.parse import urlparse

BULLET_RE = re.compile(r"^\s*[-*•]\s+(.*)$")
NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")
HEADER_RE = re.compile(r"^(#{1,3})\s+(.*)$")

LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
BOLD_ITALIC_RE = re.compile(r"\*\*\*(?![\s*])(.+?)(?<![\s*])\*\*\*")
BOLD_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
ITALIC_STAR_RE = re.compile(r"(?<!\*)\*(?![\s*])(.+?)(?<![\s*])\*(?!\*)")
# Underscores inside words (snake_case) are left alone
ITALIC_UNDERSCORE_RE = re.compile(r"(?<!\w)_(?![\s_])(.+?)(?<![\s_])_(?!\w)")
PLACEHOLDER_RE = re.compile("\x00(\\d+)\x00")

SAFE_URL_SCHEMES = ("", "http", "https", "mailto")


def _is_safe_url(url: str) -> bool:
    return urlparse(html.unescape(url)).scheme.lower() in SAFE_URL_SCHEMES


def _emphasis(text: str) -> str:
    text = BOLD_ITALIC_RE.sub(r"<strong><em>\1</em></strong>", text)
    text = BOLD_RE.sub(lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>", text)
    text = ITALIC_STAR_RE.sub(r"<em>\1</em>", text)
    return ITALIC_UNDERSCORE_RE.sub(r"<em>\1</em>", text)


def format_inline(text: str) -> str:
    """Apply link, bold and italic transforms to one escaped line."""
    anchors: List[str] = []

    def stash_link(match: re.Match) -> str:
        label, url = match.group(1), match.group(2)
        if not _is_safe_url(url):
            return match.group(0)
        anchors.append(
            f'<a href="{url}" target="_blank" rel="noopener noreferrer">{_emphasis(label)}</a>'
        )
        return f"\x00{len(anchors) - 1}\x00"

    # Links are swapped out first so emphasis never rewrites a URL
    text = LINK_RE.sub(stash_link, text)
    text = _emphasis(text)
    return PLACEHOLDER_RE.sub(lambda m: anchors[int(m.group(1))], text)


def format_message(text: Optional[str]) -> str:
    """Render bot message text as HTML. Never raises; empty input gives ``""``."""
    if not text:
        return ""

    blocks: List[str] = []
    list_items: List[str] = []
    list_tag: Optional[str] = None

    def flush_list() -> None:
        nonlocal list_tag
        if list_items:
            items = "".join(f"<li>{item}</li>" for item in list_items)
            blocks.append(f"<{list_tag}>{items}</{list_tag}>")
            list_items.clear()
        list_tag = None

    for raw_line in text.replace("\x00", "").split("\n"):
        line = html.escape(raw_line.rstrip("\r"), quote=True)

        bullet = BULLET_RE.match(line)
        numbered = None if bullet else NUMBERED_RE.match(line)
        if bullet or numbered:
            tag = "ul" if bullet else "ol"
            if list_tag != tag:
                flush_list()
                list_tag = tag
            list_items.append(format_inline((bullet or numbered).group(1)))
            continue

        flush_list()

        header = HEADER_RE.match(line)
        if header:
            level = len(header.group(1))
            blocks.append(f"<h{level}>{header.group(2)}</h{level}>")
        elif not line.strip():
            blocks.append("<br>")
        else:
            blocks.append(f"<p>{format_inline(line)}</p>")

    flush_list()
    return "".join(blocks)
