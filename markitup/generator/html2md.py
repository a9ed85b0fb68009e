"""HTML to Markdown."""

from __future__ import annotations

import re
from html.parser import HTMLParser

from markitup.common import ConversionError

_INLINE = {"strong": "**", "b": "**", "em": "*", "i": "*", "code": "`"}
_BLOCK = {"p", "div", "section", "article", "ul", "ol", "table", "tr", "blockquote"}
_SKIP = {"script", "style", "head", "title"}


class _MarkdownBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.out: list[str] = []
        self.skip = 0
        self.links: list[str | None] = []
        self.in_pre = False
        self.list_stack: list[list[int]] = []

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag in _SKIP:
            self.skip += 1
        elif re.fullmatch(r"h[1-6]", tag):
            self.out.append("\n\n" + "#" * int(tag[1]) + " ")
        elif tag in _BLOCK:
            self.out.append("\n\n")
            if tag == "ol":
                self.list_stack.append([1])
            elif tag == "ul":
                self.list_stack.append([0])
        elif tag == "li":
            indent = "  " * max(len(self.list_stack) - 1, 0)
            if self.list_stack and self.list_stack[-1][0]:
                marker = f"{self.list_stack[-1][0]}. "
                self.list_stack[-1][0] += 1
            else:
                marker = "* "
            self.out.append("\n" + indent + marker)
        elif tag == "br":
            self.out.append("  \n")
        elif tag == "hr":
            self.out.append("\n\n---\n\n")
        elif tag in _INLINE:
            self.out.append(_INLINE[tag])
        elif tag == "a":
            self.links.append(attrs.get("href"))
            self.out.append("[")
        elif tag == "img":
            self.out.append(f"![{attrs.get('alt') or ''}]({attrs.get('src') or ''})")
        elif tag == "pre":
            self.in_pre = True
            self.out.append("\n\n```\n")
        elif tag in ("td", "th"):
            self.out.append("| ")

    def handle_endtag(self, tag):
        if tag in _SKIP:
            self.skip = max(self.skip - 1, 0)
        elif re.fullmatch(r"h[1-6]", tag) or tag in _BLOCK:
            if tag in ("ul", "ol") and self.list_stack:
                self.list_stack.pop()
            self.out.append("\n\n")
        elif tag in _INLINE:
            self.out.append(_INLINE[tag])
        elif tag == "a":
            href = self.links.pop() if self.links else None
            self.out.append(f"]({href})" if href else "]")
        elif tag == "pre":
            self.in_pre = False
            self.out.append("\n```\n\n")
        elif tag in ("td", "th"):
            self.out.append(" ")

    def handle_data(self, data):
        if self.skip:
            return
        if self.in_pre:
            self.out.append(data)
        else:
            self.out.append(re.sub(r"\s+", " ", data))


def html_to_markdown(html: str) -> str:
    """Convert an HTML string to Markdown text."""
    builder = _MarkdownBuilder()
    builder.feed(html)
    builder.close()
    text = "".join(builder.out)
    text = "\n".join(line.rstrip() if not line.endswith("  ") else line for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def run(data: bytes) -> str:
    """Convert UTF-8 HTML bytes to Markdown."""
    try:
        html = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConversionError(f"Invalid UTF-8 encoding: {exc}") from exc
    markdown = html_to_markdown(html)
    if not markdown.strip():
        raise ConversionError("Empty or invalid HTML content")
    return markdown