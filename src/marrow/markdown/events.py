"""Markdown event stream with source positions.

markdown-it-py produces a flat token list whose block tokens carry 0-based
half-open line maps. This module flattens that list (block tokens plus their
inline children) into start/end/text events, each tagged with the character
range of the source it came from, so consumers can map any construct back to
1-based source lines.
"""

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Iterator, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

# Class of the html_inline checkbox that tasklists_plugin puts before item text
_TASK_CHECKBOX_CLASS = 'class="task-list-item-checkbox"'

# markdown-it token base type -> event tag
_BLOCK_TAGS = {
    "paragraph": "paragraph",
    "heading": "heading",
    "blockquote": "blockquote",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
    "table": "table",
    "thead": "thead",
    "tbody": "tbody",
    "tr": "row",
    "th": "cell",
    "td": "cell",
    "footnote_block": "footnote_block",
    "footnote": "footnote_definition",
}

_INLINE_TAGS = {
    "em": "emphasis",
    "strong": "strong",
    "s": "strikethrough",
    "link": "link",
}


class EventKind(str, Enum):
    """Kinds of events in the stream."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "softbreak"
    HARD_BREAK = "hardbreak"
    RULE = "rule"
    FOOTNOTE_REF = "footnote_ref"
    TASK_MARKER = "task_marker"


@dataclass
class Event:
    """A single parser notification.

    Attributes:
        kind: What happened (start/end of a tag, text, break, ...)
        tag: Element the event belongs to, for start and end events
        span: Character offset range ``(start, end)`` in the source
        text: Literal text for text, code and html events
        attrs: Extra element data (heading level, link href, ...)
    """

    kind: EventKind
    tag: str = ""
    span: tuple[int, int] = (0, 0)
    text: str = ""
    attrs: dict[str, Any] = field(default_factory=dict)


def offset_to_line(source: str, offset: int) -> int:
    """Convert a character offset in the source to a 1-based line number.

    Args:
        source: Source text
        offset: Character offset (clamped to the text length)

    Returns:
        int: Number of newlines before the offset, plus one
    """
    offset = max(0, min(offset, len(source)))
    return source.count("\n", 0, offset) + 1


def normalize_newlines(source: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return source.replace("\r\n", "\n").replace("\r", "\n")


class LineIndex:
    """Line lookups over a source text.

    Gives the same answers as :func:`offset_to_line` but with a binary search
    over precomputed line starts, which matters for large documents.
    """

    def __init__(self, text: str):
        self.text = text
        self.starts = [0] + [m.end() for m in re.finditer("\n", text)]

    @property
    def total_lines(self) -> int:
        """Number of source lines (a trailing newline does not open a new one)."""
        count = self.text.count("\n")
        if not self.text.endswith("\n"):
            count += 1
        return max(count, 1)

    def line_of(self, offset: int) -> int:
        """1-based line number of a character offset."""
        offset = max(0, min(offset, len(self.text)))
        return bisect_right(self.starts, offset)

    def line_text(self, line: int) -> str:
        """Text of a 0-based line without its newline."""
        if line >= len(self.starts):
            return ""
        start = self.starts[line]
        end = self.starts[line + 1] - 1 if line + 1 < len(self.starts) else len(self.text)
        return self.text[start:end]

    def span_of_lines(self, first: int, last: int) -> tuple[int, int]:
        """Character span covering 0-based lines ``first..last`` inclusive."""
        last = max(first, min(last, len(self.starts) - 1))
        first = min(first, last)
        return self.starts[first], self.starts[last] + len(self.line_text(last))

    def block_span(self, line_map: list[int], quoted: bool = False) -> tuple[int, int]:
        """Span of a half-open line map, ignoring trailing blank lines.

        Inside a blockquote a line holding only ``>`` markers is blank too.
        """
        first, stop = line_map
        last = max(first, stop - 1)
        blank = " \t>" if quoted else " \t"
        while last > first and not self.line_text(last).strip(blank):
            last -= 1
        return self.span_of_lines(first, last)


def _footnote_label(token: Token) -> str:
    # Inline footnotes have no label; fall back to their 1-based number
    meta = token.meta or {}
    return str(meta.get("label") or meta.get("id", 0) + 1)


def _plain_text(tokens: list[Token]) -> str:
    """Literal text of inline tokens with all markup dropped."""
    parts = []
    for token in tokens:
        if token.type in ("text", "text_special", "code_inline"):
            parts.append(token.content)
        elif token.children:
            parts.append(_plain_text(token.children))
    return "".join(parts)


@lru_cache(maxsize=1)
def get_parser() -> MarkdownIt:
    """Shared markdown-it instance (commonmark + tables, strikethrough, footnotes, task lists)."""
    md = MarkdownIt("commonmark", {"html": True})
    md.enable("table").enable("strikethrough")
    md.use(footnote_plugin).use(tasklists_plugin)
    return md


class _TokenWalker:
    """Turn a markdown-it token list into positioned events."""

    def __init__(self, index: LineIndex):
        self.index = index
        self.spans: list[tuple[int, int]] = [(0, len(index.text))]
        self.quote_depth = 0

    @property
    def current_span(self) -> tuple[int, int]:
        return self.spans[-1]

    def walk(self, tokens: list[Token]) -> Iterator[Event]:
        for token in tokens:
            yield from self._block(token)

    def _span(self, token: Token) -> tuple[int, int]:
        if token.map:
            return self.index.block_span(token.map, quoted=self.quote_depth > 0)
        return self.current_span

    def _block(self, token: Token) -> Iterator[Event]:
        kind = token.type

        if kind == "inline":
            yield from self._inline(token)
            return

        if kind in ("fence", "code_block"):
            yield from self._code_block(token)
            return

        if kind == "hr":
            yield Event(EventKind.RULE, tag="rule", span=self._span(token))
            return

        if kind == "html_block":
            yield Event(EventKind.HTML, span=self._span(token), text=token.content)
            return

        if token.nesting == 0:
            # footnote_anchor and other leaf tokens carry nothing to render
            return

        base = kind[: -len("_open")] if token.nesting == 1 else kind[: -len("_close")]
        tag = _BLOCK_TAGS.get(base)
        if tag is None:
            return

        # Tight list paragraphs are not rendered as paragraphs
        if tag == "paragraph" and token.hidden:
            return

        if token.nesting == 1:
            if tag == "blockquote":
                self.quote_depth += 1
            span = self._span(token)
            self.spans.append(span)
            yield Event(EventKind.START, tag=tag, span=span, attrs=self._block_attrs(base, token))
        else:
            if tag == "blockquote":
                self.quote_depth = max(0, self.quote_depth - 1)
            span = self.spans.pop() if len(self.spans) > 1 else self.current_span
            yield Event(EventKind.END, tag=tag, span=span, attrs=self._block_attrs(base, token))

    def _block_attrs(self, base: str, token: Token) -> dict[str, Any]:
        if base == "heading":
            return {"level": int(token.tag[1:])}
        if base == "ordered_list":
            attrs: dict[str, Any] = {"ordered": True}
            start = token.attrGet("start")
            if start is not None:
                attrs["start"] = int(start)
            return attrs
        if base == "bullet_list":
            return {"ordered": False}
        if base in ("th", "td"):
            style = token.attrGet("style")
            return {"style": style} if style else {}
        if base == "footnote":
            return {"label": _footnote_label(token)}
        return {}

    def _code_block(self, token: Token) -> Iterator[Event]:
        attrs: dict[str, Any] = {}
        span = self._span(token)
        if token.type == "fence" and token.map:
            first, stop = token.map
            content_lines = len(token.content.splitlines())
            attrs["info"] = token.info.strip().split(maxsplit=1)[0] if token.info.strip() else ""
            attrs["closing_fence"] = stop > first + 1 + content_lines
            span = self.index.span_of_lines(first, first + content_lines)
        else:
            attrs["info"] = ""
            attrs["closing_fence"] = False

        yield Event(EventKind.START, tag="code_block", span=span, attrs=attrs)
        if token.content:
            yield Event(EventKind.TEXT, span=span, text=token.content)
        yield Event(EventKind.END, tag="code_block", span=span, attrs=attrs)

    def _inline(self, token: Token) -> Iterator[Event]:
        span = self._span(token)
        children = token.children or []
        after_marker = False

        for position, child in enumerate(children):
            kind = child.type

            if kind in ("text", "text_special"):
                content = child.content.lstrip(" \t") if after_marker else child.content
                after_marker = False
                if content:
                    yield Event(EventKind.TEXT, span=span, text=content)
            elif kind == "html_inline" and position == 0 and _TASK_CHECKBOX_CLASS in child.content:
                yield Event(EventKind.TASK_MARKER, span=span, attrs={"checked": "checked=" in child.content})
                after_marker = True
            elif kind == "code_inline":
                yield Event(EventKind.CODE, span=span, text=child.content)
            elif kind == "softbreak":
                yield Event(EventKind.SOFT_BREAK, span=span)
            elif kind == "hardbreak":
                yield Event(EventKind.HARD_BREAK, span=span)
            elif kind == "html_inline":
                yield Event(EventKind.HTML, span=span, text=child.content)
            elif kind == "image":
                attrs = {"src": child.attrGet("src") or "", "title": child.attrGet("title") or ""}
                yield Event(EventKind.START, tag="image", span=span, attrs=attrs)
                alt = _plain_text(child.children or [])
                if alt:
                    yield Event(EventKind.TEXT, span=span, text=alt)
                yield Event(EventKind.END, tag="image", span=span, attrs=attrs)
            elif kind == "footnote_ref":
                yield Event(EventKind.FOOTNOTE_REF, span=span, attrs={"label": _footnote_label(child)})
            elif kind.endswith("_open") or kind.endswith("_close"):
                opening = child.nesting == 1
                base = kind[: -len("_open")] if opening else kind[: -len("_close")]
                tag = _INLINE_TAGS.get(base)
                if tag is None:
                    continue
                attrs = {}
                if tag == "link" and opening:
                    attrs = {"href": child.attrGet("href") or "", "title": child.attrGet("title") or ""}
                yield Event(EventKind.START if opening else EventKind.END, tag=tag, span=span, attrs=attrs)


def iter_events(source: str) -> Iterator[Event]:
    """Parse Markdown and yield its events in document order.

    Spans index into the newline-normalized source, which has the same line
    numbering as the original for LF and CRLF files.

    Args:
        source: Markdown source text

    Yields:
        Event: Positioned parser events
    """
    text = normalize_newlines(source)
    tokens = get_parser().parse(text)
    yield from _TokenWalker(LineIndex(text)).walk(tokens)


def heading_level(event: Event) -> Optional[int]:
    """Heading level of a heading start/end event, else None."""
    if event.tag != "heading":
        return None
    return event.attrs.get("level")
