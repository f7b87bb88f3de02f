"""Markdown to HTML with source line annotations.

Every block element in the output carries ``data-lines="start-end"``, the
inclusive 1-based range of source lines it was rendered from. The copy handler
in the page uses these ranges to turn a selection back into Markdown.

The renderer consumes the positioned event stream in one pass and builds a
tree of element nodes. A node learns its start line when it opens and its end
line when it closes; the tree is serialized only after the whole stream has
been consumed, so no output ever has to be patched after the fact.
"""

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from marrow.markdown.events import Event, EventKind, LineIndex, iter_events, normalize_newlines
from marrow.markdown.images import resolve_image_url
from marrow.markdown.slug import slugify

logger = logging.getLogger(__name__)


def escape(text: str) -> str:
    """Escape text for HTML element content and attribute values."""
    return html.escape(text, quote=False).replace("\"", "&quot;")


@dataclass
class Node:
    """An element under construction.

    Attributes:
        tag: HTML tag name, or "" for the document root
        attrs: Attributes written before ``data-lines`` (values pre-escaped)
        start_line: First source line, or None for unannotated elements
        end_line: Last source line, filled in when the element closes
        children: Raw HTML strings and child nodes in order
        prefix: Markup written right after the opening tag
        suffix: Markup written right before the closing tag
        void: Self-closing element without content
    """

    tag: str
    attrs: list[tuple[str, str]] = field(default_factory=list)
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    children: list[Union["Node", str]] = field(default_factory=list)
    prefix: str = ""
    suffix: str = ""
    void: bool = False

    def serialize(self, total_lines: int) -> str:
        """Render this node and its children to HTML."""
        inner = "".join(
            child if isinstance(child, str) else child.serialize(total_lines)
            for child in self.children
        )
        if not self.tag:
            return inner

        attrs = list(self.attrs)
        if self.start_line is not None:
            start = min(max(self.start_line, 1), total_lines)
            end = self.end_line if self.end_line is not None else start
            end = min(max(end, start), total_lines)
            attrs.append(("data-lines", f"{start}-{end}"))
        attr_text = "".join(f' {name}="{value}"' for name, value in attrs)

        if self.void:
            return f"<{self.tag}{attr_text} />\n"
        return f"<{self.tag}{attr_text}>{self.prefix}{inner}{self.suffix}</{self.tag}>{_TRAILERS.get(self.tag, '')}"


# Whitespace after closing tags, for readable output
_TRAILERS = {
    "p": "\n",
    "h1": "\n",
    "h2": "\n",
    "h3": "\n",
    "h4": "\n",
    "h5": "\n",
    "h6": "\n",
    "blockquote": "\n",
    "ul": "\n",
    "ol": "\n",
    "li": "\n",
    "pre": "\n",
    "table": "\n",
    "section": "\n",
}


class MainSink:
    """Writes inline content into the innermost open block."""

    def __init__(self, stack: list[Node]):
        self.stack = stack

    def write(self, markup: str) -> None:
        self.stack[-1].children.append(markup)

    def text(self, raw: str) -> None:
        self.write(escape(raw))

    def code(self, raw: str) -> None:
        self.write(f"<code>{escape(raw)}</code>")

    def note_plain(self, raw: str) -> None:
        """Record text that counts toward heading text (ignored outside headings)."""
        pass


class HeadingSink(MainSink):
    """Buffers a heading's inline content and its plain text.

    The plain text (text events plus inline code literals) becomes the
    heading's anchor slug when the heading closes.
    """

    def __init__(self, node: Node):
        self.node = node
        self.plain: list[str] = []

    def write(self, markup: str) -> None:
        self.node.children.append(markup)

    def text(self, raw: str) -> None:
        super().text(raw)
        self.note_plain(raw)

    def code(self, raw: str) -> None:
        super().code(raw)
        self.note_plain(raw)

    def note_plain(self, raw: str) -> None:
        self.plain.append(raw)


class ImageAltSink(MainSink):
    """Collects an image's alt text; markup inside the alt text is dropped."""

    def __init__(self, parent: MainSink, src: str, title: str):
        self.parent = parent
        self.src = src
        self.title = title
        self.alt: list[str] = []

    def write(self, markup: str) -> None:
        pass

    def text(self, raw: str) -> None:
        self.alt.append(raw)
        self.parent.note_plain(raw)

    def code(self, raw: str) -> None:
        self.text(raw)

    def note_plain(self, raw: str) -> None:
        self.parent.note_plain(raw)

    def close(self) -> None:
        """Emit the finished image tag into the enclosing sink."""
        markup = f'<img src="{escape(self.src)}" alt="{escape("".join(self.alt))}"'
        if self.title:
            markup += f' title="{escape(self.title)}"'
        self.parent.write(markup + " />")


class AnnotatedRenderer:
    """Render a Markdown event stream to line-annotated HTML.

    A renderer instance handles one document; use :func:`render_markdown`
    for the common case.
    """

    def __init__(self, source: str, base_dir: Optional[Path | str] = None):
        """Initialize renderer.

        Args:
            source: Markdown source text
            base_dir: Directory used to resolve relative image paths
        """
        self.source = normalize_newlines(source)
        self.base_dir = base_dir
        self.index = LineIndex(self.source)
        self.root = Node(tag="")
        self.stack: list[Node] = [self.root]
        self.sinks: list[MainSink] = [MainSink(self.stack)]

    @property
    def sink(self) -> MainSink:
        return self.sinks[-1]

    def line(self, offset: int) -> int:
        return self.index.line_of(offset)

    def render(self, events: Optional[Iterable[Event]] = None) -> str:
        """Consume the event stream and return the HTML.

        Args:
            events: Pre-parsed events for this source (parsed if omitted)

        Returns:
            str: Annotated HTML fragment
        """
        if events is None:
            events = iter_events(self.source)

        for event in events:
            self.handle(event)

        if len(self.stack) > 1:
            logger.debug("Event stream ended with %d unclosed elements", len(self.stack) - 1)

        return self.root.serialize(self.index.total_lines)

    def handle(self, event: Event) -> None:
        """Dispatch a single event."""
        kind = event.kind

        if kind == EventKind.START:
            self.start(event)
        elif kind == EventKind.END:
            self.end(event)
        elif kind == EventKind.TEXT:
            self.sink.text(event.text)
        elif kind == EventKind.CODE:
            self.sink.code(event.text)
        elif kind == EventKind.SOFT_BREAK:
            self.sink.write("\n")
        elif kind == EventKind.HARD_BREAK:
            self.sink.write("<br />\n")
        elif kind == EventKind.HTML:
            self.sink.write(event.text)
        elif kind == EventKind.RULE:
            start = self.line(event.span[0])
            self.stack[-1].children.append(
                Node(tag="hr", start_line=start, end_line=self.line(event.span[1]), void=True)
            )
        elif kind == EventKind.FOOTNOTE_REF:
            label = escape(event.attrs["label"])
            self.sink.write(f'<sup class="footnote-ref"><a href="#fn-{label}">[{label}]</a></sup>')
        elif kind == EventKind.TASK_MARKER:
            checked = " checked" if event.attrs.get("checked") else ""
            self.sink.write(f'<input type="checkbox"{checked} disabled /> ')

    # Block and inline starts

    def start(self, event: Event) -> None:
        tag = event.tag
        start_line = self.line(event.span[0])

        if tag == "paragraph":
            self.open(Node(tag="p", start_line=start_line))
        elif tag == "heading":
            node = self.open(Node(tag=f"h{event.attrs['level']}", start_line=start_line))
            self.sinks.append(HeadingSink(node))
        elif tag == "blockquote":
            self.open(Node(tag="blockquote", start_line=start_line, prefix="\n"))
        elif tag == "list":
            attrs = []
            if event.attrs.get("ordered") and event.attrs.get("start", 1) != 1:
                attrs.append(("start", str(event.attrs["start"])))
            tag_name = "ol" if event.attrs.get("ordered") else "ul"
            self.open(Node(tag=tag_name, attrs=attrs, start_line=start_line, prefix="\n"))
        elif tag == "item":
            self.open(Node(tag="li", start_line=start_line))
        elif tag == "code_block":
            self.open(self.code_block_node(event, start_line))
        elif tag == "table":
            self.open(Node(tag="table", start_line=start_line))
        elif tag == "thead":
            self.open(Node(tag="thead"))
        elif tag == "tbody":
            self.open(Node(tag="tbody"))
        elif tag == "row":
            self.open(Node(tag="tr"))
        elif tag == "cell":
            cell = "th" if self.inside("thead") else "td"
            attrs = [("style", escape(event.attrs["style"]))] if event.attrs.get("style") else []
            self.open(Node(tag=cell, attrs=attrs))
        elif tag == "footnote_block":
            self.open(Node(tag="section", attrs=[("class", "footnotes")], prefix="\n"))
        elif tag == "footnote_definition":
            label = escape(event.attrs["label"])
            self.open(
                Node(
                    tag="div",
                    attrs=[("class", "footnote-definition"), ("id", f"fn-{label}")],
                    prefix=f'<sup class="footnote-definition-label">{label}</sup>',
                )
            )
        elif tag == "emphasis":
            self.sink.write("<em>")
        elif tag == "strong":
            self.sink.write("<strong>")
        elif tag == "strikethrough":
            self.sink.write("<del>")
        elif tag == "link":
            markup = f'<a href="{escape(event.attrs["href"])}"'
            if event.attrs.get("title"):
                markup += f' title="{escape(event.attrs["title"])}"'
            self.sink.write(markup + ">")
        elif tag == "image":
            src = resolve_image_url(event.attrs["src"], self.base_dir)
            self.sinks.append(ImageAltSink(self.sink, src, event.attrs.get("title", "")))

    def code_block_node(self, event: Event, start_line: int) -> Node:
        info = event.attrs.get("info", "")
        if info == "math":
            return Node(
                tag="div",
                attrs=[("class", "math-block")],
                start_line=start_line,
                prefix="$$",
                suffix="$$",
            )
        prefix = f'<code class="language-{escape(info)}">' if info else "<code>"
        return Node(tag="pre", start_line=start_line, prefix=prefix, suffix="</code>")

    # Block and inline ends

    def end(self, event: Event) -> None:
        tag = event.tag

        if tag == "emphasis":
            self.sink.write("</em>")
        elif tag == "strong":
            self.sink.write("</strong>")
        elif tag == "strikethrough":
            self.sink.write("</del>")
        elif tag == "link":
            self.sink.write("</a>")
        elif tag == "image":
            sink = self.sinks.pop()
            if isinstance(sink, ImageAltSink):
                sink.close()
        elif len(self.stack) > 1:
            node = self.stack.pop()
            end_line = self.line(event.span[1])

            if tag == "code_block":
                # The closing fence is part of the copyable block
                if event.attrs.get("closing_fence"):
                    end_line += 1
                node.end_line = end_line
            elif tag == "heading":
                sink = self.sinks.pop()
                if isinstance(sink, HeadingSink):
                    slug = slugify("".join(sink.plain))
                    if slug:
                        node.attrs.insert(0, ("id", slug))
                node.end_line = end_line
            elif node.start_line is not None:
                node.end_line = end_line

    def open(self, node: Node) -> Node:
        """Attach a node to the innermost open element and make it current."""
        self.stack[-1].children.append(node)
        self.stack.append(node)
        return node

    def inside(self, tag: str) -> bool:
        """Whether any open element has the given tag."""
        return any(node.tag == tag for node in self.stack)


def render_markdown(source: str, base_dir: Optional[Path | str] = None) -> str:
    """Render Markdown to HTML annotated with source line ranges.

    Never raises on malformed Markdown; whatever the parser produces is
    rendered as well as possible.

    Args:
        source: Markdown source text
        base_dir: Directory used to resolve relative image paths

    Returns:
        str: HTML fragment
    """
    return AnnotatedRenderer(source, base_dir).render()
