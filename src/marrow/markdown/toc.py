"""Table-of-contents extraction."""

from typing import Iterable, Optional

from marrow.markdown.events import Event, EventKind, heading_level, iter_events
from marrow.models.document import TocEntry


def extract_toc(source: str) -> list[TocEntry]:
    """Collect the headings of a Markdown document.

    Heading text is accumulated from text events and inline code literals
    only, the same rule the renderer uses for anchor slugs. Headings whose
    text is empty are left out.

    Args:
        source: Markdown source text

    Returns:
        list[TocEntry]: Headings in document order
    """
    return toc_from_events(iter_events(source))


def toc_from_events(events: Iterable[Event]) -> list[TocEntry]:
    """Collect TOC entries from an already parsed event stream."""
    toc: list[TocEntry] = []
    level: Optional[int] = None
    parts: list[str] = []

    for event in events:
        if event.kind == EventKind.START and event.tag == "heading":
            level = heading_level(event)
            parts = []
        elif event.kind == EventKind.END and event.tag == "heading":
            text = "".join(parts)
            if level is not None and text:
                toc.append(TocEntry(level=level, text=text))
            level = None
        elif level is not None and event.kind in (EventKind.TEXT, EventKind.CODE):
            parts.append(event.text)

    return toc
