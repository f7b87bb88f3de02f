"""Full HTML page assembly."""

import json
import re
from typing import Optional

from marrow.markdown.events import normalize_newlines
from marrow.markdown.renderer import escape
from marrow.models import TocEntry, ViewSettings

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>{css}</style>
</head>
<body>
<nav id="toc" class="toc">{toc}</nav>
<main id="content">
<article id="github-view" class="markdown-body" style="display:{md_display}">{github_view}</article>
<pre id="terminal-view" class="terminal-view" style="display:none">{terminal_view}</pre>
<article id="notebook-view" class="notebook-view" style="display:{nb_display}">{notebook_view}</article>
</main>
<script>
const markdownLines = [{markdown_lines}];
const settings = {settings};
</script>
<script>{js}</script>
</body>
</html>
"""


def build_toc_html(toc: list[TocEntry]) -> str:
    """Render TOC entries as sidebar links.

    Args:
        toc: Headings in document order

    Returns:
        str: Concatenated ``<a>`` elements
    """
    return "".join(
        f'<a href="#" onclick="scrollToHeading(\'{entry.slug}\'); return false;" '
        f'class="toc-item toc-level-{entry.level}">{escape(entry.text)}</a>'
        for entry in toc
    )


def build_settings_json(settings: ViewSettings, extension: str) -> str:
    """Serialize view settings for the page, tagged with the file extension."""
    data = settings.model_dump()
    data["extension"] = extension
    return json.dumps(data).replace("</", "<\\/")


def markdown_lines_json(source: str) -> str:
    """Source lines as comma-separated JSON strings for the copy handler.

    Lines are split exactly as the renderer numbers them, so ``data-lines``
    ranges index straight into this array.
    """
    lines = normalize_newlines(source).split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    # "</" would end the surrounding <script> element early
    return ",".join(json.dumps(line).replace("</", "<\\/") for line in lines)


def build_page(
    *,
    toc: list[TocEntry],
    settings: ViewSettings,
    extension: str,
    markdown_source: Optional[str] = None,
    markdown_html: str = "",
    notebook_html: str = "",
    title: str = "Marrow",
    css: str = "",
    js: str = "",
) -> str:
    """Assemble the full page handed to the webview.

    Markdown documents fill the rendered and raw-source views and embed the
    source lines so a selection can be copied back as Markdown; notebooks
    only fill the notebook view.

    Args:
        toc: Headings for the sidebar
        settings: View settings for this document's extension
        extension: File extension of the document
        markdown_source: Markdown text, for Markdown documents
        markdown_html: Rendered Markdown
        notebook_html: Rendered notebook
        title: Document title
        css: Stylesheet text
        js: Script text

    Returns:
        str: Complete HTML document
    """
    is_markdown = markdown_source is not None
    values = {
        "title": escape(title),
        "css": css,
        "toc": build_toc_html(toc),
        "md_display": "block" if is_markdown else "none",
        "nb_display": "none" if is_markdown else "block",
        "github_view": markdown_html if is_markdown else "",
        "terminal_view": escape(markdown_source) if is_markdown else "",
        "notebook_view": "" if is_markdown else notebook_html,
        "markdown_lines": markdown_lines_json(markdown_source) if is_markdown else "",
        "settings": build_settings_json(settings, extension),
        "js": js,
    }
    # Single pass, so placeholder-like text inside documents is left alone
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), PAGE_TEMPLATE)
