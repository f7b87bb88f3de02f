"""Tests for full page assembly."""

import json

from marrow.models import TocEntry, ViewSettings
from marrow.page import build_page, build_settings_json, build_toc_html, markdown_lines_json


class TestBuildTocHtml:
    """Tests for build_toc_html function."""

    def test_links(self):
        """Test entries link to their heading slug with a level class."""
        html = build_toc_html([TocEntry(level=2, text="A & B")])

        assert html == (
            '<a href="#" onclick="scrollToHeading(\'a-b\'); return false;" '
            'class="toc-item toc-level-2">A &amp; B</a>'
        )

    def test_empty(self):
        """Test an empty TOC renders nothing."""
        assert build_toc_html([]) == ""


class TestEmbeddedData:
    """Tests for data embedded in the page scripts."""

    def test_settings_json(self):
        """Test settings carry the document extension."""
        data = json.loads(build_settings_json(ViewSettings(), "ipynb"))

        assert data["extension"] == "ipynb"
        assert data["theme"] == "dark"

    def test_markdown_lines(self):
        """Test each source line becomes one JSON string."""
        assert markdown_lines_json("a\r\n\"b\"\n") == '"a","\\"b\\""'

    def test_script_end_escaped(self):
        """Test closing tags in the source cannot end the script early."""
        assert "</script>" not in markdown_lines_json("</script>")


class TestBuildPage:
    """Tests for build_page function."""

    def test_markdown_page(self):
        """Test a Markdown page shows the rendered view and embeds lines."""
        page = build_page(
            toc=[TocEntry(level=1, text="T")],
            settings=ViewSettings(),
            extension="md",
            markdown_source="# T\n",
            markdown_html='<h1 id="t" data-lines="1-1">T</h1>\n',
            title="T · a.md · Marrow",
        )

        assert page.startswith("<!DOCTYPE html>")
        assert "<title>T · a.md · Marrow</title>" in page
        assert '<article id="github-view" class="markdown-body" style="display:block"><h1 id="t"' in page
        assert 'style="display:none"></article>' in page
        assert 'const markdownLines = ["# T"];' in page
        assert "scrollToHeading('t')" in page

    def test_notebook_page(self):
        """Test a notebook page only fills the notebook view."""
        page = build_page(
            toc=[],
            settings=ViewSettings(),
            extension="ipynb",
            notebook_html='<div class="notebook"></div>',
        )

        assert '<article id="notebook-view" class="notebook-view" style="display:block"><div class="notebook">' in page
        assert "const markdownLines = [];" in page

    def test_placeholders_in_content_kept(self):
        """Test placeholder-like text in documents is not substituted."""
        page = build_page(
            toc=[],
            settings=ViewSettings(),
            extension="md",
            markdown_source="{css}",
            markdown_html="<p>{js}</p>",
            css="body{}",
            js="run()",
        )

        assert "<p>{js}</p>" in page
        assert "<style>body{}</style>" in page
        assert "<script>run()</script>" in page

    def test_terminal_view_escaped(self):
        """Test the raw source view is escaped."""
        page = build_page(toc=[], settings=ViewSettings(), extension="md", markdown_source="<b>")

        assert '<pre id="terminal-view" class="terminal-view" style="display:none">&lt;b&gt;</pre>' in page
