"""Tests for document loading and views."""

import json

import pytest

from marrow.models import TocEntry, ViewSettings
from marrow.settings import SettingsStore
from marrow.view import (
    WELCOME_DOCUMENT,
    load_source,
    open_document,
    truncate_end,
    truncate_middle,
    window_title,
)


class TestTitles:
    """Tests for window title helpers."""

    def test_truncate_end(self):
        """Test long text is cut with a trailing ellipsis."""
        assert truncate_end("short", 20) == "short"
        assert truncate_end("a" * 25, 20) == "a" * 19 + "…"

    def test_truncate_middle(self):
        """Test long names keep their start and extension."""
        result = truncate_middle("a_very_long_file_name_here.md", 20)

        assert len(result) == 20
        assert result.startswith("a_very_lo")
        assert result.endswith("here.md")
        assert "…" in result

    def test_title_with_heading(self):
        """Test the first heading leads the title."""
        toc = [TocEntry(level=1, text="Intro"), TocEntry(level=2, text="More")]

        assert window_title(toc, "notes.md") == "Intro · notes.md · Marrow"

    def test_title_without_heading(self):
        """Test documents without headings are titled by file name."""
        assert window_title([], "notes.md") == "notes.md · Marrow"


class TestLoadSource:
    """Tests for load_source function."""

    def test_welcome(self):
        """Test no path gives the welcome document."""
        assert load_source(None) == (WELCOME_DOCUMENT, "Marrow")

    def test_markdown_file(self, tmp_path):
        """Test Markdown files are returned as is."""
        path = tmp_path / "doc.md"
        path.write_text("# Doc\n")

        assert load_source(path) == ("# Doc\n", "doc.md")

    def test_missing_file(self, tmp_path):
        """Test unreadable files produce an error document."""
        text, name = load_source(tmp_path / "missing.md")

        assert text.startswith("# Error\n\nCould not load file:")
        assert name == "Error"

    def test_notebook_as_markdown(self, notebook_file):
        """Test notebooks are converted to Markdown."""
        text, name = load_source(notebook_file)

        assert text.startswith("# Analysis")
        assert name == "analysis.ipynb"

    def test_invalid_notebook(self, tmp_path):
        """Test malformed notebooks produce an error document."""
        path = tmp_path / "bad.ipynb"
        path.write_text("not json")

        text, _ = load_source(path)

        assert text.startswith("# Error\n\nCould not parse notebook:")


class TestOpenDocument:
    """Tests for open_document function."""

    def test_markdown_view(self, tmp_path):
        """Test a Markdown document renders into a full page."""
        path = tmp_path / "notes.md"
        path.write_text("# Intro\n\nSome **text**.\n")

        view = open_document(path)

        assert view.extension == "md"
        assert view.title == "Intro · notes.md · Marrow"
        assert '<p data-lines="3-3">Some <strong>text</strong>.</p>' in view.body_html
        assert view.body_html in view.page_html
        assert view.source == "# Intro\n\nSome **text**.\n"
        assert len(view.paginator) == 0

    def test_welcome_view(self):
        """Test opening nothing shows the welcome page."""
        view = open_document(None)

        assert view.path is None
        assert view.toc[0].text == "Welcome to Marrow"
        assert "<code>.ipynb</code>" in view.body_html

    def test_relative_images(self, tmp_path):
        """Test images are resolved next to the document."""
        (tmp_path / "img.png").write_bytes(b"png")
        path = tmp_path / "doc.markdown"
        path.write_text("![x](img.png)\n")

        view = open_document(path)

        assert "data:image/png;base64," in view.body_html
        assert view.extension == "markdown"

    def test_notebook_view(self, notebook_file):
        """Test notebooks render natively with paginated outputs."""
        view = open_document(notebook_file)

        assert view.extension == "ipynb"
        assert view.source is None
        assert view.title == "Analysis · analysis.ipynb · Marrow"
        assert '<div class="notebook">' in view.page_html
        assert view.paginator.keys() == [(2, 0)]

    def test_notebook_reveal(self, notebook_file):
        """Test reveal requests are served from the view's outputs."""
        view = open_document(notebook_file)

        fragment = view.reveal(2, 0, "50")

        assert fragment.lines_html.startswith("line 200\n")
        assert fragment.hidden_remaining == 40
        assert view.reveal(0, 0, "50") is None

    def test_views_are_independent(self, notebook_file):
        """Test two views of the same file keep separate reveal state."""
        first = open_document(notebook_file)
        second = open_document(notebook_file)

        first.reveal(2, 0, "all")

        assert second.reveal(2, 0, "50").hidden_remaining == 40

    def test_broken_notebook(self, tmp_path):
        """Test a broken notebook opens as an error page."""
        path = tmp_path / "broken.ipynb"
        path.write_text(json.dumps({"nbformat": 4, "cells": "nope"}))

        view = open_document(path)

        assert "Could not parse notebook" in view.body_html
        assert view.toc[0].text == "Error"

    def test_missing_notebook(self, tmp_path):
        """Test a missing notebook opens as an error page."""
        view = open_document(tmp_path / "gone.ipynb")

        assert "Could not load file" in view.body_html

    def test_settings_for_extension(self, tmp_path):
        """Test the view uses settings saved for its extension."""
        store = SettingsStore(tmp_path / "settings.json")
        store.set("md", ViewSettings(theme="light", toc_visible=False, window_width=700))
        path = tmp_path / "a.md"
        path.write_text("text")

        view = open_document(path, settings_store=store)

        assert view.settings.theme == "light"
        assert view.window_size == (700.0, 900.0)
        assert '"theme": "light"' in view.page_html

    @pytest.mark.parametrize("name", ["notes.MD", "notes.Md"])
    def test_extension_lowercased(self, tmp_path, name):
        """Test settings are looked up by lowercase extension."""
        path = tmp_path / name
        path.write_text("x")

        assert open_document(path).extension == "md"
