"""Tests for data models."""

import pytest
from pydantic import ValidationError

from marrow.models import (
    AllSettings,
    CellOutput,
    NotebookCell,
    RevealFragment,
    TocEntry,
    ViewSettings,
)


class TestCellOutput:
    """Tests for CellOutput model."""

    def test_text_list_joined(self):
        """Test stream text given as a list is joined."""
        output = CellOutput(output_type="stream", text=["a\n", "b\n"])
        assert output.text == "a\nb\n"

    def test_data_payloads_joined(self):
        """Test list payloads in data are joined."""
        output = CellOutput(output_type="display_data", data={"text/plain": ["x", "y"]})
        assert output.data == {"text/plain": "xy"}

    def test_extra_fields_ignored(self):
        """Test unknown output fields are ignored."""
        output = CellOutput.model_validate({"output_type": "stream", "metadata": {"a": 1}})
        assert output.text is None


class TestNotebookCell:
    """Tests for NotebookCell model."""

    def test_defaults(self):
        """Test a cell needs only its type."""
        cell = NotebookCell(cell_type="markdown")
        assert cell.source == ""
        assert cell.outputs == []
        assert cell.execution_count is None


class TestTocEntry:
    """Tests for TocEntry model."""

    def test_slug(self):
        """Test the slug is derived from the text."""
        assert TocEntry(level=2, text="Getting Started!").slug == "getting-started"

    @pytest.mark.parametrize("level", [0, 7])
    def test_level_bounds(self, level):
        """Test heading levels outside 1-6 are rejected."""
        with pytest.raises(ValidationError):
            TocEntry(level=level, text="x")


class TestRevealFragment:
    """Tests for RevealFragment model."""

    def test_negative_hidden_rejected(self):
        """Test the hidden count cannot be negative."""
        with pytest.raises(ValidationError):
            RevealFragment(cell_index=0, output_index=0, lines_html="", hidden_remaining=-1, is_complete=True)


class TestSettingsModels:
    """Tests for ViewSettings and AllSettings models."""

    def test_view_defaults(self):
        """Test default view settings."""
        settings = ViewSettings()
        assert (settings.window_width, settings.window_height) == (800.0, 900.0)
        assert settings.toc_visible is True
        assert settings.view_mode == "github"
        assert settings.font_size_level == 0
        assert settings.theme == "dark"

    def test_extension_fallback(self):
        """Test unknown extensions get the default settings."""
        all_settings = AllSettings()
        assert all_settings.get_for_extension("md") == ViewSettings()

    def test_set_for_extension(self):
        """Test settings are stored per extension."""
        all_settings = AllSettings()
        custom = ViewSettings(theme="light")

        all_settings.set_for_extension("ipynb", custom)

        assert all_settings.get_for_extension("ipynb").theme == "light"
        assert all_settings.get_for_extension("md").theme == "dark"
