"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from marrow import __version__
from marrow.cli import main


@pytest.fixture
def runner(settings_path):
    """CLI runner with settings kept in a temporary directory."""
    return CliRunner()


@pytest.fixture
def markdown_file(tmp_path):
    path = tmp_path / "guide.md"
    path.write_text("# Guide\n\n## Install `pkg`\n\nRun it.\n", encoding="utf-8")
    return path


class TestRender:
    """Tests for the render command."""

    def test_render_to_stdout(self, runner, markdown_file):
        """Test the page is written to stdout by default."""
        result = runner.invoke(main, ["render", str(markdown_file)])

        assert result.exit_code == 0
        assert "<!DOCTYPE html>" in result.output
        assert '<h2 id="install-pkg" data-lines="3-3">' in result.output

    def test_render_to_file_with_assets(self, runner, markdown_file, tmp_path):
        """Test output file, stylesheet and script options."""
        css = tmp_path / "style.css"
        css.write_text("body { color: red; }")
        js = tmp_path / "app.js"
        js.write_text("console.log('hi');")
        out = tmp_path / "out" / "guide.html"

        result = runner.invoke(main, ["render", str(markdown_file), "-o", str(out), "--css", str(css), "--js", str(js)])

        assert result.exit_code == 0
        page = out.read_text(encoding="utf-8")
        assert "<style>body { color: red; }</style>" in page
        assert "<script>console.log('hi');</script>" in page

    def test_render_notebook(self, runner, notebook_file):
        """Test notebooks render with truncation controls."""
        result = runner.invoke(main, ["render", str(notebook_file)])

        assert result.exit_code == 0
        assert "90 lines hidden" in result.output

    def test_render_with_undecodable_settings(self, runner, markdown_file, settings_path):
        """Test a settings file that is not UTF-8 falls back to defaults."""
        settings_path.parent.mkdir(parents=True)
        settings_path.write_bytes(b"\xff\xfe{")

        result = runner.invoke(main, ["render", str(markdown_file)])

        assert result.exit_code == 0
        assert '"theme": "dark"' in result.output

    def test_render_missing_file(self, runner, tmp_path):
        """Test a missing path is rejected."""
        result = runner.invoke(main, ["render", str(tmp_path / "nope.md")])

        assert result.exit_code != 0


class TestToc:
    """Tests for the toc command."""

    def test_toc_table(self, runner, markdown_file):
        """Test headings and anchors are listed."""
        result = runner.invoke(main, ["toc", str(markdown_file)])

        assert result.exit_code == 0
        assert "Guide" in result.output
        assert "install-pkg" in result.output

    def test_toc_empty(self, runner, tmp_path):
        """Test documents without headings say so."""
        path = tmp_path / "plain.md"
        path.write_text("no headings")

        result = runner.invoke(main, ["toc", str(path)])

        assert result.exit_code == 0
        assert "No headings found" in result.output


class TestExportMarkdown:
    """Tests for the export-markdown command."""

    def test_export_to_file(self, runner, notebook_file, tmp_path):
        """Test the notebook is written as Markdown."""
        out = tmp_path / "analysis.md"

        result = runner.invoke(main, ["export-markdown", str(notebook_file), "-o", str(out)])

        assert result.exit_code == 0
        text = out.read_text(encoding="utf-8")
        assert text.startswith("# Analysis")
        assert "```python\nimport numpy as np\n```" in text

    def test_export_invalid_notebook(self, runner, tmp_path):
        """Test parse failures exit with an error."""
        path = tmp_path / "bad.ipynb"
        path.write_text("{broken")

        result = runner.invoke(main, ["export-markdown", str(path)])

        assert result.exit_code == 1
        assert "Export Failed" in result.output


class TestConfigShow:
    """Tests for the config-show command."""

    def test_config_show(self, runner):
        """Test configuration values are printed."""
        result = runner.invoke(main, ["config-show"])

        assert result.exit_code == 0
        assert "Truncate Threshold" in result.output
        assert "290" in result.output

    def test_invalid_config(self, runner, monkeypatch):
        """Test invalid configuration exits with an error."""
        monkeypatch.setenv("MARROW_HEAD_LINES", "400")

        result = runner.invoke(main, ["config-show"])

        assert result.exit_code == 1
        assert "Invalid Configuration" in result.output


def test_version(runner):
    """Test the version option."""
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
