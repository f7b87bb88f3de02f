"""Notebook to HTML rendering."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from marrow.config import MarrowConfig, get_config
from marrow.markdown.renderer import escape, render_markdown
from marrow.markdown.toc import extract_toc
from marrow.models import CellOutput, Notebook, NotebookCell, TocEntry
from marrow.notebook.ansi import ansi_to_html
from marrow.notebook.paginator import OutputPaginator

logger = logging.getLogger(__name__)

ERROR_COLOR = "#e06c75"


def split_lines(text: str) -> list[str]:
    """Split output text into lines; a trailing newline adds no empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def strip_pre_wrapper(html: str) -> str:
    """Remove an outer ``<pre ...>`` element from HTML output, keeping its content.

    pandas and friends wrap plain-looking HTML output in a styled ``<pre>``
    which clashes with the notebook's own output styling.
    """
    trimmed = html.strip()
    if trimmed.startswith("<pre") and trimmed.endswith("</pre>"):
        tag_end = trimmed.find(">")
        if tag_end != -1:
            return trimmed[tag_end + 1 : -len("</pre>")].rstrip("\n")
    return html


@dataclass
class NotebookRender:
    """Result of rendering a notebook.

    Attributes:
        html: Notebook HTML fragment
        toc: Headings of all markdown cells, in order
        paginator: Truncated outputs that the page can expand
    """

    html: str
    toc: list[TocEntry]
    paginator: OutputPaginator


class NotebookRenderer:
    """Render notebook cells and outputs to HTML.

    Markdown cells go through the annotated Markdown renderer; code and raw
    cells and all outputs are rendered here. Long text outputs are handed to
    an :class:`OutputPaginator`.
    """

    def __init__(
        self,
        base_dir: Optional[Path | str] = None,
        config: Optional[MarrowConfig] = None,
    ):
        """Initialize notebook renderer.

        Args:
            base_dir: Directory of the notebook, for images in markdown cells
            config: Configuration supplying truncation thresholds
        """
        self.base_dir = base_dir
        self.config = config or get_config()

    def render(self, notebook: Notebook) -> NotebookRender:
        """Render a whole notebook.

        Args:
            notebook: Parsed notebook

        Returns:
            NotebookRender: HTML, table of contents and truncated outputs
        """
        paginator = OutputPaginator(self.config)
        toc: list[TocEntry] = []
        parts = ['<div class="notebook">\n']

        for cell_index, cell in enumerate(notebook.cells):
            if cell.cell_type == "markdown":
                toc.extend(extract_toc(cell.source))
                parts.append(self.render_markdown_cell(cell, cell_index))
            elif cell.cell_type == "code":
                parts.append(self.render_code_cell(cell, cell_index, paginator))
            elif cell.cell_type == "raw":
                parts.append(self.render_raw_cell(cell, cell_index))
            else:
                logger.debug("Skipping cell %d of unknown type %r", cell_index, cell.cell_type)

        parts.append("</div>\n")
        return NotebookRender(html="".join(parts), toc=toc, paginator=paginator)

    def render_markdown_cell(self, cell: NotebookCell, cell_index: int) -> str:
        rendered = render_markdown(cell.source, self.base_dir)
        return (
            f'<div class="nb-cell nb-markdown-cell" data-cell-idx="{cell_index}">\n'
            f"{rendered}\n"
            "</div>\n"
        )

    def render_raw_cell(self, cell: NotebookCell, cell_index: int) -> str:
        return (
            f'<div class="nb-cell nb-raw-cell" data-cell-idx="{cell_index}">\n'
            f'    <div class="nb-raw-content">{escape(cell.source)}</div>\n'
            "</div>\n"
        )

    def render_code_cell(self, cell: NotebookCell, cell_index: int, paginator: OutputPaginator) -> str:
        exec_count = str(cell.execution_count) if cell.execution_count is not None else " "
        parts = [
            f'<div class="nb-cell nb-code-cell" data-cell-idx="{cell_index}">\n'
            '    <div class="nb-cell-header">\n'
            f'        <span class="nb-prompt nb-in">In [{exec_count}]:</span>\n'
            '        <button class="nb-collapse-btn">▼</button>\n'
            "    </div>\n"
            '    <div class="nb-input">\n'
            f'        <pre><code class="language-python">{escape(cell.source)}</code></pre>\n'
            "    </div>\n"
        ]

        if cell.outputs:
            parts.append('    <div class="nb-outputs">\n')
            for output_index, output in enumerate(cell.outputs):
                parts.append(self.render_output(output, exec_count, cell_index, output_index, paginator))
            parts.append("    </div>\n")

        parts.append("</div>\n")
        return "".join(parts)

    def render_output(
        self,
        output: CellOutput,
        exec_count: str,
        cell_index: int,
        output_index: int,
        paginator: OutputPaginator,
    ) -> str:
        """Render one output of a code cell.

        Rich outputs prefer PNG, then JPEG, then HTML, then plain text.
        Images and HTML are never truncated; text, streams and errors are
        truncated once they exceed the configured line threshold.

        Args:
            output: The output to render
            exec_count: Execution counter shown in the Out[] prompt
            cell_index: Index of the owning cell
            output_index: Index of the output within the cell
            paginator: Receives outputs that need truncation

        Returns:
            str: Output HTML (empty for unsupported outputs)
        """
        kind = output.output_type

        if kind == "stream":
            if output.text is None:
                return ""
            return self.render_text(
                output.text, "nb-output nb-output-stream", "", cell_index, output_index, paginator
            )

        if kind in ("execute_result", "display_data"):
            data = output.data or {}
            prompt = ""
            if kind == "execute_result":
                prompt = (
                    '<div class="nb-output-header">'
                    f'<span class="nb-prompt nb-out">Out[{exec_count}]:</span></div>'
                )

            for mime in ("image/png", "image/jpeg"):
                if mime in data:
                    payload = data[mime].replace("\n", "")
                    return (
                        '        <div class="nb-output nb-output-image">\n'
                        f'            <img src="data:{mime};base64,{payload}" class="nb-figure" alt="output">\n'
                        "        </div>\n"
                    )

            if "text/html" in data:
                return (
                    '        <div class="nb-output nb-output-html">\n'
                    f"            {prompt}\n"
                    f'            <div class="nb-output-content">{strip_pre_wrapper(data["text/html"])}</div>\n'
                    "        </div>\n"
                )

            if "text/plain" in data:
                return self.render_text(
                    data["text/plain"], "nb-output nb-output-text", prompt, cell_index, output_index, paginator
                )
            return ""

        if kind == "error":
            lines: list[str] = []
            if output.ename is not None:
                first_line = f'<span style="color:{ERROR_COLOR};font-weight:bold">{escape(output.ename)}</span>'
                if output.evalue is not None:
                    first_line += f": {escape(output.evalue)}"
                lines.append(first_line)
            lines.extend(ansi_to_html(line) for line in output.traceback or [])

            if paginator.needs_truncation(len(lines)):
                return self.render_truncated(
                    lines, "nb-output nb-output-error", "", cell_index, output_index, paginator
                )
            error_html = "\n".join(lines)
            return (
                '        <div class="nb-output nb-output-error">\n'
                f'            <div class="nb-output-content">{error_html}</div>\n'
                "        </div>\n"
            )

        logger.debug("Skipping output %d:%d of unknown type %r", cell_index, output_index, kind)
        return ""

    def render_text(
        self,
        text: str,
        css_class: str,
        prompt: str,
        cell_index: int,
        output_index: int,
        paginator: OutputPaginator,
    ) -> str:
        lines = [escape(line) for line in split_lines(text)]
        if paginator.needs_truncation(len(lines)):
            return self.render_truncated(lines, css_class, prompt, cell_index, output_index, paginator)

        prompt_line = f"            {prompt}\n" if prompt else ""
        return (
            f'        <div class="{css_class}">\n'
            f"{prompt_line}"
            f'            <div class="nb-output-content">{escape(text)}</div>\n'
            "        </div>\n"
        )

    def render_truncated(
        self,
        lines: list[str],
        css_class: str,
        prompt: str,
        cell_index: int,
        output_index: int,
        paginator: OutputPaginator,
    ) -> str:
        """Render head and tail of a long output with controls for the middle."""
        view = paginator.truncate(cell_index, output_index, lines)
        step = self.config.reveal_step
        head = "\n".join(view.head)
        tail = "\n".join(view.tail)
        return (
            f'        <div class="{css_class}" data-cell-idx="{cell_index}" data-output-idx="{output_index}">\n'
            f"            {prompt}\n"
            f'            <div class="nb-output-content"><div class="nb-output-head">{head}</div>\n'
            '            <div class="nb-output-truncated">\n'
            f'                <span class="nb-truncated-info">{view.hidden} lines hidden</span>\n'
            f'                <button class="nb-show-more" data-amount="{step}">Show {step} more</button>\n'
            '                <button class="nb-show-all">Show all</button>\n'
            "            </div>\n"
            f'            <div class="nb-output-tail">{tail}</div></div>\n'
            "        </div>\n"
        )


def render_notebook(
    notebook: Notebook,
    base_dir: Optional[Path | str] = None,
    config: Optional[MarrowConfig] = None,
) -> NotebookRender:
    """Render a notebook to HTML.

    Args:
        notebook: Parsed notebook
        base_dir: Directory of the notebook file
        config: Configuration supplying truncation thresholds

    Returns:
        NotebookRender: HTML, table of contents and truncated outputs
    """
    return NotebookRenderer(base_dir=base_dir, config=config).render(notebook)
