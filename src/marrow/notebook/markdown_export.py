"""Notebook to Markdown conversion."""

from marrow.models import CellOutput, Notebook
from marrow.notebook.ansi import strip_ansi_codes

CELL_SEPARATOR = "\n---\n\n"


def _fenced(text: str, info: str = "") -> str:
    body = text if text.endswith("\n") else text + "\n"
    return f"```{info}\n{body}```\n\n"


def _output_to_markdown(output: CellOutput) -> str:
    kind = output.output_type

    if kind == "stream":
        return _fenced(output.text) if output.text is not None else ""

    if kind in ("execute_result", "display_data"):
        data = output.data or {}
        for mime in ("image/png", "image/jpeg"):
            if mime in data:
                payload = data[mime].replace("\n", "")
                return f"![output](data:{mime};base64,{payload})\n\n"
        if "text/plain" in data:
            return _fenced(data["text/plain"])
        return ""

    if kind == "error":
        lines = []
        if output.ename is not None:
            header = output.ename
            if output.evalue is not None:
                header += f": {output.evalue}"
            lines.append(header + "\n")
        for line in output.traceback or []:
            lines.append(strip_ansi_codes(line) + "\n")
        return "```\n" + "".join(lines) + "```\n\n"

    return ""


def notebook_to_markdown(notebook: Notebook) -> str:
    """Flatten a notebook into a single Markdown document.

    Cells are separated by horizontal rules. Code goes in python fences,
    text outputs and errors in plain fences (tracebacks without ANSI codes),
    and image outputs become inline data-URI images.

    Args:
        notebook: Parsed notebook

    Returns:
        str: Markdown text
    """
    parts: list[str] = []

    for index, cell in enumerate(notebook.cells):
        if index > 0:
            parts.append(CELL_SEPARATOR)

        if cell.cell_type == "markdown":
            parts.append(cell.source + "\n\n")
        elif cell.cell_type == "code":
            parts.append(_fenced(cell.source, "python"))
            parts.extend(_output_to_markdown(output) for output in cell.outputs)
        elif cell.cell_type == "raw":
            parts.append(_fenced(cell.source))

    return "".join(parts)
