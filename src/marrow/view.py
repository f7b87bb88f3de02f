"""Document loading and per-view state.

A :class:`DocumentView` is everything the display shell needs for one open
document: the finished page, the window title and size, and the paginator
that answers "show more" requests for that page. Views are independent; the
shell keeps one per window and forwards requests to it.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from marrow import DocumentLoadError, NotebookParseError
from marrow.config import MarrowConfig, get_config
from marrow.markdown.renderer import render_markdown
from marrow.markdown.toc import extract_toc
from marrow.models import RevealFragment, TocEntry, ViewSettings
from marrow.notebook.markdown_export import notebook_to_markdown
from marrow.notebook.paginator import OutputPaginator
from marrow.notebook.renderer import render_notebook
from marrow.page import build_page
from marrow.parsing.notebook import NotebookParser
from marrow.settings import SettingsStore, window_size

logger = logging.getLogger(__name__)

APP_NAME = "Marrow"
DEFAULT_EXTENSION = "md"
NOTEBOOK_EXTENSION = "ipynb"
TITLE_PART_LENGTH = 20

WELCOME_DOCUMENT = (
    "# Welcome to Marrow\n\n"
    "Open a markdown file to get started.\n\n"
    "Drag and drop a `.md` or `.ipynb` file or open one with Marrow."
)


def error_document(message: str) -> str:
    """Markdown shown in place of a document that could not be displayed."""
    return f"# Error\n\n{message}"


def truncate_end(text: str, limit: int) -> str:
    """Shorten text to ``limit`` characters, ending with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def truncate_middle(text: str, limit: int) -> str:
    """Shorten text to ``limit`` characters with an ellipsis in the middle."""
    if len(text) <= limit:
        return text
    keep = limit - 1
    left = keep // 2
    right = keep - left
    return text[:left] + "…" + text[len(text) - right :]


def window_title(toc: list[TocEntry], filename: str) -> str:
    """Window title built from the first heading and the file name.

    Args:
        toc: Headings of the document
        filename: Display name of the file

    Returns:
        str: e.g. "Introduction · notes.md · Marrow"
    """
    short_name = truncate_middle(filename, TITLE_PART_LENGTH)
    if toc:
        return f"{truncate_end(toc[0].text, TITLE_PART_LENGTH)} · {short_name} · {APP_NAME}"
    return f"{short_name} · {APP_NAME}"


def read_document(path: Path) -> str:
    """Read a source document.

    Raises:
        DocumentLoadError: If the file cannot be read as UTF-8 text
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentLoadError(f"Could not load file: {e}") from e


def load_source(path: Optional[Path | str]) -> tuple[str, str]:
    """Load Markdown for display.

    Notebooks are converted to Markdown. Load and parse failures produce an
    error document instead of raising, and no path yields the welcome page.

    Args:
        path: Document to load, or None

    Returns:
        tuple[str, str]: Markdown text and display file name
    """
    if path is None:
        return WELCOME_DOCUMENT, APP_NAME

    path = Path(path)
    filename = path.name or "untitled"

    try:
        content = read_document(path)
    except DocumentLoadError as e:
        logger.warning("%s", e)
        return error_document(str(e)), "Error"

    if path.suffix.lower() == f".{NOTEBOOK_EXTENSION}":
        try:
            return notebook_to_markdown(NotebookParser().parse_string(content)), filename
        except NotebookParseError as e:
            logger.warning("Could not parse notebook %s: %s", path, e)
            return error_document(f"Could not parse notebook: {e}"), "Error"

    return content, filename


@dataclass
class DocumentView:
    """Rendered state of one open document.

    Attributes:
        path: Source file, or None for the welcome page
        extension: Extension used to look up view settings
        filename: Display name shown in the title
        toc: Headings for navigation
        body_html: Rendered document fragment
        page_html: Complete page for the webview
        settings: View settings in effect
        source: Markdown source (None when a notebook was rendered natively)
        paginator: Truncated outputs of this view
    """

    path: Optional[Path]
    extension: str
    filename: str
    toc: list[TocEntry]
    body_html: str
    page_html: str
    settings: ViewSettings
    source: Optional[str] = None
    paginator: OutputPaginator = field(default_factory=OutputPaginator)

    @property
    def title(self) -> str:
        return window_title(self.toc, self.filename)

    @property
    def window_size(self) -> tuple[float, float]:
        return window_size(self.settings)

    def reveal(self, cell_index: int, output_index: int, amount: str | int) -> Optional[RevealFragment]:
        """Serve a "show more" request for one of this view's outputs."""
        return self.paginator.reveal(cell_index, output_index, amount)


def _markdown_view(
    path: Optional[Path],
    extension: str,
    source: str,
    filename: str,
    settings: ViewSettings,
    config: MarrowConfig,
    css: str,
    js: str,
) -> DocumentView:
    base_dir = path.parent if path is not None else None
    toc = extract_toc(source)
    body = render_markdown(source, base_dir)
    page = build_page(
        toc=toc,
        settings=settings,
        extension=extension,
        markdown_source=source,
        markdown_html=body,
        title=window_title(toc, filename),
        css=css,
        js=js,
    )
    return DocumentView(
        path=path,
        extension=extension,
        filename=filename,
        toc=toc,
        body_html=body,
        page_html=page,
        settings=settings,
        source=source,
        paginator=OutputPaginator(config),
    )


def open_document(
    path: Optional[Path | str],
    settings_store: Optional[SettingsStore] = None,
    config: Optional[MarrowConfig] = None,
    css: str = "",
    js: str = "",
) -> DocumentView:
    """Load and render a document into a new view.

    Notebooks are rendered natively (with paginated outputs); everything else
    is treated as Markdown. Never raises for unreadable or malformed input:
    an error document is rendered instead.

    Args:
        path: Document to open, or None for the welcome page
        settings_store: Source of per-extension view settings
        config: Application configuration
        css: Stylesheet embedded in the page
        js: Script embedded in the page

    Returns:
        DocumentView: The rendered view
    """
    config = config or get_config()
    path = Path(path) if path is not None else None
    extension = path.suffix.lstrip(".").lower() if path is not None and path.suffix else DEFAULT_EXTENSION
    settings = settings_store.get(extension) if settings_store is not None else ViewSettings()

    if path is None or extension != NOTEBOOK_EXTENSION:
        source, filename = load_source(path)
        return _markdown_view(path, extension, source, filename, settings, config, css, js)

    filename = path.name
    try:
        notebook = NotebookParser().parse_string(read_document(path))
    except DocumentLoadError as e:
        logger.warning("%s", e)
        return _markdown_view(path, extension, error_document(str(e)), "Error", settings, config, css, js)
    except NotebookParseError as e:
        logger.warning("Could not parse notebook %s: %s", path, e)
        message = error_document(f"Could not parse notebook: {e}")
        return _markdown_view(path, extension, message, "Error", settings, config, css, js)

    rendered = render_notebook(notebook, base_dir=path.parent, config=config)
    page = build_page(
        toc=rendered.toc,
        settings=settings,
        extension=extension,
        notebook_html=rendered.html,
        title=window_title(rendered.toc, filename),
        css=css,
        js=js,
    )
    return DocumentView(
        path=path,
        extension=extension,
        filename=filename,
        toc=rendered.toc,
        body_html=rendered.html,
        page_html=page,
        settings=settings,
        paginator=rendered.paginator,
    )
