"""Marrow - Markdown and Jupyter notebook viewer core.

Renders documents to HTML annotated with source line ranges so a selection in
the rendered view can be copied back out as the original Markdown.
"""

__version__ = "0.1.0"


class MarrowError(Exception):
    """Base exception for all Marrow errors."""

    pass


class NotebookParseError(MarrowError):
    """Raised when notebook parsing fails."""

    pass


class DocumentLoadError(MarrowError):
    """Raised when a source document cannot be read."""

    pass


class ConfigurationError(MarrowError):
    """Raised when configuration is invalid or missing."""

    pass
