"""Data models for Marrow."""

from marrow.models.document import RevealFragment, TocEntry
from marrow.models.notebook import CellOutput, Notebook, NotebookCell
from marrow.models.settings import AllSettings, ViewSettings

__all__ = [
    "CellOutput",
    "Notebook",
    "NotebookCell",
    "TocEntry",
    "RevealFragment",
    "ViewSettings",
    "AllSettings",
]
