"""Jupyter notebook parsing functionality."""

import json
import logging
from pathlib import Path
from typing import Any

import nbformat
from pydantic import ValidationError

from marrow import NotebookParseError
from marrow.models import Notebook

logger = logging.getLogger(__name__)


class NotebookParser:
    """Parser for Jupyter notebooks.

    Accepts the on-disk ``.ipynb`` format as well as bare ``{"cells": [...]}``
    documents. Files that declare an ``nbformat`` version are read through
    nbformat and upgraded to version 4 first; the result is then validated
    into :class:`~marrow.models.Notebook`.
    """

    def parse(self, filepath: Path | str) -> Notebook:
        """Parse a Jupyter notebook file.

        Args:
            filepath: Path to the .ipynb file

        Returns:
            Notebook: Parsed notebook structure

        Raises:
            NotebookParseError: If the file cannot be read or parsed
        """
        filepath = Path(filepath)

        try:
            text = filepath.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise NotebookParseError(f"Failed to read notebook {filepath}: {e}") from e

        return self.parse_string(text)

    def parse_string(self, text: str) -> Notebook:
        """Parse notebook JSON text.

        Args:
            text: Notebook JSON

        Returns:
            Notebook: Parsed notebook structure

        Raises:
            NotebookParseError: If the JSON or its structure is invalid
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise NotebookParseError(f"Invalid notebook JSON: {e}") from e

        if not isinstance(raw, dict):
            raise NotebookParseError("Notebook must be a JSON object")

        if "nbformat" in raw:
            raw = self._upgrade(raw)

        try:
            return Notebook.model_validate(raw)
        except ValidationError as e:
            raise NotebookParseError(f"Invalid notebook structure: {e}") from e

    def _upgrade(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Convert a versioned notebook to nbformat 4.

        Args:
            raw: Decoded notebook JSON

        Returns:
            dict: Version 4 notebook as plain dictionaries
        """
        try:
            nb = nbformat.reads(json.dumps(raw), as_version=4)
        except Exception as e:
            raise NotebookParseError(f"Unsupported notebook format: {e}") from e
        logger.debug("Read notebook (nbformat %s.%s)", nb.nbformat, nb.nbformat_minor)
        return nb
