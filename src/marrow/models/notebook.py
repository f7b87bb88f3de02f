"""Data models for notebook parsing and representation."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def join_text(value: Any) -> Any:
    """Normalize a notebook text field given as a string or list of strings."""
    if isinstance(value, list):
        return "".join(str(part) for part in value)
    return value


class CellOutput(BaseModel):
    """Represents a single code cell output.

    Attributes:
        output_type: One of stream, execute_result, display_data, error
        name: Stream name (stdout or stderr) for stream outputs
        text: Stream text
        data: MIME type to payload mapping for rich outputs
        ename: Exception class name for error outputs
        evalue: Exception message for error outputs
        traceback: Traceback lines (may contain ANSI escapes)
        execution_count: Execution counter attached to execute_result outputs
    """

    output_type: str
    name: Optional[str] = None
    text: Optional[str] = None
    data: Optional[dict[str, str]] = None
    ename: Optional[str] = None
    evalue: Optional[str] = None
    traceback: Optional[list[str]] = None
    execution_count: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("text", mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> Any:
        """Accept text as a single string or an array of strings."""
        return join_text(v)

    @field_validator("data", mode="before")
    @classmethod
    def normalize_data(cls, v: Any) -> Any:
        """Join list payloads and drop non-textual MIME values (e.g. JSON)."""
        if v is None:
            return None
        if not isinstance(v, dict):
            return v
        normalized = {}
        for mime, payload in v.items():
            payload = join_text(payload)
            if isinstance(payload, str):
                normalized[mime] = payload
        return normalized


class NotebookCell(BaseModel):
    """Represents a single notebook cell.

    Attributes:
        cell_type: Type of cell (markdown, code or raw)
        source: Cell content as a string
        outputs: List of cell outputs (for code cells)
        execution_count: Execution number (for code cells)
    """

    cell_type: str
    source: str = ""
    outputs: list[CellOutput] = Field(default_factory=list)
    execution_count: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("source", mode="before")
    @classmethod
    def normalize_source(cls, v: Any) -> Any:
        """Accept source as a single string or an array of strings."""
        return join_text(v)


class Notebook(BaseModel):
    """Complete parsed notebook structure.

    Attributes:
        cells: Cells in document order
        metadata: Notebook metadata dictionary
    """

    cells: list[NotebookCell]
    metadata: dict = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")
