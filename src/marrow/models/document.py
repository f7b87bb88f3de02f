"""Data models for rendered documents."""

from pydantic import BaseModel, Field

from marrow.markdown.slug import slugify


class TocEntry(BaseModel):
    """Single table-of-contents entry.

    Attributes:
        level: Heading level (1-6)
        text: Plain text of the heading
    """

    level: int = Field(ge=1, le=6)
    text: str

    @property
    def slug(self) -> str:
        """Anchor id the renderer gives this heading."""
        return slugify(self.text)


class RevealFragment(BaseModel):
    """Reply to a request for more lines of a truncated output.

    Attributes:
        cell_index: Index of the cell owning the output
        output_index: Index of the output within the cell
        lines_html: Newline-joined, already escaped HTML lines
        hidden_remaining: Lines still hidden after this reply
        is_complete: True when nothing remains hidden
    """

    cell_index: int
    output_index: int
    lines_html: str
    hidden_remaining: int = Field(ge=0)
    is_complete: bool
