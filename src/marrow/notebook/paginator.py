"""Incremental display of very long cell outputs.

Outputs longer than the truncation threshold are rendered as a head and a
tail with the middle held back. The page asks for more of the middle on
demand; an :class:`OutputPaginator` keeps the full text of every truncated
output of one view and answers those requests.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from marrow.config import MarrowConfig, get_config
from marrow.models.document import RevealFragment

logger = logging.getLogger(__name__)

REVEAL_ALL = "all"

OutputKey = tuple[int, int]


@dataclass
class TruncatedOutput:
    """Retained state of one truncated output.

    Attributes:
        full_lines: Every line of the output, already HTML-escaped
        total_lines: Number of lines
        shown_lines: Lines from the start that the page has received
        tail_lines: Lines at the end that were rendered up front
        fully_revealed: Set once the whole middle has been sent
    """

    full_lines: list[str]
    total_lines: int
    shown_lines: int
    tail_lines: int
    fully_revealed: bool = False

    @property
    def reveal_limit(self) -> int:
        """Index where the permanently shown tail begins."""
        return self.total_lines - self.tail_lines


@dataclass
class TruncatedView:
    """What the renderer shows for a freshly truncated output."""

    head: list[str]
    tail: list[str]
    hidden: int


class OutputPaginator:
    """Owns the truncated outputs of one view and serves reveal requests.

    Entries are keyed by ``(cell_index, output_index)``. Requests for keys
    that were never truncated are ignored.
    """

    def __init__(self, config: Optional[MarrowConfig] = None):
        """Initialize paginator.

        Args:
            config: Configuration supplying the line thresholds
        """
        self.config = config or get_config()
        self.outputs: dict[OutputKey, TruncatedOutput] = {}

    def __contains__(self, key: OutputKey) -> bool:
        return key in self.outputs

    def __len__(self) -> int:
        return len(self.outputs)

    def keys(self) -> list[OutputKey]:
        """Keys of all outputs that can be expanded."""
        return list(self.outputs)

    def needs_truncation(self, line_count: int) -> bool:
        """Whether an output with this many lines must be truncated."""
        return line_count > self.config.truncate_threshold

    def truncate(self, cell_index: int, output_index: int, lines: list[str]) -> TruncatedView:
        """Register an output and return the parts to render immediately.

        Args:
            cell_index: Index of the cell owning the output
            output_index: Index of the output within the cell
            lines: All output lines, already HTML-escaped

        Returns:
            TruncatedView: Head lines, tail lines and the hidden line count
        """
        head_count = self.config.head_lines
        tail_count = self.config.tail_lines
        total = len(lines)

        self.outputs[(cell_index, output_index)] = TruncatedOutput(
            full_lines=list(lines),
            total_lines=total,
            shown_lines=head_count,
            tail_lines=tail_count,
        )
        logger.debug(
            "Truncated output %d:%d (%d lines, %d hidden)",
            cell_index,
            output_index,
            total,
            total - head_count - tail_count,
        )
        return TruncatedView(
            head=lines[:head_count],
            tail=lines[total - tail_count:] if tail_count else [],
            hidden=total - head_count - tail_count,
        )

    def reveal(self, cell_index: int, output_index: int, amount: str | int) -> Optional[RevealFragment]:
        """Return more of a truncated output's hidden middle.

        ``"all"`` returns everything between the shown head and the tail and
        marks the output complete without moving the shown position; any
        later request returns no lines. A count returns the next lines and
        advances the position.

        Args:
            cell_index: Index of the cell owning the output
            output_index: Index of the output within the cell
            amount: Line count, or "all"

        Returns:
            Optional[RevealFragment]: Lines to insert, or None for unknown outputs
        """
        entry = self.outputs.get((cell_index, output_index))
        if entry is None:
            logger.debug("Ignoring reveal for unknown output %d:%d", cell_index, output_index)
            return None

        limit = entry.reveal_limit

        if entry.fully_revealed:
            lines: list[str] = []
        elif amount == REVEAL_ALL:
            lines = entry.full_lines[entry.shown_lines:limit]
            entry.fully_revealed = True
        else:
            count = self.parse_amount(amount)
            end = min(entry.shown_lines + count, limit)
            lines = entry.full_lines[entry.shown_lines:end]
            entry.shown_lines = end

        hidden = 0 if entry.fully_revealed else limit - entry.shown_lines
        logger.debug("Revealed %d lines of output %d:%d, %d hidden", len(lines), cell_index, output_index, hidden)
        return RevealFragment(
            cell_index=cell_index,
            output_index=output_index,
            lines_html="\n".join(lines),
            hidden_remaining=hidden,
            is_complete=hidden == 0,
        )

    def parse_amount(self, amount: str | int) -> int:
        """Interpret a reveal amount; anything but ASCII decimal digits uses the default step."""
        if isinstance(amount, int):
            return amount if amount >= 0 else self.config.reveal_step
        if amount.isascii() and amount.isdigit():
            return int(amount)
        return self.config.reveal_step
