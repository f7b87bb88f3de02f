"""Messages exchanged between the page and its host window.

The page posts plain strings such as ``"get_output_lines:3:0:50"``. They are
decoded by :func:`parse_message` into command objects and applied to a view
by :class:`MessageDispatcher`. Commands that need the native window (resize,
clipboard, closing) are handed back to the caller unchanged.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from marrow.models import RevealFragment, ViewSettings
from marrow.settings import SettingsStore
from marrow.view import DocumentView

logger = logging.getLogger(__name__)


@dataclass
class Resize:
    width: float
    height: float


@dataclass
class CopyToClipboard:
    text: str


@dataclass
class SaveSettings:
    extension: str
    settings: ViewSettings


@dataclass
class RequestOutputLines:
    cell_index: int
    output_index: int
    amount: str


@dataclass
class CloseWindow:
    pass


@dataclass
class QuitApp:
    pass


Command = Union[Resize, CopyToClipboard, SaveSettings, RequestOutputLines, CloseWindow, QuitApp]


def _index(value: str) -> int:
    return int(value) if value.isascii() and value.isdigit() else 0


def parse_message(message: str) -> Optional[Command]:
    """Decode a message posted by the page.

    Args:
        message: Raw message string

    Returns:
        Optional[Command]: The command, or None for unknown or malformed messages
    """
    if message.startswith("resize:"):
        parts = message.split(":")
        if len(parts) != 3:
            return None
        try:
            return Resize(width=float(parts[1]), height=float(parts[2]))
        except ValueError:
            return None

    if message.startswith("clipboard:"):
        return CopyToClipboard(text=message[len("clipboard:"):])

    if message.startswith("save_settings:"):
        extension, sep, payload = message[len("save_settings:"):].partition(":")
        if not sep:
            return None
        try:
            settings = ViewSettings.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Ignoring invalid settings for %r: %s", extension, e)
            return None
        return SaveSettings(extension=extension, settings=settings)

    if message.startswith("get_output_lines:"):
        parts = message[len("get_output_lines:"):].split(":")
        if len(parts) != 3:
            return None
        return RequestOutputLines(cell_index=_index(parts[0]), output_index=_index(parts[1]), amount=parts[2])

    if message == "close_window":
        return CloseWindow()
    if message == "quit_app":
        return QuitApp()

    logger.debug("Ignoring unknown message %r", message[:40])
    return None


def reveal_callback_js(fragment: RevealFragment) -> str:
    """JavaScript call that hands revealed lines to the page."""
    return (
        f"receiveOutputLines({fragment.cell_index}, {fragment.output_index}, "
        f"{json.dumps(fragment.lines_html)}, {fragment.hidden_remaining}, "
        f"{'true' if fragment.is_complete else 'false'})"
    )


@dataclass
class DispatchResult:
    """Outcome of handling one message.

    Attributes:
        command: Decoded command, or None if the message was ignored
        script: JavaScript to evaluate in the page, if any
    """

    command: Optional[Command] = None
    script: Optional[str] = None


class MessageDispatcher:
    """Applies page messages to one view and the shared settings."""

    def __init__(self, view: DocumentView, settings_store: Optional[SettingsStore] = None):
        """Initialize dispatcher.

        Args:
            view: The view whose page sends the messages
            settings_store: Where saved settings go (not persisted if None)
        """
        self.view = view
        self.settings_store = settings_store

    def dispatch(self, message: str) -> DispatchResult:
        """Decode and apply a message.

        Settings are saved and reveal requests answered here; every other
        command is returned for the window host to act on.

        Args:
            message: Raw message string from the page

        Returns:
            DispatchResult: The command and any script to run in the page
        """
        command = parse_message(message)
        if command is None:
            return DispatchResult()

        if isinstance(command, SaveSettings):
            if self.settings_store is not None:
                self.settings_store.set(command.extension, command.settings)
            if command.extension == self.view.extension:
                self.view.settings = command.settings
            return DispatchResult(command=command)

        if isinstance(command, RequestOutputLines):
            fragment = self.view.reveal(command.cell_index, command.output_index, command.amount)
            if fragment is None:
                return DispatchResult(command=command)
            return DispatchResult(command=command, script=reveal_callback_js(fragment))

        return DispatchResult(command=command)
