"""ANSI escape sequence handling for notebook tracebacks."""

import re

ESC = "\x1b"

# SGR parameter string -> CSS colour
ANSI_COLORS = {
    "31": "#e06c75",  # red
    "32": "#98c379",  # green
    "33": "#e5c07b",  # yellow
    "34": "#61afef",  # blue
    "35": "#c678dd",  # magenta
    "36": "#56b6c2",  # cyan
    "37": "#abb2bf",  # white
    "38;5;160": "#e06c75",  # extended red
    "38;5;196": "#e06c75",
    "38;5;28": "#98c379",  # extended green
    "38;5;34": "#98c379",
}

for _code in ("31", "32", "33", "34", "35", "36", "37"):
    ANSI_COLORS[f"0;{_code}"] = ANSI_COLORS[_code]
    ANSI_COLORS[f"1;{_code}"] = ANSI_COLORS[_code]

_HTML_ESCAPES = {"&": "&amp;", "<": "&lt;", ">": "&gt;"}

# ESC [ params final-byte; a sequence cut off at end of input has no final byte
_CSI = re.compile(r"\x1b\[([0-9;]*)([^0-9;]?)")


def ansi_to_html(text: str) -> str:
    """Translate ANSI colour codes into HTML spans.

    Each escape sequence closes the currently open span; recognized colours
    open a new one, while reset and unknown codes leave the text uncoloured.
    Everything outside escape sequences is HTML-escaped.

    Args:
        text: Text containing ANSI escape sequences

    Returns:
        str: HTML with ``<span style="color:...">`` runs
    """
    result: list[str] = []
    in_span = False
    pos = 0

    while pos < len(text):
        char = text[pos]
        if char != ESC:
            result.append(_HTML_ESCAPES.get(char, char))
            pos += 1
            continue

        match = _CSI.match(text, pos)
        if match is None:
            # Lone ESC not followed by '[' is dropped
            pos += 1
            continue

        pos = match.end()
        if in_span:
            result.append("</span>")
            in_span = False

        color = ANSI_COLORS.get(match.group(1))
        if color:
            result.append(f'<span style="color:{color}">')
            in_span = True

    if in_span:
        result.append("</span>")
    return "".join(result)


def strip_ansi_codes(text: str) -> str:
    """Remove ANSI escape sequences without emitting any markup.

    An escape character swallows everything up to and including the next
    ASCII letter.

    Args:
        text: Text containing ANSI escape sequences

    Returns:
        str: Plain text
    """
    result: list[str] = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        pos += 1
        if char != ESC:
            result.append(char)
            continue
        while pos < len(text):
            skipped = text[pos]
            pos += 1
            if skipped.isascii() and skipped.isalpha():
                break
    return "".join(result)
