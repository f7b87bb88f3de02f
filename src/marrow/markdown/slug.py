"""Heading slug generation.

The client-side navigation script carries its own copy of this function and
anchors are matched by plain string equality, so the two must agree byte for
byte.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Turn heading text into a DOM-safe anchor id.

    Args:
        text: Plain heading text

    Returns:
        str: Lowercase ASCII letters and digits joined by single hyphens
    """
    pieces = _NON_ALNUM.split(text.lower())
    return "-".join(piece for piece in pieces if piece)
