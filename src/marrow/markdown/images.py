"""Image reference resolution for rendered Markdown."""

import base64
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)

# References that already point somewhere the webview can load
PASSTHROUGH_PREFIXES = ("http://", "https://", "file://", "data:")

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".bmp": "image/bmp",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: Path | str) -> str:
    """Guess an image MIME type from a file extension.

    Args:
        path: File path

    Returns:
        str: MIME type, or application/octet-stream for unknown extensions
    """
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_image_url(url: str, base_dir: Optional[Path | str] = None) -> str:
    """Resolve an image reference for display.

    Web URLs, file URLs and data URIs are returned unchanged. Relative and
    absolute paths are looked up under ``base_dir`` and inlined as base64 data
    URIs so the page does not need filesystem access. Anything that cannot be
    resolved is returned as given and simply renders as a broken image.

    Args:
        url: Image reference as written in the document
        base_dir: Directory of the document, if known

    Returns:
        str: Data URI or the original reference
    """
    if url.startswith(PASSTHROUGH_PREFIXES):
        return url

    if base_dir is None:
        return url

    path = Path(base_dir) / unquote(url)
    if not path.is_file():
        logger.debug("Image not found, leaving reference unresolved: %s", path)
        return url

    try:
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Could not read image %s: %s", path, e)
        return url

    payload = base64.b64encode(data).decode("ascii")
    return f"data:{get_mime_type(path)};base64,{payload}"
