"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a file extension to the value of the Content-Type header.

The table is deliberately small. Anything not listed, including files
without an extension, is served as text/plain:

    ┌────────────┬─────────────────────────────────┐
    │ extension  │ Content-Type                    │
    ├────────────┼─────────────────────────────────┤
    │ html       │ text/html                       │
    │ css        │ text/css                        │
    │ js         │ text/javascript                 │
    │ jpg        │ image/jpeg                      │
    │ md         │ text/markdown;charset=UTF-8     │
    │ png        │ image/png                       │
    │ svg        │ image/svg+xml                   │
    │ wasm       │ application/wasm                │
    │ (other)    │ text/plain                      │
    └────────────┴─────────────────────────────────┘

Lookups are case-sensitive: "HTML" is not "html" and maps to text/plain.

=============================================================================
"""

from pathlib import Path
from typing import Optional


# Keys are extensions without the leading dot, exactly as they appear on disk.
MIME_TYPES = {
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "jpg": "image/jpeg",
    "md": "text/markdown;charset=UTF-8",
    "png": "image/png",
    "svg": "image/svg+xml",
    "wasm": "application/wasm",
}

DEFAULT_MIME_TYPE = "text/plain"


def mime_for(extension: Optional[str]) -> str:
    """
    Get the Content-Type for a file extension.

    Args:
        extension: Extension without the dot ("html"), or None when the
                   file has no extension.

    Returns:
        The Content-Type value. Never fails.

    Examples:
        >>> mime_for("html")
        'text/html'
        >>> mime_for("HTML")
        'text/plain'
        >>> mime_for(None)
        'text/plain'
    """
    if extension is None:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def path_extension(path: str | Path) -> Optional[str]:
    """
    Final extension of a path without the dot, or None.

    "a/b.tar.gz" -> "gz", "a/b" -> None, "a/.profile" -> None
    """
    suffix = Path(path).suffix
    return suffix[1:] if suffix else None


def file_path_mime(path: str | Path) -> str:
    """Content-Type for a file, from its extension."""
    return mime_for(path_extension(path))
