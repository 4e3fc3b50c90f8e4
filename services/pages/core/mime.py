"""
MIME type derivation from file extensions.
"""

import posixpath
from typing import Iterable, Mapping

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: Mapping[str, str] = {
    "css": "text/css",
    "csv": "text/csv",
    "gif": "image/gif",
    "html": "text/html",
    "ico": "image/x-icon",
    "ics": "text/calendar",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "js": "application/javascript",
    "json": "application/json",
    "pdf": "application/pdf",
    "png": "image/png",
    "svg": "image/svg+xml",
    "ttf": "font/ttf",
    "txt": "text/plain",
    "woff": "font/woff",
    "woff2": "font/woff2",
    "xml": "application/xml",
}


def mime_type_for_path(
    path: str,
    default: str = DEFAULT_MIME_TYPE,
    forbidden: Iterable[str] = (),
) -> str:
    """
    Derive the MIME type of `path` from its extension.

    Unknown extensions and types listed in `forbidden` map to `default`.
    """
    extension = posixpath.splitext(path)[1].lstrip(".").lower()
    mime_type = MIME_TYPES.get(extension, default)
    if mime_type in forbidden:
        return default
    return mime_type
