"""
Request path sanitization.

Only paths made of `[a-zA-Z0-9_ +./-]` ever reach the repository store.
"""

import re
from typing import Optional

from .exceptions import InvalidRequestPathError

# "/" followed by allow-listed characters only, matched against the whole path.
ALLOWED_PATH_PATTERN = re.compile(r"/[a-zA-Z0-9_ +./\-]*")


def validate_request_path(path: str) -> None:
    """
    Reject a request path with forbidden characters or traversal.

    Raises:
        InvalidRequestPathError: 404 on mismatch
    """
    if ALLOWED_PATH_PATTERN.fullmatch(path) is None or ".." in path:
        raise InvalidRequestPathError(path)


def sanitize_path(path: str, original_path: Optional[str] = None) -> str:
    """
    Validate a request path and turn it into an in-repository path.

    Args:
        path: in-repository part of the request path (leading "/")
        original_path: full request path when `path` is only a suffix of it;
            validation always covers the full original path

    Returns:
        Slash-joined path without empty segments ("" is the repository root)
    """
    validate_request_path(original_path if original_path is not None else path)

    return "/".join(segment for segment in path.split("/") if segment)
