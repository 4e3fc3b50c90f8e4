"""
Core logic package.

Provides request-level resolution logic: tenants, path sanitization, MIME types.
"""

from .mime import mime_type_for_path
from .sanitizer import sanitize_path, validate_request_path
from .tenant import TenantResolver, split_host

__all__ = [
    "mime_type_for_path",
    "sanitize_path",
    "validate_request_path",
    "TenantResolver",
    "split_host",
]
