"""Boundary sanitization for request data.

Strips null bytes, path traversal sequences and the common XSS vectors from
strings, and drops prototype-pollution keys from mappings. This is cleanup,
not validation: request schemas still validate the sanitized values.
"""

import re
from typing import Any

from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)

BLOCKED_KEYS = frozenset({"__proto__", "constructor", "prototype"})

_SCRIPT_TAG = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_TAG = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
# Anchored on a word boundary so query strings like ``utm_content=`` survive
_EVENT_HANDLER = re.compile(r"\bon\w+\s*=", re.IGNORECASE)


def sanitize_value(value: Any) -> Any:
    """Sanitize a scalar. Non-strings are returned unchanged."""
    if not isinstance(value, str):
        return value

    sanitized = value.replace("\0", "")
    sanitized = sanitized.replace("../", "").replace("..\\", "")
    sanitized = _SCRIPT_TAG.sub("", sanitized)
    sanitized = _JS_PROTOCOL.sub("", sanitized)
    sanitized = _EVENT_HANDLER.sub("", sanitized)
    sanitized = _IFRAME_TAG.sub("", sanitized)
    return sanitized


def deep_sanitize(data: Any) -> Any:
    """Recursively sanitize dicts, lists and strings."""
    if data is None:
        return None

    if isinstance(data, (list, tuple)):
        return [deep_sanitize(item) for item in data]

    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            if key in BLOCKED_KEYS:
                LOGGER.warning(f"[SECURITY] Blocked prototype pollution attempt with key: {key}")
                continue
            sanitized[key] = deep_sanitize(value)
        return sanitized

    return sanitize_value(data)


def sanitize_filename(filename: Any) -> Any:
    """Stricter cleanup for file names: no separators, no ``..``."""
    if not isinstance(filename, str):
        return filename

    sanitized = filename.replace("\0", "")
    sanitized = re.sub(r"[/\\]", "", sanitized)
    return sanitized.replace("..", "")
