"""String sanitisation applied to free-text request fields."""

from __future__ import annotations

import re

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def sanitize_string(value: str | None) -> str:
    """
    Trim whitespace and strip markup that could be used for script injection.

    Removes ``<`` and ``>``, the ``javascript:`` protocol, inline event
    handlers such as ``onclick=`` and NUL bytes.

    Args:
        value: The raw string, or ``None``.

    Returns:
        The cleaned string (empty when the input was ``None`` or empty).
    """
    if not value:
        return ""
    cleaned = value.strip()
    cleaned = _ANGLE_BRACKETS.sub("", cleaned)
    cleaned = _JAVASCRIPT_PROTOCOL.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    return cleaned.replace("\0", "")
