"""
Common utility functions and helpers.
"""
import re


_NUMBERED_ITEM = re.compile(r"^[0-9]+\.")
_NUMBER_PREFIX = re.compile(r"^[0-9]+\.\s*")


def strip_emphasis(text: str) -> str:
    """
    Remove every markdown emphasis marker (literal asterisk) from text.

    Args:
        text: Raw text string

    Returns:
        Text without asterisks
    """
    return text.replace("*", "")


def is_numbered_item(line: str) -> bool:
    """Return True if a line starts with a decimal number followed by a period."""
    return bool(_NUMBERED_ITEM.match(line))


def strip_number_prefix(line: str) -> str:
    """Drop a leading ``N.`` marker and the whitespace after it."""
    return _NUMBER_PREFIX.sub("", line, count=1)


def preview(text: str, limit: int = 200) -> str:
    """
    Shorten text for log output.

    Args:
        text: Text to shorten
        limit: Maximum number of characters kept

    Returns:
        Single-line preview, suffixed with an ellipsis when cut
    """
    flat = re.sub(r"\s+", " ", text).strip()
    if len(flat) <= limit:
        return flat
    return flat[:limit] + "..."
