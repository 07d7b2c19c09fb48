"""
Common utility functions and helpers.
"""
import re


def collapse_whitespace(text: str) -> str:
    """
    Collapse every run of whitespace to a single space.

    Args:
        text: Raw text string

    Returns:
        Text with single spaces and no leading/trailing whitespace
    """
    return re.sub(r'\s+', ' ', text).strip()


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix

