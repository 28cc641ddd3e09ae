"""
Suggestion Bot - Helper Utilities
=================================

Text clean-up shared by the modals and the embed renderer.
"""

from typing import Optional


# =============================================================================
# String Helpers
# =============================================================================

def truncate(text: str, max_length: int, ellipsis: str = "...") -> str:
    """Cut text to max_length characters, ellipsis included."""
    if not text or len(text) <= max_length:
        return text
    return text[:max_length - len(ellipsis)] + ellipsis


def sanitize_input(text: Optional[str], max_length: int = 1000) -> Optional[str]:
    """
    Strip whitespace and enforce a length limit on modal input.

    Blank input becomes None so optional modal fields store NULL rather
    than an empty string.
    """
    if text is None:
        return None
    cleaned = text.strip()
    return cleaned[:max_length] or None


__all__ = [
    "truncate",
    "sanitize_input",
]
