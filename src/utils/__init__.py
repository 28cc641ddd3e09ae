"""
Suggestion Bot - Utilities Package
==================================
"""

from .helpers import (
    truncate,
    sanitize_input,
)
from .discord_rate_limit import (
    log_http_error,
    call_with_retry,
    delete_message_safe,
)

__all__ = [
    # String helpers
    "truncate",
    "sanitize_input",
    # Rate limit helpers
    "log_http_error",
    "call_with_retry",
    "delete_message_safe",
]
