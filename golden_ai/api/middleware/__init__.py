"""
HTTP middleware.
"""

from golden_ai.api.middleware.wide_events import (
    REQUEST_ID_HEADER,
    WideEventMiddleware,
    add_ai_call_to_wide_event,
    add_profile_to_wide_event,
)

__all__ = [
    "REQUEST_ID_HEADER",
    "WideEventMiddleware",
    "add_ai_call_to_wide_event",
    "add_profile_to_wide_event",
]
