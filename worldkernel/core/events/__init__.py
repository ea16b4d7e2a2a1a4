"""
Append-only audit logging.
"""

from worldkernel.core.events.event_store import EventStore

__all__ = [
    "EventStore",
]
