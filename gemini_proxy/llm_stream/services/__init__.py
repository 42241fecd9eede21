from .event_channel import EventChannel
from .relay_session import Heartbeat, RelaySession

__all__ = [
    "EventChannel",
    "Heartbeat",
    "RelaySession",
]
