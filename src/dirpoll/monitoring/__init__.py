"""
Monitoring package: the poller, its output channels and the optional
native change trigger.
"""

from .channel import EventChannel
from .poller import Poller, PollerState
from .watch_trigger import NativeChangeTrigger

__all__ = [
    "EventChannel",
    "NativeChangeTrigger",
    "Poller",
    "PollerState",
]
