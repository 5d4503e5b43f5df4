from lanshare.realtime.broadcaster import Broadcaster
from lanshare.realtime.registry import ConnectionRegistry

__all__ = ["Broadcaster", "ConnectionRegistry"]
