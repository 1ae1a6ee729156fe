"""Streaming session adapter for resolved tracks."""

from .session import PlaybackController, StreamingSession

__all__ = [
    "PlaybackController",
    "StreamingSession",
]
