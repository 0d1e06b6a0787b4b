"""Bounded frame buffer between the broker and one WebSocket."""

import asyncio
from typing import Any

import structlog

logger = structlog.get_logger()


class FeedOutbox:
    """Frames waiting to be written to a realtime feed socket.

    When a client stops reading and the buffer fills, the pending frames are
    dropped and the feed ends: ``next_frame`` returns None and the socket is
    closed. The client reconnects and reloads history instead of silently
    missing messages.
    """

    def __init__(self, maxsize: int) -> None:
        self._frames: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(maxsize=maxsize)
        self.overflowed = False

    def push(self, frame: dict[str, Any]) -> bool:
        """Buffer a frame. Returns False once the feed has overflowed."""
        if self.overflowed:
            return False
        try:
            self._frames.put_nowait(frame)
        except asyncio.QueueFull:
            self.overflowed = True
            dropped = 0
            while not self._frames.empty():
                self._frames.get_nowait()
                dropped += 1
            self._frames.put_nowait(None)
            logger.warning("realtime_feed_overflow", dropped_frames=dropped + 1)
            return False
        return True

    async def next_frame(self) -> dict[str, Any] | None:
        """The next frame to send, or None when the feed must close."""
        return await self._frames.get()
