"""Channels carrying frames to and from the upstream role."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass
class UpstreamConnection:
    """A pair of queues: frames from the upstream and frames to it."""

    receiver: asyncio.Queue = field(default_factory=asyncio.Queue)
    sender: asyncio.Queue = field(default_factory=asyncio.Queue)

    async def send(self, frame: Any) -> None:
        """Queue a frame for the upstream."""
        await self.sender.put(frame)

    async def recv(self) -> Any:
        """Wait for the next frame from the upstream."""
        return await self.receiver.get()