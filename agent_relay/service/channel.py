"""Outbound side of one client connection."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Protocol

from agent_relay.models.envelopes import OutboundEnvelope

logger = logging.getLogger(__name__)


class TextSocket(Protocol):
    async def send_text(self, data: str) -> None: ...


class Channel:
    """
    A client connection as seen by the relay core.

    ``lock`` serialises dispatches for this connection. Once the connection is
    closed every ``send`` is a silent no-op, so a turn still running when the
    client leaves never raises on emit.
    """

    def __init__(self, socket: TextSocket, channel_id: str | None = None) -> None:
        self.id = channel_id or uuid.uuid4().hex
        self.lock = asyncio.Lock()
        self._socket = socket
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        self._closed = True

    async def send(self, envelope: OutboundEnvelope) -> bool:
        """Send one envelope; returns False when nothing was sent."""
        if self._closed:
            logger.debug("Dropping %s for closed channel %s", envelope.type, self.id)
            return False
        try:
            await self._socket.send_text(envelope.to_wire())
        except Exception as e:
            # Transport failures end the channel; the endpoint tears the session down.
            logger.warning("Send failed on channel %s, marking closed: %s", self.id, e)
            self._closed = True
            return False
        return True

    def __repr__(self) -> str:
        return f"Channel(id={self.id!r}, closed={self._closed})"
