# blockpilot/outbound.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Outbound chat: direct replies and broadcasts."""

import logging

from .session import SessionHandle

logger = logging.getLogger(__name__)


class Outbound:
    """Send text through whichever client is currently connected.

    With no connection, messages are logged and dropped.
    """

    def __init__(self, handle: SessionHandle, max_length: int = 256):
        self.handle = handle
        self.max_length = max_length

    def _clip(self, text: str) -> str:
        text = " ".join(str(text).split())
        if len(text) > self.max_length:
            return text[: self.max_length - 3].rstrip() + "..."
        return text

    async def reply(self, actor: str, text: str) -> None:
        """Whisper to ``actor``, falling back to broadcast."""
        client = self.handle.client
        text = self._clip(text)
        if client is None:
            logger.info(f"Not connected, dropping reply to {actor}: {text}")
            return
        try:
            await client.whisper(actor, text)
            return
        except Exception as e:
            logger.warning(f"Whisper to {actor} failed, broadcasting instead: {e}")
        await self.broadcast(text)

    async def broadcast(self, text: str) -> None:
        client = self.handle.client
        text = self._clip(text)
        if client is None:
            logger.info(f"Not connected, dropping broadcast: {text}")
            return
        try:
            await client.chat(text)
        except Exception as e:
            logger.error(f"Broadcast failed: {e}")

    async def command(self, command: str) -> None:
        """Send a raw slash command. Raises if the client rejects it."""
        client = self.handle.client
        if client is None:
            logger.info(f"Not connected, dropping command: {command}")
            return
        await client.chat(command)
