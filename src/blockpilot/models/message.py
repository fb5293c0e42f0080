# blockpilot/models/message.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Inbound message model."""

from pydantic import BaseModel

from .enums import MessageKind


class InboundMessage(BaseModel):
    """A message attributed to an actor.

    Attributes:
        actor: Name of the player who sent it.
        text: Message body with any channel markers removed.
        kind: Channel the message arrived on. SYSTEM messages are
            synthesized announcements (joins and leaves) and are never planned.
    """

    actor: str
    text: str
    kind: MessageKind = MessageKind.CHAT
