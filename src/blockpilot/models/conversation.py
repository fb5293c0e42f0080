# blockpilot/models/conversation.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Bounded conversation log fed to the generative backend."""

import logging
from collections import deque
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 50


class ConversationEntry(BaseModel):
    """Single turn in the conversation log.

    Attributes:
        role: "user" for inbound chat, "assistant" for the agent's own turns.
        content: Text of the turn.
    """

    role: Literal["user", "assistant"]
    content: str


class ConversationLog:
    """Ordered conversation turns, keeping only the most recent entries.

    The log is advisory: losing it only costs conversational continuity.
    """

    def __init__(self, entries: Iterable[ConversationEntry] = (), maxlen: int = MAX_LOG_ENTRIES):
        self._entries: deque[ConversationEntry] = deque(entries, maxlen=maxlen)
        self.maxlen = maxlen

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def append(self, role: str, content: str) -> ConversationEntry:
        entry = ConversationEntry(role=role, content=content)
        self._entries.append(entry)
        return entry

    def recent(self, count: int) -> list[ConversationEntry]:
        if count <= 0:
            return []
        return list(self._entries)[-count:]

    def to_list(self) -> list[dict[str, str]]:
        return [entry.model_dump() for entry in self._entries]

    @classmethod
    def from_list(cls, data: Any, maxlen: int = MAX_LOG_ENTRIES) -> "ConversationLog":
        """Rebuild a log from persisted data, skipping malformed entries."""
        entries = []
        if isinstance(data, list):
            for item in data:
                try:
                    entries.append(ConversationEntry.model_validate(item))
                except ValidationError:
                    logger.warning(f"Skipping malformed conversation entry: {item!r}")
        elif data is not None:
            logger.warning("Conversation log is not a list, starting empty")
        return cls(entries, maxlen=maxlen)
