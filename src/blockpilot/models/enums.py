# blockpilot/models/enums.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Enumeration types for actors, messages and the session lifecycle."""

from enum import Enum


class Tier(str, Enum):
    """Authorization level of an actor.

    Derived on demand from the trusted and ignored sets; never stored
    on the actor itself.

    Attributes:
        OWNER: The configured owner. Always trusted.
        TRUSTED: May issue commands that produce an action plan.
        UNTRUSTED: May converse but never trigger planning.
        IGNORED: Filtered out before any other processing.
    """

    OWNER = "owner"
    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"
    IGNORED = "ignored"


class MessageKind(str, Enum):
    """Channel an inbound message arrived on."""

    CHAT = "chat"
    WHISPER = "whisper"
    SYSTEM = "system"


class SessionState(str, Enum):
    """Connection state owned by the session supervisor."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
    KICKED = "kicked"
