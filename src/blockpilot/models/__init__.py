"""Pydantic models for blockpilot."""

# Enums
from .enums import Tier, MessageKind, SessionState

# Models
from .actions import (
    WAIT_MIN_SECONDS,
    WAIT_MAX_SECONDS,
    ActionPlan,
    ActionStep,
    FollowStep,
    GotoBlockStep,
    InvalidStep,
    TeleportRequestStep,
    WaitStep,
    clamp_wait_seconds,
    parse_step,
    parse_steps,
)
from .conversation import MAX_LOG_ENTRIES, ConversationEntry, ConversationLog
from .message import InboundMessage

__all__ = [
    # Enums
    "Tier", "MessageKind", "SessionState",
    # Steps
    "WAIT_MIN_SECONDS", "WAIT_MAX_SECONDS", "ActionPlan", "ActionStep",
    "FollowStep", "GotoBlockStep", "InvalidStep", "TeleportRequestStep",
    "WaitStep", "clamp_wait_seconds", "parse_step", "parse_steps",
    # Conversation
    "MAX_LOG_ENTRIES", "ConversationEntry", "ConversationLog",
    "InboundMessage",
]
