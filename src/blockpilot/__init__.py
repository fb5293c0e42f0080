# blockpilot/__init__.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Chat command agent for a multiplayer block-world session.

Players address the agent by name in chat. Their lines are normalized,
checked against the owner's trust and ignore lists, turned into an
ordered plan of movement, teleport and wait steps, and executed against
the session's movement controller. A supervisor keeps the session
connected across disconnects and kicks.
"""

from .agent import ChatAgent
from .config import BotConfig
from .context import BotContext
from .executor import StepExecutor
from .gate import AuthorizationGate
from .normalizer import normalize_line
from .session import SessionHandle, SessionOptions
from .supervisor import SessionSupervisor

__all__ = [
    "ChatAgent",
    "BotConfig",
    "BotContext",
    "StepExecutor",
    "AuthorizationGate",
    "normalize_line",
    "SessionHandle",
    "SessionOptions",
    "SessionSupervisor",
]
