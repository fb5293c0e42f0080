# blockpilot/listeners.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Raw-line listeners that live outside plan execution.

Listeners see every raw session line. They are re-created for each
connection so per-connection state (such as "already logged in")
starts fresh after a reconnect.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .context import BotContext
from .normalizer import flatten_component, strip_format_codes
from .outbound import Outbound
from .patterns import LOGIN_PROMPT_PATTERN, REGISTER_PROMPT_PATTERN, TPA_REQUEST_PATTERNS

logger = logging.getLogger(__name__)


def line_text(raw: Any) -> str:
    if isinstance(raw, (dict, list)):
        raw = flatten_component(raw)
    return strip_format_codes(str(raw)).strip()


def accept_commands(player: str) -> list[str]:
    """Accept commands for the common teleport plugins, tried in turn."""
    return [
        "/tpaccept",
        f"/tpaccept {player}",
        "/tpaaccept",
        f"/tpaaccept {player}",
        "/tpacceptall",
        "/tpyes",
        f"/tpyes {player}",
        f"/tp accept {player}",
        f"/tpa accept {player}",
    ]


class Listener(ABC):
    @abstractmethod
    async def on_line(self, raw: Any) -> None:
        """Handle one raw session line."""
        pass


class TeleportAutoAccept(Listener):
    """Accept teleport requests from trusted players."""

    def __init__(self, context: BotContext, outbound: Outbound, delay: float = 0.5):
        self.context = context
        self.outbound = outbound
        self.delay = delay

    @staticmethod
    def requester(line: str) -> Optional[str]:
        for pattern in TPA_REQUEST_PATTERNS:
            match = pattern.search(line)
            if match:
                return match.group(1)
        return None

    async def on_line(self, raw: Any) -> None:
        player = self.requester(line_text(raw))
        if player is None:
            return
        if not self.context.is_trusted(player):
            logger.info(f"Ignoring teleport request from untrusted {player}")
            return
        logger.info(f"Accepting teleport request from {player}")
        for index, command in enumerate(accept_commands(player)):
            if index > 0 and self.delay > 0:
                await asyncio.sleep(self.delay)
            try:
                await self.outbound.command(command)
                logger.debug(f"Sent accept command: {command}")
            except Exception as e:
                logger.warning(f"Failed to send command {command}: {e}")


class AutoAuth(Listener):
    """Answer /register and /login prompts from auth plugins once per connection."""

    def __init__(self, outbound: Outbound, password: str):
        self.outbound = outbound
        self.password = password
        self.registered = False
        self.logged_in = False

    async def on_line(self, raw: Any) -> None:
        line = line_text(raw)
        if REGISTER_PROMPT_PATTERN.search(line) and not self.registered:
            self.registered = True
            logger.info("Server asked to register, sending credentials")
            await self.outbound.command(f"/register {self.password} {self.password}")
        elif LOGIN_PROMPT_PATTERN.search(line) and not self.logged_in:
            self.logged_in = True
            logger.info("Server asked to log in, sending credentials")
            await self.outbound.command(f"/login {self.password}")
