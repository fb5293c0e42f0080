# blockpilot/gate.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Authorization gate.

Decides whether an attributed message reaches the planner. Ignored
actors and messages that do not address the agent are dropped silently.
The owner's list-management commands are handled here and end
processing. Untrusted actors may talk to the agent but never command it.
"""

from dataclasses import dataclass
import logging
import re
from typing import Callable, Optional

from .context import BotContext
from .executor import StepExecutor
from .models import Tier
from .outbound import Outbound
from .patterns import (
    ACTION_VERB_PATTERN,
    IGNORE_PATTERN,
    LIST_PATTERN,
    NAME_TOKEN_PATTERN,
    STOP_PATTERN,
    TARGET_SELF_WORDS,
    TARGET_STOP_WORDS,
    TRUST_PATTERN,
    UNIGNORE_PATTERN,
    UNTRUST_PATTERN,
)

logger = logging.getLogger(__name__)

ASK_OWNER_REPLY = "Sorry, I only take orders from trusted players. Ask {owner} to trust you."

# Words that follow "trust"/"ignore" in ordinary speech and are never names
NOT_NAMES = {"you", "him", "her", "them", "it", "this", "that", "all", "everyone", "everybody", "anyone", "nobody"}


def command_target(match: Optional[re.Match]) -> Optional[str]:
    """The player named by an owner command, or None when the word is not a name."""
    if match is None:
        return None
    name = match.group(1)
    lowered = name.lower()
    if lowered in NOT_NAMES or lowered in TARGET_STOP_WORDS or lowered in TARGET_SELF_WORDS:
        return None
    if not NAME_TOKEN_PATTERN.match(name) or name.isdigit():
        return None
    return name


@dataclass
class Admission:
    """A message that passed the gate."""

    actor: str
    text: str
    tier: Tier


class AuthorizationGate:
    """Filter, tier and route owner commands for inbound messages.

    Attributes:
        context: Trust lists and conversation log.
        call_names: Names the agent answers to.
        self_name: Returns the agent's current username.
    """

    def __init__(
        self,
        context: BotContext,
        outbound: Outbound,
        executor: StepExecutor,
        call_names: list[str],
        self_name: Callable[[], str],
    ):
        self.context = context
        self.outbound = outbound
        self.executor = executor
        self.call_names = [name.lower() for name in call_names if name]
        self.self_name = self_name

    def addressed(self, text: str) -> bool:
        lowered = text.lower()
        return any(name in lowered for name in self.call_names)

    async def admit(self, actor: str, text: str) -> Optional[Admission]:
        """Run the gate for one message.

        Returns:
            An Admission to pass on, or None when the message was
            dropped, refused or fully handled here.
        """
        own_name = self.self_name()
        if own_name and actor == own_name:
            return None
        if self.context.is_ignored(actor):
            return None
        if not self.addressed(text):
            return None

        tier = self.context.tier(actor)
        if tier == Tier.OWNER and await self.handle_owner_command(text):
            return None

        self.context.remember("user", f"{actor}: {text}")

        if tier == Tier.UNTRUSTED and ACTION_VERB_PATTERN.search(text):
            logger.info(f"Refused command from untrusted {actor}: {text}")
            await self.outbound.reply(actor, ASK_OWNER_REPLY.format(owner=self.context.owner or "the owner"))
            return None

        return Admission(actor=actor, text=text, tier=tier)

    async def handle_owner_command(self, text: str) -> bool:
        """Apply an owner list-management command. Returns True if one matched."""
        # Removal patterns first so "untrust" never reads as "trust"
        name = command_target(UNTRUST_PATTERN.search(text))
        if name:
            if self.context.is_owner(name):
                await self.outbound.broadcast(f"{name} is the owner and is always trusted.")
            elif self.context.untrust(name):
                await self.outbound.broadcast(f"{name} is no longer trusted.")
            else:
                await self.outbound.broadcast(f"{name} wasn't trusted.")
            return True

        name = command_target(UNIGNORE_PATTERN.search(text))
        if name:
            if self.context.unignore(name):
                await self.outbound.broadcast(f"No longer ignoring {name}.")
            else:
                await self.outbound.broadcast(f"{name} wasn't ignored.")
            return True

        name = command_target(TRUST_PATTERN.search(text))
        if name:
            if self.context.trust(name):
                logger.info(f"Owner trusted {name}")
                await self.outbound.broadcast(f"{name} is now trusted!")
            else:
                await self.outbound.broadcast(f"{name} is already trusted.")
            return True

        name = command_target(IGNORE_PATTERN.search(text))
        if name:
            if self.context.is_owner(name):
                await self.outbound.broadcast("I can't ignore the owner.")
            elif self.context.ignore(name):
                logger.info(f"Owner ignored {name}")
                await self.outbound.broadcast(f"Now ignoring {name}.")
            else:
                await self.outbound.broadcast(f"Already ignoring {name}.")
            return True

        match = LIST_PATTERN.search(text)
        if match:
            which = match.group(1).lower()
            names = self.context.trusted if which == "trusted" else self.context.ignored
            listing = ", ".join(sorted(names)) or "nobody"
            await self.outbound.broadcast(f"{which.capitalize()}: {listing}")
            return True

        if STOP_PATTERN.search(text):
            stopped = self.executor.stop()
            await self.outbound.broadcast("Stopped." if stopped else "Nothing to stop.")
            return True

        return False
