# blockpilot/responder.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Short conversational replies for messages that carry no instruction."""

import logging

from .config import BotConfig
from .context import BotContext
from .llm import UNAVAILABLE, GenerativeBackend
from .outbound import Outbound
from .planner.prompts import CHAT_PROMPT

logger = logging.getLogger(__name__)

APOLOGY = "Sorry, I can't chat right now."
HISTORY_TURNS = 8


class Responder:
    def __init__(self, config: BotConfig, context: BotContext, backend: GenerativeBackend, outbound: Outbound):
        self.config = config
        self.context = context
        self.backend = backend
        self.outbound = outbound

    def build_prompt(self, actor: str, text: str) -> str:
        # The newest entry is this message itself
        history = self.context.log.recent(HISTORY_TURNS + 1)[:-1]
        lines = [f"{entry.role}: {entry.content}" for entry in history] or ["(none)"]
        trusted = ", ".join(sorted(self.context.trusted)) or "nobody"
        return CHAT_PROMPT.format(
            bot_name=self.config.username,
            owner=self.context.owner or "nobody",
            trusted=trusted,
            history="\n".join(lines),
            actor=actor,
            text=text.replace('"', "'"),
        )

    async def respond(self, actor: str, text: str) -> str:
        """Generate and send a reply to ``actor``. Returns what was sent."""
        if not self.backend.available:
            reply = APOLOGY
        else:
            generated = await self.backend.generate(
                self.build_prompt(actor, text),
                temperature=self.config.temperature,
                max_tokens=min(self.config.max_tokens, 128),
            )
            reply = self._clean(generated)

        await self.outbound.reply(actor, reply)
        if reply != APOLOGY:
            self.context.remember("assistant", reply)
        return reply

    @staticmethod
    def _clean(generated: str) -> str:
        if not generated or generated == UNAVAILABLE:
            return APOLOGY
        for line in generated.splitlines():
            line = line.strip().strip('"').strip()
            if line:
                return line
        return APOLOGY
