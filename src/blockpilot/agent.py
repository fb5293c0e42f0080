# blockpilot/agent.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""The chat command pipeline.

Inbound text flows normalizer -> gate -> (owner command | planner ->
executor | conversational reply). The agent holds no connection of its
own; it reads the live client through the shared SessionHandle.
"""

import logging
from typing import Any, Optional

from .config import BotConfig
from .context import BotContext
from .executor import StepExecutor
from .gate import AuthorizationGate
from .models import InboundMessage, MessageKind, Tier
from .normalizer import normalize_line
from .outbound import Outbound
from .planner import PlanningStrategy
from .responder import Responder
from .session import SessionHandle

logger = logging.getLogger(__name__)


class ChatAgent:
    """Routes one inbound message at a time through the pipeline.

    Attributes:
        config: Agent configuration.
        context: Trust lists and conversation log.
        handle: Live session reference, used for online names and identity.
        gate: Authorization gate.
        planner: Active planning strategy.
        executor: Step executor shared by all plans.
        responder: Conversational replies, or None to stay quiet.
    """

    def __init__(
        self,
        config: BotConfig,
        context: BotContext,
        handle: SessionHandle,
        outbound: Outbound,
        planner: PlanningStrategy,
        executor: StepExecutor,
        responder: Optional[Responder] = None,
    ):
        self.config = config
        self.context = context
        self.handle = handle
        self.outbound = outbound
        self.planner = planner
        self.executor = executor
        self.responder = responder
        self.gate = AuthorizationGate(
            context,
            outbound,
            executor,
            call_names=config.call_names,
            self_name=self.own_name,
        )

    def own_name(self) -> str:
        client = self.handle.client
        if client is not None and getattr(client, "username", None):
            return client.username
        return self.config.username

    def online_players(self) -> list[str]:
        client = self.handle.client
        if client is None:
            return []
        try:
            return list(client.online_players())
        except Exception as e:
            logger.debug(f"Online player list unavailable: {e}")
            return []

    async def handle_raw(self, raw: Any) -> None:
        """Normalize a raw session line and process it if addressable."""
        message = normalize_line(raw, online=self.online_players(), bridge_tag=self.config.bridge_tag)
        if message is None:
            return
        await self.handle_message(message)

    async def handle_chat(self, actor: str, text: str) -> None:
        await self.handle_message(InboundMessage(actor=actor, text=text, kind=MessageKind.CHAT))

    async def handle_whisper(self, actor: str, text: str) -> None:
        await self.handle_message(InboundMessage(actor=actor, text=text, kind=MessageKind.WHISPER))

    async def handle_message(self, message: InboundMessage) -> None:
        if message.kind == MessageKind.SYSTEM:
            logger.info(f"{message.actor} {message.text}")
            return

        admission = await self.gate.admit(message.actor, message.text)
        if admission is None:
            return

        if admission.tier == Tier.UNTRUSTED:
            await self._converse(admission.actor, admission.text)
            return

        plan = await self.planner.plan(admission.actor, admission.text)
        if not plan:
            await self._converse(admission.actor, admission.text)
            return

        logger.info(f"Executing {len(plan)} step plan for {admission.actor} ({self.planner.name})")
        await self.executor.execute(admission.actor, plan)
        self.context.flush_log()

    async def _converse(self, actor: str, text: str) -> None:
        if self.responder is None or not self.config.chat_replies:
            return
        await self.responder.respond(actor, text)
        self.context.flush_log()
