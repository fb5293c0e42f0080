# blockpilot/planner/generative.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Planner that delegates to a generative backend.

The backend is asked for ``{"steps": [...]}``. Models often wrap JSON
in prose, so the first JSON object anywhere in the reply is used. Prompt
variants are tried in order with the same validation; if none yields a
usable object the plan is empty.
"""

import json
import logging
from typing import Any, Optional, Sequence

from ..llm import UNAVAILABLE, GenerativeBackend
from ..models import ActionPlan, parse_steps
from .base import PlanningStrategy
from .prompts import PLAN_PROMPT_VARIANTS

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def extract_json_object(response: str) -> Optional[dict]:
    """Return the first JSON object embedded anywhere in ``response``."""
    if not response:
        return None
    start = response.find("{")
    while start >= 0:
        try:
            obj, _ = _decoder.raw_decode(response, start)
        except json.JSONDecodeError:
            start = response.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = response.find("{", start + 1)
    return None


def valid_plan_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and isinstance(payload.get("steps"), list)


class GenerativePlanner(PlanningStrategy):
    """Plan through the generative backend with a stricter retry."""

    def __init__(
        self,
        backend: GenerativeBackend,
        bot_name: str,
        temperature: float = 0.2,
        max_tokens: int = 256,
        variants: Sequence[str] = PLAN_PROMPT_VARIANTS,
    ):
        self.backend = backend
        self.bot_name = bot_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.variants = tuple(variants)

    @property
    def name(self) -> str:
        return "llm"

    def build_prompts(self, actor: str, text: str) -> list[str]:
        instruction = text.replace('"', "'")
        return [
            variant.format(bot_name=self.bot_name, actor=actor, instruction=instruction)
            for variant in self.variants
        ]

    async def plan(self, actor: str, text: str) -> ActionPlan:
        for attempt, prompt in enumerate(self.build_prompts(actor, text), start=1):
            response = await self.backend.generate(
                prompt, temperature=self.temperature, max_tokens=self.max_tokens
            )
            if response == UNAVAILABLE:
                logger.warning(f"Backend unavailable on plan attempt {attempt}")
                continue
            payload = extract_json_object(response)
            if not valid_plan_payload(payload):
                logger.info(f"Plan attempt {attempt} returned no usable JSON: {response[:120]!r}")
                continue
            plan = parse_steps(payload["steps"])
            logger.info(f"Generated plan for {actor}: {[s.describe() for s in plan]}")
            return plan

        logger.warning(f"No plan could be generated for {actor}: {text!r}")
        return []
