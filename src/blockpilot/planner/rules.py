# blockpilot/planner/rules.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Rule-based planner.

A handful of independent pattern checks, each contributing at most one
step. Steps are ordered by where their phrase appears in the text, so
"go to 10 5 10 then follow me" goes first and follows second.
"""

import logging
from typing import Optional

from ..models import ActionPlan, FollowStep, GotoBlockStep, TeleportRequestStep, WaitStep
from ..patterns import (
    FOLLOW_PATTERN,
    GOTO_PATTERN,
    NAME_TOKEN_PATTERN,
    TARGET_SELF_WORDS,
    TARGET_STOP_WORDS,
    TELEPORT_EXCLUDE_PATTERN,
    TELEPORT_PATTERN,
    TOKEN_PATTERN,
    WAIT_PATTERN,
)
from .base import PlanningStrategy

logger = logging.getLogger(__name__)


def resolve_target(text: str, verb_end: int, actor: str) -> str:
    """Find the player named right after a command verb.

    Skips "to", "at" and "the"; "me", "here" or no usable token means the actor.
    """
    for token in TOKEN_PATTERN.findall(text[verb_end:]):
        lowered = token.lower()
        if lowered in TARGET_STOP_WORDS:
            continue
        if lowered in TARGET_SELF_WORDS:
            return actor
        if NAME_TOKEN_PATTERN.match(token) and not token.isdigit():
            return token
        break
    return actor


class RuleBasedPlanner(PlanningStrategy):
    @property
    def name(self) -> str:
        return "rules"

    async def plan(self, actor: str, text: str) -> ActionPlan:
        found: list[tuple[int, object]] = []

        follow = FOLLOW_PATTERN.search(text)
        if follow:
            found.append((follow.start(), FollowStep(player=resolve_target(text, follow.end(), actor))))

        goto = GOTO_PATTERN.search(text)
        if goto:
            step = self._goto_step(goto.group(1), goto.group(2), goto.group(3))
            if step is not None:
                found.append((goto.start(), step))

        teleport = TELEPORT_PATTERN.search(text)
        if teleport and not TELEPORT_EXCLUDE_PATTERN.search(text):
            found.append((teleport.start(), TeleportRequestStep(player=resolve_target(text, teleport.end(), actor))))

        wait = WAIT_PATTERN.search(text)
        if wait:
            found.append((wait.start(), WaitStep(seconds=wait.group(1))))

        found.sort(key=lambda item: item[0])
        plan = [step for _, step in found]
        logger.debug(f"Rule plan for {actor}: {[s.describe() for s in plan]}")
        return plan

    @staticmethod
    def _goto_step(x: str, y: str, z: str) -> Optional[GotoBlockStep]:
        try:
            return GotoBlockStep(x=int(x), y=int(y), z=int(z))
        except ValueError:
            return None
