"""Instruction planners.

Two interchangeable strategies share the PlanningStrategy contract:
local rule matching and delegation to a generative backend.
"""

import logging

from ..config import BotConfig
from ..llm import GenerativeBackend
from .base import PlanningStrategy
from .generative import GenerativePlanner, extract_json_object
from .rules import RuleBasedPlanner, resolve_target

logger = logging.getLogger(__name__)


def build_planner(config: BotConfig, backend: GenerativeBackend) -> PlanningStrategy:
    """Select the planner named by ``config.planner``.

    The generative planner needs a configured backend; without one the
    rule planner is used.
    """
    if config.planner.lower() in ("llm", "generative"):
        if backend.available:
            return GenerativePlanner(backend, bot_name=config.username)
        logger.warning("Generative planner requested but no backend is configured, using rules")
    return RuleBasedPlanner()


__all__ = [
    "PlanningStrategy",
    "RuleBasedPlanner",
    "GenerativePlanner",
    "build_planner",
    "extract_json_object",
    "resolve_target",
]
