# blockpilot/planner/base.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Base interface for instruction planners."""

from abc import ABC, abstractmethod

from ..models import ActionPlan


class PlanningStrategy(ABC):
    """Turns a trusted actor's free text into an action plan.

    Implementations never raise: anything they cannot understand yields
    an empty plan, and malformed steps come back as InvalidStep.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def plan(self, actor: str, text: str) -> ActionPlan:
        """Build a plan for ``text`` sent by ``actor``.

        Args:
            actor: Requesting player; the default target of follow and
                teleport steps.
            text: The instruction as received.

        Returns:
            Ordered steps, possibly empty.
        """
        pass
