# blockpilot/models/actions.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Action steps that make up a plan.

A plan is an ordered list of steps. Each step is one of four known
shapes; anything else becomes an InvalidStep so the executor can tell
the actor what it did not understand instead of guessing.
"""

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)

WAIT_MIN_SECONDS = 1
WAIT_MAX_SECONDS = 30

# Alternate spellings seen in model output, mapped to the canonical tag
ACTION_ALIASES = {
    "follow": "follow",
    "goto": "goto",
    "goto_block": "goto",
    "gotoblock": "goto",
    "tpa": "tpa",
    "tp": "tpa",
    "teleport": "tpa",
    "teleport_request": "tpa",
    "wait": "wait",
}


def clamp_wait_seconds(value: Any) -> int:
    """Clamp a wait duration into [1, 30].

    Non-numeric values and values outside the range default to 1.
    """
    if isinstance(value, bool):
        return WAIT_MIN_SECONDS
    try:
        seconds = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return WAIT_MIN_SECONDS
    if seconds < WAIT_MIN_SECONDS or seconds > WAIT_MAX_SECONDS:
        return WAIT_MIN_SECONDS
    return seconds


class FollowStep(BaseModel):
    """Follow a player until superseded or timed out."""

    action: Literal["follow"] = "follow"
    player: str = ""

    def describe(self) -> str:
        return f"follow {self.player}".strip()


class GotoBlockStep(BaseModel):
    """Path to an exact block coordinate."""

    action: Literal["goto"] = "goto"
    x: int = Field(strict=True)
    y: int = Field(strict=True)
    z: int = Field(strict=True)

    def describe(self) -> str:
        return f"goto {self.x} {self.y} {self.z}"


class TeleportRequestStep(BaseModel):
    """Send a teleport request to a player."""

    action: Literal["tpa"] = "tpa"
    player: str = ""

    def describe(self) -> str:
        return f"tpa {self.player}".strip()


class WaitStep(BaseModel):
    """Pause the remainder of the plan."""

    action: Literal["wait"] = "wait"
    seconds: int = WAIT_MIN_SECONDS

    @field_validator("seconds", mode="before")
    @classmethod
    def clamp_seconds(cls, v):
        return clamp_wait_seconds(v)

    def describe(self) -> str:
        return f"wait {self.seconds}"


class InvalidStep(BaseModel):
    """A step whose shape matched none of the known actions.

    Attributes:
        action: The action name as given, or "unknown".
        reason: Why it was rejected.
        raw: The original payload.
    """

    action: str = "unknown"
    reason: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    def describe(self) -> str:
        return self.action


ActionStep = Union[FollowStep, GotoBlockStep, TeleportRequestStep, WaitStep, InvalidStep]
ActionPlan = list[ActionStep]

_KnownStep = Annotated[
    Union[FollowStep, GotoBlockStep, TeleportRequestStep, WaitStep],
    Field(discriminator="action"),
]
_step_adapter = TypeAdapter(_KnownStep)


def parse_step(raw: Any) -> ActionStep:
    """Validate one raw step dict into a typed step.

    Never raises. Unknown actions and malformed fields produce an
    InvalidStep carrying the reason.
    """
    if not isinstance(raw, dict):
        return InvalidStep(action="unknown", reason=f"step is not an object: {raw!r}")

    name = str(raw.get("action", "")).strip().lower()
    canonical = ACTION_ALIASES.get(name)
    if canonical is None:
        return InvalidStep(action=name or "unknown", reason="unknown action", raw=raw)

    payload = dict(raw)
    payload["action"] = canonical
    try:
        return _step_adapter.validate_python(payload)
    except ValidationError as e:
        logger.debug(f"Rejected {canonical} step {raw!r}: {e}")
        return InvalidStep(action=name, reason=str(e.errors()[0].get("msg", "invalid")), raw=raw)


def parse_steps(raw_steps: list) -> ActionPlan:
    """Validate a list of raw step dicts, preserving order."""
    return [parse_step(raw) for raw in raw_steps]
