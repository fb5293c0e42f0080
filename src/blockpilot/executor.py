# blockpilot/executor.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Sequential execution of action plans against the movement controller.

Steps of one plan run strictly in order. Plans from different actors may
interleave (each runs in its own task), but the movement controller only
ever holds one goal: every goal-setting step clears the previous goal
first, and the follow auto-stop timer acts only if its own goal is still
the current one.
"""

import asyncio
import logging
import math
from typing import Optional

from .config import BotConfig
from .context import BotContext
from .exceptions import MovementUnavailableError
from .models import (
    ActionPlan,
    ActionStep,
    FollowStep,
    GotoBlockStep,
    InvalidStep,
    TeleportRequestStep,
    WaitStep,
    clamp_wait_seconds,
)
from .outbound import Outbound
from .session import BlockGoal, FollowGoal, Goal, MovementController, SessionClient, SessionHandle

logger = logging.getLogger(__name__)

MAX_HORIZONTAL = 30_000_000
MIN_Y = -64
MAX_Y = 320


def valid_coordinates(x, y, z) -> bool:
    """Check a block coordinate is inside the world bounds."""
    try:
        fx, fy, fz = float(x), float(y), float(z)
    except (TypeError, ValueError):
        return False
    if not all(math.isfinite(v) for v in (fx, fy, fz)):
        return False
    if abs(fx) > MAX_HORIZONTAL or abs(fz) > MAX_HORIZONTAL:
        return False
    return MIN_Y <= fy <= MAX_Y


class StepExecutor:
    """Runs plans step by step, isolating failures per step.

    Attributes:
        config: Agent configuration (timings, follow radius).
        context: Shared state; receives the plan summary.
        outbound: Reply channel to the actor.
        handle: Live session reference.
    """

    def __init__(self, config: BotConfig, context: BotContext, outbound: Outbound, handle: SessionHandle):
        self.config = config
        self.context = context
        self.outbound = outbound
        self.handle = handle

        # Movement controller, set up lazily once per connected client
        self._movement: Optional[MovementController] = None
        self._movement_client: Optional[SessionClient] = None

        self._timers: set[asyncio.Task] = set()

    async def execute(self, actor: str, plan: ActionPlan) -> int:
        """Execute ``plan`` on behalf of ``actor``.

        Returns:
            Number of steps attempted.
        """
        for index, step in enumerate(plan):
            if index > 0 and self.config.step_delay_seconds > 0:
                await asyncio.sleep(self.config.step_delay_seconds)
            try:
                await self._run_step(actor, step)
            except Exception as e:
                logger.error(f"Step {step.describe()!r} for {actor} failed: {e}", exc_info=True)
                await self.outbound.reply(actor, f"Something went wrong with: {step.action}")

        if plan:
            self.context.remember("assistant", f"executed {len(plan)} instructions for {actor}")
        return len(plan)

    async def _run_step(self, actor: str, step: ActionStep) -> None:
        logger.info(f"Executing {step.describe()!r} for {actor}")
        if isinstance(step, FollowStep):
            await self._follow(actor, step)
        elif isinstance(step, GotoBlockStep):
            await self._goto(actor, step)
        elif isinstance(step, TeleportRequestStep):
            await self._teleport_request(actor, step)
        elif isinstance(step, WaitStep):
            await self._wait(actor, step)
        elif isinstance(step, InvalidStep):
            logger.info(f"Skipping invalid step {step.action!r}: {step.reason}")
            await self.outbound.reply(actor, f"I don't know how to {step.action}.")
        else:
            await self.outbound.reply(actor, f"I don't know how to {getattr(step, 'action', 'do that')}.")

    # Movement controller

    def movement(self) -> MovementController:
        """Return the movement controller for the current client.

        Raises:
            MovementUnavailableError: If there is no connection or the
                controller cannot be set up.
        """
        client = self.handle.client
        if client is None:
            raise MovementUnavailableError("not connected")
        if self._movement is not None and self._movement_client is client:
            return self._movement
        try:
            controller = client.load_movement()
        except Exception as e:
            raise MovementUnavailableError(str(e)) from e
        if controller is None:
            raise MovementUnavailableError("movement controller unavailable")
        self._movement = controller
        self._movement_client = client
        logger.info("Movement controller initialized")
        return controller

    def _set_goal(self, controller: MovementController, goal: Goal) -> None:
        if controller.current_goal() is not None:
            controller.set_goal(None)
        controller.set_goal(goal)

    def stop(self) -> bool:
        """Clear any active goal. Returns True if a goal was cleared."""
        try:
            controller = self.movement()
        except MovementUnavailableError:
            return False
        if controller.current_goal() is None:
            return False
        controller.set_goal(None)
        return True

    # Steps

    async def _follow(self, actor: str, step: FollowStep) -> None:
        try:
            controller = self.movement()
        except MovementUnavailableError as e:
            logger.warning(f"Cannot follow: {e}")
            await self.outbound.reply(actor, "I can't move right now.")
            return

        player = step.player.strip()
        client = self.handle.client
        target = client.player_entity(player) if (client is not None and player) else None
        if target is None:
            await self.outbound.reply(actor, f"I can't see {player or 'that player'}.")
            return

        goal = FollowGoal(target=target, radius=self.config.follow_radius)
        self._set_goal(controller, goal)
        await self.outbound.reply(actor, f"Following {player}.")

        timer = asyncio.create_task(self._follow_timeout(actor, player, controller, goal))
        self._timers.add(timer)
        timer.add_done_callback(self._timers.discard)

    async def _follow_timeout(self, actor: str, player: str, controller: MovementController, goal: FollowGoal) -> None:
        await asyncio.sleep(self.config.follow_timeout_seconds)
        if controller.current_goal() is not goal:
            logger.debug(f"Follow goal for {player} was superseded, timer does nothing")
            return
        controller.set_goal(None)
        logger.info(f"Stopped following {player} after {self.config.follow_timeout_seconds}s")
        await self.outbound.reply(actor, f"Stopped following {player}.")

    async def _goto(self, actor: str, step: GotoBlockStep) -> None:
        if not valid_coordinates(step.x, step.y, step.z):
            await self.outbound.reply(actor, f"Invalid coordinates: {step.x} {step.y} {step.z}")
            return
        try:
            controller = self.movement()
        except MovementUnavailableError as e:
            logger.warning(f"Cannot path: {e}")
            await self.outbound.reply(actor, "I can't move right now.")
            return

        self._set_goal(controller, BlockGoal(step.x, step.y, step.z))
        await self.outbound.reply(actor, f"Heading to {step.x} {step.y} {step.z}.")

    async def _teleport_request(self, actor: str, step: TeleportRequestStep) -> None:
        player = step.player.strip()
        if not player:
            await self.outbound.reply(actor, "Who should I teleport to?")
            return
        await self.outbound.command(f"/tpa {player}")
        await self.outbound.reply(actor, f"Sent a teleport request to {player}.")

    async def _wait(self, actor: str, step: WaitStep) -> None:
        seconds = clamp_wait_seconds(step.seconds)
        await self.outbound.reply(actor, f"Waiting {seconds} seconds...")
        await asyncio.sleep(seconds)
        await self.outbound.reply(actor, "Done waiting.")

    async def shutdown(self) -> None:
        """Cancel pending follow timers."""
        for timer in list(self._timers):
            timer.cancel()
        if self._timers:
            await asyncio.gather(*self._timers, return_exceptions=True)
        self._timers.clear()
