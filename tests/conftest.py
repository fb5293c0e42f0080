# tests/conftest.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""
Pytest configuration and shared fixtures for blockpilot tests.

Ensures the src package is importable and provides an in-process session
client and movement controller that record everything sent to them.
"""

import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional

import pytest

# Add src directory to path for local packages
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from blockpilot.config import BotConfig
from blockpilot.context import BotContext
from blockpilot.executor import StepExecutor
from blockpilot.outbound import Outbound
from blockpilot.session import SessionHandle
from blockpilot.store import MemoryStore


class FakeMovement:
    """Movement controller that records every set_goal call."""

    def __init__(self):
        self.goal = None
        self.calls: list[Any] = []

    def set_goal(self, goal) -> None:
        self.calls.append(goal)
        self.goal = goal

    def current_goal(self):
        return self.goal


class FakeEntity:
    def __init__(self, name: str):
        self.name = name


class FakeSession:
    """Session client that records outbound traffic and lets tests emit events."""

    def __init__(self, username: str = "Bot", players: Optional[list[str]] = None):
        self.username = username
        self.players = set(players or [])
        self.handlers: dict[str, list] = defaultdict(list)
        self.movement: Optional[FakeMovement] = FakeMovement()
        self.chats: list[str] = []
        self.whispers: list[tuple[str, str]] = []
        self.quit_count = 0

    def on(self, event: str, handler) -> None:
        self.handlers[event].append(handler)

    def emit(self, event: str, *args) -> None:
        for handler in list(self.handlers[event]):
            handler(*args)

    def online_players(self) -> list[str]:
        return sorted(self.players | {self.username})

    def player_entity(self, name: str):
        return FakeEntity(name) if name in self.players else None

    def load_movement(self):
        return self.movement

    async def chat(self, text: str) -> None:
        self.chats.append(text)

    async def whisper(self, player: str, text: str) -> None:
        self.whispers.append((player, text))

    async def quit(self, reason: str = "") -> None:
        self.quit_count += 1

    def replies_to(self, player: str) -> list[str]:
        return [text for name, text in self.whispers if name == player]


@pytest.fixture
def config():
    """Config with pacing delays disabled."""
    return BotConfig(
        username="Bot",
        owner="Owner",
        call_names=["Bot"],
        step_delay_seconds=0,
        accept_command_delay_seconds=0,
        follow_timeout_seconds=60.0,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def context(config, store):
    return BotContext.load(config, store)


@pytest.fixture
def session():
    return FakeSession(username="Bot", players=["Owner", "Alice", "Bob"])


@pytest.fixture
def handle(session):
    handle = SessionHandle()
    handle.client = session
    return handle


@pytest.fixture
def outbound(handle):
    return Outbound(handle)


@pytest.fixture
def executor(config, context, outbound, handle):
    return StepExecutor(config, context, outbound, handle)


@pytest.fixture
def session_class():
    """The FakeSession class, for tests that need several clients."""
    return FakeSession
