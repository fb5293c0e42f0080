# blockpilot/console.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""A local stand-in session that reads chat lines from stdin.

Each typed line is emitted as a raw ``message`` event, so the usual
formats work: ``<Alice> Bot follow me``, ``Alice: Bot wait 3`` or a
JSON rich-text object. Outbound chat and whispers are printed. End of
input ends the session.
"""

import asyncio
from collections import defaultdict
import logging
import sys
from typing import Any, Callable, Iterable, Optional, TextIO

from .session import Goal, SessionOptions

logger = logging.getLogger(__name__)


class ConsoleEntity:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"ConsoleEntity({self.name!r})"


class LoggingMovementController:
    """Records goals instead of pathing."""

    def __init__(self):
        self._goal: Optional[Goal] = None

    def set_goal(self, goal: Optional[Goal]) -> None:
        if goal is None:
            logger.info("Movement goal cleared")
        else:
            logger.info(f"Movement goal set: {goal}")
        self._goal = goal

    def current_goal(self) -> Optional[Goal]:
        return self._goal


class ConsoleSession:
    """Session client backed by a text stream pair.

    Attributes:
        username: The agent's name.
        players: Names treated as online and visible.
    """

    def __init__(
        self,
        username: str,
        players: Optional[Iterable[str]] = None,
        reader: Optional[TextIO] = None,
        writer: Optional[TextIO] = None,
    ):
        self.username = username
        self.players: set[str] = set(players or [])
        self.reader = reader or sys.stdin
        self.writer = writer or sys.stdout
        self.handlers: dict[str, list[Callable[..., None]]] = defaultdict(list)
        self.movement: Optional[LoggingMovementController] = None
        self.closed = False
        self._pump: Optional[asyncio.Task] = None

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self.handlers[event].append(handler)

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(*args)

    def online_players(self) -> list[str]:
        return sorted(self.players | {self.username})

    def player_entity(self, name: str) -> Optional[ConsoleEntity]:
        if name in self.players:
            return ConsoleEntity(name)
        return None

    def load_movement(self) -> LoggingMovementController:
        if self.movement is None:
            self.movement = LoggingMovementController()
        return self.movement

    async def chat(self, text: str) -> None:
        self._write(f"<{self.username}> {text}")

    async def whisper(self, player: str, text: str) -> None:
        self._write(f"{self.username} whispers to {player}: {text}")

    async def quit(self, reason: str = "") -> None:
        self.closed = True
        if self._pump is not None and self._pump is not asyncio.current_task():
            self._pump.cancel()

    def _write(self, line: str) -> None:
        self.writer.write(line + "\n")
        self.writer.flush()

    def start(self) -> None:
        self._pump = asyncio.create_task(self._read_lines())

    async def _read_lines(self) -> None:
        while not self.closed:
            line = await asyncio.to_thread(self.reader.readline)
            if not line:
                break
            line = line.rstrip("\n")
            if not line.strip():
                continue
            # Anyone who speaks counts as online
            speaker = line.split(">", 1)[0].lstrip("<").strip() if line.startswith("<") else ""
            if speaker:
                self.players.add(speaker)
            self.emit("message", line)
        if not self.closed:
            self.emit("end", "end of input")


async def create_console_session(options: SessionOptions) -> ConsoleSession:
    """Session factory for local runs."""
    logger.info(f"Starting console session as {options.username}")
    session = ConsoleSession(options.username)
    session.start()
    return session
