# blockpilot/session.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Contracts for the external game session and its movement controller.

The agent never talks to the game directly. A session factory (configured
as a dotted "module:callable") produces a connected SessionClient, and the
supervisor publishes the live client through a SessionHandle so every
other component can see whether a connection currently exists.

Events a client emits through ``on(event, handler)``:

- ``chat(actor, text)``: player chat, already attributed.
- ``whisper(actor, text)``: direct messages to the agent.
- ``message(raw)``: any other line (system text, bridged channels,
  rich-text objects) that still needs normalizing. Lines delivered as
  ``chat`` or ``whisper`` must not be repeated here.
- ``end(reason)``, ``kicked(reason)``, ``error(exc)``: lifecycle signals.
"""

import importlib
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, Union

from .exceptions import SessionFactoryError


@dataclass(eq=False)
class FollowGoal:
    """Track a live entity, staying within ``radius`` blocks."""

    target: Any
    radius: int = 1


@dataclass(eq=False)
class BlockGoal:
    """Reach an exact block coordinate."""

    x: int
    y: int
    z: int


Goal = Union[FollowGoal, BlockGoal]


class MovementController(Protocol):
    """Pathing engine owned by the session client."""

    def set_goal(self, goal: Optional[Goal]) -> None:
        ...

    def current_goal(self) -> Optional[Goal]:
        ...


class SessionClient(Protocol):
    """A connected game session."""

    username: str

    def on(self, event: str, handler: Callable[..., None]) -> None:
        ...

    def online_players(self) -> Iterable[str]:
        ...

    def player_entity(self, name: str) -> Any:
        """Return a live position handle for ``name``, or None if not visible."""
        ...

    def load_movement(self) -> Optional[MovementController]:
        """Set up (once) and return the movement controller, or None."""
        ...

    async def chat(self, text: str) -> None:
        ...

    async def whisper(self, player: str, text: str) -> None:
        ...

    async def quit(self, reason: str = "") -> None:
        ...


@dataclass
class SessionOptions:
    """Connection parameters handed to the session factory."""

    host: str
    port: int
    username: str
    version: Optional[str] = None
    password: Optional[str] = None
    auth: str = "offline"


SessionFactory = Callable[[SessionOptions], Awaitable[SessionClient]]


class SessionHandle:
    """Reference to the live client, owned by the supervisor.

    ``client`` is None whenever no connection is established.
    """

    def __init__(self):
        self.client: Optional[SessionClient] = None

    @property
    def connected(self) -> bool:
        return self.client is not None


def load_session_factory(path: str) -> SessionFactory:
    """Import a session factory from a "module:callable" path.

    Raises:
        SessionFactoryError: If the path is malformed or cannot be imported.
    """
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise SessionFactoryError(f"Session factory must look like 'module:callable', got {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SessionFactoryError(f"Cannot import session factory module {module_name}: {e}") from e
    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise SessionFactoryError(f"{module_name} has no callable {attr}")
    return factory
