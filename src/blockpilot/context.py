# blockpilot/context.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Owned agent state: trust lists and conversation log.

All mutation goes through BotContext so every change is persisted.
State is read from the store once at startup and lives in memory after
that.
"""

import logging
from typing import Any, Iterable, Optional

from .config import BotConfig
from .models import ConversationLog, Tier
from .store import KeyValueStore

logger = logging.getLogger(__name__)

TRUSTED_KEY = "trusted"
IGNORED_KEY = "ignored"
MEMORY_KEY = "memory"


def _clean_names(key: str, data: Any) -> set[str]:
    if data is None:
        return set()
    if not isinstance(data, list):
        logger.warning(f"Stored {key} list is not a JSON array, starting empty")
        return set()
    return {str(name).strip() for name in data if isinstance(name, str) and name.strip()}


class BotContext:
    """Trusted set, ignored set and conversation log for one agent.

    Attributes:
        owner: The configured owner; implicitly trusted, never stored.
        trusted: Explicitly trusted players.
        ignored: Players whose messages are dropped.
        log: Bounded conversation log.
    """

    def __init__(
        self,
        owner: str,
        store: KeyValueStore,
        trusted: Iterable[str] = (),
        ignored: Iterable[str] = (),
        log: Optional[ConversationLog] = None,
    ):
        self.owner = owner
        self.store = store
        self.trusted: set[str] = set(trusted)
        self.ignored: set[str] = set(ignored)
        self.log = log or ConversationLog()
        self._log_dirty = False

    @classmethod
    def load(cls, config: BotConfig, store: KeyValueStore) -> "BotContext":
        """Load persisted state; missing or corrupt entries start empty."""
        stored_trusted = store.load(TRUSTED_KEY, None)
        trusted = _clean_names(TRUSTED_KEY, stored_trusted)
        # Seed only a list that was never saved; an emptied list stays empty
        if stored_trusted is None and config.trusted_seed:
            trusted = set(config.trusted_seed)
            logger.info(f"Seeding trusted players from config: {sorted(trusted)}")
        ignored = _clean_names(IGNORED_KEY, store.load(IGNORED_KEY, None))
        log = ConversationLog.from_list(store.load(MEMORY_KEY, []))
        trusted.discard(config.owner)
        context = cls(config.owner, store, trusted, ignored, log)
        logger.info(
            f"Loaded {len(context.trusted)} trusted, {len(context.ignored)} ignored, "
            f"{len(context.log)} conversation entries"
        )
        return context

    # Tiers

    def is_owner(self, name: str) -> bool:
        return bool(self.owner) and name == self.owner

    def is_trusted(self, name: str) -> bool:
        return self.is_owner(name) or name in self.trusted

    def is_ignored(self, name: str) -> bool:
        return name in self.ignored and not self.is_owner(name)

    def tier(self, name: str) -> Tier:
        if self.is_owner(name):
            return Tier.OWNER
        if name in self.ignored:
            return Tier.IGNORED
        if name in self.trusted:
            return Tier.TRUSTED
        return Tier.UNTRUSTED

    # List mutation

    def trust(self, name: str) -> bool:
        """Add ``name`` to the trusted set. Returns False if already trusted."""
        if self.is_trusted(name):
            return False
        self.trusted.add(name)
        self._save_names(TRUSTED_KEY, self.trusted)
        return True

    def untrust(self, name: str) -> bool:
        """Remove ``name`` from the trusted set. Returns False if it wasn't there."""
        if name not in self.trusted:
            return False
        self.trusted.discard(name)
        self._save_names(TRUSTED_KEY, self.trusted)
        return True

    def ignore(self, name: str) -> bool:
        if name in self.ignored:
            return False
        self.ignored.add(name)
        self._save_names(IGNORED_KEY, self.ignored)
        return True

    def unignore(self, name: str) -> bool:
        if name not in self.ignored:
            return False
        self.ignored.discard(name)
        self._save_names(IGNORED_KEY, self.ignored)
        return True

    def _save_names(self, key: str, names: set[str]) -> None:
        if not self.store.save(key, sorted(names)):
            logger.warning(f"Could not persist {key} list")

    # Conversation log

    def remember(self, role: str, content: str) -> None:
        self.log.append(role, content)
        self._log_dirty = True

    def flush_log(self, force: bool = False) -> bool:
        """Persist the conversation log if it changed since the last flush."""
        if not self._log_dirty and not force:
            return False
        if self.store.save(MEMORY_KEY, self.log.to_list()):
            self._log_dirty = False
            return True
        return False
