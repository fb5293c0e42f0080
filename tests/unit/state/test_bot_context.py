# tests/unit/state/test_bot_context.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for the owned agent state."""

import json

from blockpilot.context import IGNORED_KEY, MEMORY_KEY, TRUSTED_KEY, BotContext
from blockpilot.models import MAX_LOG_ENTRIES, Tier
from blockpilot.store import JsonFileStore, MemoryStore


class TestLoad:
    """Tests for loading persisted state."""

    def test_empty_store(self, config):
        context = BotContext.load(config, MemoryStore())
        assert context.trusted == set()
        assert context.ignored == set()
        assert len(context.log) == 0

    def test_corrupt_files_start_empty(self, config, tmp_path):
        """Test unreadable files are treated as empty, not as errors."""
        (tmp_path / "trusted.json").write_text("{not json")
        (tmp_path / "ignored.json").write_text('{"Bob": true}')
        (tmp_path / "memory.json").write_text("[")

        context = BotContext.load(config, JsonFileStore(str(tmp_path)))

        assert context.trusted == set()
        assert context.ignored == set()
        assert len(context.log) == 0

    def test_trusted_seed_used_when_empty(self, config):
        config.trusted_seed = ["Alice", "Carol"]
        context = BotContext.load(config, MemoryStore())
        assert context.trusted == {"Alice", "Carol"}

    def test_trusted_seed_ignored_when_list_exists(self, config):
        store = MemoryStore()
        store.save(TRUSTED_KEY, ["Dave"])
        config.trusted_seed = ["Alice"]
        context = BotContext.load(config, store)
        assert context.trusted == {"Dave"}

    def test_emptied_trusted_list_is_not_reseeded(self, config, tmp_path):
        """Test untrusting every seeded player survives a restart."""
        config.trusted_seed = ["Alice"]
        store = JsonFileStore(str(tmp_path))
        context = BotContext.load(config, store)
        assert context.untrust("Alice")

        reloaded = BotContext.load(config, JsonFileStore(str(tmp_path)))

        assert store.load(TRUSTED_KEY) == []
        assert reloaded.trusted == set()
        assert not reloaded.is_trusted("Alice")

    def test_owner_is_never_stored_as_trusted(self, config):
        store = MemoryStore()
        store.save(TRUSTED_KEY, ["Owner", "Alice"])
        context = BotContext.load(config, store)
        assert context.trusted == {"Alice"}
        assert context.is_trusted("Owner")

    def test_round_trip_through_files(self, config, tmp_path):
        store = JsonFileStore(str(tmp_path))
        context = BotContext.load(config, store)
        context.trust("Alice")
        context.ignore("Bob")
        context.remember("user", "Alice: Bot hi")
        context.flush_log()

        reloaded = BotContext.load(config, JsonFileStore(str(tmp_path)))

        assert reloaded.trusted == {"Alice"}
        assert reloaded.ignored == {"Bob"}
        assert [entry.content for entry in reloaded.log] == ["Alice: Bot hi"]


class TestTiers:
    def test_tiers(self, context):
        context.trust("Alice")
        context.ignore("Bob")
        assert context.tier("Owner") == Tier.OWNER
        assert context.tier("Alice") == Tier.TRUSTED
        assert context.tier("Bob") == Tier.IGNORED
        assert context.tier("Carol") == Tier.UNTRUSTED

    def test_names_are_case_sensitive(self, context):
        context.trust("Alice")
        assert context.is_trusted("Alice")
        assert not context.is_trusted("alice")

    def test_owner_cannot_be_ignored(self, context):
        context.ignored.add("Owner")
        assert not context.is_ignored("Owner")
        assert context.tier("Owner") == Tier.OWNER


class TestMutation:
    """Tests for list changes and persistence."""

    def test_trust_persists_sorted(self, context, store):
        assert context.trust("Zed") is True
        assert context.trust("Alice") is True
        assert store.load(TRUSTED_KEY) == ["Alice", "Zed"]

    def test_trust_is_idempotent(self, context):
        assert context.trust("Alice") is True
        assert context.trust("Alice") is False
        assert context.trust("Owner") is False

    def test_untrust(self, context, store):
        context.trust("Alice")
        assert context.untrust("Alice") is True
        assert context.untrust("Alice") is False
        assert store.load(TRUSTED_KEY) == []

    def test_ignore_and_unignore(self, context, store):
        assert context.ignore("Bob") is True
        assert context.ignore("Bob") is False
        assert store.load(IGNORED_KEY) == ["Bob"]
        assert context.unignore("Bob") is True
        assert context.unignore("Bob") is False
        assert store.load(IGNORED_KEY) == []


class TestConversationLog:
    """Tests for the log and its flushing."""

    def test_log_is_bounded(self, context, store):
        for i in range(MAX_LOG_ENTRIES + 5):
            context.remember("user", f"line {i}")
        context.flush_log()

        saved = store.load(MEMORY_KEY)
        assert len(saved) == MAX_LOG_ENTRIES
        assert saved[0] == {"role": "user", "content": "line 5"}

    def test_flush_only_when_dirty(self, context, store):
        assert context.flush_log() is False
        context.remember("assistant", "hello")
        assert context.flush_log() is True
        assert context.flush_log() is False
        assert context.flush_log(force=True) is True

    def test_memory_file_is_json_array(self, config, tmp_path):
        context = BotContext.load(config, JsonFileStore(str(tmp_path)))
        context.remember("user", "Alice: Bot hi")
        context.flush_log()

        data = json.loads((tmp_path / "memory.json").read_text())
        assert data == [{"role": "user", "content": "Alice: Bot hi"}]
