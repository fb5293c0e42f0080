# tests/unit/state/test_stores.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for the key-value stores."""

from unittest.mock import MagicMock, patch

import fakeredis
import pytest
import redis

from blockpilot.store import JsonFileStore, MemoryStore, RedisStore, build_store


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


class TestJsonFileStore:
    def test_missing_key_returns_default(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        assert store.load("trusted", []) == []

    def test_save_creates_directory(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "nested" / "data"))
        assert store.save("trusted", ["Alice"]) is True
        assert store.load("trusted") == ["Alice"]
        assert store.path_for("trusted").name == "trusted.json"

    def test_save_replaces_whole_file(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save("trusted", ["Alice", "Bob"])
        store.save("trusted", ["Carol"])
        assert store.load("trusted") == ["Carol"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["trusted.json"]

    def test_corrupt_file_returns_default(self, tmp_path):
        (tmp_path / "ignored.json").write_text("not json at all")
        store = JsonFileStore(str(tmp_path))
        assert store.load("ignored", []) == []

    def test_unserializable_value_leaves_no_temp_file(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save("trusted", ["Alice"])

        assert store.save("trusted", {"bad": object()}) is False

        assert store.load("trusted") == ["Alice"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["trusted.json"]

    def test_failed_replace_leaves_no_temp_file(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        with patch("blockpilot.store.os.replace", side_effect=OSError("disk full")):
            assert store.save("trusted", ["Alice"]) is False
        assert list(tmp_path.iterdir()) == []

    def test_unwritable_location_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = JsonFileStore(str(blocker / "data"))
        assert store.save("trusted", ["Alice"]) is False


class TestRedisStore:
    """Tests for the Redis store using fakeredis."""

    def test_round_trip(self, fake_redis):
        store = RedisStore("redis://unused", client=fake_redis)
        assert store.save("trusted", ["Alice"]) is True
        assert store.load("trusted") == ["Alice"]

    def test_keys_are_namespaced(self, fake_redis):
        store = RedisStore("redis://unused", namespace="test:", client=fake_redis)
        store.save("memory", [{"role": "user", "content": "hi"}])
        assert fake_redis.get("test:memory") == '[{"role": "user", "content": "hi"}]'

    def test_missing_key_returns_default(self, fake_redis):
        store = RedisStore("redis://unused", client=fake_redis)
        assert store.load("ignored", []) == []

    def test_corrupt_value_returns_default(self, fake_redis):
        fake_redis.set("blockpilot:trusted", "{broken")
        store = RedisStore("redis://unused", client=fake_redis)
        assert store.load("trusted", []) == []

    def test_redis_errors_return_default(self):
        client = MagicMock()
        client.get.side_effect = redis.RedisError("down")
        client.set.side_effect = redis.RedisError("down")
        store = RedisStore("redis://unused", client=client)

        assert store.load("trusted", ["seed"]) == ["seed"]
        assert store.save("trusted", ["Alice"]) is False

    def test_unreachable_server_degrades(self):
        """Test a failed ping leaves the store usable with defaults."""
        with patch("blockpilot.store.redis.Redis.from_url") as mock_from_url:
            mock_from_url.return_value.ping.side_effect = redis.ConnectionError("refused")
            store = RedisStore("redis://nowhere:6379")

        assert store.redis is None
        assert store.load("trusted", []) == []
        assert store.save("trusted", ["Alice"]) is False


class TestBuildStore:
    def test_file_backend(self, config, tmp_path):
        config.store_backend = "file"
        config.data_dir = str(tmp_path)
        store = build_store(config)
        assert isinstance(store, JsonFileStore)

    def test_memory_backend(self, config):
        config.store_backend = "memory"
        assert isinstance(build_store(config), MemoryStore)

    def test_unknown_backend_uses_files(self, config, tmp_path):
        config.store_backend = "floppy"
        config.data_dir = str(tmp_path)
        assert isinstance(build_store(config), JsonFileStore)

    def test_redis_backend(self, config):
        config.store_backend = "redis"
        with patch("blockpilot.store.redis.Redis.from_url") as mock_from_url:
            store = build_store(config)
        assert isinstance(store, RedisStore)
        mock_from_url.assert_called_once()
        assert mock_from_url.call_args.args[0] == config.redis_url
