# tests/unit/config/test_bot_config.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Unit tests for configuration, CLI wiring and the console session."""

import io
from unittest.mock import patch

import pytest

from blockpilot.config import BotConfig, get_env, parse_bool, parse_csv
from blockpilot.console import ConsoleSession, LoggingMovementController, create_console_session
from blockpilot.exceptions import SessionFactoryError
from blockpilot.session import BlockGoal, SessionOptions, load_session_factory
from blockpilot.supervisor import SessionSupervisor
from blockpilot.utils import build_supervisor, parse_args


ENV_VARS = [
    "BOT_USERNAME", "OWNER_NAME", "CALL_NAMES", "TRUSTED_PLAYERS", "SERVER_PORT",
    "BOT_PASSWORD", "PLANNER", "AUTO_RECONNECT", "STORE_BACKEND", "DATA_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes anything a .env file loads
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # No .env file in the working directory
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestParsers:
    def test_parse_csv(self):
        assert parse_csv(" Alice, Bob ,,Carol ") == ["Alice", "Bob", "Carol"]
        assert parse_csv(None) == []

    @pytest.mark.parametrize("raw,expected", [("1", True), ("true", True), ("Yes", True), ("0", False), ("off", False)])
    def test_parse_bool(self, raw, expected):
        assert parse_bool(raw) is expected

    def test_parse_bool_default(self):
        assert parse_bool(None, True) is True
        assert parse_bool("", False) is False


class TestBotConfig:
    """Tests for BotConfig defaults and environment loading."""

    def test_defaults(self):
        config = BotConfig()
        assert config.username == "Bot"
        assert config.call_names == ["Bot"]
        assert config.planner == "rules"
        assert config.follow_timeout_seconds == 60.0
        assert config.step_delay_seconds == 0.5
        assert config.connect_max_attempts == 5
        assert config.auth_mode == "offline"

    def test_auth_mode_with_password(self):
        assert BotConfig(password="secret").auth_mode == "microsoft"

    def test_from_env(self, clean_env):
        clean_env.setenv("BOT_USERNAME", "Helper")
        clean_env.setenv("OWNER_NAME", "Alice")
        clean_env.setenv("TRUSTED_PLAYERS", "Bob,Carol")
        clean_env.setenv("SERVER_PORT", "25570")
        clean_env.setenv("AUTO_RECONNECT", "false")

        config = BotConfig.from_env()

        assert config.username == "Helper"
        assert config.call_names == ["Helper"]
        assert config.owner == "Alice"
        assert config.trusted_seed == ["Bob", "Carol"]
        assert config.port == 25570
        assert config.auto_reconnect is False

    def test_call_names_override(self, clean_env):
        clean_env.setenv("CALL_NAMES", "Bot, Robo")
        assert get_env()["call_names"] == ["Bot", "Robo"]

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / "bot.env"
        env_file.write_text("OWNER_NAME=Dana\nPLANNER=llm\n")

        config = BotConfig.from_env(str(env_file))

        assert config.owner == "Dana"
        assert config.planner == "llm"

    def test_update(self):
        config = BotConfig()
        config.update(owner="Eve", planner="llm")
        assert config.to_dict()["owner"] == "Eve"
        assert config.planner == "llm"


class TestCli:
    def test_parse_args_defaults(self):
        args = parse_args([])
        assert args.log_level == "INFO"
        assert args.verbose is False
        assert args.planner is None

    def test_parse_args_overrides(self):
        args = parse_args(["--owner", "Alice", "--planner", "llm", "-v", "--session-factory", "a.b:c"])
        assert args.owner == "Alice"
        assert args.planner == "llm"
        assert args.verbose is True
        assert args.session_factory == "a.b:c"

    def test_build_supervisor(self, tmp_path):
        config = BotConfig(owner="Alice", data_dir=str(tmp_path), login_password="pw")
        supervisor = build_supervisor(config)

        assert isinstance(supervisor, SessionSupervisor)
        assert supervisor.factory is create_console_session
        assert supervisor.agent.planner.name == "rules"
        kinds = [type(listener).__name__ for listener in supervisor.listener_factory()]
        assert kinds == ["TeleportAutoAccept", "AutoAuth"]

    def test_bad_session_factory(self):
        with pytest.raises(SessionFactoryError):
            build_supervisor(BotConfig(session_factory="no_colon_here"))


class TestSessionFactoryLoading:
    def test_load_console_factory(self):
        assert load_session_factory("blockpilot.console:create_console_session") is create_console_session

    @pytest.mark.parametrize("path", ["blockpilot.console", "no.such.module:factory", "blockpilot.console:missing"])
    def test_bad_paths(self, path):
        with pytest.raises(SessionFactoryError):
            load_session_factory(path)


class TestConsoleSession:
    """Tests for the stdin/stdout session."""

    @pytest.mark.asyncio
    async def test_lines_become_message_events(self):
        reader = io.StringIO("<Alice> Bot follow me\n\nAlice: hi\n")
        writer = io.StringIO()
        session = ConsoleSession("Bot", reader=reader, writer=writer)
        received, ended = [], []
        session.on("message", received.append)
        session.on("end", ended.append)

        session.start()
        await session._pump

        assert received == ["<Alice> Bot follow me", "Alice: hi"]
        assert ended == ["end of input"]
        assert "Alice" in session.online_players()
        assert session.player_entity("Alice").name == "Alice"
        assert session.player_entity("Zed") is None

    @pytest.mark.asyncio
    async def test_output(self):
        writer = io.StringIO()
        session = ConsoleSession("Bot", reader=io.StringIO(""), writer=writer)

        await session.chat("hello")
        await session.whisper("Alice", "psst")

        assert writer.getvalue() == "<Bot> hello\nBot whispers to Alice: psst\n"

    def test_movement_controller(self):
        controller = LoggingMovementController()
        goal = BlockGoal(1, 2, 3)
        controller.set_goal(goal)
        assert controller.current_goal() is goal
        controller.set_goal(None)
        assert controller.current_goal() is None

    @pytest.mark.asyncio
    async def test_factory(self):
        with patch("blockpilot.console.ConsoleSession.start") as mock_start:
            session = await create_console_session(SessionOptions(host="localhost", port=25565, username="Bot"))
        assert session.username == "Bot"
        mock_start.assert_called_once()
        assert session.load_movement() is session.load_movement()
