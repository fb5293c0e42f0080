# blockpilot/config.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Configuration for the chat command agent.

Values come from the environment (optionally a .env file), following the
same get_env/from_env split used by the chat configuration.
"""

from dataclasses import asdict, dataclass, field
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


def parse_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def parse_bool(raw: Optional[str], default: bool = False) -> bool:
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_env(dotenv_path: Optional[str] = None) -> Dict[str, Any]:
    if dotenv_path is not None:
        load_dotenv(dotenv_path)
    else:
        load_dotenv()

    username = os.getenv("BOT_USERNAME", "Bot")
    return {
        # Identity
        "username": username,
        "owner": os.getenv("OWNER_NAME", ""),
        "call_names": parse_csv(os.getenv("CALL_NAMES")) or [username],
        "trusted_seed": parse_csv(os.getenv("TRUSTED_PLAYERS")),

        # Session
        "host": os.getenv("SERVER_HOST", "localhost"),
        "port": int(os.getenv("SERVER_PORT", 25565)),
        "version": os.getenv("MC_VERSION") or None,
        "fallback_version": os.getenv("MC_FALLBACK_VERSION") or None,
        "password": os.getenv("BOT_PASSWORD") or None,
        "session_factory": os.getenv("SESSION_FACTORY", "blockpilot.console:create_console_session"),
        "bridge_tag": os.getenv("BRIDGE_TAG", "[discord]"),

        # Listeners
        "auto_auth": parse_bool(os.getenv("AUTO_AUTH"), True),
        "login_password": os.getenv("LOGIN_PASSWORD") or None,
        "auto_reconnect": parse_bool(os.getenv("AUTO_RECONNECT"), True),
        "auto_accept_tpa": parse_bool(os.getenv("AUTO_ACCEPT_TPA"), True),
        "chat_replies": parse_bool(os.getenv("CHAT_REPLIES"), True),

        # Planner and generative backend
        "planner": os.getenv("PLANNER", "rules"),
        "llm_provider": os.getenv("LLM_PROVIDER", "openai"),
        "llm_model": os.getenv("LLM_MODEL") or None,
        "llm_timeout_seconds": float(os.getenv("LLM_TIMEOUT", 20)),
        "temperature": float(os.getenv("TEMPERATURE", 0.7)),
        "max_tokens": int(os.getenv("MAX_TOKENS", 512)),
        "openai_api_key": os.getenv("OPENAI_API_KEY", None),
        "compat_model_url": os.getenv("COMPAT_MODEL_URL", None),
        "compat_api_key": os.getenv("COMPAT_API_KEY", None),
        "ai_studio_api_key": os.getenv("AI_STUDIO_API_KEY") or os.getenv("GEMINI_API_KEY") or None,

        # Persistence
        "store_backend": os.getenv("STORE_BACKEND", "file"),
        "data_dir": os.getenv("DATA_DIR", "data"),
        "redis_url": os.getenv("REDIS_URL", "redis://localhost:6379"),
        "redis_namespace": os.getenv("REDIS_NAMESPACE", "blockpilot:"),
    }


@dataclass
class BotConfig:
    """Configuration for the agent.

    Attributes:
        username: The agent's own name in the session.
        owner: Name of the player who manages the trust and ignore lists.
        call_names: Names the agent answers to (case-insensitive substring match).
        trusted_seed: Players trusted at first start, before any list exists.
        version: Protocol version pin, or None to auto-detect.
        fallback_version: Version retried once after a version mismatch.
        session_factory: Dotted "module:callable" that creates a session client.
        planner: "rules" or "llm".
        store_backend: "file" or "redis".
    """

    # Identity
    username: str = "Bot"
    owner: str = ""
    call_names: List[str] = field(default_factory=lambda: ["Bot"])
    trusted_seed: List[str] = field(default_factory=list)

    # Session
    host: str = "localhost"
    port: int = 25565
    version: Optional[str] = None
    fallback_version: Optional[str] = None
    password: Optional[str] = None
    session_factory: str = "blockpilot.console:create_console_session"
    bridge_tag: str = "[discord]"

    # Listeners
    auto_auth: bool = True
    login_password: Optional[str] = None
    auto_reconnect: bool = True
    auto_accept_tpa: bool = True
    chat_replies: bool = True

    # Planner and generative backend
    planner: str = "rules"
    llm_provider: str = "openai"
    llm_model: Optional[str] = None
    llm_timeout_seconds: float = 20.0
    temperature: float = 0.7
    max_tokens: int = 512
    openai_api_key: Optional[str] = None
    compat_model_url: Optional[str] = None
    compat_api_key: Optional[str] = None
    ai_studio_api_key: Optional[str] = None

    # Persistence
    store_backend: str = "file"
    data_dir: str = "data"
    redis_url: str = "redis://localhost:6379"
    redis_namespace: str = "blockpilot:"
    memory_flush_interval_seconds: float = 60.0

    # Timing
    step_delay_seconds: float = 0.5
    follow_timeout_seconds: float = 60.0
    follow_radius: int = 1
    accept_command_delay_seconds: float = 0.5

    # Reconnect
    connect_max_attempts: int = 5
    connect_retry_base_seconds: float = 2.0
    reconnect_delay_seconds: float = 5.0
    error_reconnect_delay_seconds: float = 10.0
    kick_reconnect_delay_seconds: float = 30.0
    reconnect_cycle_cooldown_seconds: float = 300.0

    # Outbound
    max_message_length: int = 256

    @property
    def auth_mode(self) -> str:
        """Account auth mode: a password means an online account."""
        return "microsoft" if self.password else "offline"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def update(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)

    @classmethod
    def from_env(cls, dotenv_file: Optional[str] = None) -> "BotConfig":
        env = get_env(dotenv_file)
        return cls(**env)
