# blockpilot/utils.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Command-line entry point and wiring for the chat command agent."""

import argparse
import asyncio
import logging

from .agent import ChatAgent
from .config import BotConfig
from .context import BotContext
from .executor import StepExecutor
from .listeners import AutoAuth, Listener, TeleportAutoAccept
from .llm import GenerativeBackend
from .outbound import Outbound
from .planner import build_planner
from .responder import Responder
from .session import SessionHandle, load_session_factory
from .store import build_store
from .supervisor import SessionSupervisor


logger = logging.getLogger(__name__)


def build_supervisor(config: BotConfig) -> SessionSupervisor:
    """Assemble every component around a shared SessionHandle.

    Raises:
        SessionFactoryError: If the configured session factory cannot be loaded.
    """
    factory = load_session_factory(config.session_factory)

    store = build_store(config)
    context = BotContext.load(config, store)
    handle = SessionHandle()
    outbound = Outbound(handle, max_length=config.max_message_length)

    backend = GenerativeBackend.from_config(config)
    planner = build_planner(config, backend)
    executor = StepExecutor(config, context, outbound, handle)
    responder = Responder(config, context, backend, outbound) if config.chat_replies else None

    agent = ChatAgent(config, context, handle, outbound, planner, executor, responder)

    def listener_factory() -> list[Listener]:
        listeners: list[Listener] = []
        if config.auto_accept_tpa:
            listeners.append(TeleportAutoAccept(context, outbound, delay=config.accept_command_delay_seconds))
        if config.auto_auth and config.login_password:
            listeners.append(AutoAuth(outbound, config.login_password))
        return listeners

    logger.info(f"Planner: {planner.name}, generative backend available: {backend.available}")
    return SessionSupervisor(config, factory, handle, agent, listener_factory, context=context)


async def run_agent(config: BotConfig) -> None:
    """Build the agent and run it until stopped."""
    supervisor = build_supervisor(config)
    await supervisor.run()


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Run the chat command agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run against the local console session
  python -m blockpilot --owner Alice

  # Use a custom env file and the generative planner
  python -m blockpilot --env-file /path/to/.env --planner llm

  # Connect through a real session adapter
  python -m blockpilot --session-factory mypackage.adapter:create_session
        """,
    )
    parser.add_argument(
        "--env-file",
        help="Path to .env file for loading environment variables",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose debug logging (overrides --log-level)",
    )
    parser.add_argument(
        "--planner",
        choices=["rules", "llm"],
        help="Planner override (default: from env PLANNER)",
    )
    parser.add_argument(
        "--owner",
        help="Owner override (default: from env OWNER_NAME)",
    )
    parser.add_argument(
        "--session-factory",
        help="Session factory as module:callable (default: from env SESSION_FACTORY)",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure logging with the specified level.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    """Main entry point for the agent CLI.

    Parses arguments, loads configuration, and runs the supervisor until
    interrupted.
    """
    args = parse_args()
    log_level = "DEBUG" if args.verbose else args.log_level
    setup_logging(log_level)

    config = BotConfig.from_env(args.env_file)
    logger.info("Loaded environment configuration")

    if args.planner:
        config.planner = args.planner
        logger.info(f"Planner override: {args.planner}")

    if args.owner:
        config.owner = args.owner
        logger.info(f"Owner override: {args.owner}")

    if args.session_factory:
        config.session_factory = args.session_factory
        logger.info(f"Session factory override: {args.session_factory}")

    logger.info(f"Username: {config.username}")
    logger.info(f"Owner: {config.owner or '(none)'}")
    logger.info(f"Server: {config.host}:{config.port}")

    try:
        asyncio.run(run_agent(config))
    except KeyboardInterrupt:
        logger.info("Agent stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Agent error: {e}")
        raise
