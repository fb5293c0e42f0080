# blockpilot/supervisor.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Connection lifecycle for the agent.

The supervisor is the only owner of the live client. It connects with
bounded, linearly backed-off attempts (retrying once with a fallback
version on a version mismatch), installs every event subscription on
each new client, and schedules a reconnect after disconnects, errors
and kicks. Subscriptions never carry over from an old client.
"""

import asyncio
import contextlib
import logging
import signal
from typing import Any, Callable, Coroutine, Optional, Sequence

from .agent import ChatAgent
from .config import BotConfig
from .context import BotContext
from .exceptions import ProtocolMismatchError
from .listeners import Listener
from .models import SessionState
from .patterns import VERSION_MISMATCH_PATTERNS
from .session import SessionClient, SessionFactory, SessionHandle, SessionOptions

logger = logging.getLogger(__name__)

ListenerFactory = Callable[[], Sequence[Listener]]


def is_version_mismatch(error: BaseException) -> bool:
    """Check if a connection error means the protocol versions disagree."""
    if isinstance(error, ProtocolMismatchError):
        return True
    error_msg = str(error).lower()
    return any(pattern in error_msg for pattern in VERSION_MISMATCH_PATTERNS)


class SessionSupervisor:
    """Owns and restarts the session connection.

    Attributes:
        config: Agent configuration (addresses, delays, retry bounds).
        factory: Creates a connected client from SessionOptions.
        handle: Where the live client is published.
        agent: Pipeline receiving inbound events.
        state: Current SessionState.
    """

    def __init__(
        self,
        config: BotConfig,
        factory: SessionFactory,
        handle: SessionHandle,
        agent: ChatAgent,
        listener_factory: Optional[ListenerFactory] = None,
        context: Optional[BotContext] = None,
    ):
        self.config = config
        self.factory = factory
        self.handle = handle
        self.agent = agent
        self.listener_factory = listener_factory or (lambda: [])
        self.context = context

        self.state = SessionState.DISCONNECTED
        self.running = False
        self.listeners: list[Listener] = []

        self._reconnect_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._stopped: Optional[asyncio.Event] = None

    # Connecting

    def _options(self, version: Optional[str]) -> SessionOptions:
        return SessionOptions(
            host=self.config.host,
            port=self.config.port,
            username=self.config.username,
            version=version,
            password=self.config.password,
            auth=self.config.auth_mode,
        )

    async def _create_session(self) -> SessionClient:
        """One connection attempt, with an immediate fallback-version retry."""
        version = self.config.version
        try:
            return await self.factory(self._options(version))
        except Exception as e:
            fallback = self.config.fallback_version
            if not (is_version_mismatch(e) and fallback and fallback != version):
                raise
            logger.warning(f"Version mismatch ({e}), retrying with fallback version {fallback}")
            return await self.factory(self._options(fallback))

    async def connect(self) -> bool:
        """Run one connection cycle.

        Returns:
            True once connected, False when every attempt failed.
        """
        attempts = self.config.connect_max_attempts
        for attempt in range(1, attempts + 1):
            self.state = SessionState.CONNECTING
            logger.info(
                f"Connecting to {self.config.host}:{self.config.port} as {self.config.username} "
                f"(attempt {attempt}/{attempts}, auth {self.config.auth_mode})"
            )
            try:
                client = await self._create_session()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.state = SessionState.ERROR
                logger.error(f"Connection attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    delay = self.config.connect_retry_base_seconds * attempt
                    logger.info(f"Retrying in {delay:.1f}s")
                    await asyncio.sleep(delay)
                continue

            self._install(client)
            return True

        self.state = SessionState.DISCONNECTED
        logger.critical(f"Could not connect after {attempts} attempts")
        if self.running and self.config.auto_reconnect:
            self.schedule_reconnect(self.config.reconnect_cycle_cooldown_seconds)
        return False

    def _install(self, client: SessionClient) -> None:
        """Publish ``client`` and subscribe to all of its events."""
        self.handle.client = client
        self.listeners = list(self.listener_factory())
        self.subscribe(client)
        self.state = SessionState.CONNECTED
        logger.info(f"Connected as {getattr(client, 'username', self.config.username)}")

    def subscribe(self, client: SessionClient) -> None:
        """Install every event subscription on a freshly connected client."""

        def current() -> bool:
            return client is self.handle.client

        def on_chat(actor: str, text: str) -> None:
            if current():
                self._spawn(self.agent.handle_chat(actor, text))

        def on_whisper(actor: str, text: str) -> None:
            if current():
                self._spawn(self.agent.handle_whisper(actor, text))

        def on_message(raw: Any) -> None:
            if not current():
                return
            self._spawn(self.agent.handle_raw(raw))
            for listener in self.listeners:
                self._spawn(listener.on_line(raw))

        def on_end(reason: Any = None) -> None:
            if current():
                self._spawn(self._on_end(client, reason))

        def on_kicked(reason: Any = None) -> None:
            if current():
                self._spawn(self._on_kicked(client, reason))

        def on_error(error: Any = None) -> None:
            if current():
                self._spawn(self._on_error(client, error))

        client.on("chat", on_chat)
        client.on("whisper", on_whisper)
        client.on("message", on_message)
        client.on("end", on_end)
        client.on("kicked", on_kicked)
        client.on("error", on_error)

    # Lifecycle signals

    async def _on_end(self, client: SessionClient, reason: Any) -> None:
        logger.info(f"Disconnected: {reason}")
        await self._drop(client, SessionState.DISCONNECTED, self.config.reconnect_delay_seconds)

    async def _on_kicked(self, client: SessionClient, reason: Any) -> None:
        logger.warning(f"Kicked from server: {reason}")
        await self._drop(client, SessionState.KICKED, self.config.kick_reconnect_delay_seconds)

    async def _on_error(self, client: SessionClient, error: Any) -> None:
        logger.error(f"Session error: {error}")
        await self._drop(client, SessionState.ERROR, self.config.error_reconnect_delay_seconds)

    async def _drop(
        self, client: SessionClient, state: SessionState, reconnect_delay: Optional[float] = None
    ) -> None:
        """Detach ``client`` and quit it. Only the first signal for a client picks the reconnect delay."""
        if client is not self.handle.client:
            return
        self.handle.client = None
        self.state = state
        # The delay is fixed before the first await
        if reconnect_delay is not None:
            self.schedule_reconnect(reconnect_delay)
        try:
            await client.quit()
        except Exception as e:
            logger.debug(f"Quit after {state.value} failed: {e}")

    def schedule_reconnect(self, delay: float) -> bool:
        """Schedule a fresh connection cycle unless one is already pending."""
        if not self.running or not self.config.auto_reconnect:
            return False
        if self._reconnect_task is not None and not self._reconnect_task.done():
            logger.debug("Reconnect already scheduled")
            return False
        logger.info(f"Scheduling reconnect in {delay:.1f}s")
        self._reconnect_task = asyncio.create_task(self._reconnect_after(delay))
        return True

    async def _reconnect_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        if not self.running:
            return
        # Clear the guard so a failed cycle can schedule its own retry
        self._reconnect_task = None
        await self.connect()

    # Tasks

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Event handler failed: {error}", exc_info=error)

    async def _flush_loop(self) -> None:
        while self.running:
            await asyncio.sleep(self.config.memory_flush_interval_seconds)
            if self.context is not None:
                self.context.flush_log()

    # Run

    async def run(self) -> None:
        """Connect and keep the session alive until stop() is called."""
        self.running = True
        self._stopped = asyncio.Event()
        self.setup_signal_handlers()
        flusher = asyncio.create_task(self._flush_loop())
        try:
            connected = await self.connect()
            if not connected and not self.config.auto_reconnect:
                logger.critical("Giving up: auto-reconnect is disabled")
                return
            await self._stopped.wait()
        finally:
            self.running = False
            flusher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await flusher
            await self.shutdown()

    async def stop(self) -> None:
        logger.info("Stopping supervisor...")
        self.running = False
        if self._stopped is not None:
            self._stopped.set()

    async def shutdown(self) -> None:
        """Cancel pending work, close the client and flush state."""
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.agent.executor.shutdown()
        client = self.handle.client
        if client is not None:
            await self._drop(client, SessionState.DISCONNECTED)
        if self.context is not None:
            self.context.flush_log(force=True)
        logger.info("Supervisor stopped")

    def setup_signal_handlers(self) -> None:
        """Register SIGINT and SIGTERM to trigger a graceful stop."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda s=sig: self._on_signal(s))
            except (NotImplementedError, RuntimeError):
                # Not available on this platform or outside the main thread
                logger.debug(f"Cannot install handler for {sig.name}")

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down gracefully...")
        asyncio.create_task(self.stop())
