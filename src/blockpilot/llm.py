# blockpilot/llm.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Generative text backend.

Providers wrap a vendor SDK behind ``generate(prompt, ...)``. The
GenerativeBackend adds the agent's contract on top: calls run off the
event loop under a timeout, and every failure (missing key, network
error, timeout) comes back as the UNAVAILABLE sentinel instead of an
exception.
"""

from abc import ABC, abstractmethod
import asyncio
import logging
import time
from typing import Optional

import tiktoken

from .config import BotConfig

logger = logging.getLogger(__name__)

UNAVAILABLE = "[generation unavailable]"

# Retryable exceptions for API calls
RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    OSError,
)

DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 8.0  # seconds


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable (transient network/API error)."""
    if isinstance(error, RETRYABLE_EXCEPTIONS):
        return True

    error_msg = str(error).lower()
    retryable_patterns = [
        "connection",
        "timeout",
        "reset by peer",
        "rate limit",
        "429",
        "502",
        "503",
        "504",
        "overloaded",
        "internal server error",
    ]
    return any(pattern in error_msg for pattern in retryable_patterns)


class LLMProvider(ABC):
    @property
    @abstractmethod
    def model(self) -> str:
        pass

    @abstractmethod
    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 512) -> str:
        """Generate a completion for a single user prompt.

        Blocking; may raise on any transport or API error.
        """
        pass


class OpenAIProvider(LLMProvider):
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_name: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
    ):
        import openai
        self.openai = openai.OpenAI(api_key=api_key, base_url=base_url)
        self.model_name = model_name or "gpt-4o-mini"
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    @property
    def model(self) -> str:
        return self.model_name

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 512) -> str:
        messages = [{"role": "user", "content": prompt}]

        try:
            encoder = tiktoken.get_encoding("cl100k_base")
            request_tokens = len(encoder.encode(prompt))
            logger.debug(f"Request: {len(prompt)} characters, {request_tokens} tokens. Generating {max_tokens} tokens.")
        except Exception as e:
            logger.debug(f"Token count unavailable: {e}")

        for attempt in range(self.max_retries + 1):
            if attempt > 0:
                delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
                logger.warning(f"Retry {attempt}/{self.max_retries} after {delay:.1f}s delay...")
                time.sleep(delay)
            try:
                response = self.openai.chat.completions.create(
                    model=self.model_name,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                content = response.choices[0].message.content if response.choices else None
                return content or ""
            except Exception as e:
                logger.error(f"API error (attempt {attempt + 1}/{self.max_retries + 1}): {e}")
                if is_retryable_error(e) and attempt < self.max_retries:
                    continue
                raise
        return ""

    @classmethod
    def from_url(cls, url: str, api_key: Optional[str], model_name: Optional[str] = None) -> "OpenAIProvider":
        return cls(base_url=url, api_key=api_key or "none", model_name=model_name)


class AIStudioProvider(LLMProvider):
    def __init__(self, api_key: str, model_name: Optional[str] = None):
        import google.generativeai as genai
        genai.configure(api_key=api_key)
        self.model_name = model_name or "gemini-1.5-flash"
        self.gem = genai.GenerativeModel(self.model_name)

    @property
    def model(self) -> str:
        return self.model_name

    def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 512) -> str:
        from google.generativeai import GenerationConfig

        config = GenerationConfig(
            candidate_count=1,
            max_output_tokens=max_tokens,
            temperature=temperature,
            top_p=0.9,
        )
        result = self.gem.generate_content(prompt, generation_config=config)
        return result.text.strip()


def build_provider(config: BotConfig) -> Optional[LLMProvider]:
    """Create the configured provider, or None when its secrets are missing."""
    provider = config.llm_provider.lower()
    try:
        if provider == "openai":
            if not config.openai_api_key:
                logger.warning("OPENAI_API_KEY is not set, generative backend disabled")
                return None
            return OpenAIProvider(api_key=config.openai_api_key, model_name=config.llm_model)
        if provider == "compat":
            if not config.compat_model_url:
                logger.warning("COMPAT_MODEL_URL is not set, generative backend disabled")
                return None
            return OpenAIProvider.from_url(config.compat_model_url, config.compat_api_key, config.llm_model)
        if provider in ("ai_studio", "gemini"):
            if not config.ai_studio_api_key:
                logger.warning("AI_STUDIO_API_KEY is not set, generative backend disabled")
                return None
            return AIStudioProvider(config.ai_studio_api_key, config.llm_model)
    except ImportError as e:
        logger.error(f"LLM provider {provider} is not installed: {e}")
        return None
    logger.warning(f"Unknown LLM provider {config.llm_provider!r}, generative backend disabled")
    return None


class GenerativeBackend:
    """Non-throwing, time-bounded wrapper around an LLMProvider."""

    def __init__(self, provider: Optional[LLMProvider], timeout: float = 20.0):
        self.provider = provider
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: BotConfig) -> "GenerativeBackend":
        return cls(build_provider(config), timeout=config.llm_timeout_seconds)

    @property
    def available(self) -> bool:
        return self.provider is not None

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 512) -> str:
        """Return generated text, or UNAVAILABLE on any failure."""
        if self.provider is None:
            return UNAVAILABLE
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self.provider.generate, prompt, temperature, max_tokens),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Generation timed out after {self.timeout}s")
            return UNAVAILABLE
        except Exception as e:
            logger.error(f"Generation failed: {e}", exc_info=True)
            return UNAVAILABLE
        return text or UNAVAILABLE
