from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional, Protocol, Sequence

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config.schema import LLMCloudConfig, LLMConfig
from ..domain.chat import ChatMessage, Sender
from ..errors import AIServiceError

logger = logging.getLogger(__name__)

PROMPT_PREAMBLE = "You are an expert AI Analyst for the Chaos Theorist financial infrastructure platform."
EMPTY_REPLY = "No response generated."


class CompletionBackend(Protocol):
    def generate(self, prompt: str, *, system_instruction: str) -> str:
        ...


def build_prompt(history: Sequence[ChatMessage], new_text: str) -> str:
    lines = [f"{'User' if msg.sender is Sender.USER else 'Model'}: {msg.text}" for msg in history]
    context = "\n".join(lines)
    return f"{PROMPT_PREAMBLE}\nCurrent Conversation:\n{context}\nUser: {new_text}\nModel:"


class CloudChatBackend:
    """OpenAI-compatible chat completions with exponential backoff."""

    def __init__(self, cfg: LLMCloudConfig, *, timeout_seconds: int = 30):
        self.cfg = cfg
        self.timeout_seconds = timeout_seconds
        provider = (cfg.provider or "").lower()
        if provider not in {"openai", "azure-openai", "azure_openai"}:
            raise AIServiceError(f"Unsupported cloud provider: {cfg.provider}")
        self._client = self._init_openai()

    def _init_openai(self):
        try:
            from openai import OpenAI
        except ImportError as exc:
            raise AIServiceError(
                "openai package not installed. Install with `pip install chaos-theorist[cloud]`."
            ) from exc
        api_key = os.getenv(self.cfg.api_key_env)
        if not api_key:
            raise AIServiceError(f"OpenAI API key not available; set {self.cfg.api_key_env}")
        return OpenAI(api_key=api_key)

    def _request(self, prompt: str, system_instruction: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.cfg.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": prompt},
                ],
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            raise AIServiceError(f"OpenAI request failed: {exc}") from exc
        try:
            return response.choices[0].message.content or ""
        except Exception as exc:
            raise AIServiceError(f"Malformed OpenAI response: {exc}") from exc

    def generate(self, prompt: str, *, system_instruction: str) -> str:
        attempts = self.cfg.retry_attempts
        if attempts <= 1:
            return self._request(prompt, system_instruction)

        def _log_retry_warning(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            if exc:
                logger.warning("Chat completion retry %s/%s failed: %s", retry_state.attempt_number, attempts, exc)

        retryer = Retrying(
            retry=retry_if_exception_type(AIServiceError),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self.cfg.retry_initial_delay,
                min=self.cfg.retry_initial_delay,
                max=self.cfg.retry_max_delay,
            ),
            reraise=True,
            before_sleep=_log_retry_warning,
        )
        return retryer(self._request, prompt, system_instruction)


class ChatClient:
    """Chat completion provider used by the orchestration layer.

    ``offline`` mode answers with a canned reply after a short delay so the
    conversation flow works without credentials. ``cloud`` mode delegates to
    a :class:`CompletionBackend`, run in a worker thread so the event loop
    keeps serving other flows while the request is in flight. Every provider
    fault surfaces as :class:`AIServiceError`.
    """

    def __init__(self, cfg: Optional[LLMConfig] = None, *, backend: Optional[CompletionBackend] = None):
        self.cfg = cfg or LLMConfig()
        self.mode = self.cfg.mode
        self._backend = backend

    def _resolve_backend(self) -> CompletionBackend:
        if self._backend is None:
            if self.cfg.cloud is None:
                raise AIServiceError("llm.mode is 'cloud' but no llm.cloud section is configured")
            self._backend = CloudChatBackend(self.cfg.cloud, timeout_seconds=self.cfg.timeout_seconds)
        return self._backend

    async def send_chat_turn(self, history: Sequence[ChatMessage], new_text: str) -> str:
        prompt = build_prompt(history, new_text)
        if self.mode == "offline" and self._backend is None:
            if self.cfg.offline_delay_seconds > 0:
                await asyncio.sleep(self.cfg.offline_delay_seconds)
            return (
                "I am running in a demo environment without a configured API key. "
                "In a production deployment, I would process: " + new_text
            )

        try:
            backend = self._resolve_backend()
            text = await asyncio.to_thread(
                backend.generate, prompt, system_instruction=self.cfg.system_instruction
            )
        except AIServiceError:
            raise
        except Exception as exc:
            raise AIServiceError(f"Chat completion failed: {exc}") from exc
        return text if text and text.strip() else EMPTY_REPLY


__all__ = ["CompletionBackend", "build_prompt", "CloudChatBackend", "ChatClient"]
