"""Thin wrapper around the OpenAI chat completions API."""

from typing import Dict, List, Optional

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI

from vira.ai.retry import build_llm_retry
from vira.core.exceptions import AIProcessingError, UpstreamTimeout
from vira.core.logging import get_logger
from vira.settings import Settings, settings as default_settings

logger = get_logger("ai.llm")


class LLMClient:
    """Blocking chat-completion client with deadline and retry policy."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the client.

        Args:
            client: Optional preconfigured OpenAI client
            settings: Optional settings instance
        """
        self._settings = settings or default_settings
        self._client = client
        retry_policy = build_llm_retry(
            self._settings.ai_retry_attempts,
            self._settings.ai_retry_wait_min,
            self._settings.ai_retry_wait_max,
        )
        self._create_with_retry = retry_policy(self._create_completion)

    @property
    def model(self) -> str:
        return self._settings.ai_model

    @property
    def client(self) -> OpenAI:
        """Get OpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = OpenAI(
                api_key=self._settings.openai_api_key,
                timeout=self._settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    def complete_json(self, system: str, prompt: str) -> str:
        """Request a JSON object response and return its raw text."""
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        return self._complete(messages, json_mode=True, prompt_preview=prompt)

    def complete_text(self, system: str, messages: List[Dict[str, str]]) -> str:
        """Request a free-text reply for a conversation."""
        payload = [{"role": "system", "content": system}, *messages]
        preview = messages[-1]["content"] if messages else ""
        return self._complete(payload, json_mode=False, prompt_preview=preview)

    def _complete(
        self,
        messages: List[Dict[str, str]],
        json_mode: bool,
        prompt_preview: str,
    ) -> str:
        try:
            response = self._create_with_retry(messages, json_mode)
        except (APITimeoutError, APIConnectionError) as e:
            logger.warning("LLM call timed out or unreachable: %s", type(e).__name__)
            raise UpstreamTimeout(
                f"Model call failed: {type(e).__name__}",
                model=self.model,
                prompt_preview=prompt_preview,
            ) from e
        except APIError as e:
            logger.error("LLM call failed: %s", type(e).__name__)
            raise AIProcessingError(
                f"Model call failed: {type(e).__name__}",
                model=self.model,
                prompt_preview=prompt_preview,
            ) from e

        if response.usage:
            logger.debug(
                "AI-Usage: %s | %d+%d tokens",
                self.model,
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return response.choices[0].message.content or ""

    def _create_completion(self, messages: List[Dict[str, str]], json_mode: bool):
        kwargs = {
            "model": self._settings.ai_model,
            "messages": messages,
            "temperature": self._settings.ai_temperature,
            "timeout": self._settings.ai_timeout_seconds,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return self.client.chat.completions.create(**kwargs)
