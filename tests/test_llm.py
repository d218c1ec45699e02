"""Tests for the LLM client deadline and retry handling."""

from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError, APITimeoutError

from vira.ai.llm import LLMClient
from vira.core.exceptions import UpstreamTimeout

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _fake_client(outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def _completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5),
    )


class TestLLMClient:
    """Tests for LLMClient."""

    def test_json_mode_request(self, test_settings):
        """Test JSON completions request JSON mode with configured model."""
        client, completions = _fake_client([_completion('{"recommendations": []}')])
        llm = LLMClient(client=client, settings=test_settings)
        assert llm.complete_json("system", "prompt") == '{"recommendations": []}'
        call = completions.calls[0]
        assert call["response_format"] == {"type": "json_object"}
        assert call["model"] == test_settings.ai_model
        assert call["timeout"] == test_settings.ai_timeout_seconds

    def test_text_request_has_no_json_mode(self, test_settings):
        """Test text completions prepend the system prompt."""
        client, completions = _fake_client([_completion("Hi there")])
        llm = LLMClient(client=client, settings=test_settings)
        reply = llm.complete_text("system", [{"role": "user", "content": "hello"}])
        assert reply == "Hi there"
        call = completions.calls[0]
        assert "response_format" not in call
        assert call["messages"][0] == {"role": "system", "content": "system"}

    def test_retry_then_success(self, test_settings):
        """Test one transient failure is retried."""
        client, completions = _fake_client([
            APIConnectionError(request=REQUEST),
            _completion("ok"),
        ])
        llm = LLMClient(client=client, settings=test_settings)
        assert llm.complete_json("system", "prompt") == "ok"
        assert len(completions.calls) == 2

    def test_timeout_after_retries(self, test_settings):
        """Test persistent timeouts raise UpstreamTimeout after all attempts."""
        client, completions = _fake_client([
            APITimeoutError(request=REQUEST),
            APITimeoutError(request=REQUEST),
        ])
        llm = LLMClient(client=client, settings=test_settings)
        with pytest.raises(UpstreamTimeout) as excinfo:
            llm.complete_json("system", "prompt")
        assert len(completions.calls) == test_settings.ai_retry_attempts
        assert excinfo.value.model == test_settings.ai_model

    def test_empty_content(self, test_settings):
        """Test a missing message content becomes an empty string."""
        client, _ = _fake_client([_completion(None)])
        llm = LLMClient(client=client, settings=test_settings)
        assert llm.complete_json("system", "prompt") == ""
