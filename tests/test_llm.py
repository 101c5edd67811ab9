"""
Unit tests for the LLM client configuration guards.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest

from snippy.agent.llm import chat_with_tools, hf_llm
from snippy.core.errors import ServiceUnavailableError


def test_chat_with_tools_requires_openai_key() -> None:
    with patch("snippy.agent.llm.OPENAI_API_KEY", ""):
        with pytest.raises(ServiceUnavailableError):
            chat_with_tools([{"role": "user", "content": "hi"}], [])


def test_hf_llm_without_any_key_is_unavailable() -> None:
    with patch("snippy.agent.llm.OPENAI_API_KEY", ""), patch("snippy.agent.llm.HF_API_KEY", ""):
        with pytest.raises(ServiceUnavailableError):
            hf_llm("hello")


def test_hf_llm_openai_failure_without_hf_key_reports_openai() -> None:
    with patch("snippy.agent.llm.OPENAI_API_KEY", "sk-test"), patch(
        "snippy.agent.llm.HF_API_KEY", ""
    ), patch("snippy.agent.llm._call_openai", return_value=""):
        with pytest.raises(ServiceUnavailableError) as exc:
            hf_llm("hello")
    assert "OpenAI" in exc.value.message
    assert "No LLM configured" not in exc.value.message


def test_hf_llm_non_json_body_is_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    real_client = httpx.Client
    monkeypatch.setattr(
        httpx,
        "Client",
        lambda **kwargs: real_client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>busy</html>")),
            **kwargs,
        ),
    )
    with patch("snippy.agent.llm.OPENAI_API_KEY", ""), patch("snippy.agent.llm.HF_API_KEY", "hf_test"):
        with pytest.raises(ServiceUnavailableError, match="non-JSON"):
            hf_llm("hello")


def test_chat_with_tools_parses_tool_calls() -> None:
    tool_call = SimpleNamespace(
        id="call_1",
        function=SimpleNamespace(name="vector_search", arguments='{"query": "retry"}'),
    )
    message = SimpleNamespace(content=None, tool_calls=[tool_call])
    fake_client = MagicMock()
    fake_client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=message)])

    with patch("snippy.agent.llm.OPENAI_API_KEY", "sk-test"), \
            patch("snippy.agent.llm._openai_client", return_value=fake_client):
        content, calls = chat_with_tools([{"role": "user", "content": "hi"}], [])

    assert content is None
    assert calls == [{"id": "call_1", "name": "vector_search", "arguments": {"query": "retry"}}]


def test_chat_with_tools_final_answer() -> None:
    message = SimpleNamespace(content="  # Doc  ", tool_calls=None)
    fake_client = MagicMock()
    fake_client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=message)])

    with patch("snippy.agent.llm.OPENAI_API_KEY", "sk-test"), \
            patch("snippy.agent.llm._openai_client", return_value=fake_client):
        assert chat_with_tools([], []) == ("# Doc", None)
