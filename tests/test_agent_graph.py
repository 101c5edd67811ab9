"""
Tests for the document-authoring agent graph.

The LLM, snippet search and tool execution are mocked; the LangGraph wiring
(routing, tool loop, round limit, fallback path) runs for real.
"""

from unittest.mock import patch

import pytest

from snippy.agent.graph import CODE_STYLE, DEEP_WIKI, run_agent, run_code_style, run_deep_wiki
from snippy.core.config import DEFAULT_PROJECT, MAX_AGENTIC_ROUNDS
from snippy.core.errors import AgentRunError

HITS = [
    {"name": "greet", "project": "demo", "content": "def greet(): ...", "updated_at": "", "score": 0.9},
    {"name": "add", "project": "demo", "content": "def add(a, b): ...", "updated_at": "", "score": 0.4},
]

TOOL_CALL = {"id": "call_1", "name": "vector_search", "arguments": {"query": "greeting"}}


@pytest.fixture
def with_openai():
    with patch("snippy.agent.graph.OPENAI_API_KEY", "sk-test"), \
            patch("snippy.agent.graph.search_snippets", return_value=HITS) as mock_search:
        yield mock_search


def test_tool_loop_runs_tools_then_returns_document(with_openai) -> None:
    replies = [(None, [TOOL_CALL]), ("# Demo wiki", None)]
    with patch("snippy.agent.graph.chat_with_tools", side_effect=replies) as mock_chat, \
            patch("snippy.agent.graph.execute_tool", return_value="[name=greet]\ndef greet(): ...") as mock_exec:
        result = run_deep_wiki("demo")

    assert result == {
        "project": "demo",
        "kind": DEEP_WIKI,
        "document": "# Demo wiki",
        "tools_used": ["vector_search"],
        "snippets_used": ["greet", "add"],
    }
    mock_exec.assert_called_once_with("vector_search", {"query": "greeting"}, default_project="demo")
    assert mock_chat.call_count == 2
    second_messages = mock_chat.call_args_list[1].args[0]
    assert second_messages[0]["role"] == "system"
    tool_msgs = [m for m in second_messages if m["role"] == "tool"]
    assert tool_msgs == [{"role": "tool", "tool_call_id": "call_1", "content": "[name=greet]\ndef greet(): ..."}]
    assistant = next(m for m in second_messages if m["role"] == "assistant")
    assert assistant["tool_calls"][0]["function"]["name"] == "vector_search"


def test_gathered_snippets_and_history_are_sent_to_model(with_openai) -> None:
    history = [{"role": "user", "content": "We use FastAPI."}, {"role": "assistant", "content": ""}]
    with patch("snippy.agent.graph.chat_with_tools", return_value=("# Guide", None)) as mock_chat:
        run_code_style("demo", user_query="naming", history=history)

    with_openai.assert_called_once()
    assert with_openai.call_args.args[0] == "naming"
    messages = mock_chat.call_args.args[0]
    assert {"role": "user", "content": "We use FastAPI."} in messages
    assert all(m["content"] for m in messages if m["role"] == "assistant")
    request = [m for m in messages if m["role"] == "user"][-1]["content"]
    assert "name=greet" in request
    assert "naming" in request


def test_seed_query_used_without_user_query(with_openai) -> None:
    with patch("snippy.agent.graph.chat_with_tools", return_value=("# Wiki", None)):
        run_deep_wiki("demo")
    query = with_openai.call_args.args[0]
    assert query.strip()


def test_round_limit_raises_agent_run_error(with_openai) -> None:
    with patch("snippy.agent.graph.chat_with_tools", return_value=(None, [TOOL_CALL])) as mock_chat, \
            patch("snippy.agent.graph.execute_tool", return_value="result"):
        with pytest.raises(AgentRunError):
            run_deep_wiki("demo")
    assert mock_chat.call_count == MAX_AGENTIC_ROUNDS + 1


def test_empty_document_raises_agent_run_error(with_openai) -> None:
    with patch("snippy.agent.graph.chat_with_tools", return_value=(None, None)):
        with pytest.raises(AgentRunError):
            run_code_style("demo")


def test_fallback_without_openai_uses_single_generation() -> None:
    with patch("snippy.agent.graph.OPENAI_API_KEY", ""), \
            patch("snippy.agent.graph.search_snippets", return_value=HITS), \
            patch("snippy.agent.graph.chat_with_tools") as mock_chat, \
            patch("snippy.agent.graph.hf_llm", return_value="# Style guide") as mock_llm:
        result = run_code_style("demo")

    mock_chat.assert_not_called()
    prompt = mock_llm.call_args.args[0]
    assert "name=greet" in prompt
    assert result["document"] == "# Style guide"
    assert result["kind"] == CODE_STYLE
    assert result["tools_used"] == []


def test_empty_project_still_produces_document() -> None:
    with patch("snippy.agent.graph.OPENAI_API_KEY", ""), \
            patch("snippy.agent.graph.search_snippets", return_value=[]), \
            patch("snippy.agent.graph.hf_llm", return_value="# Empty wiki") as mock_llm:
        result = run_deep_wiki(None)

    assert result["project"] == DEFAULT_PROJECT
    assert result["snippets_used"] == []
    assert "no snippets found" in mock_llm.call_args.args[0]


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValueError):
        run_agent("poem", "demo")
