"""
Unit tests for agent tool definitions and execute_tool().
"""

from unittest.mock import patch

import pytest

from snippy.agent.tools import AGENT_TOOLS, execute_tool, format_snippet
from snippy.core.errors import SnippetNotFoundError

HIT = {"name": "greet", "project": "demo", "content": "def greet(): ...", "updated_at": "", "score": 0.91234}


def test_tool_names() -> None:
    assert [t["function"]["name"] for t in AGENT_TOOLS] == ["vector_search", "get_snippet", "list_snippets"]


def test_vector_search_defaults_to_run_project() -> None:
    with patch("snippy.agent.tools.search_snippets", return_value=[HIT]) as mock_search:
        out = execute_tool("vector_search", {"query": "greeting"}, default_project="demo")
    mock_search.assert_called_once()
    assert mock_search.call_args.kwargs["project"] == "demo"
    assert "[name=greet project=demo score=0.9123]" in out
    assert "def greet(): ..." in out


def test_vector_search_explicit_project_wins() -> None:
    with patch("snippy.agent.tools.search_snippets", return_value=[]) as mock_search:
        out = execute_tool("vector_search", {"query": "x", "project": "other", "top_k": "3"}, default_project="demo")
    assert out == "No matching snippets found."
    assert mock_search.call_args.kwargs == {"project": "other", "top_k": 3}


def test_vector_search_requires_query() -> None:
    with patch("snippy.agent.tools.search_snippets") as mock_search:
        assert execute_tool("vector_search", {"query": "  "}) == "Error: query is required."
    mock_search.assert_not_called()


def test_get_snippet_not_found_is_text() -> None:
    with patch("snippy.agent.tools.get_snippet", side_effect=SnippetNotFoundError("nope", "demo")):
        out = execute_tool("get_snippet", {"name": "nope"}, default_project="demo")
    assert out == "Snippet 'nope' not found in project 'demo'"


def test_get_snippet_returns_full_text() -> None:
    snippet = {"name": "greet", "project": "demo", "content": "x" * 3000, "updated_at": ""}
    with patch("snippy.agent.tools.get_snippet", return_value=snippet):
        out = execute_tool("get_snippet", {"name": "greet"}, default_project="demo")
    assert "x" * 3000 in out


def test_list_snippets() -> None:
    with patch("snippy.agent.tools.list_snippets", return_value=["a", "b"]):
        assert execute_tool("list_snippets", {}, default_project="demo") == "Snippets in project:\n- a\n- b"
    with patch("snippy.agent.tools.list_snippets", return_value=[]):
        assert execute_tool("list_snippets", {}) == "No snippets saved in this project."


def test_unknown_tool() -> None:
    assert execute_tool("rm_rf", {}) == "Unknown tool: rm_rf"


@pytest.mark.parametrize("max_chars,truncated", [(5, True), (100, False)])
def test_format_snippet_truncates(max_chars: int, truncated: bool) -> None:
    out = format_snippet({"name": "n", "project": "p", "content": "0123456789"}, max_chars=max_chars)
    assert out.startswith("[name=n project=p]")
    assert out.endswith("(truncated)") is truncated
