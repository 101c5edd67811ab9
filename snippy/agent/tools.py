"""
Agent tools: definitions and execution for the tool-calling loop.

Tools: vector_search, get_snippet, list_snippets. Each defaults to the agent
run's project when the model omits one.
"""

import logging
from typing import Any

from snippy.core.config import AGENT_SEARCH_TOP_K, AGENT_SNIPPET_CHARS
from snippy.core.errors import SnippetNotFoundError
from snippy.services.snippet_service import get_snippet, list_snippets, search_snippets

logger = logging.getLogger(__name__)

# OpenAI function-calling format: list of tool definitions
AGENT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "vector_search",
            "description": "Semantic search over the saved code snippets. Use this to find implementations, patterns, or examples related to a topic. Returns snippet names, similarity scores, and code.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "What to look for (keywords, natural language, or a code fragment)",
                    },
                    "project": {
                        "type": "string",
                        "description": "Optional project id; defaults to the project being documented",
                    },
                    "top_k": {
                        "type": "integer",
                        "description": "Optional maximum number of snippets to return",
                    },
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "get_snippet",
            "description": "Fetch the full code of one snippet by its name. Use after vector_search or list_snippets when you need the complete text.",
            "parameters": {
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Snippet name",
                    },
                    "project": {
                        "type": "string",
                        "description": "Optional project id; defaults to the project being documented",
                    },
                },
                "required": ["name"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "list_snippets",
            "description": "List the names of all snippets saved in a project. Use to see what code exists before searching.",
            "parameters": {
                "type": "object",
                "properties": {
                    "project": {
                        "type": "string",
                        "description": "Optional project id; defaults to the project being documented",
                    }
                },
            },
        },
    },
]


def format_snippet(snippet: dict, max_chars: int = AGENT_SNIPPET_CHARS) -> str:
    """Render a snippet (or search hit) as a block of text for the LLM."""
    content = snippet.get("content") or ""
    if len(content) > max_chars:
        content = content[:max_chars] + "\n... (truncated)"
    header = f"[name={snippet.get('name', '')} project={snippet.get('project', '')}"
    if "score" in snippet:
        header += f" score={snippet['score']:.4f}"
    return f"{header}]\n{content}"


def execute_tool(name: str, arguments: dict[str, Any], default_project: str | None = None) -> str:
    """
    Execute a tool by name with the given arguments. Returns a string result for the LLM.
    """
    args = arguments or {}
    project = (args.get("project") or "").strip() or default_project
    logger.info("[tools] execute_tool name=%r arguments=%r project=%r", name, args, project)

    if name == "vector_search":
        query = (args.get("query") or "").strip()
        if not query:
            return "Error: query is required."
        try:
            top_k = int(args.get("top_k") or AGENT_SEARCH_TOP_K)
        except (TypeError, ValueError):
            top_k = AGENT_SEARCH_TOP_K
        hits = search_snippets(query, project=project, top_k=top_k)
        if not hits:
            return "No matching snippets found."
        return "\n\n---\n\n".join(format_snippet(h) for h in hits)

    if name == "get_snippet":
        snippet_name = (args.get("name") or "").strip()
        if not snippet_name:
            return "Error: name is required."
        try:
            snippet = get_snippet(snippet_name, project=project)
        except SnippetNotFoundError as e:
            return e.message
        return format_snippet(snippet, max_chars=AGENT_SNIPPET_CHARS * 4)

    if name == "list_snippets":
        names = list_snippets(project)
        if not names:
            return "No snippets saved in this project."
        return "Snippets in project:\n" + "\n".join(f"- {n}" for n in names)

    return f"Unknown tool: {name}"
