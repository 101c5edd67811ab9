"""
LangGraph agent for document authoring: gather snippets → model ⇄ tools → document.

Two kinds share one graph: "deep_wiki" (project wiki) and "code_style" (style guide).
With OPENAI_API_KEY the model runs a tool-calling loop (vector_search, get_snippet,
list_snippets) bounded by MAX_AGENTIC_ROUNDS. Without it, a single HF generation
is made from the gathered snippets.
"""

import json
import logging
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph

from snippy.agent.llm import chat_with_tools, hf_llm
from snippy.agent.tools import AGENT_TOOLS, execute_tool, format_snippet
from snippy.core.config import (
    AGENT_MAX_TOKENS,
    AGENT_SEARCH_TOP_K,
    MAX_AGENTIC_ROUNDS,
    OPENAI_API_KEY,
)
from snippy.core.errors import AgentRunError
from snippy.services.snippet_service import resolve_project, search_snippets

logger = logging.getLogger(__name__)

DEEP_WIKI = "deep_wiki"
CODE_STYLE = "code_style"

INSTRUCTIONS = {
    DEEP_WIKI: (
        "You are a senior engineer writing a developer wiki for a codebase that is stored as a set of "
        "named code snippets. Produce a single Markdown document with these sections: Overview, "
        "Architecture, Key Components (one subsection per important snippet or group of snippets), "
        "Data Flow, Usage Examples, and Open Questions.\n\n"
        "Use the vector_search tool to find code related to each topic before you describe it, and "
        "get_snippet when you need a snippet's full text. Quote short code excerpts where they help. "
        "Describe only what the snippets actually contain; do not invent modules or behavior. "
        "When you have gathered enough, reply with the finished Markdown document and nothing else."
    ),
    CODE_STYLE: (
        "You are a staff engineer writing a code style guide inferred from an existing codebase that is "
        "stored as a set of named code snippets. Produce a single Markdown document with these sections: "
        "Summary, Naming Conventions, Formatting and Layout, Error Handling, Logging, Testing, and "
        "Recommended Practices. For each rule, cite the snippet name(s) it is based on and include a short "
        "example in a fenced code block.\n\n"
        "Use the vector_search tool to look for evidence of each convention and get_snippet for full "
        "text. Where snippets disagree, state the majority convention and note the exceptions. "
        "When you have gathered enough, reply with the finished Markdown document and nothing else."
    ),
}

# Query used to gather context when the caller gives no focus
SEED_QUERIES = {
    DEEP_WIKI: "main entry point architecture modules classes functions",
    CODE_STYLE: "naming conventions error handling logging tests formatting",
}


class AgentState(TypedDict):
    kind: str
    project: str
    user_query: str
    chat_history: list  # list of {"role": "user"|"assistant", "content": str}
    snippets: list
    messages: list
    pending_tool_calls: list
    rounds: int
    document: str
    tools_used: list


def _format_history(history: list, max_messages: int = 6) -> str:
    """Format last N messages for inclusion in prompts."""
    if not history:
        return ""
    recent = history[-max_messages:] if len(history) > max_messages else history
    lines = []
    for m in recent:
        role = (m.get("role") or "user").strip().lower()
        content = (m.get("content") or "").strip()
        if not content:
            continue
        label = "User" if role == "user" else "Assistant"
        lines.append(f"{label}: {content}")
    if not lines:
        return ""
    return "Recent conversation:\n" + "\n".join(lines) + "\n\n"


def _snippet_block(snippets: list) -> str:
    if not snippets:
        return "(no snippets found in this project)"
    return "\n\n---\n\n".join(format_snippet(s) for s in snippets)


def _request_text(state: AgentState) -> str:
    kind_label = "developer wiki" if state["kind"] == DEEP_WIKI else "code style guide"
    text = f"Write the {kind_label} for project {state['project']!r}."
    focus = (state.get("user_query") or "").strip()
    if focus:
        text += f"\n\nFocus / extra instructions: {focus}"
    return text


def _gather_snippets(state: AgentState) -> dict:
    """Node 1: similarity search for context to seed the run."""
    query = (state.get("user_query") or "").strip() or SEED_QUERIES[state["kind"]]
    logger.info("[graph:gather_snippets] IN  project=%r query=%r", state["project"], query)
    hits = search_snippets(query, project=state["project"], top_k=AGENT_SEARCH_TOP_K)
    logger.info("[graph:gather_snippets] OUT snippets=%d names=%s", len(hits), [h.get("name") for h in hits])
    return {"snippets": hits}


def _route_after_gather(state: AgentState) -> Literal["call_model", "generate_without_tools"]:
    next_node = "call_model" if OPENAI_API_KEY else "generate_without_tools"
    logger.info("[graph:route_after_gather] -> %s", next_node)
    return next_node


def _initial_messages(state: AgentState) -> list[dict]:
    messages: list[dict] = [{"role": "system", "content": INSTRUCTIONS[state["kind"]]}]
    for m in state.get("chat_history") or []:
        role = (m.get("role") or "user").strip().lower()
        content = (m.get("content") or "").strip()
        if role in ("user", "assistant") and content:
            messages.append({"role": role, "content": content})
    messages.append({
        "role": "user",
        "content": _request_text(state) + "\n\nSnippets retrieved so far:\n\n" + _snippet_block(state.get("snippets") or []),
    })
    return messages


def _call_model(state: AgentState) -> dict:
    """Node 2: send the conversation and tool declarations to the model."""
    messages = list(state.get("messages") or []) or _initial_messages(state)
    logger.info("[graph:call_model] IN  round=%d messages=%d", state.get("rounds") or 0, len(messages))
    content, tool_calls = chat_with_tools(messages, AGENT_TOOLS, max_tokens=AGENT_MAX_TOKENS)
    if tool_calls:
        messages.append({
            "role": "assistant",
            "content": content or "",
            "tool_calls": [
                {"id": tc["id"], "type": "function", "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})}}
                for tc in tool_calls
            ],
        })
        logger.info("[graph:call_model] OUT tool_calls=%s", [tc["name"] for tc in tool_calls])
        return {"messages": messages, "pending_tool_calls": tool_calls}
    messages.append({"role": "assistant", "content": content or ""})
    logger.info("[graph:call_model] OUT document_len=%d", len(content or ""))
    return {"messages": messages, "pending_tool_calls": [], "document": content or ""}


def _run_tools(state: AgentState) -> dict:
    """Node 3: execute requested tool calls locally and append their results."""
    messages = list(state.get("messages") or [])
    tools_used = list(state.get("tools_used") or [])
    for tc in state.get("pending_tool_calls") or []:
        name = tc.get("name", "")
        result = execute_tool(name, tc.get("arguments") or {}, default_project=state["project"])
        tools_used.append(name)
        messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})
    rounds = (state.get("rounds") or 0) + 1
    logger.info("[graph:run_tools] OUT round=%d tools_used=%s", rounds, tools_used)
    return {"messages": messages, "pending_tool_calls": [], "rounds": rounds, "tools_used": tools_used}


def _route_after_model(state: AgentState) -> str:
    """Run tools while the model asks for them and the round budget allows; else finish."""
    pending = state.get("pending_tool_calls") or []
    rounds = state.get("rounds") or 0
    next_node = "run_tools" if (pending and rounds < MAX_AGENTIC_ROUNDS) else END
    logger.info("[graph:route_after_model] pending=%d rounds=%d max=%d -> %s", len(pending), rounds, MAX_AGENTIC_ROUNDS, next_node)
    return next_node


def _generate_without_tools(state: AgentState) -> dict:
    """Fallback node: one-shot generation from the gathered snippets (no tool calling)."""
    prompt = (
        INSTRUCTIONS[state["kind"]]
        + "\n\nTools are not available in this run; write the document from the snippets below.\n\n"
        + _format_history(state.get("chat_history") or [])
        + _request_text(state)
        + "\n\nSnippets:\n\n"
        + _snippet_block(state.get("snippets") or [])
    )
    logger.info("[graph:generate_without_tools] prompt_len=%d", len(prompt))
    document = hf_llm(prompt, max_new_tokens=AGENT_MAX_TOKENS).strip()
    logger.info("[graph:generate_without_tools] OUT document_len=%d", len(document))
    return {"document": document}


def build_graph():
    """
    Build and compile the agent graph.
    gather → call_model → (run_tools → call_model)* → END, or gather → generate_without_tools → END.
    """
    graph = StateGraph(AgentState)

    graph.add_node("gather_snippets", _gather_snippets)
    graph.add_node("call_model", _call_model)
    graph.add_node("run_tools", _run_tools)
    graph.add_node("generate_without_tools", _generate_without_tools)

    graph.set_entry_point("gather_snippets")
    graph.add_conditional_edges("gather_snippets", _route_after_gather)
    graph.add_conditional_edges("call_model", _route_after_model)
    graph.add_edge("run_tools", "call_model")
    graph.add_edge("generate_without_tools", END)

    return graph.compile()


def run_agent(kind: str, project: str | None = None, user_query: str | None = None, history: list | None = None) -> dict:
    """
    Run a document-authoring agent synchronously.
    Returns project, kind, document, tools_used, snippets_used.
    Raises AgentRunError when the run ends without a document.
    """
    if kind not in INSTRUCTIONS:
        raise ValueError(f"unknown agent kind: {kind!r}")
    project = resolve_project(project)
    hist = history if history is not None else []
    logger.info("[run_agent] START kind=%s project=%r user_query=%r history_len=%d", kind, project, user_query, len(hist))
    initial: AgentState = {
        "kind": kind,
        "project": project,
        "user_query": (user_query or "").strip(),
        "chat_history": hist,
        "snippets": [],
        "messages": [],
        "pending_tool_calls": [],
        "rounds": 0,
        "document": "",
        "tools_used": [],
    }
    graph = build_graph()
    final = graph.invoke(initial, config={"recursion_limit": 2 * MAX_AGENTIC_ROUNDS + 5})
    document = (final.get("document") or "").strip()
    if not document:
        if final.get("pending_tool_calls"):
            raise AgentRunError(f"Agent did not finish within {MAX_AGENTIC_ROUNDS} tool-call rounds")
        raise AgentRunError("Agent returned an empty document")
    tools_used = final.get("tools_used") or []
    logger.info("[run_agent] END kind=%s rounds=%d tools_used=%s document_len=%d", kind, final.get("rounds") or 0, tools_used, len(document))
    return {
        "project": project,
        "kind": kind,
        "document": document,
        "tools_used": list(tools_used),
        "snippets_used": [s.get("name", "") for s in final.get("snippets") or []],
    }


def run_deep_wiki(project: str | None = None, user_query: str | None = None, history: list | None = None) -> dict:
    return run_agent(DEEP_WIKI, project, user_query, history)


def run_code_style(project: str | None = None, user_query: str | None = None, history: list | None = None) -> dict:
    return run_agent(CODE_STYLE, project, user_query, history)
