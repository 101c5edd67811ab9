"""
Minimal MCP-style tool server: exposes snippet save/get/search and the two
agent-authoring operations as a standardized tool interface, so an external
AI assistant can discover the tools (GET /mcp/tools) and call them.

Input schemas are generated from the same pydantic request models the HTTP
API uses, so both surfaces accept exactly the same fields.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from snippy.api.handlers import call_service, handle_agent, handle_save, handle_search
from snippy.core.errors import SnippetNotFoundError
from snippy.schemas.agent import AgentDocumentRequest
from snippy.schemas.snippet import (
    GetSnippetRequest,
    ListSnippetsRequest,
    SaveSnippetRequest,
    SearchSnippetsRequest,
)
from snippy.services.snippet_service import get_snippet, list_snippets, resolve_project

logger = logging.getLogger(__name__)


def tool_input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """
    Flatten a pydantic model's JSON schema to {type: object, properties, required},
    one primitive type and description per property (Optional[X] reported as X).
    """
    schema = model.model_json_schema()
    properties: dict[str, dict[str, str]] = {}
    for name, prop in schema.get("properties", {}).items():
        prop_type = prop.get("type")
        if prop_type is None:
            types = [p.get("type") for p in prop.get("anyOf", []) if p.get("type") not in (None, "null")]
            prop_type = types[0] if types else "string"
        properties[name] = {"type": prop_type, "description": prop.get("description", "")}
    return {
        "type": "object",
        "properties": properties,
        "required": list(schema.get("required", [])),
    }


# MCP tool schema for discovery / documentation
TOOL_MODELS: dict[str, tuple[str, type[BaseModel]]] = {
    "save_snippet": ("Save a code snippet under a name and project; its embedding is computed automatically. Re-saving a name replaces it.", SaveSnippetRequest),
    "get_snippet": ("Fetch a saved snippet by name (and optional project).", GetSnippetRequest),
    "search_snippets": ("Find snippets in a project similar to a free-text or code query.", SearchSnippetsRequest),
    "list_snippets": ("List the names of the snippets saved in a project.", ListSnippetsRequest),
    "deep_wiki": ("Generate a Markdown developer wiki from a project's snippets using an AI agent.", AgentDocumentRequest),
    "code_style": ("Generate a Markdown code style guide inferred from a project's snippets using an AI agent.", AgentDocumentRequest),
}

tools = [
    {"name": name, "description": description, "input_schema": tool_input_schema(model)}
    for name, (description, model) in TOOL_MODELS.items()
]

mcp_router = APIRouter(tags=["mcp"])


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    """Return the declared tools with their input schemas."""
    return {"tools": tools}


# --- save_snippet ---

@mcp_router.post(
    "/tools/save_snippet",
    summary="MCP tool: save_snippet",
    description="This endpoint acts as an MCP tool server, allowing external agents to save snippets through a standardized interface.",
)
def mcp_save_snippet(body: SaveSnippetRequest) -> dict[str, Any]:
    logger.info("MCP tool called: save_snippet")
    snippet = handle_save(body)
    return {"snippet": snippet.model_dump()}


# --- get_snippet ---

@mcp_router.post(
    "/tools/get_snippet",
    summary="MCP tool: get_snippet",
    description="Fetch a snippet by name. Returns {snippet: null} when it does not exist.",
)
def mcp_get_snippet(body: GetSnippetRequest) -> dict[str, Any]:
    logger.info("MCP tool called: get_snippet")
    return {"snippet": call_service(_get_snippet_or_none, body.name, body.project)}


def _get_snippet_or_none(name: str, project: str | None) -> dict | None:
    try:
        return get_snippet(name, project=project)
    except SnippetNotFoundError:
        return None


# --- search_snippets ---

@mcp_router.post(
    "/tools/search_snippets",
    summary="MCP tool: search_snippets",
    description="Similarity search over a project's snippets.",
)
def mcp_search_snippets(body: SearchSnippetsRequest) -> dict[str, list[dict[str, Any]]]:
    logger.info("MCP tool called: search_snippets")
    response = handle_search(body)
    return {"results": [r.model_dump() for r in response.results]}


# --- list_snippets ---

@mcp_router.post(
    "/tools/list_snippets",
    summary="MCP tool: list_snippets",
    description="List snippet names in a project.",
)
def mcp_list_snippets(body: ListSnippetsRequest) -> dict[str, Any]:
    logger.info("MCP tool called: list_snippets")
    names = call_service(list_snippets, body.project)
    return {"project": resolve_project(body.project), "names": names}


# --- deep_wiki / code_style ---

@mcp_router.post(
    "/tools/deep_wiki",
    summary="MCP tool: deep_wiki",
    description="Generate a developer wiki for a project with the deep-wiki agent.",
)
def mcp_deep_wiki(body: AgentDocumentRequest) -> dict[str, Any]:
    logger.info("MCP tool called: deep_wiki")
    return handle_agent("deep_wiki", body).model_dump()


@mcp_router.post(
    "/tools/code_style",
    summary="MCP tool: code_style",
    description="Generate a code style guide for a project with the code-style agent.",
)
def mcp_code_style(body: AgentDocumentRequest) -> dict[str, Any]:
    logger.info("MCP tool called: code_style")
    return handle_agent("code_style", body).model_dump()
