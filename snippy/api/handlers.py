"""
API handlers: call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import logging
from typing import Any, Callable

from fastapi import HTTPException

from snippy.agent.graph import run_code_style, run_deep_wiki
from snippy.core.errors import AgentRunError, ServiceUnavailableError, SnippetNotFoundError
from snippy.schemas.agent import AgentDocumentRequest, AgentDocumentResponse
from snippy.schemas.snippet import (
    SaveSnippetRequest,
    SearchSnippetsRequest,
    SearchSnippetsResponse,
    Snippet,
    SnippetMatch,
)
from snippy.services.snippet_service import get_snippet, save_snippet, search_snippets

logger = logging.getLogger(__name__)


def call_service(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Run a service call and translate its errors:
    ValueError → 400, SnippetNotFoundError → 404, AgentRunError → 502,
    ServiceUnavailableError → 503.
    """
    try:
        return fn(*args, **kwargs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SnippetNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except AgentRunError as e:
        logger.warning("Agent run failed: %s", e.message)
        raise HTTPException(status_code=502, detail=e.message) from e
    except ServiceUnavailableError as e:
        logger.warning("Dependency unavailable: %s", e.message)
        raise HTTPException(status_code=503, detail=e.message) from e


def handle_save(body: SaveSnippetRequest) -> Snippet:
    record = call_service(save_snippet, body.name, body.content, project=body.project)
    return Snippet(**record)


def handle_get(name: str, project: str | None) -> Snippet:
    record = call_service(get_snippet, name, project=project)
    return Snippet(**record)


def handle_search(body: SearchSnippetsRequest) -> SearchSnippetsResponse:
    hits = call_service(search_snippets, body.query, project=body.project, top_k=body.top_k)
    return SearchSnippetsResponse(results=[SnippetMatch(**h) for h in hits])


def handle_agent(kind: str, body: AgentDocumentRequest) -> AgentDocumentResponse:
    """Run the deep_wiki or code_style agent for the request's project."""
    runner = run_deep_wiki if kind == "deep_wiki" else run_code_style
    history = [m.model_dump() for m in body.chat_history]
    result = call_service(runner, body.project, body.user_query, history)
    return AgentDocumentResponse(**result)
