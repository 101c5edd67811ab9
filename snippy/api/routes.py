"""
HTTP routes for snippets and agents. Endpoints delegate to handlers and services.
"""

import logging

from fastapi import APIRouter

from snippy.api.handlers import call_service, handle_agent, handle_get, handle_save, handle_search
from snippy.schemas.agent import AgentDocumentRequest, AgentDocumentResponse
from snippy.schemas.snippet import (
    SaveSnippetRequest,
    SearchSnippetsRequest,
    SearchSnippetsResponse,
    Snippet,
    SnippetListResponse,
)
from snippy.services.snippet_service import get_store_stats, list_snippets, resolve_project

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Snippy backend running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get("/stats", tags=["system"], summary="Snippet store statistics")
def stats() -> dict:
    return call_service(get_store_stats)


# --- Snippets ---

@router.post(
    "/snippets",
    response_model=Snippet,
    tags=["snippets"],
    summary="Save a snippet",
    description="Embed the code and store it under (project, name), replacing any earlier snippet with that key. 422 on missing fields, 503 if the embedding API or vector store fails.",
)
def post_snippet(body: SaveSnippetRequest) -> Snippet:
    logger.info("[api:post_snippet] IN  name=%r project=%r", body.name, body.project)
    return handle_save(body)


@router.get(
    "/snippets",
    response_model=SnippetListResponse,
    tags=["snippets"],
    summary="List snippet names in a project",
)
def get_snippet_names(project: str | None = None) -> SnippetListResponse:
    names = call_service(list_snippets, project)
    return SnippetListResponse(project=resolve_project(project), names=names)


@router.post(
    "/snippets/search",
    response_model=SearchSnippetsResponse,
    tags=["snippets"],
    summary="Similarity search",
    description="Return the top-K snippets in a project closest to the query by cosine similarity. Empty project returns an empty list.",
)
def post_search(body: SearchSnippetsRequest) -> SearchSnippetsResponse:
    logger.info("[api:post_search] IN  query=%r project=%r top_k=%d", body.query, body.project, body.top_k)
    return handle_search(body)


@router.post(
    "/snippets/wiki",
    response_model=AgentDocumentResponse,
    tags=["agents"],
    summary="Generate a developer wiki for a project",
    description="Runs the deep-wiki agent over the project's snippets. 502 if the agent does not finish, 503 if the LLM or store is unavailable.",
)
def post_wiki(body: AgentDocumentRequest) -> AgentDocumentResponse:
    logger.info("[api:post_wiki] IN  project=%r", body.project)
    return handle_agent("deep_wiki", body)


@router.post(
    "/snippets/code-style",
    response_model=AgentDocumentResponse,
    tags=["agents"],
    summary="Generate a code style guide for a project",
    description="Runs the code-style agent over the project's snippets. 502 if the agent does not finish, 503 if the LLM or store is unavailable.",
)
def post_code_style(body: AgentDocumentRequest) -> AgentDocumentResponse:
    logger.info("[api:post_code_style] IN  project=%r", body.project)
    return handle_agent("code_style", body)


@router.get(
    "/snippets/{name:path}",
    response_model=Snippet,
    tags=["snippets"],
    summary="Get a snippet by name",
    description="Exact lookup by (project, name). 404 if no such snippet.",
)
def get_snippet_by_name(name: str, project: str | None = None) -> Snippet:
    logger.info("[api:get_snippet] IN  name=%r project=%r", name, project)
    return handle_get(name, project)
