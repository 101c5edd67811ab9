"""
Snippet operations: save, get, similarity search, listing.

Responsibility: Validate and default inputs, derive embeddings, and call the
vector store. Called by the API, MCP tools and agent tools; no HTTP here.
Storage failures are raised as ServiceUnavailableError; missing keys as
SnippetNotFoundError.
"""

import logging
from datetime import datetime, timezone

from pymilvus import MilvusException

from snippy.core.config import DEFAULT_PROJECT, MAX_TOP_K, SEARCH_TOP_K
from snippy.core.errors import ServiceUnavailableError, SnippetNotFoundError
from snippy.services.vector_store import (
    embed_text,
    fetch_snippet,
    get_collection_stats,
    list_snippet_names,
    search_vectors,
    upsert_snippet,
)

logger = logging.getLogger(__name__)


def resolve_project(project: str | None) -> str:
    """Blank or missing project id falls back to DEFAULT_PROJECT."""
    project = (project or "").strip()
    return project or DEFAULT_PROJECT


def _require_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("name is required")
    return name


def save_snippet(name: str, content: str, project: str | None = None) -> dict:
    """
    Embed the snippet content and store it under (project, name), replacing any
    previous record with that key. The embedding is computed before anything is
    written, so a failed embedding call leaves the store untouched.

    Returns the stored fields (name, project, content, updated_at).
    """
    name = _require_name(name)
    if content is None or not str(content).strip():
        raise ValueError("content is required")
    project = resolve_project(project)
    logger.info("[snippets:save] IN  name=%r project=%r content_len=%d", name, project, len(content))

    vector = embed_text(content)
    record = {
        "name": name,
        "project": project,
        "content": content,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        upsert_snippet(record, vector)
    except MilvusException as e:
        logger.warning("[snippets:save] store failed: %s", e)
        raise ServiceUnavailableError(f"Vector store write failed: {e}") from e
    logger.info("[snippets:save] OUT name=%r project=%r", name, project)
    return record


def get_snippet(name: str, project: str | None = None) -> dict:
    """Exact-key lookup. Raises SnippetNotFoundError when no record exists."""
    name = _require_name(name)
    project = resolve_project(project)
    logger.info("[snippets:get] IN  name=%r project=%r", name, project)
    try:
        record = fetch_snippet(project, name)
    except MilvusException as e:
        logger.warning("[snippets:get] lookup failed: %s", e)
        raise ServiceUnavailableError(f"Vector store read failed: {e}") from e
    if record is None:
        logger.info("[snippets:get] OUT not found name=%r project=%r", name, project)
        raise SnippetNotFoundError(name, project)
    return record


def search_snippets(
    query: str,
    project: str | None = None,
    top_k: int = SEARCH_TOP_K,
) -> list[dict]:
    """
    Embed the query and return the store's top-K nearest snippets in the project,
    as ranked by Milvus (cosine). Each result carries name, project, content, score.
    An empty project yields [].
    """
    query = (query or "").strip()
    if not query:
        raise ValueError("query is required")
    project = resolve_project(project)
    top_k = max(1, min(int(top_k or SEARCH_TOP_K), MAX_TOP_K))
    logger.info("[snippets:search] IN  query=%r project=%r top_k=%d", query, project, top_k)

    vector = embed_text(query)
    try:
        hits = search_vectors(vector, project, top_k)
    except MilvusException as e:
        logger.warning("[snippets:search] search failed: %s", e)
        raise ServiceUnavailableError(f"Vector store search failed: {e}") from e
    logger.info(
        "[snippets:search] OUT hits=%d names=%s scores=%s",
        len(hits),
        [h.get("name") for h in hits[:5]],
        [round(h.get("score", 0.0), 4) for h in hits[:5]],
    )
    return hits


def list_snippets(project: str | None = None) -> list[str]:
    """Sorted names of the snippets stored in the project."""
    project = resolve_project(project)
    try:
        return list_snippet_names(project)
    except MilvusException as e:
        raise ServiceUnavailableError(f"Vector store query failed: {e}") from e


def get_store_stats() -> dict:
    try:
        return get_collection_stats()
    except MilvusException as e:
        raise ServiceUnavailableError(f"Vector store query failed: {e}") from e
