"""Schemas for the snippet endpoints and snippet tools."""

from pydantic import BaseModel, Field

from snippy.core.config import MAX_TOP_K, SEARCH_TOP_K


class SaveSnippetRequest(BaseModel):
    """Request body for POST /snippets and the save_snippet tool."""

    name: str = Field(..., min_length=1, description="Snippet name; unique within its project.")
    project: str | None = Field(None, description="Project id. Defaults to the default project when omitted.")
    content: str = Field(..., min_length=1, description="Raw code text of the snippet.")


class GetSnippetRequest(BaseModel):
    """Request body for the get_snippet tool."""

    name: str = Field(..., min_length=1, description="Name of the snippet to fetch.")
    project: str | None = Field(None, description="Project id. Defaults to the default project when omitted.")


class SearchSnippetsRequest(BaseModel):
    """Request body for POST /snippets/search and the search_snippets tool."""

    query: str = Field(..., min_length=1, description="Free-text or code to search for by semantic similarity.")
    project: str | None = Field(None, description="Project id to search in. Defaults to the default project.")
    top_k: int = Field(SEARCH_TOP_K, ge=1, le=MAX_TOP_K, description="Maximum number of matches to return.")


class ListSnippetsRequest(BaseModel):
    """Request body for the list_snippets tool."""

    project: str | None = Field(None, description="Project id. Defaults to the default project when omitted.")


class Snippet(BaseModel):
    """A stored snippet (embedding omitted)."""

    name: str
    project: str
    content: str
    updated_at: str = Field("", description="UTC ISO-8601 time of the last save.")


class SnippetMatch(Snippet):
    """A similarity-search hit."""

    score: float = Field(..., description="Cosine similarity reported by the vector store (higher is closer).")


class SearchSnippetsResponse(BaseModel):
    """Response for POST /snippets/search."""

    results: list[SnippetMatch] = Field(default_factory=list)


class SnippetListResponse(BaseModel):
    """Response for GET /snippets."""

    project: str
    names: list[str] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [{"project": "default-project", "names": ["fastapi_app", "retry_decorator"]}]
        }
    }
