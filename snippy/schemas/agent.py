"""Schemas for the agent-authoring endpoints (deep wiki, code style guide)."""

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: str = ""


class AgentDocumentRequest(BaseModel):
    """Request body for POST /snippets/wiki, POST /snippets/code-style and the matching tools."""

    project: str | None = Field(None, description="Project whose snippets the document is written from. Defaults to the default project.")
    user_query: str | None = Field(None, description="Optional focus or extra instructions for the generated document.")
    chat_history: list[ChatMessage] = Field(default_factory=list, description="Optional prior conversation turns to give the agent context.")


class AgentDocumentResponse(BaseModel):
    """Response for the agent-authoring endpoints."""

    project: str = Field(..., description="Project the document was generated for.")
    kind: str = Field(..., description="'deep_wiki' or 'code_style'.")
    document: str = Field(..., description="Generated Markdown document.")
    tools_used: list[str] = Field(default_factory=list, description="Tools the model called during the run.")
    snippets_used: list[str] = Field(default_factory=list, description="Names of snippets gathered before the run.")
