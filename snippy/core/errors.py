"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (vector store, embeddings, LLM)
is misconfigured or unreachable so the API can return 503 with a user-facing message.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. vector store, embeddings API) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SnippetNotFoundError(Exception):
    """Raised when no snippet is stored under the requested (project, name) key."""

    def __init__(self, name: str, project: str) -> None:
        self.name = name
        self.project = project
        self.message = f"Snippet {name!r} not found in project {project!r}"
        super().__init__(self.message)


class AgentRunError(Exception):
    """Raised when an agent run stops without producing a document (e.g. tool-call round limit)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
