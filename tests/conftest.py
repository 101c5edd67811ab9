"""
Shared fixtures: an in-memory stand-in for the Milvus client and a
deterministic embedder, so tests do not require Milvus or HF API.
"""

import re
import string

import pytest
from fastapi.testclient import TestClient

from snippy.main import app
from snippy.services import snippet_service, vector_store

_PROJECT_FILTER = re.compile(r'^project == "((?:[^"\\]|\\.)*)"$')


def fake_embed(text: str) -> list[float]:
    """Letter-frequency vector, L2-normalized (cosine == dot product)."""
    lowered = text.lower()
    vec = [float(lowered.count(c)) for c in string.ascii_lowercase] + [1.0]
    norm = sum(x * x for x in vec) ** 0.5
    return [x / norm for x in vec]


class FakeMilvusClient:
    """Implements the MilvusClient calls the vector store makes."""

    def __init__(self) -> None:
        self.rows: dict[str, dict] = {}
        self.last_search_limit: int | None = None

    @staticmethod
    def _project_from_filter(expr: str) -> str | None:
        if not expr:
            return None
        match = _PROJECT_FILTER.match(expr)
        assert match, f"unexpected filter: {expr!r}"
        return match.group(1).replace('\\"', '"').replace("\\\\", "\\")

    @staticmethod
    def _select(row: dict, output_fields: list[str] | None) -> dict:
        fields = output_fields or [k for k in row if k != "vector"]
        out = {f: row[f] for f in fields if f in row}
        out["id"] = row["id"]
        return out

    def upsert(self, collection_name: str, data: list[dict]) -> dict:
        for row in data:
            self.rows[row["id"]] = dict(row)
        return {"upsert_count": len(data)}

    def flush(self, collection_name: str) -> None:
        return None

    def get(self, collection_name: str, ids: list, output_fields: list[str] | None = None) -> list[dict]:
        return [self._select(self.rows[i], output_fields) for i in ids if i in self.rows]

    def search(self, collection_name: str, data: list, limit: int = 10, filter: str = "", output_fields: list[str] | None = None) -> list[list[dict]]:
        self.last_search_limit = limit
        project = self._project_from_filter(filter)
        query = data[0]
        hits = []
        for row in self.rows.values():
            if project is not None and row.get("project") != project:
                continue
            score = sum(a * b for a, b in zip(query, row["vector"]))
            hits.append({"id": row["id"], "distance": score, "entity": self._select(row, output_fields)})
        hits.sort(key=lambda h: -h["distance"])
        return [hits[:limit]]

    def query(self, collection_name: str, filter: str = "", limit: int = 16_384, output_fields: list[str] | None = None) -> list[dict]:
        project = self._project_from_filter(filter)
        rows = [r for r in self.rows.values() if project is None or r.get("project") == project]
        if output_fields == ["count(*)"]:
            return [{"count(*)": len(rows)}]
        return [self._select(r, output_fields) for r in rows[:limit]]


@pytest.fixture
def fake_milvus(monkeypatch: pytest.MonkeyPatch) -> FakeMilvusClient:
    """Route the vector store to an in-memory client and embed with fake_embed."""
    fake = FakeMilvusClient()
    monkeypatch.setattr(vector_store, "get_milvus_client", lambda: fake)
    monkeypatch.setattr(snippet_service, "embed_text", fake_embed)
    return fake


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
