"""
Vector store client: Milvus Cloud connection, embeddings (HF Inference API), and snippet storage.

Responsibility: Connect to Milvus, embed texts via all-MiniLM-L6-v2, upsert/get/search snippet
records keyed by a digest of (project, name). No validation or defaulting here; see snippet_service.
"""

import hashlib
import json
import logging
from typing import Any

import httpx
from pymilvus import MilvusClient

from snippy.core.config import (
    COLLECTION_NAME,
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    KEY_MAX_LENGTH,
    MILVUS_TOKEN,
    MILVUS_URI,
    VECTOR_DIM,
)
from snippy.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

HF_API_URL_ROUTER = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)
HF_API_URL_STANDARD = f"https://api-inference.huggingface.co/models/{HF_EMBED_MODEL}"

SNIPPET_FIELDS = ["name", "project", "content", "updated_at"]


def snippet_key(project: str, name: str) -> str:
    """Primary key for a snippet record: sha256 of the JSON pair, so no two (project, name) pairs share a key."""
    return hashlib.sha256(json.dumps([project, name]).encode("utf-8")).hexdigest()


def quote_filter_value(value: str) -> str:
    """Quote a string for a Milvus boolean filter expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def embed_texts(
    texts: list[str], batch_size: int | None = None
) -> list[list[float]]:
    """
    Batch embed texts using Hugging Face Inference API (all-MiniLM-L6-v2).

    Returns list of 384-dim vectors (normalized for cosine similarity).
    Raises ServiceUnavailableError when the key is missing or the API fails.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if not HF_API_KEY:
        raise ServiceUnavailableError(
            "HF_API_KEY must be set in .env. Get a token from https://huggingface.co/settings/tokens"
        )

    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    all_embeddings: list[list[float]] = []

    with httpx.Client(timeout=EMBED_API_TIMEOUT) as client:
        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            payload = {"inputs": batch, "options": {"wait_for_model": True}}
            api_urls = [HF_API_URL_ROUTER, HF_API_URL_STANDARD]
            response = None
            last_error: str | None = None

            for api_url in api_urls:
                try:
                    response = client.post(api_url, json=payload, headers=headers)
                    if response.status_code == 200:
                        break
                    if response.status_code == 403 and api_url == HF_API_URL_ROUTER:
                        last_error = response.text
                        continue
                    break
                except httpx.HTTPError as e:
                    last_error = str(e)
                    if api_url == api_urls[-1]:
                        raise ServiceUnavailableError(f"Embedding request failed: {e}") from e
                    continue

            if response is None or response.status_code != 200:
                msg = response.text if response is not None else last_error
                if response is not None and response.status_code == 503:
                    raise ServiceUnavailableError(f"HF model is loading. Retry later. {msg}")
                if response is not None and response.status_code == 401:
                    raise ServiceUnavailableError(
                        "Invalid HF API key. Check HF_API_KEY at https://huggingface.co/settings/tokens"
                    )
                if response is not None and response.status_code == 403:
                    raise ServiceUnavailableError(
                        f"HF token lacks Inference API permission. Create a token with read access. {msg}"
                    )
                raise ServiceUnavailableError(f"HF API error: {msg}")

            try:
                result = response.json()
            except ValueError as e:
                raise ServiceUnavailableError(
                    f"HF API returned a non-JSON body: {response.text[:200]}"
                ) from e
            if isinstance(result, list) and result and isinstance(result[0], list):
                batch_emb = result
            else:
                batch_emb = [
                    item if isinstance(item, list) else [item]
                    for item in (result if isinstance(result, list) else [result])
                ]

            # Normalize for cosine similarity (Milvus COSINE)
            for vec in batch_emb:
                if len(vec) != VECTOR_DIM:
                    raise ServiceUnavailableError(
                        f"HF API returned a {len(vec)}-dim vector, expected {VECTOR_DIM}"
                    )
                norm = sum(x * x for x in vec) ** 0.5
                if norm == 0:
                    norm = 1.0
                all_embeddings.append([x / norm for x in vec])

    if len(all_embeddings) != len(texts):
        raise ServiceUnavailableError(
            f"HF API returned {len(all_embeddings)} embeddings for {len(texts)} texts"
        )
    return all_embeddings


def embed_text(text: str) -> list[float]:
    """Embed a single text; convenience wrapper around embed_texts."""
    return embed_texts([text])[0]


def get_milvus_client() -> Any:
    """
    Connect to Milvus Cloud and return a client. Creates the snippet collection
    if it does not exist (string primary key, dim 384, COSINE, dynamic fields on).
    """
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ServiceUnavailableError("MILVUS_URI and MILVUS_TOKEN must be set in .env")

    client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
    logger.info("Milvus connection established")

    if not client.has_collection(COLLECTION_NAME):
        client.create_collection(
            collection_name=COLLECTION_NAME,
            dimension=VECTOR_DIM,
            primary_field_name="id",
            id_type="string",
            max_length=KEY_MAX_LENGTH,
            vector_field_name="vector",
            metric_type="COSINE",
            auto_id=False,
            enable_dynamic_field=True,
        )
        logger.info("Collection %s created (dim=%s)", COLLECTION_NAME, VECTOR_DIM)
    return client


def upsert_snippet(record: dict, vector: list[float]) -> None:
    """Write one snippet record, replacing any record with the same key."""
    key = snippet_key(record["project"], record["name"])
    row = {"id": key, "vector": vector}
    row.update({field: record.get(field, "") for field in SNIPPET_FIELDS})
    client = get_milvus_client()
    client.upsert(collection_name=COLLECTION_NAME, data=[row])
    client.flush(collection_name=COLLECTION_NAME)
    logger.info("[vector_store:upsert_snippet] stored key=%r dim=%d", key, len(vector))


def fetch_snippet(project: str, name: str) -> dict | None:
    """Fetch a snippet by exact key. Returns None when absent."""
    client = get_milvus_client()
    key = snippet_key(project, name)
    results = client.get(
        collection_name=COLLECTION_NAME,
        ids=[key],
        output_fields=SNIPPET_FIELDS,
    )
    if not results:
        return None
    r = results[0]
    if r.get("project") != project or r.get("name") != name:
        logger.warning("[vector_store:fetch_snippet] key=%r holds a different snippet", key)
        return None
    return {field: r.get(field, "") for field in SNIPPET_FIELDS}


def search_vectors(vector: list[float], project: str, top_k: int) -> list[dict]:
    """
    Nearest-neighbour search scoped to one project. Returns hits in store order
    with the snippet fields plus "score" (cosine similarity, higher is closer).
    """
    client = get_milvus_client()
    results = client.search(
        collection_name=COLLECTION_NAME,
        data=[vector],
        limit=top_k,
        filter=f"project == {quote_filter_value(project)}",
        output_fields=SNIPPET_FIELDS,
    )

    # results: list of list of hits (one list per query vector)
    hits = results[0] if results else []
    out = []
    for h in hits:
        score = float(h.get("distance", h.get("score", 0.0)))
        e = h.get("entity") or h
        item = {field: e.get(field, "") for field in SNIPPET_FIELDS}
        item["score"] = score
        out.append(item)
    return out


def list_snippet_names(project: str, limit: int = 16_384) -> list[str]:
    """Return sorted snippet names stored under a project."""
    client = get_milvus_client()
    results = client.query(
        collection_name=COLLECTION_NAME,
        filter=f"project == {quote_filter_value(project)}",
        limit=limit,
        output_fields=["name"],
    )
    return sorted({(r.get("name") or "") for r in results if r.get("name")})


def get_collection_stats(limit: int = 16_384) -> dict:
    """
    Return store stats: collection name, total snippets, and distinct project ids.

    total_snippets comes from a count(*) query and is exact. The project list is
    read from at most `limit` records, so past that it may miss projects.
    """
    client = get_milvus_client()
    counted = client.query(
        collection_name=COLLECTION_NAME,
        filter="",
        output_fields=["count(*)"],
    )
    total = int(counted[0]["count(*)"]) if counted else 0
    results = client.query(
        collection_name=COLLECTION_NAME,
        filter="",
        limit=limit,
        output_fields=["project"],
    )
    projects = sorted({(r.get("project") or "") for r in results if r.get("project")})
    return {
        "collection_name": COLLECTION_NAME,
        "total_snippets": total,
        "project_count": len(projects),
        "projects": projects,
    }
