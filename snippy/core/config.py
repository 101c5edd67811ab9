"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()

# Hugging Face (embeddings / fallback LLM)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()

# Snippet collection: one record per (project, name). all-MiniLM-L6-v2 = 384 dims, float32, cosine.
COLLECTION_NAME: str = os.getenv("SNIPPY_COLLECTION", "snippets").strip() or "snippets"
VECTOR_DIM: int = 384
KEY_MAX_LENGTH: int = 512
HF_EMBED_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
EMBED_BATCH_SIZE: int = 32

# Project used when a caller omits one
DEFAULT_PROJECT: str = (
    os.getenv("SNIPPY_DEFAULT_PROJECT", "default-project").strip() or "default-project"
)

# Similarity search
SEARCH_TOP_K: int = 10
MAX_TOP_K: int = 50

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 120.0

# Hugging Face chat (fallback LLM)
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"

# Agent graph
AGENT_SEARCH_TOP_K: int = 8
MAX_AGENTIC_ROUNDS: int = 8
AGENT_MAX_TOKENS: int = 2048
AGENT_SNIPPET_CHARS: int = 1500

# OpenAI (agent LLM). When set, the agent uses OpenAI tool calling; otherwise a single HF generation.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)

# HF LLM for agent (fallback when OPENAI_API_KEY is not set). Router chat completions require a chat model.
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
