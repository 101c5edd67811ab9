"""
Agent LLM: OpenAI (primary) or Hugging Face (fallback).
When OPENAI_API_KEY is set, uses OpenAI chat completions (with tool calling);
otherwise plain generation goes through the HF router.
"""

import json
import logging
from typing import Any

import httpx
from openai import OpenAI, OpenAIError

from snippy.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from snippy.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def _openai_client() -> OpenAI:
    return OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)


def _call_openai(prompt: str, max_new_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text ("" on empty response)."""
    try:
        response = _openai_client().chat.completions.create(
            model=OPENAI_LLM_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_new_tokens,
        )
    except OpenAIError as e:
        logger.warning("[llm:openai] request failed: %s", e)
        return ""
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    out = (msg.content or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


def _call_hf(prompt: str, max_new_tokens: int) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    if not HF_API_KEY:
        raise ServiceUnavailableError("No LLM configured: set OPENAI_API_KEY or HF_API_KEY in .env")
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_new_tokens,
    }
    try:
        with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
            response = client.post(HF_CHAT_URL, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise ServiceUnavailableError(f"HF LLM request failed: {e}") from e
    if response.status_code != 200:
        logger.warning("[llm:hf] HF LLM error %s: %s", response.status_code, response.text[:200])
        raise ServiceUnavailableError(f"HF LLM error {response.status_code}")
    try:
        data = response.json()
    except ValueError as e:
        raise ServiceUnavailableError(f"HF LLM returned a non-JSON body: {response.text[:200]}") from e
    if not isinstance(data, dict):
        raise ServiceUnavailableError("HF LLM returned an unexpected response shape")
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
        logger.info("[llm:hf] OUT response_len=%d", len(out))
        return out
    return ""


def hf_llm(prompt: str, max_new_tokens: int = 256) -> str:
    """
    Call LLM for text generation. Uses OpenAI when OPENAI_API_KEY is set, else Hugging Face.
    If OpenAI fails or returns empty, falls back to HF.
    Raises ServiceUnavailableError when no backend produced text.
    """
    logger.info("[llm] IN  prompt_len=%d max_new_tokens=%d", len(prompt), max_new_tokens)
    logger.debug("[llm] prompt_sample=%r", prompt[:500] if len(prompt) > 500 else prompt)
    if OPENAI_API_KEY:
        out = _call_openai(prompt, max_new_tokens)
        if out:
            return out
        if not HF_API_KEY:
            raise ServiceUnavailableError(
                "OpenAI request failed or returned empty, and no HF_API_KEY fallback is configured"
            )
        logger.info("[llm] OpenAI returned empty; falling back to Hugging Face")
    out = _call_hf(prompt, max_new_tokens)
    if not out:
        raise ServiceUnavailableError("LLM returned an empty response")
    return out


def chat_with_tools(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]],
    max_tokens: int = 512,
) -> tuple[str | None, list[dict[str, Any]] | None]:
    """
    Call OpenAI chat with tools. Used for the agent tool-calling loop.
    Returns (content, tool_calls). If tool_calls is non-empty, caller should execute
    them and call again with tool results; if content is set and no tool_calls, that's the final answer.
    Raises ServiceUnavailableError when OpenAI is not configured or the call fails.
    """
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("Tool calling requires OPENAI_API_KEY")
    try:
        response = _openai_client().chat.completions.create(
            model=OPENAI_LLM_MODEL,
            messages=messages,
            tools=tools,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.warning("[llm:chat_with_tools] request failed: %s", e)
        raise ServiceUnavailableError(f"OpenAI request failed: {e}") from e
    msg = response.choices[0].message if response.choices else None
    if not msg:
        return None, None
    content = (getattr(msg, "content", None) or "").strip() or None
    raw_tool_calls = getattr(msg, "tool_calls", None) or []
    tool_calls = []
    for tc in raw_tool_calls:
        fid = getattr(tc, "id", None) or ""
        fn = getattr(tc, "function", None)
        if not fn:
            continue
        fname = getattr(fn, "name", None) or ""
        fargs = getattr(fn, "arguments", None) or "{}"
        try:
            args = json.loads(fargs) if isinstance(fargs, str) else fargs
        except json.JSONDecodeError:
            args = {}
        tool_calls.append({"id": fid, "name": fname, "arguments": args})
    if tool_calls:
        logger.info("[llm:chat_with_tools] OUT tool_calls=%s", [t["name"] for t in tool_calls])
    if content:
        logger.info("[llm:chat_with_tools] OUT content_len=%d", len(content))
    return content, tool_calls if tool_calls else None
