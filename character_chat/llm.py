"""LLM clients — HTTP connections to the chat-completion providers.

Every completion function has the shape

    async def completion(api_key: str, messages: list[Message]) -> Message: ...

and resolves with the provider's raw reply. Structured parsing of the reply
is left to character_chat.extractors.

Providers:
  OpenAI  — POST {OPENAI_API_URL}/chat/completions  {"model": ..., "messages": [...]}
            Response: {"choices": [{"message": {"role": ..., "content": ...}}]}
            Images:   POST {OPENAI_API_URL}/images/generations → data[0].b64_json
  Gemini  — POST {GEMINI_API_URL}/models/gemini-pro:generateContent  {"contents": [...]}
            Response: {"candidates": [{"content": {"parts": [{"text": ...}]}}]}

All connection and protocol failures raise LLMError.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from character_chat.models import Message

logger = logging.getLogger(__name__)

OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1")
GEMINI_API_URL = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

GEMINI_MODEL = "gemini-pro"


class LLMError(RuntimeError):
    """Raised when a provider cannot be reached or returns an error."""


async def _post_json(url: str, body: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
    headers = {"Content-Type": "application/json", **headers}
    try:
        async with httpx.AsyncClient(timeout=LLM_TIMEOUT) as client:
            resp = await client.post(url, json=body, headers=headers)
            resp.raise_for_status()
    except httpx.ConnectError as e:
        raise LLMError(f"Cannot connect to LLM provider at {url}") from e
    except httpx.HTTPStatusError as e:
        raise LLMError(f"LLM provider returned HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        raise LLMError(f"LLM provider timed out after {LLM_TIMEOUT}s") from e
    except httpx.RequestError as e:
        raise LLMError(f"Request to LLM provider failed: {type(e).__name__}: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise LLMError("LLM provider returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise LLMError(f"LLM provider returned a JSON {type(data).__name__}, expected an object")
    return data


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

def _openai_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


async def chat_completion_with_model(api_key: str, model: str, messages: list[Message]) -> Message:
    url = f"{OPENAI_API_URL.rstrip('/')}/chat/completions"
    body = {"model": model, "messages": [m.model_dump() for m in messages]}
    logger.debug("openai chat model=%s messages=%d", model, len(messages))

    data = await _post_json(url, body, _openai_headers(api_key))
    choices = data.get("choices")
    if (
        not isinstance(choices, list) or not choices
        or not isinstance(choices[0], dict)
        or not isinstance(choices[0].get("message"), dict)
    ):
        raise LLMError("Unexpected response format from OpenAI")
    raw = choices[0]["message"]
    try:
        reply = Message(role=raw.get("role", "assistant"), content=raw.get("content") or "")
    except ValueError as e:
        raise LLMError(f"Unexpected message in OpenAI response: {raw!r}") from e
    logger.debug("openai reply model=%s len=%d", model, len(reply.content))
    return reply


async def chat_completion_gpt3(api_key: str, messages: list[Message]) -> Message:
    return await chat_completion_with_model(api_key, "gpt-3.5-turbo", messages)


async def chat_completion_gpt4(api_key: str, messages: list[Message]) -> Message:
    return await chat_completion_with_model(api_key, "gpt-4", messages)


async def image_generation(api_key: str, prompt: str) -> str:
    """Generate a 256x256 avatar and return it base64-encoded."""
    url = f"{OPENAI_API_URL.rstrip('/')}/images/generations"
    body = {"prompt": prompt, "n": 1, "size": "256x256", "response_format": "b64_json"}
    logger.debug("openai image prompt_len=%d", len(prompt))

    data = await _post_json(url, body, _openai_headers(api_key))
    images = data.get("data")
    if (
        not isinstance(images, list) or not images
        or not isinstance(images[0], dict)
        or not isinstance(images[0].get("b64_json"), str)
    ):
        raise LLMError("Unexpected image response format from OpenAI")
    return images[0]["b64_json"]


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

def to_gemini_contents(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert messages to Gemini "contents".

    Gemini only knows "user" and "model" turns and wants them alternating, so
    system entries are sent as user turns and consecutive same-role turns are
    merged into one turn with several parts.
    """
    contents: list[dict[str, Any]] = []
    for msg in messages:
        role = "model" if msg.role == "assistant" else "user"
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].append({"text": msg.content})
        else:
            contents.append({"role": role, "parts": [{"text": msg.content}]})
    return contents


async def _gemini_generate(api_key: str, contents: list[dict[str, Any]]) -> Message:
    url = f"{GEMINI_API_URL.rstrip('/')}/models/{GEMINI_MODEL}:generateContent"
    logger.debug("gemini generate turns=%d", len(contents))

    data = await _post_json(url, {"contents": contents}, {"x-goog-api-key": api_key})
    candidates = data.get("candidates")
    if not candidates:
        feedback = data.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        raise LLMError(f"Gemini returned no answer: {reason or 'no candidates'}")
    first = candidates[0] if isinstance(candidates, list) else None
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not all(isinstance(p, dict) for p in parts):
        raise LLMError("Unexpected response format from Gemini")
    text = "".join(str(p.get("text", "")) for p in parts)
    logger.debug("gemini reply len=%d", len(text))
    return Message(role="assistant", content=text)


async def gemini_chat_completion(api_key: str, messages: list[Message]) -> Message:
    return await _gemini_generate(api_key, to_gemini_contents(messages))


async def gemini_direct_query(api_key: str, prompt: str) -> Message:
    """Send a single text prompt as one user turn."""
    return await _gemini_generate(api_key, [{"role": "user", "parts": [{"text": prompt}]}])
