"""Response extractors: provider replies → ChatMessageContent / MetaFromAI.

Extractors raise ExtractionError. parse_chat_reply() is the boundary the
orchestration calls; it never raises and degrades to the raw reply text.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from character_chat.models import ChatMessageContent, Message, MetaFromAI

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class ExtractionError(ValueError):
    """Raised when a provider reply is not the expected structured payload."""


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [line for line in lines[1:] if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


def remove_special_chars_and_parse(text: str) -> dict[str, Any]:
    """Parse a JSON object out of LLM output, stripping markdown fences and control characters."""
    cleaned = _CONTROL_CHARS.sub(" ", _strip_fences(text)).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError(f"Reply must be a JSON object, got {type(data).__name__}")
    return data


def _outermost_object(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ExtractionError("Reply contains no JSON object")
    return text[start:end + 1]


def _validate(model: type[BaseModel], data: dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ExtractionError(f"Reply does not match {model.__name__}: {e}") from e


# ── OpenAI ───────────────────────────────────────────────────


def extract_openai_chat_response(response: Message) -> ChatMessageContent:
    return _validate(ChatMessageContent, remove_special_chars_and_parse(response.content))


def extract_openai_profile_response(response: Message) -> MetaFromAI:
    return _validate(MetaFromAI, remove_special_chars_and_parse(response.content))


# ── Gemini ───────────────────────────────────────────────────
# Gemini tends to wrap the JSON in prose and fences, so only the outermost
# object is parsed.


def extract_gemini_chat_response(response: Message) -> ChatMessageContent:
    data = remove_special_chars_and_parse(_outermost_object(response.content))
    return _validate(ChatMessageContent, data)


def extract_gemini_profile_response(response: Message) -> MetaFromAI:
    data = remove_special_chars_and_parse(_outermost_object(response.content))
    return _validate(MetaFromAI, data)


# ── Parse boundary ───────────────────────────────────────────


@dataclass(frozen=True)
class ParsedReply:
    content: ChatMessageContent
    degraded: bool = False


def parse_chat_reply(
    extract: Callable[[Message], ChatMessageContent],
    response: Message,
    name: str,
) -> ParsedReply:
    """Extract a chat reply, falling back to the raw text under the given name."""
    try:
        content = extract(response)
    except ExtractionError as e:
        logger.warning("Reply from %s is not structured, using raw text: %s", name, e)
        return ParsedReply(ChatMessageContent(name=name, message=response.content), degraded=True)
    if not content.name:
        content = content.model_copy(update={"name": name})
    return ParsedReply(content)
