"""Tests for response extractors and the chat reply parse boundary."""

import json

import pytest

from character_chat.extractors import (
    ExtractionError,
    extract_gemini_chat_response,
    extract_gemini_profile_response,
    extract_openai_chat_response,
    extract_openai_profile_response,
    parse_chat_reply,
    remove_special_chars_and_parse,
)
from character_chat.models import Message

PROFILE = {
    "userProfile": "A baker in Lyon.",
    "name": "Eve Martin",
    "background": "Grew up above her parents' bakery.",
    "current": "Runs the bakery now.",
    "appearance": "Flour on her apron.",
    "likes": "bread, jazz",
    "dislikes": "rain",
    "chatCharacteristics": "Short sentences.",
    "avatar": "Portrait of a smiling baker, soft light.",
}


def _reply(content: str) -> Message:
    return Message(role="assistant", content=content)


# ── remove_special_chars_and_parse ───────────────────────────


def test_parse_plain_json():
    assert remove_special_chars_and_parse('{"a": 1}') == {"a": 1}


def test_parse_strips_markdown_fences():
    text = '```json\n{"answer": "hi"}\n```'
    assert remove_special_chars_and_parse(text) == {"answer": "hi"}


def test_parse_tolerates_raw_control_characters():
    text = '{"answer": "line one\nline two\tend"}'
    assert remove_special_chars_and_parse(text) == {"answer": "line one line two end"}


def test_parse_rejects_plain_text():
    with pytest.raises(ExtractionError, match="not valid JSON"):
        remove_special_chars_and_parse("Sure, I'd love to!")


def test_parse_rejects_non_object():
    with pytest.raises(ExtractionError, match="JSON object"):
        remove_special_chars_and_parse('["a", "b"]')


# ── OpenAI ───────────────────────────────────────────────────


def test_openai_chat_with_plan_and_answer():
    content = extract_openai_chat_response(_reply('{"plan": "Be casual.", "answer": "Ugh, no."}'))
    assert content.message == "Ugh, no."
    assert content.plan == "Be casual."


def test_openai_chat_missing_message_raises():
    with pytest.raises(ExtractionError):
        extract_openai_chat_response(_reply('{"plan": "only a plan"}'))


def test_openai_profile():
    meta = extract_openai_profile_response(_reply(json.dumps(PROFILE)))
    assert meta.name == "Eve Martin"
    assert meta.user_profile == "A baker in Lyon."
    assert meta.chat_characteristics == "Short sentences."


def test_openai_profile_missing_name_raises():
    broken = {k: v for k, v in PROFILE.items() if k != "name"}
    with pytest.raises(ExtractionError):
        extract_openai_profile_response(_reply(json.dumps(broken)))


# ── Gemini ───────────────────────────────────────────────────


def test_gemini_chat_with_surrounding_prose_and_fences():
    text = 'Sure! Here you go:\n```json\n{"plan": "p", "answer": "hi"}\n```\nHope that helps.'
    content = extract_gemini_chat_response(_reply(text))
    assert content.message == "hi"


def test_gemini_chat_without_object_raises():
    with pytest.raises(ExtractionError, match="no JSON object"):
        extract_gemini_chat_response(_reply("Just words."))


def test_gemini_profile_fenced():
    text = "```json\n" + json.dumps(PROFILE, indent=2) + "\n```"
    meta = extract_gemini_profile_response(_reply(text))
    assert meta.avatar == PROFILE["avatar"]


# ── parse_chat_reply ─────────────────────────────────────────


def test_plain_text_reply_degrades_to_raw_text():
    raw = "Honestly? I have no idea what you mean."
    parsed = parse_chat_reply(extract_openai_chat_response, _reply(raw), "Eve")
    assert parsed.degraded is True
    assert parsed.content.message == raw
    assert parsed.content.name == "Eve"
    assert parsed.content.plan is None


def test_gemini_plain_text_reply_degrades():
    raw = "No braces here"
    parsed = parse_chat_reply(extract_gemini_chat_response, _reply(raw), "Eve")
    assert parsed.degraded is True
    assert parsed.content.message == raw


def test_structured_reply_gets_contact_name():
    parsed = parse_chat_reply(extract_openai_chat_response, _reply('{"answer": "hi"}'), "Eve")
    assert parsed.degraded is False
    assert parsed.content.name == "Eve"
    assert parsed.content.message == "hi"


def test_structured_reply_keeps_own_name():
    reply = _reply('{"name": "Evie", "message": "hi"}')
    parsed = parse_chat_reply(extract_openai_chat_response, reply, "Eve")
    assert parsed.content.name == "Evie"


def test_parse_failure_is_logged(caplog):
    with caplog.at_level("WARNING", logger="character_chat.extractors"):
        parse_chat_reply(extract_openai_chat_response, _reply("nope"), "Eve")
    assert "not structured" in caplog.text
