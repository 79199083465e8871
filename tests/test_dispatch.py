"""Tests for provider dispatch resolution."""

from typing import get_args
from unittest.mock import AsyncMock, patch

import pytest

from character_chat import extractors
from character_chat.dispatch import (
    chat_binding,
    credential_for,
    get_chat_completion,
    get_chat_extractor,
    get_profile_extractor,
    get_profile_generation,
    profile_binding,
)
from character_chat.models import Message, Settings, TextProvider

PROMPT = [Message(role="system", content="You are Eve.")]
REPLY = Message(role="assistant", content='{"answer": "hi"}')


# ── Exhaustive resolution ────────────────────────────────────


@pytest.mark.parametrize("provider", get_args(TextProvider))
def test_every_provider_has_chat_binding(provider):
    binding = chat_binding(provider)
    assert binding is not None
    assert callable(binding.complete)
    assert callable(binding.extract)


@pytest.mark.parametrize("provider", get_args(TextProvider))
def test_every_provider_has_profile_binding(provider):
    binding = profile_binding(provider)
    assert binding is not None
    assert callable(binding.generate)
    assert callable(binding.extract)


def test_unknown_provider_is_an_assertion():
    with pytest.raises(AssertionError):
        chat_binding("claude-3")
    with pytest.raises(AssertionError):
        profile_binding("claude-3")


def test_credentials_per_provider():
    settings = Settings(open_ai_key="sk", gemini_key="gk")
    assert credential_for(settings, "gpt-3.5-turbo") == "sk"
    assert credential_for(settings, "gpt-4") == "sk"
    assert credential_for(settings, "gemini-pro") == "gk"


# ── Chat completion ──────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("provider,target,key", [
    ("gpt-3.5-turbo", "chat_completion_gpt3", "sk"),
    ("gpt-4", "chat_completion_gpt4", "sk"),
    ("gemini-pro", "gemini_chat_completion", "gk"),
])
async def test_chat_completion_bound_to_provider_and_key(provider, target, key):
    settings = Settings(chat_response=provider, open_ai_key="sk", gemini_key="gk")
    with patch(f"character_chat.llm.{target}", new_callable=AsyncMock) as mock_complete:
        mock_complete.return_value = REPLY
        completion = get_chat_completion(settings)
        result = await completion(PROMPT)
    assert result == REPLY
    mock_complete.assert_awaited_once_with(key, PROMPT)


def test_extractor_matches_provider_family():
    assert get_chat_extractor("gpt-4") is extractors.extract_openai_chat_response
    assert get_chat_extractor("gpt-3.5-turbo") is extractors.extract_openai_chat_response
    assert get_chat_extractor("gemini-pro") is extractors.extract_gemini_chat_response


def test_axes_resolved_independently():
    settings = Settings(chat_response="gemini-pro", profile_generation="gpt-4")
    assert get_chat_extractor(settings.chat_response) is extractors.extract_gemini_chat_response
    assert get_profile_extractor(settings.profile_generation) is extractors.extract_openai_profile_response


# ── Profile generation ───────────────────────────────────────


@pytest.mark.asyncio
async def test_openai_profile_generation_sends_system_and_user():
    settings = Settings(
        profile_generation="gpt-4", open_ai_key="sk",
        profile_generator_system_entry="You generate profiles.",
        profile_generator_message_entry="Profile for: %PROFILE%",
    )
    with patch("character_chat.llm.chat_completion_gpt4", new_callable=AsyncMock) as mock_complete:
        mock_complete.return_value = REPLY
        generate = get_profile_generation(settings)
        await generate("A baker in Lyon")
    mock_complete.assert_awaited_once_with("sk", [
        Message(role="system", content="You generate profiles."),
        Message(role="user", content="Profile for: A baker in Lyon"),
    ])


@pytest.mark.asyncio
async def test_gemini_profile_generation_uses_direct_query():
    settings = Settings(
        profile_generation="gemini-pro", gemini_key="gk",
        profile_generator_system_entry="System.",
        profile_generator_message_entry="Make %PROFILE%",
    )
    with patch("character_chat.llm.gemini_direct_query", new_callable=AsyncMock) as mock_query:
        mock_query.return_value = REPLY
        generate = get_profile_generation(settings)
        await generate("a pilot")
    mock_query.assert_awaited_once_with("gk", "System. Make a pilot")
