"""Provider dispatch — resolves Settings to bound completion and extraction functions.

Two independent axes select a provider:
  chat_response       which provider answers chat turns
  profile_generation  which provider generates new character profiles

Resolution is an exhaustive match over TextProvider. Adding a provider to
the Literal without a case here is a type error, and assert_never fails
loudly at runtime if it ever gets through.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from typing import assert_never

from character_chat import extractors, llm
from character_chat.models import ChatMessageContent, Message, MetaFromAI, Settings, TextProvider
from character_chat.prompts import profile_prompt, profile_prompt_text

ChatCompletion = Callable[[list[Message]], Awaitable[Message]]
ProfileGeneration = Callable[[str], Awaitable[Message]]


@dataclass(frozen=True)
class ChatBinding:
    complete: Callable[[str, list[Message]], Awaitable[Message]]
    extract: Callable[[Message], ChatMessageContent]


@dataclass(frozen=True)
class ProfileBinding:
    generate: Callable[[str, str, str, str], Awaitable[Message]]
    extract: Callable[[Message], MetaFromAI]


def chat_binding(provider: TextProvider) -> ChatBinding:
    match provider:
        case "gpt-3.5-turbo":
            return ChatBinding(llm.chat_completion_gpt3, extractors.extract_openai_chat_response)
        case "gpt-4":
            return ChatBinding(llm.chat_completion_gpt4, extractors.extract_openai_chat_response)
        case "gemini-pro":
            return ChatBinding(llm.gemini_chat_completion, extractors.extract_gemini_chat_response)
        case _:
            assert_never(provider)


async def _openai_profile(complete, api_key: str, description: str, system: str, message: str) -> Message:
    return await complete(api_key, profile_prompt(description, system, message))


async def _gemini_profile(api_key: str, description: str, system: str, message: str) -> Message:
    return await llm.gemini_direct_query(api_key, profile_prompt_text(description, system, message))


def profile_binding(provider: TextProvider) -> ProfileBinding:
    match provider:
        case "gpt-3.5-turbo":
            return ProfileBinding(
                partial(_openai_profile, llm.chat_completion_gpt3),
                extractors.extract_openai_profile_response,
            )
        case "gpt-4":
            return ProfileBinding(
                partial(_openai_profile, llm.chat_completion_gpt4),
                extractors.extract_openai_profile_response,
            )
        case "gemini-pro":
            return ProfileBinding(_gemini_profile, extractors.extract_gemini_profile_response)
        case _:
            assert_never(provider)


def credential_for(settings: Settings, provider: TextProvider) -> str:
    match provider:
        case "gpt-3.5-turbo" | "gpt-4":
            return settings.open_ai_key
        case "gemini-pro":
            return settings.gemini_key
        case _:
            assert_never(provider)


def get_chat_completion(settings: Settings) -> ChatCompletion:
    binding = chat_binding(settings.chat_response)
    return partial(binding.complete, credential_for(settings, settings.chat_response))


def get_chat_extractor(provider: TextProvider) -> Callable[[Message], ChatMessageContent]:
    return chat_binding(provider).extract


def get_profile_extractor(provider: TextProvider) -> Callable[[Message], MetaFromAI]:
    return profile_binding(provider).extract


def get_profile_generation(settings: Settings) -> ProfileGeneration:
    binding = profile_binding(settings.profile_generation)
    api_key = credential_for(settings, settings.profile_generation)

    async def generate(description: str) -> Message:
        return await binding.generate(
            api_key,
            description,
            settings.profile_generator_system_entry,
            settings.profile_generator_message_entry,
        )

    return generate
