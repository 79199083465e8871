"""Core domain models.

Provider calls, prompt assembly, storage and migrations all operate on these
types. Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

import time
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from character_chat.templates import (
    DEFAULT_CHAT_GROUP_CONTEXT,
    DEFAULT_PROFILE_GENERATOR_MESSAGE,
    DEFAULT_PROFILE_GENERATOR_SYSTEM,
    DEFAULT_SINGLE_BOT_CONTEXT,
    DEFAULT_SYSTEM_ENTRY,
)

Role = Literal["system", "user", "assistant", "error"]

TextProvider = Literal["gpt-3.5-turbo", "gpt-4", "gemini-pro"]


def count_words(text: str) -> int:
    return len(text.split())


class Message(BaseModel):
    """Wire-level unit sent to or received from a provider."""

    role: Role
    content: str


class ChatMessageContent(BaseModel):
    """The in-character payload of a chat entry.

    Provider replies may carry the text under "answer" (that is what the
    default system template asks for), so it is accepted as an alias.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    message: str = Field(validation_alias=AliasChoices("message", "answer"))
    plan: str | None = None

    def to_prompt_text(self) -> str:
        return self.model_dump_json(exclude_none=True)


class ChatMessage(BaseModel):
    """A persisted conversation entry. Build new ones with new_chat_message()."""

    contact_id: str
    role: Role
    content: ChatMessageContent
    word_count: int = Field(ge=0)
    timestamp: int  # epoch milliseconds


def new_chat_message(
    contact_id: str,
    role: Role,
    content: ChatMessageContent,
    timestamp: int | None = None,
) -> ChatMessage:
    """Create a chat entry with word_count derived from its content."""
    return ChatMessage(
        contact_id=contact_id,
        role=role,
        content=content,
        word_count=count_words(content.to_prompt_text()),
        timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
    )


class MetaFromAI(BaseModel):
    """Generated character profile.

    Stored with snake_case keys; dumped by_alias it uses the camelCase keys
    the profile generator is asked to produce.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_profile: str = Field(
        validation_alias=AliasChoices("user_profile", "userProfile"),
        serialization_alias="userProfile",
    )
    name: str
    background: str = ""
    current: str = ""
    appearance: str = ""
    likes: str = ""
    dislikes: str = ""
    chat_characteristics: str = Field(
        default="",
        validation_alias=AliasChoices("chat_characteristics", "chatCharacteristics"),
        serialization_alias="chatCharacteristics",
    )
    avatar: str = ""

    @field_validator("likes", "dislikes", mode="before")
    @classmethod
    def _join_lists(cls, value):
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return value


class GroupMeta(BaseModel):
    name: str
    description: str = ""


class AvatarMeta(BaseModel):
    prompt: str = ""
    id: str = ""


class Settings(BaseModel):
    """User settings: provider selection, credentials and prompt templates."""

    chat_response: TextProvider = "gpt-3.5-turbo"
    profile_generation: TextProvider = "gpt-3.5-turbo"
    open_ai_key: str = ""
    gemini_key: str = ""
    user_name: str = ""
    user_short_info: str = ""
    system_entry: str = DEFAULT_SYSTEM_ENTRY
    single_bot_system_entry_context: str = DEFAULT_SINGLE_BOT_CONTEXT
    chat_group_system_entry_context: str = DEFAULT_CHAT_GROUP_CONTEXT
    profile_generator_system_entry: str = DEFAULT_PROFILE_GENERATOR_SYSTEM
    profile_generator_message_entry: str = DEFAULT_PROFILE_GENERATOR_MESSAGE


class BotContact(BaseModel):
    type: Literal["bot"] = "bot"
    id: str
    meta: MetaFromAI
    avatar_meta: AvatarMeta = Field(default_factory=AvatarMeta)
    chats: list[ChatMessage] = Field(default_factory=list)
    status: str = ""
    contact_system_entry_template: str = DEFAULT_SYSTEM_ENTRY
    context_template: str = DEFAULT_SINGLE_BOT_CONTEXT


class GroupChatContact(BaseModel):
    type: Literal["group"] = "group"
    id: str
    meta: GroupMeta
    avatar_meta: AvatarMeta = Field(default_factory=AvatarMeta)
    chats: list[ChatMessage] = Field(default_factory=list)
    contacts: list[BotContact] = Field(default_factory=list)
    context_template: str = DEFAULT_CHAT_GROUP_CONTEXT
    status: str = ""


Contact = Annotated[Union[BotContact, GroupChatContact], Field(discriminator="type")]


class VolatileState(BaseModel):
    current_screen: str = "contacts"
    chat_id: str = ""
    waiting_answer: bool = False
    error_message: str = ""
    screen_stack: list[str] = Field(default_factory=lambda: ["contacts"])


class AppState(BaseModel):
    """A full state snapshot at the current schema version."""

    version: str
    contacts: dict[str, Contact] = Field(default_factory=dict)
    group_chats_participants: dict = Field(default_factory=dict)
    settings: Settings = Field(default_factory=Settings)
    volatile_state: VolatileState = Field(default_factory=VolatileState)
