"""Pydantic request models for API endpoints."""

from pydantic import BaseModel

from character_chat.models import TextProvider


class UpdateSettings(BaseModel):
    chat_response: TextProvider | None = None
    profile_generation: TextProvider | None = None
    open_ai_key: str | None = None
    gemini_key: str | None = None
    user_name: str | None = None
    user_short_info: str | None = None
    system_entry: str | None = None
    single_bot_system_entry_context: str | None = None
    chat_group_system_entry_context: str | None = None
    profile_generator_system_entry: str | None = None
    profile_generator_message_entry: str | None = None


class CreateContact(BaseModel):
    description: str


class ChatBody(BaseModel):
    message: str


class CreateGroupChat(BaseModel):
    name: str
    description: str = ""
    contact_ids: list[str]
