"""Chat orchestration — one provider round-trip per call.

send_message:
  1. Wrap the user's text into a ChatMessage.
  2. Render the contact's system entry (prompts.write_system_entry).
  3. Trim history to the word budget (history.limit_messages_size).
  4. Call the chat provider selected in Settings (dispatch.get_chat_completion).
  5. Parse the reply at the parse boundary; unstructured replies degrade to raw text.
  6. A provider failure becomes an error-role entry instead. Nothing is retried.

ask_bot_to_message runs the same loop for one bot inside a group chat.
create_contact generates a profile and an avatar; create_group_chat copies
existing bots into a new group.

None of these functions write to storage except for avatar blobs; callers
persist the returned entries.
"""

from __future__ import annotations

import json
import logging
import uuid

from character_chat import dispatch, llm
from character_chat.extractors import parse_chat_reply
from character_chat.history import limit_messages_size
from character_chat.llm import LLMError
from character_chat.models import (
    AppState,
    AvatarMeta,
    BotContact,
    ChatMessage,
    ChatMessageContent,
    GroupChatContact,
    GroupMeta,
    Message,
    MetaFromAI,
    Settings,
    new_chat_message,
)
from character_chat.prompts import write_system_entry
from character_chat.storage import Storage

logger = logging.getLogger(__name__)

USER_CONTACT_ID = "user"
SYSTEM_MESSAGE_NAME = "SystemMessage"
HIDDEN_PLAN = "1-AI.2-Analyze.3-Differences.4-Inner monologue."


def new_id(suffix: str) -> str:
    return f"{uuid.uuid4().hex[:8]}{suffix}"


def _system_entry(
    settings: Settings,
    contact: BotContact,
    prompt_context: str,
    group_meta: GroupMeta | None,
) -> Message:
    return write_system_entry(
        contact.meta.name,
        contact.meta.model_dump_json(by_alias=True),
        group_meta,
        settings.user_name,
        settings.user_short_info,
        contact.contact_system_entry_template,
        prompt_context,
    )


def _serialize_error(error: Exception) -> str:
    return json.dumps({"type": type(error).__name__, "message": str(error)}, indent=2)


def build_response_message(
    settings: Settings,
    name: str,
    contact_id: str,
    response: Message,
) -> ChatMessage:
    """Turn a raw provider reply into a chat entry attributed to contact_id."""
    extract = dispatch.get_chat_extractor(settings.chat_response)
    parsed = parse_chat_reply(extract, response, name)
    if parsed.degraded:
        logger.info("Storing unstructured reply for %s as plain text", contact_id)
    role = response.role if response.role in ("assistant", "user", "system") else "assistant"
    return new_chat_message(contact_id, role, parsed.content)


async def send_message(
    *,
    settings: Settings,
    contact: BotContact,
    history: list[ChatMessage],
    new_message: ChatMessageContent,
    prompt_context: str,
    group_meta: GroupMeta | None = None,
) -> list[ChatMessage]:
    """Send the user's turn to the contact and return [user entry, reply or error entry]."""
    user_msg = new_chat_message(USER_CONTACT_ID, "user", new_message)

    sys_entry = _system_entry(settings, contact, prompt_context, group_meta)
    prompt = limit_messages_size(sys_entry, [*history, user_msg])
    completion = dispatch.get_chat_completion(settings)

    try:
        response = await completion(prompt)
    except LLMError as e:
        logger.warning("Chat completion for %s failed: %s", contact.id, e)
        error_content = ChatMessageContent(name=contact.meta.name, message=_serialize_error(e))
        return [user_msg, new_chat_message(contact.id, "error", error_content)]

    return [user_msg, build_response_message(settings, contact.meta.name, contact.id, response)]


async def ask_bot_to_message(
    *,
    settings: Settings,
    bot_id: str,
    group: GroupChatContact,
    history: list[ChatMessage],
    prompt_context: str,
    group_meta: GroupMeta | None = None,
) -> ChatMessage:
    """Ask one bot of a group chat to speak next. Returns its reply or an error entry."""
    bot = next((c for c in group.contacts if c.id == bot_id), None)
    if bot is None:
        raise KeyError(f"Bot {bot_id!r} is not part of group {group.id!r}")

    # Other participants' plans are never shown to the bot.
    hidden = [
        m.model_copy(update={"content": ChatMessageContent(
            name=m.content.name, message=m.content.message, plan=HIDDEN_PLAN,
        )})
        for m in history
    ]

    sys_entry = _system_entry(settings, bot, prompt_context, group_meta)
    prompt = limit_messages_size(sys_entry, hidden)
    completion = dispatch.get_chat_completion(settings)

    try:
        response = await completion(prompt)
    except LLMError as e:
        logger.warning("Group completion for %s in %s failed: %s", bot_id, group.id, e)
        error_content = ChatMessageContent(name=SYSTEM_MESSAGE_NAME, plan=str(e), message="...")
        return new_chat_message(group.id, "error", error_content)

    return build_response_message(settings, bot.meta.name, group.id, response)


def create_bot_contact_from_meta(
    storage: Storage,
    contact_id: str,
    settings: Settings,
    meta: MetaFromAI,
    avatar_b64: str,
) -> BotContact:
    avatar_id = new_id("avatar")
    storage.add_avatar(avatar_id, avatar_b64)
    return BotContact(
        id=contact_id,
        meta=meta,
        avatar_meta=AvatarMeta(prompt=meta.avatar, id=avatar_id),
        status=meta.user_profile,
        contact_system_entry_template=settings.system_entry,
        context_template=settings.single_bot_system_entry_context,
    )


async def create_contact(
    *,
    storage: Storage,
    settings: Settings,
    description: str,
) -> BotContact:
    """Generate a character from a description.

    Raises LLMError if the profile call fails and ExtractionError if the
    profile is unusable. A failed avatar is stored as an empty placeholder.
    """
    contact_id = new_id("bot")
    generate = dispatch.get_profile_generation(settings)
    extract = dispatch.get_profile_extractor(settings.profile_generation)

    response = await generate(description)
    meta = extract(response)

    try:
        avatar = await llm.image_generation(settings.open_ai_key, meta.avatar)
    except LLMError as e:
        logger.warning("Avatar generation for %s failed: %s", meta.name, e)
        avatar = ""

    return create_bot_contact_from_meta(storage, contact_id, settings, meta, avatar)


def create_group_chat(
    *,
    state: AppState,
    settings: Settings,
    chat_name: str,
    description: str,
    contact_ids: list[str],
) -> GroupChatContact:
    """Create a group with copies of the selected bots. The copies start with empty chats."""
    members = [
        contact.model_copy(update={"chats": []}, deep=True)
        for contact in state.contacts.values()
        if isinstance(contact, BotContact) and contact.id in contact_ids
    ]
    return GroupChatContact(
        id=new_id("groupChat"),
        meta=GroupMeta(name=chat_name, description=description),
        contacts=members,
        context_template=settings.chat_group_system_entry_context,
        status=description,
    )
