"""System entry and profile-generation prompt assembly.

Substitution is literal and global: every occurrence of every token is
replaced, one token key after another in the order of the token dict. A
replacement value containing a token literal is only substituted again if
that token comes later in the order.
"""

from datetime import datetime

from character_chat.models import GroupMeta, Message
from character_chat.templates import DEFAULT_SYSTEM_ENTRY

CONTEXT_TOKEN = "%CONTEXT%"
PROFILE_TOKEN = "%PROFILE%"


def replace_all_tokens(text: str, tokens: dict[str, str]) -> str:
    result = text
    for key, value in tokens.items():
        result = result.replace(key, value)
    return result


def system_entry_tokens(
    name: str,
    meta_json: str,
    group_meta: GroupMeta | None,
    user_name: str,
    user_short_info: str,
    now: datetime | None = None,
) -> dict[str, str]:
    """Build the token map for a system entry. Group tokens are empty outside groups."""
    now = now or datetime.now()
    return {
        "%NAME%": name,
        "%USER_NAME%": user_name,
        "%USER_INFO%": user_short_info,
        "%META_JSON%": meta_json,
        "%CHAT_GROUP_NAME%": group_meta.name if group_meta else "",
        "%CHAT_GROUP_DESCRIPTION%": group_meta.description if group_meta else "",
        "%DATE%": now.strftime("%c"),
    }


def write_system_entry(
    name: str,
    meta_json: str,
    group_meta: GroupMeta | None,
    user_name: str,
    user_short_info: str,
    system_entry: str,
    prompt_context: str,
    now: datetime | None = None,
) -> Message:
    """Render the character's system entry.

    The context template is rendered on its own first and then placed
    wherever %CONTEXT% appears in the rendered system entry. An empty
    system_entry falls back to DEFAULT_SYSTEM_ENTRY.
    """
    if not system_entry:
        system_entry = DEFAULT_SYSTEM_ENTRY

    tokens = system_entry_tokens(name, meta_json, group_meta, user_name, user_short_info, now)
    context = replace_all_tokens(prompt_context, tokens)
    content = replace_all_tokens(system_entry, tokens).replace(CONTEXT_TOKEN, context)
    return Message(role="system", content=content)


def profile_prompt(description: str, system_entry: str, message_entry: str) -> list[Message]:
    """Messages asking a provider to generate a character profile."""
    return [
        Message(role="system", content=system_entry),
        Message(role="user", content=message_entry.replace(PROFILE_TOKEN, description)),
    ]


def profile_prompt_text(description: str, system_entry: str, message_entry: str) -> str:
    """Single-string form of profile_prompt() for providers without a system role."""
    system, user = profile_prompt(description, system_entry, message_entry)
    return f"{system.content} {user.content}"
