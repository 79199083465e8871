"""Group chat endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from character_chat.chat import USER_CONTACT_ID, ask_bot_to_message, create_group_chat
from character_chat.models import AppState, ChatMessageContent, GroupChatContact, new_chat_message
from character_chat.state import append_messages

from .deps import LiveState, get_live, get_state
from .models import ChatBody, CreateGroupChat

router = APIRouter()


def _group(state: AppState, group_id: str) -> GroupChatContact:
    group = state.contacts.get(group_id)
    if not isinstance(group, GroupChatContact):
        raise HTTPException(404, "Group chat not found")
    return group


@router.post("/groups", status_code=201, dependencies=[Depends(get_state)])
async def create_group(
    body: CreateGroupChat,
    live: LiveState = Depends(get_live),
):
    """Create a group chat from existing bot contacts."""
    async with live.lock:
        group = create_group_chat(
            state=live.state,
            settings=live.state.settings,
            chat_name=body.name,
            description=body.description,
            contact_ids=body.contact_ids,
        )
        live.state.contacts[group.id] = group
        live.save()
    return group


@router.post("/groups/{group_id}/messages", dependencies=[Depends(get_state)])
async def post_group_message(
    group_id: str,
    body: ChatBody,
    live: LiveState = Depends(get_live),
):
    """Append the user's message to a group. No bot is asked to answer."""
    async with live.lock:
        _group(live.state, group_id)
        msg = new_chat_message(
            USER_CONTACT_ID, "user",
            ChatMessageContent(name=live.state.settings.user_name, message=body.message),
        )
        append_messages(live.state, group_id, [msg])
        live.save()
    return msg


@router.post("/groups/{group_id}/ask/{bot_id}")
async def ask_bot(
    group_id: str,
    bot_id: str,
    state: AppState = Depends(get_state),
    live: LiveState = Depends(get_live),
):
    """Ask one bot of the group to write the next message."""
    group = _group(state, group_id)
    if not any(c.id == bot_id for c in group.contacts):
        raise HTTPException(404, "Bot is not part of this group")
    reply = await ask_bot_to_message(
        settings=state.settings,
        bot_id=bot_id,
        group=group,
        history=list(group.chats),
        prompt_context=group.context_template,
        group_meta=group.meta,
    )
    async with live.lock:
        _group(live.state, group_id)
        append_messages(live.state, group_id, [reply])
        live.save()
    return reply
