"""Bot contact endpoints: profile generation, removal and chat."""

from fastapi import APIRouter, Depends, HTTPException

from character_chat.chat import create_contact, send_message
from character_chat.extractors import ExtractionError
from character_chat.llm import LLMError
from character_chat.models import AppState, BotContact, ChatMessageContent
from character_chat.state import append_messages
from character_chat.storage import Storage

from .deps import LiveState, get_live, get_state, get_storage
from .models import ChatBody, CreateContact

router = APIRouter()


def _bot_contact(state: AppState, contact_id: str) -> BotContact:
    contact = state.contacts.get(contact_id)
    if not isinstance(contact, BotContact):
        raise HTTPException(404, "Contact not found")
    return contact


@router.get("/contacts")
async def list_contacts(state: AppState = Depends(get_state)):
    """List all contacts (bots and group chats)."""
    return list(state.contacts.values())


@router.post("/contacts", status_code=201)
async def create_contact_endpoint(
    body: CreateContact,
    state: AppState = Depends(get_state),
    live: LiveState = Depends(get_live),
    storage: Storage = Depends(get_storage),
):
    """Generate a new bot contact from a short description."""
    try:
        contact = await create_contact(
            storage=storage, settings=state.settings, description=body.description,
        )
    except (LLMError, ExtractionError) as e:
        raise HTTPException(502, f"Profile generation failed: {e}")
    async with live.lock:
        live.state.contacts[contact.id] = contact
        live.save()
    return contact


@router.delete("/contacts/{contact_id}", dependencies=[Depends(get_state)])
async def delete_contact(
    contact_id: str,
    live: LiveState = Depends(get_live),
):
    """Remove a contact (bot or group)."""
    async with live.lock:
        if live.state.contacts.pop(contact_id, None) is None:
            raise HTTPException(404, "Contact not found")
        live.save()
    return {"ok": True}


@router.post("/contacts/{contact_id}/messages")
async def chat_with_contact(
    contact_id: str,
    body: ChatBody,
    state: AppState = Depends(get_state),
    live: LiveState = Depends(get_live),
):
    """Send a message to a bot. Returns the user entry and the reply (or error entry)."""
    contact = _bot_contact(state, contact_id)
    new_messages = await send_message(
        settings=state.settings,
        contact=contact,
        history=list(contact.chats),
        new_message=ChatMessageContent(name=state.settings.user_name, message=body.message),
        prompt_context=contact.context_template,
    )
    async with live.lock:
        # The contact may have been removed while the provider was answering.
        _bot_contact(live.state, contact_id)
        append_messages(live.state, contact_id, new_messages)
        live.save()
    return new_messages
