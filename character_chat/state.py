"""App state lifecycle: first run, reload through migrations, recovery, settings.

reload_state() is the startup path:
  1. No current-version marker → never initialised; store and return a fresh state.
  2. Marker newer than CURRENT_VERSION → logged, no migration runs, and the
     snapshot at the stored version is loaded as-is (fresh state if missing).
  3. Otherwise run the migration chain up to CURRENT_VERSION. A failing step
     yields an error state (error_with_delete screen) and leaves the marker at
     the last committed version so the next reload retries from there.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from character_chat.migrations import (
    CURRENT_VERSION,
    MigrationError,
    looks_like_quota_error,
    run_migrations,
)
from character_chat.models import AppState, ChatMessage, Settings, VolatileState
from character_chat.storage import Storage

logger = logging.getLogger(__name__)

WELCOME_SCREEN = "welcome"
ERROR_SCREEN = "error_with_delete"


def initial_state() -> AppState:
    return AppState(
        version=str(CURRENT_VERSION),
        volatile_state=VolatileState(current_screen=WELCOME_SCREEN, screen_stack=["contacts"]),
    )


def error_state(message: str) -> AppState:
    """A fresh state whose only purpose is to show the recovery screen."""
    return AppState(
        version=str(CURRENT_VERSION),
        volatile_state=VolatileState(
            current_screen=ERROR_SCREEN,
            error_message=message,
            screen_stack=[ERROR_SCREEN],
        ),
    )


def is_error_state(state: AppState) -> bool:
    return state.volatile_state.current_screen == ERROR_SCREEN


def save_app_state(storage: Storage, state: AppState) -> None:
    storage.set_snapshot(state.version, state.model_dump(mode="json"))


def load_initial_state(storage: Storage) -> AppState:
    state = initial_state()
    save_app_state(storage, state)
    storage.set_current_version(state.version)
    return state


def _migration_error_message(storage: Storage, error: MigrationError, stored_version: int) -> str:
    try:
        stored = storage.get_snapshot(str(stored_version))
    except ValueError as e:
        stored_text = f"unreadable snapshot ({e})"
    else:
        stored_text = json.dumps(stored) if stored is not None else "nothing found"
    message = f"Migration failed for version {error.version} {error.cause} {stored_text}"
    if isinstance(error.cause, BaseException) and looks_like_quota_error(error.cause):
        message += " keys:" + ",".join(storage.keys())
    return message


def reload_state(storage: Storage) -> AppState:
    installed = storage.get_current_version()
    if installed is None:
        logger.info("No stored state found, starting fresh at version %d", CURRENT_VERSION)
        return load_initial_state(storage)

    try:
        stored_version = int(installed)
    except ValueError:
        logger.error("Stored state version %r is not a number", installed)
        return error_state(f"Unreadable state version {installed!r}")

    if stored_version > CURRENT_VERSION:
        logger.error(
            "Stored state version '%d' is higher than current version '%d'",
            stored_version, CURRENT_VERSION,
        )

    try:
        run_migrations(storage, stored_version)
    except MigrationError as e:
        logger.exception("Migration failed for version %d", e.version)
        return error_state(_migration_error_message(storage, e, stored_version))

    load_version = max(stored_version, CURRENT_VERSION)
    logger.info("Reloading state at version %d", load_version)
    try:
        snapshot = storage.get_snapshot(str(load_version))
    except ValueError as e:
        logger.exception("Stored state at version %d is unreadable", load_version)
        return error_state(f"Stored state at version {load_version} is unreadable: {e}")
    # The marker can exist without a snapshot behind it.
    if snapshot is None:
        return load_initial_state(storage)

    try:
        return AppState.model_validate(snapshot)
    except ValidationError as e:
        logger.exception("Stored state at version %d is invalid", load_version)
        return error_state(f"Stored state at version {load_version} is invalid: {e}")


def delete_state(storage: Storage) -> AppState:
    """Recovery: wipe everything persisted and start over."""
    logger.warning("Deleting all stored state in %s: %s", storage.base_path, storage.keys())
    storage.clear()
    return load_initial_state(storage)


def update_settings(state: AppState, fields: dict[str, Any]) -> AppState:
    """Merge fields into the settings. Unknown keys are ignored."""
    merged = {**state.settings.model_dump(), **fields}
    state.settings = Settings.model_validate(merged)
    return state


def append_messages(state: AppState, contact_id: str, messages: list[ChatMessage]) -> AppState:
    """Append entries to a contact's chat; its status becomes the last message."""
    contact = state.contacts[contact_id]
    contact.chats.extend(messages)
    if messages:
        contact.status = messages[-1].content.message
    return state
