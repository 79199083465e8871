"""State migrations — upgrade persisted snapshots one schema version at a time.

MIGRATIONS[i] is a pure function taking a copy of the version-i snapshot and
returning the version-(i+1) snapshot. apply_migration() owns all persistence:
it loads the snapshot stored under key i, writes the result under key i+1,
and only then advances the current-version marker. A step therefore needs
nothing but what storage holds for its own version, and re-running a step
after a failure starts from the same committed snapshot.

Step 0 exists only to keep the list 1-indexed; there is no format older
than version 1 and it always fails.
"""

from __future__ import annotations

import copy
import errno
import logging
from collections.abc import Callable
from typing import Any

from character_chat.storage import Storage
from character_chat.templates import (
    DEFAULT_CHAT_GROUP_CONTEXT,
    DEFAULT_SINGLE_BOT_CONTEXT,
    DEFAULT_SYSTEM_ENTRY,
)

logger = logging.getLogger(__name__)

Snapshot = dict[str, Any]

_NO_SPACE_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class MigrationError(RuntimeError):
    """Raised when migrating from `version` to `version + 1` fails."""

    def __init__(self, version: int, cause: BaseException | str) -> None:
        self.version = version
        self.cause = cause
        super().__init__(f"Migration failed for version {version}: {cause}")


def _migrate_from_0(state: Snapshot) -> Snapshot:
    raise MigrationError(0, "Migration from version 0 does not exist")


def _migrate_1_to_2(state: Snapshot) -> Snapshot:
    return state


def _migrate_2_to_3(state: Snapshot) -> Snapshot:
    for contact in state["contacts"].values():
        contact["contact_system_entry_template"] = DEFAULT_SYSTEM_ENTRY
        contact.pop("contact_system_entry", None)
    return state


def _migrate_3_to_4(state: Snapshot) -> Snapshot:
    for contact in state["contacts"].values():
        contact["type"] = "bot"
    return state


def _migrate_4_to_5(state: Snapshot) -> Snapshot:
    state["group_chats_participants"] = {}
    return state


def _migrate_5_to_6(state: Snapshot) -> Snapshot:
    settings = state["settings"]
    settings["single_bot_system_entry_context"] = DEFAULT_SINGLE_BOT_CONTEXT
    settings["chat_group_system_entry_context"] = DEFAULT_CHAT_GROUP_CONTEXT
    for contact in state["contacts"].values():
        contact["status"] = contact.pop("last_message", "")
        contact["context_template"] = settings["single_bot_system_entry_context"]
    return state


MIGRATIONS: list[Callable[[Snapshot], Snapshot]] = [
    _migrate_from_0,
    _migrate_1_to_2,
    _migrate_2_to_3,
    _migrate_3_to_4,
    _migrate_4_to_5,
    _migrate_5_to_6,
]

CURRENT_VERSION = len(MIGRATIONS)


def apply_migration(storage: Storage, version: int) -> Snapshot:
    """Run step `version`, persist the version+1 snapshot and advance the marker."""
    step = MIGRATIONS[version]
    stored = storage.get_snapshot(str(version))
    if stored is None:
        raise MigrationError(version, f"No state stored for version {version}")

    migrated = step(copy.deepcopy(stored))
    migrated["version"] = str(version + 1)
    storage.set_snapshot(str(version + 1), migrated)
    storage.set_current_version(str(version + 1))
    return migrated


def run_migrations(
    storage: Storage,
    from_version: int,
    to_version: int = CURRENT_VERSION,
) -> list[int]:
    """Apply every step from from_version up to to_version, in order.

    Fail-stop: the first failing step raises MigrationError and no later step
    runs. Steps already committed stay committed. Returns the versions migrated from.
    """
    applied: list[int] = []
    for version in range(from_version, to_version):
        logger.info("Applying migration %d -> %d", version, version + 1)
        try:
            apply_migration(storage, version)
        except MigrationError:
            raise
        except Exception as e:
            raise MigrationError(version, e) from e
        applied.append(version)
    return applied


def looks_like_quota_error(exc: BaseException) -> bool:
    """True when an exception smells like the storage running out of space."""
    if "quota" in type(exc).__name__.lower():
        return True
    return isinstance(exc, OSError) and exc.errno in _NO_SPACE_ERRNOS
