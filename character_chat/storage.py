"""JSON file storage for versioned state snapshots.

All state lives in flat files under a configurable base directory. There is
no database — reads and writes go through plain helper methods.

Directory layout:

    {base}/
      current-version          ← scalar marker: schema version of the live state
      state/
        {version}.json         ← one full AppState snapshot per schema version
      avatars/
        {avatar_id}.b64        ← base64-encoded avatar image

Snapshot and marker writes go to a temp file first and are moved into place
with os.replace, so a reader never sees a half-written key.
"""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path
from typing import Any

CURRENT_VERSION_KEY = "currentVersion"


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._state_root = base_path / "state"
        self._avatar_root = base_path / "avatars"
        self._state_root.mkdir(parents=True, exist_ok=True)
        self._avatar_root.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _snapshot_file(self, version: str) -> Path:
        return self._state_root / f"{version}.json"

    def _marker_file(self) -> Path:
        return self._base / "current-version"

    def _avatar_file(self, avatar_id: str) -> Path:
        return self._avatar_root / f"{avatar_id}.b64"

    def _write_atomic(self, path: Path, text: str) -> None:
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(text)
        os.replace(tmp, path)

    # ------------------------------------------------------------------
    # Snapshots, keyed by schema version
    # ------------------------------------------------------------------

    def get_snapshot(self, version: str) -> dict[str, Any] | None:
        path = self._snapshot_file(version)
        if not path.is_file():
            return None
        return json.loads(path.read_text())

    def set_snapshot(self, version: str, snapshot: dict[str, Any]) -> None:
        self._write_atomic(self._snapshot_file(version), json.dumps(snapshot, indent=2))

    # ------------------------------------------------------------------
    # Current-version marker
    # ------------------------------------------------------------------

    def get_current_version(self) -> str | None:
        """Return the marker, or None if the state was never initialised."""
        path = self._marker_file()
        if not path.is_file():
            return None
        return path.read_text().strip()

    def set_current_version(self, version: str) -> None:
        self._write_atomic(self._marker_file(), version)

    # ------------------------------------------------------------------
    # Avatars
    # ------------------------------------------------------------------

    def add_avatar(self, avatar_id: str, b64_image: str) -> None:
        self._avatar_file(avatar_id).write_text(b64_image)

    def get_avatar(self, avatar_id: str) -> str | None:
        path = self._avatar_file(avatar_id)
        if not path.is_file():
            return None
        return path.read_text()

    # ------------------------------------------------------------------
    # Diagnostics and recovery
    # ------------------------------------------------------------------

    def keys(self) -> list[str]:
        """All persisted keys: snapshot versions, the marker, and avatar ids."""
        found = sorted(p.stem for p in self._state_root.glob("*.json"))
        if self._marker_file().is_file():
            found.append(CURRENT_VERSION_KEY)
        found.extend(sorted(f"avatar:{p.stem}" for p in self._avatar_root.glob("*.b64")))
        return found

    def clear(self) -> None:
        """Delete every snapshot, the marker and all avatars."""
        shutil.rmtree(self._state_root, ignore_errors=True)
        shutil.rmtree(self._avatar_root, ignore_errors=True)
        self._marker_file().unlink(missing_ok=True)
        self._state_root.mkdir(parents=True, exist_ok=True)
        self._avatar_root.mkdir(parents=True, exist_ok=True)
