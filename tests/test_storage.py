"""Tests for character_chat.storage."""

from character_chat.storage import CURRENT_VERSION_KEY, Storage


def test_creates_directories(tmp_path):
    Storage(tmp_path / "data")
    assert (tmp_path / "data" / "state").is_dir()
    assert (tmp_path / "data" / "avatars").is_dir()


def test_missing_snapshot_is_none(storage):
    assert storage.get_snapshot("3") is None


def test_snapshot_roundtrip(storage):
    snapshot = {"version": "3", "contacts": {"1bot": {"id": "1bot"}}}
    storage.set_snapshot("3", snapshot)
    assert storage.get_snapshot("3") == snapshot


def test_snapshot_overwrite(storage):
    storage.set_snapshot("3", {"version": "3", "a": 1})
    storage.set_snapshot("3", {"version": "3", "a": 2})
    assert storage.get_snapshot("3")["a"] == 2


def test_snapshot_write_leaves_no_temp_file(storage):
    storage.set_snapshot("3", {"version": "3"})
    files = [p.name for p in (storage.base_path / "state").iterdir()]
    assert files == ["3.json"]


def test_marker_absent_until_set(storage):
    assert storage.get_current_version() is None
    storage.set_current_version("4")
    assert storage.get_current_version() == "4"


def test_avatars(storage):
    assert storage.get_avatar("9avatar") is None
    storage.add_avatar("9avatar", "aGVsbG8=")
    assert storage.get_avatar("9avatar") == "aGVsbG8="


def test_empty_avatar_placeholder(storage):
    storage.add_avatar("9avatar", "")
    assert storage.get_avatar("9avatar") == ""


def test_keys_lists_everything(storage):
    storage.set_snapshot("2", {})
    storage.set_snapshot("3", {})
    storage.set_current_version("3")
    storage.add_avatar("9avatar", "x")
    assert storage.keys() == ["2", "3", CURRENT_VERSION_KEY, "avatar:9avatar"]


def test_clear(storage):
    storage.set_snapshot("3", {})
    storage.set_current_version("3")
    storage.add_avatar("9avatar", "x")
    storage.clear()
    assert storage.keys() == []
    assert storage.get_current_version() is None
    # Still usable after clearing
    storage.set_snapshot("6", {"version": "6"})
    assert storage.get_snapshot("6") == {"version": "6"}
