import pytest

from character_chat.storage import Storage


@pytest.fixture
def storage(tmp_path) -> Storage:
    """A fresh, empty Storage rooted in the test's tmp dir."""
    return Storage(tmp_path / "data")
