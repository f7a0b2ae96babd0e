"""Tests for LocalStorage."""

from pathlib import Path

import pytest

from edu_master.state.storage import LocalStorage


class TestLocalStorage:
    def test_missing_key_returns_none(self, storage: LocalStorage) -> None:
        assert storage.get_item("nothing") is None

    def test_set_then_get(self, storage: LocalStorage) -> None:
        storage.set_item("program_state", '{"topic": "파이썬"}')
        assert storage.get_item("program_state") == '{"topic": "파이썬"}'

    def test_creates_base_dir(self, tmp_path: Path) -> None:
        storage = LocalStorage(tmp_path / "nested" / "dir")
        storage.set_item("k", "v")
        assert (tmp_path / "nested" / "dir" / "k.json").read_text(encoding="utf-8") == "v"

    def test_overwrite_leaves_no_temp_file(self, storage: LocalStorage) -> None:
        storage.set_item("k", "first")
        storage.set_item("k", "second")
        assert storage.get_item("k") == "second"
        assert sorted(p.name for p in storage.base_dir.iterdir()) == ["k.json"]

    def test_remove(self, storage: LocalStorage) -> None:
        storage.set_item("k", "v")
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_is_noop(self, storage: LocalStorage) -> None:
        storage.remove_item("never_written")

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "sp ace"])
    def test_invalid_key(self, storage: LocalStorage, key: str) -> None:
        with pytest.raises(ValueError, match="Invalid storage key"):
            storage.get_item(key)

    def test_undecodable_file_returns_none(self, storage: LocalStorage) -> None:
        storage.base_dir.mkdir(parents=True)
        (storage.base_dir / "k.json").write_bytes(b"\xff\xfe\xfa")
        assert storage.get_item("k") is None
