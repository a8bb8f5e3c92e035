"""Tests for frame artifact naming and atomic persistence."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from quake_timelapse.store.frame_store import FrameStore, RenderFailure


class TestNaming:
    def test_six_digit_zero_padded_names(self, tmp_path: Path) -> None:
        store = FrameStore(tmp_path / "frames")
        assert store.path_for(0) == tmp_path / "frames" / "frame-000000.png"
        assert store.name_for(123456) == "frame-123456.png"

    def test_extension_is_configurable(self, tmp_path: Path) -> None:
        assert FrameStore(tmp_path, ".jpg").name_for(7) == "frame-000007.jpg"

    def test_input_pattern_for_encoder(self, tmp_path: Path) -> None:
        assert FrameStore(tmp_path).input_pattern == str(tmp_path / "frame-%06d.png")


class TestPersistence:
    def test_write_creates_directory_and_file(self, tmp_path: Path) -> None:
        store = FrameStore(tmp_path / "frames")
        path = store.write(3, b"\x89PNG")
        assert path.read_bytes() == b"\x89PNG"
        assert store.exists(3)
        assert not store.exists(4)

    def test_no_temporary_files_left_behind(self, tmp_path: Path) -> None:
        store = FrameStore(tmp_path)
        store.write(0, b"a")
        store.write(1, b"b")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["frame-000000.png", "frame-000001.png"]

    def test_failed_write_leaves_no_artifact(self, tmp_path: Path) -> None:
        store = FrameStore(tmp_path)
        with patch("quake_timelapse.store.frame_store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(RenderFailure) as info:
                store.write(5, b"partial")
        assert info.value.frame_index == 5
        assert not store.exists(5)
        assert list(tmp_path.iterdir()) == []

    def test_existing_indices_ignores_foreign_files(self, tmp_path: Path) -> None:
        store = FrameStore(tmp_path)
        store.write(2, b"x")
        store.write(0, b"x")
        (tmp_path / "frame-12.png").write_bytes(b"x")
        (tmp_path / "notes.txt").write_text("hi")
        assert store.existing_indices() == [0, 2]

    def test_existing_indices_of_missing_directory(self, tmp_path: Path) -> None:
        assert FrameStore(tmp_path / "nope").existing_indices() == []
