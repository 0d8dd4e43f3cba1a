"""
Tests for the artifact store working area.
"""

import os
import time

import pytest

from convertcore.artifacts import ArtifactStore


class TestLayout:

    def test_creates_working_dirs(self, tmp_path):
        store = ArtifactStore(tmp_path / "area")
        assert store.uploads_dir.is_dir()
        assert store.temp_dir.is_dir()
        assert store.converted_dir.is_dir()

    def test_allocate_path_is_unique(self, store):
        first = store.allocate_path("JPG")
        second = store.allocate_path("jpg")
        assert first != second
        assert first.suffix == ".jpg"
        assert first.parent == store.converted_dir
        assert store.allocate_path("bin", temporary=True).parent == store.temp_dir
        assert not first.exists()


class TestRegister:

    def test_register_measures_file(self, store):
        path = store.uploads_dir / "a.png"
        path.write_bytes(b"12345")
        artifact = store.register(path, "png")
        assert artifact.size_bytes == 5
        assert artifact.mime_type == "image/png"
        assert store.get(artifact.id) == artifact

    def test_register_missing_file(self, store):
        with pytest.raises(FileNotFoundError):
            store.register(store.uploads_dir / "nope.png", "png")

    def test_adopt_moves_into_temp(self, store, tmp_path):
        produced = tmp_path / "tool-output.bin"
        produced.write_bytes(b"raw")
        artifact = store.adopt(produced, "bin", temporary=True)
        assert not produced.exists()
        assert artifact.exists()
        assert artifact.temporary
        assert artifact.path.startswith(str(store.temp_dir))

    def test_adopt_missing_file(self, store, tmp_path):
        with pytest.raises(FileNotFoundError):
            store.adopt(tmp_path / "nothing.bin", "bin")

    def test_copy(self, make_source, store):
        source = make_source("a.csv", b"a,b")
        copied = store.copy(source)
        assert copied.id != source.id
        assert copied.path.startswith(str(store.converted_dir))
        assert open(copied.path, "rb").read() == b"a,b"


class TestRelease:

    def test_release_is_idempotent(self, make_source, store):
        artifact = make_source("a.png")
        assert store.release(artifact) is True
        assert store.release(artifact) is False
        assert store.get(artifact.id) is None

    def test_purge_expired(self, make_source, store):
        old = make_source("old.png")
        fresh = make_source("fresh.png")
        stamp = time.time() - 7200
        os.utime(old.path, (stamp, stamp))

        assert store.purge_expired(3600) == 1
        assert not old.exists()
        assert fresh.exists()
        assert store.get(old.id) is None
        assert store.count() == 1
