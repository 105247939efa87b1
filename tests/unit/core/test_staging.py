"""Unit tests for StagingArea."""

import hashlib
import json
import os
from pathlib import Path

import pytest

from gitlite.core.ignore import IgnoreRules
from gitlite.core.staging import StagingArea, StagingError
from gitlite.storage import ObjectStore, StagedEntry


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


@pytest.fixture
def object_store(workspace: Path) -> ObjectStore:
    """Create ObjectStore instance."""
    return ObjectStore(workspace / ".gitLite")


@pytest.fixture
def staging(workspace: Path, object_store: ObjectStore) -> StagingArea:
    """Create StagingArea instance."""
    return StagingArea(workspace, object_store)


class TestStagingAreaInit:
    """Test StagingArea initialization."""

    def test_init_valid_workspace(self, workspace: Path, object_store: ObjectStore) -> None:
        staging = StagingArea(workspace, object_store)

        assert staging.workspace_root == workspace
        assert staging.index_path == workspace / ".gitLite" / "index"

    def test_init_no_gitlite(self, tmp_path: Path, object_store: ObjectStore) -> None:
        with pytest.raises(StagingError, match="Not a GitLite repository"):
            StagingArea(tmp_path, object_store)


class TestLoad:
    """Test reading persisted state."""

    def test_load_fresh_index(self, staging: StagingArea) -> None:
        assert staging.load() == []

    def test_load_missing_index(self, staging: StagingArea) -> None:
        staging.index_path.unlink()
        assert staging.load() == []

    def test_load_corrupt_index(self, staging: StagingArea, capsys) -> None:
        """Test that a corrupt index is reported and treated as empty."""
        staging.index_path.write_text("{not json", encoding="utf-8")

        assert staging.load() == []
        assert "Corrupted index" in capsys.readouterr().err

    def test_load_wrong_shape(self, staging: StagingArea, capsys) -> None:
        staging.index_path.write_text(json.dumps({"entries": {}}), encoding="utf-8")

        assert staging.load() == []
        assert "Corrupted index" in capsys.readouterr().err

    def test_load_existing_entries(self, staging: StagingArea) -> None:
        data = [{"path": "a.txt", "hash": "a" * 40}, {"path": "b.txt", "hash": "b" * 40}]
        staging.index_path.write_text(json.dumps(data), encoding="utf-8")

        assert staging.load() == [StagedEntry("a.txt", "a" * 40), StagedEntry("b.txt", "b" * 40)]


class TestStage:
    """Test staging raw content."""

    def test_stage_new_content(self, staging: StagingArea, object_store: ObjectStore) -> None:
        digest, staged = staging.stage("a.txt", b"hello")

        assert staged
        assert digest == sha1(b"hello")
        assert object_store.get(digest) == b"hello"
        assert staging.entries == [StagedEntry("a.txt", digest)]

    def test_stage_duplicate_content_other_path(self, staging: StagingArea) -> None:
        """Test that identical bytes under a second path are skipped."""
        staging.stage("a.txt", b"same")
        digest, staged = staging.stage("b.txt", b"same")

        assert not staged
        assert digest == sha1(b"same")
        assert [e.path for e in staging.entries] == ["a.txt"]

    def test_stage_same_path_twice(self, staging: StagingArea) -> None:
        """Test that a path staged twice with different content yields two entries."""
        staging.stage("a.txt", b"v1")
        staging.stage("a.txt", b"v2")

        assert staging.entries == [
            StagedEntry("a.txt", sha1(b"v1")),
            StagedEntry("a.txt", sha1(b"v2")),
        ]

    def test_stage_does_not_persist_until_save(self, staging: StagingArea) -> None:
        staging.stage("a.txt", b"hello")
        assert json.loads(staging.index_path.read_text()) == []

        staging.save()
        assert json.loads(staging.index_path.read_text()) == [
            {"path": "a.txt", "hash": sha1(b"hello")}
        ]


class TestSaveAndClear:
    """Test persistence."""

    def test_save_overwrites(self, staging: StagingArea) -> None:
        staging.save([StagedEntry("a", "a" * 40)])
        staging.save([StagedEntry("b", "b" * 40)])

        assert staging.load() == [StagedEntry("b", "b" * 40)]

    def test_clear(self, staging: StagingArea) -> None:
        staging.stage("a.txt", b"content")
        staging.save()
        assert staging.load() != []

        staging.clear()

        assert staging.load() == []
        assert json.loads(staging.index_path.read_text()) == []

    def test_index_persists_across_instances(
        self, workspace: Path, object_store: ObjectStore
    ) -> None:
        first = StagingArea(workspace, object_store)
        first.stage("a.txt", b"persisted")
        first.save()

        second = StagingArea(workspace, object_store)

        assert second.load() == [StagedEntry("a.txt", sha1(b"persisted"))]

    def test_index_is_pretty_printed_list(self, staging: StagingArea) -> None:
        staging.save([StagedEntry("a", "a" * 40)])

        text = staging.index_path.read_text()
        assert text.startswith("[\n  {")


class TestAdd:
    """Test adding workspace files."""

    def test_add_single_file(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "a.txt").write_text("hello")

        stats = staging.add(["a.txt"])

        assert stats["added"] == [("a.txt", sha1(b"hello"))]
        assert staging.load() == [StagedEntry("a.txt", sha1(b"hello"))]

    def test_add_missing_file(self, staging: StagingArea) -> None:
        stats = staging.add(["does_not_exist.txt"])

        assert stats["missing"] == ["does_not_exist.txt"]
        assert stats["added"] == []

    def test_add_continues_after_missing(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "b.txt").write_text("b")

        stats = staging.add(["missing.txt", "b.txt"])

        assert stats["missing"] == ["missing.txt"]
        assert [p for p, _ in stats["added"]] == ["b.txt"]

    def test_add_ignored_file(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "keep.txt").write_text("keep")
        (workspace / "debug.log").write_text("log")

        stats = staging.add(["keep.txt", "debug.log"], IgnoreRules([r"\.log$"]))

        assert stats["ignored"] == ["debug.log"]
        assert [p for p, _ in stats["added"]] == ["keep.txt"]

    def test_add_duplicate_content(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "a.txt").write_text("same")
        (workspace / "b.txt").write_text("same")

        stats = staging.add(["a.txt", "b.txt"])

        assert [p for p, _ in stats["added"]] == ["a.txt"]
        assert [p for p, _ in stats["duplicates"]] == ["b.txt"]
        assert [e.path for e in staging.load()] == ["a.txt"]

    def test_add_dot_stages_everything(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "a.txt").write_text("a")
        (workspace / "sub").mkdir()
        (workspace / "sub" / "b.txt").write_text("b")

        stats = staging.add(["."])

        added = [p for p, _ in stats["added"]]
        assert added == ["a.txt", os.path.join("sub", "b.txt")]

    def test_add_dot_skips_repository_dir(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "a.txt").write_text("a")

        stats = staging.add(["."])

        assert all(not p.startswith(".gitLite") for p, _ in stats["added"])

    def test_add_dot_respects_ignore_rules(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "src").mkdir()
        (workspace / "src" / "main.py").write_text("print()")
        (workspace / "build").mkdir()
        (workspace / "build" / "out.bin").write_text("bin")

        stats = staging.add(["."], IgnoreRules(["^build/"]))

        assert [p for p, _ in stats["added"]] == [os.path.join("src", "main.py")]
        assert stats["ignored"] == [os.path.join("build", "out.bin")]

    def test_add_directory(self, staging: StagingArea, workspace: Path) -> None:
        (workspace / "sub").mkdir()
        (workspace / "sub" / "one.txt").write_text("1")
        (workspace / "sub" / "two.txt").write_text("2")
        (workspace / "other.txt").write_text("other")

        stats = staging.add(["sub"])

        assert [p for p, _ in stats["added"]] == [
            os.path.join("sub", "one.txt"),
            os.path.join("sub", "two.txt"),
        ]

    def test_add_repository_path_is_skipped(self, staging: StagingArea) -> None:
        stats = staging.add([".gitLite/index"])

        assert stats == {"added": [], "duplicates": [], "ignored": [], "missing": []}

    def test_add_outside_workspace(
        self, staging: StagingArea, workspace: Path, tmp_path: Path
    ) -> None:
        (tmp_path / "outside.txt").write_text("outside")

        stats = staging.add(["../outside.txt"])

        assert stats["missing"] == ["../outside.txt"]
        assert stats["added"] == []

    def test_add_appends_to_existing_index(
        self, staging: StagingArea, workspace: Path
    ) -> None:
        (workspace / "a.txt").write_text("a")
        staging.add(["a.txt"])
        (workspace / "b.txt").write_text("b")

        staging.add(["b.txt"])

        assert [e.path for e in staging.load()] == ["a.txt", "b.txt"]
