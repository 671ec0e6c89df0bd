"""Tests for Tidier."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from cargobin.config import AppConfig
from cargobin.manifest.section import BinSection
from cargobin.manifest.store import ManifestStore
from cargobin.manifest.tidy import Tidier, TidyStats
from cargobin.models import BinRecord


def _touch(path: Path, content: str = "fn main() {}\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def section() -> BinSection:
    return BinSection(tomlkit.document())


class TestTidyStats:
    """Test TidyStats tracking."""

    def test_init_defaults(self) -> None:
        stats = TidyStats()

        assert stats.removed == []
        assert stats.added == []
        assert stats.unchanged == 0
        assert not stats.changed

    def test_changed(self) -> None:
        assert TidyStats(added=[BinRecord("a", "src/a.rs")]).changed
        assert TidyStats(removed=[BinRecord("a", "src/a.rs")]).changed
        assert not TidyStats(unchanged=3).changed


class TestPrune:
    """Test the prune pass."""

    def test_removes_records_with_missing_files(self, tmp_path: Path, section: BinSection) -> None:
        _touch(tmp_path / "src" / "kept.rs")
        section.add("kept", "src/kept.rs")
        section.add("gone", "src/gone.rs")

        removed = Tidier(section, tmp_path, finder=lambda root: []).prune()

        assert removed == [BinRecord("gone", "src/gone.rs")]
        assert section.records() == [BinRecord("kept", "src/kept.rs")]

    def test_directory_is_not_a_file(self, tmp_path: Path, section: BinSection) -> None:
        (tmp_path / "src" / "dir.rs").mkdir(parents=True)
        section.add("dir", "src/dir.rs")

        removed = Tidier(section, tmp_path, finder=lambda root: []).prune()

        assert removed == [BinRecord("dir", "src/dir.rs")]

    def test_keeps_live_record_sharing_a_name(self, tmp_path: Path) -> None:
        """Only the stale duplicate goes when two records share a name."""
        _touch(tmp_path / "src" / "ok.rs")
        store = ManifestStore.from_string(
            '[[bin]]\nname = "x"\npath = "src/ok.rs"\n\n'
            '[[bin]]\nname = "x"\npath = "src/gone.rs"\n'
        )

        removed = Tidier(store.bins, tmp_path, finder=lambda root: []).prune()

        assert removed == [BinRecord("x", "src/gone.rs")]
        assert store.bins.records() == [BinRecord("x", "src/ok.rs")]

    def test_empty_path_record_is_left_alone(self, tmp_path: Path) -> None:
        """A record with an empty path is skipped, not mistaken for a stale one."""
        _touch(tmp_path / "src" / "foo.rs")
        store = ManifestStore.from_string(
            '[[bin]]\nname = "foo"\npath = "src/foo.rs"\n\n'
            '[[bin]]\nname = "foo"\npath = ""\n'
        )

        stats = Tidier(store.bins, tmp_path, finder=lambda root: []).tidy()

        assert stats.removed == []
        assert store.bins.records() == [BinRecord("foo", "src/foo.rs")]
        assert len(store.bins) == 2


class TestDiscover:
    """Test the discover pass."""

    def test_adds_untracked_files(self, tmp_path: Path, section: BinSection) -> None:
        files = [tmp_path / "src" / "a" / "b.rs", tmp_path / "tool.rs"]

        added, unchanged = Tidier(section, tmp_path, finder=lambda root: files).discover()

        assert added == [BinRecord("a-b", "src/a/b.rs"), BinRecord("tool", "tool.rs")]
        assert unchanged == 0
        assert section.records() == added

    def test_does_not_overwrite_tracked_records(self, tmp_path: Path, section: BinSection) -> None:
        """A file already tracked under another name is left alone."""
        section.add("custom-name", "src/tool.rs")
        files = [tmp_path / "src" / "tool.rs"]

        added, unchanged = Tidier(section, tmp_path, finder=lambda root: files).discover()

        assert added == []
        assert unchanged == 1
        assert section.records() == [BinRecord("custom-name", "src/tool.rs")]

    def test_uses_config_for_names(self, tmp_path: Path, section: BinSection) -> None:
        config = AppConfig(default_dir="bins", name_delimiter="_")
        files = [tmp_path / "bins" / "x" / "y.rs"]

        added, _ = Tidier(section, tmp_path, config=config, finder=lambda root: files).discover()

        assert added == [BinRecord("x_y", "bins/x/y.rs")]

    def test_finder_receives_root(self, tmp_path: Path, section: BinSection) -> None:
        seen: list[Path] = []

        def finder(root: Path) -> list[Path]:
            seen.append(root)
            return []

        Tidier(section, tmp_path, finder=finder).discover()

        assert seen == [tmp_path]


class TestTidy:
    """End-to-end tidy against a project on disk."""

    def test_stale_removed_and_untracked_added(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            '[package]\nname = "demo"\n\n[[bin]]\nname = "x"\npath = "src/x.rs"\n',
            encoding="utf-8",
        )
        _touch(tmp_path / "src" / "y.rs")

        store = ManifestStore.load(manifest)
        stats = Tidier(store.bins, tmp_path).tidy()

        assert stats.removed == [BinRecord("x", "src/x.rs")]
        assert stats.added == [BinRecord("y", "src/y.rs")]
        assert store.bins.records() == [BinRecord("y", "src/y.rs")]

    def test_skips_ignored_dirs_and_libraries(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text('[package]\nname = "demo"\n', encoding="utf-8")
        _touch(tmp_path / "src" / "bin" / "auto.rs")
        _touch(tmp_path / "target" / "debug" / "build" / "out.rs")
        _touch(tmp_path / "src" / "lib.rs", "pub fn helper() {}\n")
        _touch(tmp_path / "src" / "cli" / "run.rs")

        store = ManifestStore.load(manifest)
        stats = Tidier(store.bins, tmp_path).tidy()

        assert stats.added == [BinRecord("cli-run", "src/cli/run.rs")]
        assert stats.removed == []

    def test_second_run_is_a_no_op(self, tmp_path: Path) -> None:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text('[package]\nname = "demo"\n', encoding="utf-8")
        _touch(tmp_path / "src" / "main.rs")

        store = ManifestStore.load(manifest)
        first = Tidier(store.bins, tmp_path).tidy()
        second = Tidier(store.bins, tmp_path).tidy()

        assert first.added == [BinRecord("main", "src/main.rs")]
        assert not second.changed
        assert second.unchanged == 1
