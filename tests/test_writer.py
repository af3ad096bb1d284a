"""Tests for the debounced patch writer."""

import pathlib as _pathlib

import pytest as _pytest
import yaml as _yaml

import rimecfg.domains as domains
import rimecfg.storage as storage
import rimecfg.writer as writer

DEFAULT = domains.ConfigDomain.DEFAULT


def _read_patch(rime_dir: _pathlib.Path) -> dict:
    content = (rime_dir / "default.custom.yaml").read_text(encoding="utf-8")
    return _yaml.safe_load(content)["patch"]


@_pytest.fixture
def statuses() -> list[storage.WriteStatus]:
    return []


@_pytest.fixture
def patch_writer(
    tmp_path: _pathlib.Path,
    statuses: list[storage.WriteStatus],
) -> writer.PatchWriter:
    return writer.PatchWriter(tmp_path, debounce_seconds=0.05, on_status=statuses.append)


class TestDebounce:
    """Tests for coalescing repeated edits."""

    @_pytest.mark.slow
    def test_burst_writes_once_with_last_value(
        self,
        tmp_path: _pathlib.Path,
        patch_writer: writer.PatchWriter,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """Five quick schedules for one path should produce one write."""
        for size in range(5, 10):
            patch_writer.schedule(DEFAULT, "menu/page_size", size)

        assert patch_writer.wait(timeout=5)
        assert len(statuses) == 1
        assert statuses[0].ok
        assert _read_patch(tmp_path) == {"menu/page_size": 9}

    @_pytest.mark.slow
    def test_paths_debounced_independently(
        self,
        tmp_path: _pathlib.Path,
        patch_writer: writer.PatchWriter,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """Edits to different paths should each be written."""
        patch_writer.schedule(DEFAULT, "menu/page_size", 7)
        patch_writer.schedule(DEFAULT, "style/font_point", 18)

        assert patch_writer.wait(timeout=5)
        assert len(statuses) == 2
        assert _read_patch(tmp_path) == {"menu/page_size": 7, "style/font_point": 18}

    def test_nothing_written_before_window(
        self,
        tmp_path: _pathlib.Path,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """A scheduled write should stay pending until the window passes."""
        slow_writer = writer.PatchWriter(tmp_path, debounce_seconds=60, on_status=statuses.append)
        slow_writer.schedule(DEFAULT, "menu/page_size", 7)

        assert slow_writer.pending() == [(DEFAULT, "menu/page_size")]
        assert not (tmp_path / "default.custom.yaml").exists()
        assert not slow_writer.wait(timeout=0.01)
        slow_writer.cancel_domain(DEFAULT)

    def test_flush_writes_pending_now(
        self,
        tmp_path: _pathlib.Path,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """flush should write every pending value immediately."""
        slow_writer = writer.PatchWriter(tmp_path, debounce_seconds=60, on_status=statuses.append)
        slow_writer.schedule(DEFAULT, "menu/page_size", 7)
        slow_writer.schedule(DEFAULT, "menu/page_size", 8)

        flushed = slow_writer.flush()

        assert [status.ok for status in flushed] == [True]
        assert slow_writer.pending() == []
        assert _read_patch(tmp_path) == {"menu/page_size": 8}

    def test_cancel_drops_pending(self, tmp_path: _pathlib.Path) -> None:
        """A cancelled write should never happen."""
        slow_writer = writer.PatchWriter(tmp_path, debounce_seconds=60)
        slow_writer.schedule(DEFAULT, "menu/page_size", 7)

        assert slow_writer.cancel(DEFAULT, "menu/page_size")
        assert not slow_writer.cancel(DEFAULT, "menu/page_size")
        assert slow_writer.flush() == []
        assert not (tmp_path / "default.custom.yaml").exists()

    def test_close_makes_later_writes_immediate(
        self,
        tmp_path: _pathlib.Path,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """After close, schedule should write synchronously."""
        slow_writer = writer.PatchWriter(tmp_path, debounce_seconds=60, on_status=statuses.append)
        slow_writer.close()
        slow_writer.schedule(DEFAULT, "menu/page_size", 7)

        assert len(statuses) == 1
        assert _read_patch(tmp_path) == {"menu/page_size": 7}


class TestWriteEntry:
    """Tests for single-key patch writes."""

    def test_keeps_other_entries(self, tmp_path: _pathlib.Path) -> None:
        """Existing entries and top-level keys should be preserved."""
        (tmp_path / "default.custom.yaml").write_text(
            "customization:\n  generator: manual\npatch:\n  style/font_face: Avenir\n",
            encoding="utf-8",
        )
        status = writer.PatchWriter(tmp_path).write_entry(DEFAULT, "menu/page_size", 7)

        assert status.ok
        root = _yaml.safe_load((tmp_path / "default.custom.yaml").read_text(encoding="utf-8"))
        assert root["customization"] == {"generator": "manual"}
        assert root["patch"] == {"style/font_face": "Avenir", "menu/page_size": 7}

    def test_nested_patch_rewritten_flat(self, tmp_path: _pathlib.Path) -> None:
        """A nested patch on disk should be re-emitted with flat keys."""
        (tmp_path / "default.custom.yaml").write_text(
            "patch:\n  style:\n    font_face: Avenir\n",
            encoding="utf-8",
        )
        writer.PatchWriter(tmp_path).write_entry(DEFAULT, "style/font_point", 18)

        assert _read_patch(tmp_path) == {"style/font_face": "Avenir", "style/font_point": 18}

    def test_failure_reported(
        self,
        tmp_path: _pathlib.Path,
        statuses: list[storage.WriteStatus],
    ) -> None:
        """A write that cannot happen should be reported, not raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        failing = writer.PatchWriter(blocker, on_status=statuses.append)

        status = failing.write_entry(DEFAULT, "menu/page_size", 7)

        assert not status.ok
        assert statuses == [status]


class TestWritePatch:
    """Tests for whole-patch writes."""

    def test_replaces_patch_map(self, tmp_path: _pathlib.Path) -> None:
        """The patch map should be replaced, not merged."""
        patch_writer = writer.PatchWriter(tmp_path)
        patch_writer.write_entry(DEFAULT, "menu/page_size", 7)
        patch_writer.write_patch(DEFAULT, {"style/font_point": 18})

        assert _read_patch(tmp_path) == {"style/font_point": 18}

    def test_empty_patch(self, tmp_path: _pathlib.Path) -> None:
        """An empty patch map should be written as an empty map."""
        writer.PatchWriter(tmp_path).write_patch(DEFAULT, {})
        assert _read_patch(tmp_path) == {}
