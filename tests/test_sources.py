"""Tests for formexport.sources."""

from __future__ import annotations

from pathlib import Path

from formexport.sources import find_by_suffix, scan_sources, static_sources


def test_scan_sources_filters_patterns_and_excluded_dirs(tmp_path: Path) -> None:
    (tmp_path / "adapters" / "evm").mkdir(parents=True)
    (tmp_path / "adapters" / "evm" / "adapter.ts").write_text("export {}", encoding="utf-8")
    (tmp_path / "adapters" / "evm" / "README.md").write_text("# evm", encoding="utf-8")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.ts").write_text("x", encoding="utf-8")

    table = scan_sources(tmp_path, ("*.ts",))

    assert list(table) == ["adapters/evm/adapter.ts"]
    assert table["adapters/evm/adapter.ts"]() == "export {}"


def test_scan_sources_reads_lazily(tmp_path: Path) -> None:
    target = tmp_path / "utils" / "index.ts"
    target.parent.mkdir()
    target.write_text("before", encoding="utf-8")

    table = scan_sources(tmp_path, ("*.ts",))
    target.write_text("after", encoding="utf-8")

    assert table["utils/index.ts"]() == "after"


def test_scan_sources_missing_root_is_empty(tmp_path: Path) -> None:
    assert scan_sources(tmp_path / "missing") == {}


def test_find_by_suffix_matches_whole_segments() -> None:
    table = static_sources(
        {
            "b/patches/foo.patch": "b",
            "a/patches/foo.patch": "a",
            "c/patches/barfoo.patch": "c",
        }
    )

    assert find_by_suffix(table, "foo.patch") == "a/patches/foo.patch"
    assert find_by_suffix(table, "barfoo.patch") == "c/patches/barfoo.patch"
    assert find_by_suffix(table, "missing.patch") is None
