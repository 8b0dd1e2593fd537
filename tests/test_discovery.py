"""Tests for component discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from forge.discovery import ComponentScanner
from tests._fixtures.library_builder import LibraryBuilder


def test_scan_lists_component_directories_in_sorted_order(library: LibraryBuilder) -> None:
    library.component("tabs")
    library.component("alert")
    (library.components_dir / "notes").mkdir()
    library.write({"src/components/README.md": "# components\n"})

    found = ComponentScanner().scan(library.components_dir)

    assert [entry.key for entry in found] == ["alert", "tabs"]
    assert found[0].descriptor_path.name == "component.json"


def test_scan_skips_hidden_and_tool_directories(library: LibraryBuilder) -> None:
    library.component("button")
    library.component("cached", directory=".cache")
    library.component("dep", directory="node_modules")

    found = ComponentScanner().scan(library.components_dir)

    assert [entry.key for entry in found] == ["button"]


def test_scan_only_looks_one_level_deep(library: LibraryBuilder) -> None:
    library.component("group-item", directory="group/item")

    assert ComponentScanner().scan(library.components_dir) == []


def test_scan_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ComponentScanner().scan(tmp_path / "absent")

    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        ComponentScanner().scan(not_a_dir)
