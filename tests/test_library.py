"""Tests for library maintenance commands."""

from __future__ import annotations

import json

import pytest

from forge.builder import RegistryBuilder
from forge.library import ComponentLibrary, ComponentNotFoundError
from forge.validators import SchemaError
from forge.validators.base import MISSING_FILE
from tests._fixtures.library_builder import LibraryBuilder


@pytest.fixture
def maintained(library: LibraryBuilder, fixed_clock) -> ComponentLibrary:
    library.component("button", tags=["interactive"], description="Clickable button")
    library.component("date-picker", category="forms", tags=["form"], description="Pick a button date")
    library.component("grid", category="layout", description="Layout grid")
    return ComponentLibrary(library.config(), clock=fixed_clock)


def test_list_components_filters_by_category_and_tag(maintained: ComponentLibrary) -> None:
    assert [c.name for c in maintained.list_components()] == ["button", "date-picker", "grid"]
    assert [c.name for c in maintained.list_components(category="forms")] == ["date-picker"]
    assert [c.name for c in maintained.list_components(tag="interactive")] == ["button"]
    assert maintained.list_components(category="layout", tag="form") == []


def test_list_skips_unreadable_descriptors(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    library.descriptor(library.components_dir / "broken", {"name": "broken"})

    assert "broken" not in [c.name for c in maintained.list_components()]


def test_search_requires_every_term_and_ranks_name_matches_first(maintained: ComponentLibrary) -> None:
    results = maintained.search("button")

    assert [c.name for c in results] == ["button", "date-picker"]
    assert [c.name for c in maintained.search("pick date")] == ["date-picker"]
    assert maintained.search("pick grid") == []
    assert [c.name for c in maintained.search("BUTTON", category="forms")] == ["date-picker"]


def test_update_bumps_patch_version_and_prunes_missing_files(library: LibraryBuilder, fixed_clock) -> None:
    directory = library.component(
        "button",
        version="1.2.3",
        files={"button.tsx": "export const Button = 1;\n", "button.css": ".b{}\n"},
    )
    RegistryBuilder(clock=fixed_clock).build(library.config())
    (directory / "button.css").unlink()

    outcome = ComponentLibrary(library.config(), clock=fixed_clock).update("button")

    assert outcome.previous_version == "1.2.3"
    assert outcome.descriptor.version == "1.2.4"
    assert outcome.removed_files == ["button.css"]
    assert outcome.registry_synced is True
    on_disk = json.loads((directory / "component.json").read_text(encoding="utf-8"))
    assert on_disk["version"] == "1.2.4"
    assert [entry["path"] for entry in on_disk["files"]] == ["button.tsx"]
    registry = library.read_json("public/registry.json")
    assert registry["components"][0]["version"] == "1.2.4"


def test_update_without_registry_only_touches_the_descriptor(maintained: ComponentLibrary) -> None:
    outcome = maintained.update("grid")

    assert outcome.descriptor.version == "1.0.1"
    assert outcome.registry_synced is False


def test_update_unknown_component(maintained: ComponentLibrary) -> None:
    with pytest.raises(ComponentNotFoundError):
        maintained.update("missing")


def test_update_rejects_invalid_descriptor(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    library.descriptor(library.components_dir / "broken", {"name": "broken"})

    with pytest.raises(SchemaError):
        maintained.update("broken")


def test_remove_deletes_sources_and_generated_artifacts(library: LibraryBuilder, fixed_clock) -> None:
    library.component("button")
    library.component("card")
    RegistryBuilder(clock=fixed_clock).build(library.config())

    outcome = ComponentLibrary(library.config(), clock=fixed_clock).remove("card")

    assert outcome.registry_synced is True
    assert not (library.components_dir / "card").exists()
    assert not (library.root / "public" / "components" / "card").exists()
    assert not (library.root / "public" / "docs" / "card.html").exists()
    assert library.names() == ["button"]


def test_remove_unknown_component(maintained: ComponentLibrary) -> None:
    with pytest.raises(ComponentNotFoundError):
        maintained.remove("missing")


def test_find_reads_descriptor_leniently(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    library.descriptor(library.components_dir / "broken", {"name": "broken"})

    assert maintained.find("button").display_name == "Button"
    assert maintained.find("broken") is None
    assert maintained.find("missing") is None


def test_validate_reports_issues_without_writing(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    (library.components_dir / "grid" / "grid.tsx").unlink()

    report = maintained.validate()

    assert not report.ok
    assert report.components == ["button", "date-picker"]
    assert [issue.kind for issue in report.issues] == [MISSING_FILE]
    assert not (library.root / "public").exists()
    assert report.to_dict()["issues"][0]["component"] == "grid"


def test_validate_fix_repairs_descriptors_first(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    (library.components_dir / "grid" / "grid.tsx").unlink()
    (library.components_dir / "grid" / "grid.jsx").write_text("export const Grid = 1;\n", encoding="utf-8")
    library.descriptor(
        library.components_dir / "grid",
        {
            "name": "grid",
            "displayName": "Grid",
            "description": "Layout grid",
            "files": [
                {"name": "grid", "path": "grid.jsx"},
                {"name": "grid-old", "path": "grid.tsx"},
            ],
        },
    )

    report = maintained.validate(fix=True)

    assert report.ok
    assert report.components == ["button", "date-picker", "grid"]
    assert any(fix.changed for fix in report.fixes)
    fixed = report.to_dict()["fixed"]
    assert any("grid.tsx" in change for entry in fixed for change in entry["changes"])


@pytest.mark.parametrize("name", ["..", ".", "../src", "button/../..", ""])
def test_names_outside_components_dir_are_rejected(
    library: LibraryBuilder, maintained: ComponentLibrary, name: str
) -> None:
    keep = library.components_dir.parent / "keep.txt"
    keep.write_text("keep\n", encoding="utf-8")

    with pytest.raises(ComponentNotFoundError):
        maintained.remove(name)
    with pytest.raises(ComponentNotFoundError):
        maintained.update(name)

    assert maintained.find(name) is None
    assert keep.is_file()
    assert library.components_dir.is_dir()


def test_update_tolerates_undecodable_registry(library: LibraryBuilder, maintained: ComponentLibrary) -> None:
    registry = library.root / "public" / "registry.json"
    registry.parent.mkdir()
    registry.write_bytes(b'{"components": ["\xff"]}')

    outcome = maintained.update("grid")

    assert outcome.descriptor.version == "1.0.1"
    assert outcome.registry_synced is False
