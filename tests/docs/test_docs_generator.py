"""Tests for the HTML documentation generator."""

from __future__ import annotations

from pathlib import Path

from forge.docs import DocumentationGenerator
from forge.docs.generator import PLACEHOLDER, format_prop_default
from forge.models import ComponentProp, RegistryDocument
from forge.validators import parse_descriptor


def _registry() -> RegistryDocument:
    button = parse_descriptor(
        {
            "name": "button",
            "displayName": "Button",
            "description": "Clickable <button>",
            "category": "ui",
            "tags": ["interactive"],
            "examples": ["<Button>Click</Button>"],
            "props": [
                {"name": "size", "type": "'sm' | 'md'", "default": "'md'", "description": "Size"},
                {"name": "children", "type": "React.ReactNode", "required": True},
            ],
            "files": [
                {"name": "button", "path": "button.tsx"},
                {"name": "button-types", "path": "button.types.ts", "type": "type"},
            ],
            "dependencies": [
                {"name": "clsx", "version": "^2.0.0"},
                {"name": "vitest", "dev": True},
            ],
        }
    )
    grid = parse_descriptor(
        {
            "name": "grid",
            "displayName": "Grid",
            "description": "Layout grid",
            "category": "layout",
            "files": [{"name": "grid", "path": "grid.tsx"}],
        }
    )
    return RegistryDocument(
        name="acme-ui",
        description="Acme components",
        author="Acme",
        components=[button, grid],
        categories=["ui", "layout"],
        tags=["interactive"],
        last_updated="2024-05-01T12:30:45.123Z",
    )


def test_generate_writes_index_and_component_pages(tmp_path: Path) -> None:
    docs_dir = tmp_path / "docs"

    written = DocumentationGenerator().generate(_registry(), docs_dir)

    assert [path.name for path in written] == ["index.html", "button.html", "grid.html"]
    assert all(path.parent == docs_dir for path in written)


def test_index_groups_components_by_category_with_counts() -> None:
    html = DocumentationGenerator().render_index(_registry())

    assert "acme-ui - Component Library" in html
    assert 'id="category-ui"' in html
    assert 'id="category-layout"' in html
    assert 'data-category="layout"' in html
    assert 'href="button.html"' in html
    assert "2 Components" in html
    assert "&copy; 2024 Acme" in html


def test_component_page_shows_install_props_files_and_runtime_dependencies() -> None:
    registry = _registry()
    html = DocumentationGenerator().render_component(registry, registry.components[0])

    assert "forge add button" in html
    assert "&lt;Button&gt;Click&lt;/Button&gt;" in html
    assert "Clickable &lt;button&gt;" in html
    assert "React.ReactNode" in html
    assert "button.types.ts" in html
    assert ">type</span>" in html
    assert "clsx@^2.0.0" in html
    assert "vitest" not in html
    assert PLACEHOLDER in html


def test_component_page_omits_empty_sections() -> None:
    registry = _registry()
    html = DocumentationGenerator().render_component(registry, registry.components[1])

    assert "<h2 class=\"text-2xl font-bold mb-4\">Props</h2>" not in html
    assert "Dependencies</h2>" not in html


def test_rendering_is_deterministic() -> None:
    registry = _registry()
    generator = DocumentationGenerator()

    assert generator.render_index(registry) == generator.render_index(registry)


def test_format_prop_default() -> None:
    assert format_prop_default(ComponentProp(name="a", type="string")) == PLACEHOLDER
    assert format_prop_default(ComponentProp(name="a", type="string", default="'md'")) == "'md'"
    assert format_prop_default(ComponentProp(name="a", type="number", default=3)) == "3"
    assert format_prop_default(ComponentProp(name="a", type="string", default=None)) == "null"
