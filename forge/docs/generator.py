"""Renders the static HTML documentation site for a registry."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..logging import get_logger
from ..models import ComponentDescriptor, ComponentProp, RegistryDocument

PLACEHOLDER = "—"


class DocumentationGenerator:
    """Writes ``index.html`` plus one ``<name>.html`` page per component."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["prop_default"] = format_prop_default
        self.env.filters["or_placeholder"] = _or_placeholder
        self.logger = get_logger("docs")

    def render_index(self, registry: RegistryDocument) -> str:
        template = self.env.get_template("index.html.j2")
        return template.render(
            registry=registry,
            categories=self._category_counts(registry),
            year=registry.last_updated[:4],
        )

    def render_component(self, registry: RegistryDocument, component: ComponentDescriptor) -> str:
        template = self.env.get_template("component.html.j2")
        return template.render(
            registry=registry,
            component=component,
            runtime_dependencies=[dep for dep in component.dependencies if not dep.dev],
            year=registry.last_updated[:4],
        )

    def generate(self, registry: RegistryDocument, docs_dir: Path) -> List[Path]:
        """Render every page into ``docs_dir`` and return the written paths."""
        docs_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []

        index_path = docs_dir / "index.html"
        index_path.write_text(self.render_index(registry), encoding="utf-8")
        written.append(index_path)

        for component in registry.components:
            page = docs_dir / f"{component.name}.html"
            page.write_text(self.render_component(registry, component), encoding="utf-8")
            written.append(page)

        self.logger.debug("Wrote %d documentation page(s) to %s", len(written), docs_dir)
        return written

    @staticmethod
    def _category_counts(registry: RegistryDocument) -> List[Dict[str, Any]]:
        return [
            {"name": category, "label": category.replace("-", " "), "components": members}
            for category, members in registry.components_by_category().items()
            if members
        ]


def format_prop_default(prop: ComponentProp) -> str:
    """Display form of a prop default; the placeholder when none was declared."""
    if not prop.has_default:
        return PLACEHOLDER
    if isinstance(prop.default, str):
        return prop.default
    return json.dumps(prop.default)


def _or_placeholder(value: Any) -> Any:
    if value is None or value == "":
        return PLACEHOLDER
    return value


__all__ = ["DocumentationGenerator", "PLACEHOLDER", "format_prop_default"]
