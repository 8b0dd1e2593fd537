"""Maintenance operations over an existing component library."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .builder import (
    COMPONENTS_SUBDIR,
    DOCS_SUBDIR,
    REGISTRY_FILENAME,
    RegistryBuilder,
    format_timestamp,
    write_json,
)
from .config import ForgeConfig
from .discovery import ComponentScanner
from .logging import get_logger
from .models import DESCRIPTOR_FILENAME, NAME_PATTERN, ComponentDescriptor
from .semver import bump_patch
from .validators import FixResult, SchemaError, ValidationIssue, fix_descriptor, load_descriptor


class ComponentNotFoundError(FileNotFoundError):
    """Raised when a named component has no directory under componentsDir."""


@dataclass
class UpdateOutcome:
    descriptor: ComponentDescriptor
    previous_version: str
    removed_files: List[str] = field(default_factory=list)
    registry_synced: bool = False


@dataclass
class RemovalOutcome:
    name: str
    removed: List[Path] = field(default_factory=list)
    registry_synced: bool = False


@dataclass
class ValidationReport:
    """Result of ``forge validate`` across the whole library."""

    components: List[str] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    fixes: List[FixResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "components": list(self.components),
            "issues": [issue.to_dict() for issue in self.issues],
            "fixed": [
                {"path": str(fix.path), "changes": list(fix.changes)}
                for fix in self.fixes
                if fix.changed
            ],
        }


class ComponentLibrary:
    """Read and mutate the components of one configured library."""

    def __init__(
        self,
        config: ForgeConfig,
        *,
        scanner: ComponentScanner | None = None,
        builder: RegistryBuilder | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.scanner = scanner or ComponentScanner()
        self.builder = builder or RegistryBuilder(scanner=self.scanner, clock=clock)
        self.clock = self.builder.clock
        self.logger = get_logger("library")

    def load_components(self) -> List[ComponentDescriptor]:
        """Every descriptor that parses, skipping broken ones with a warning."""
        components: List[ComponentDescriptor] = []
        for entry in self.scanner.scan(self.config.components_path):
            try:
                components.append(load_descriptor(entry.descriptor_path))
            except SchemaError as exc:
                self.logger.warning("Failed to read %s/%s: %s", entry.key, DESCRIPTOR_FILENAME, exc)
        return components

    def list_components(
        self,
        *,
        category: str | None = None,
        tag: str | None = None,
    ) -> List[ComponentDescriptor]:
        components = self.load_components()
        if category:
            components = [component for component in components if component.category == category]
        if tag:
            components = [component for component in components if tag in component.tags]
        return components

    def search(self, query: str, *, category: str | None = None) -> List[ComponentDescriptor]:
        """Components matching every whitespace-separated term; name hits first."""
        terms = query.lower().split()
        lowered = query.lower()
        results = []
        for component in self.load_components():
            haystack = " ".join(
                [
                    component.name,
                    component.display_name,
                    component.description,
                    *component.tags,
                    component.category,
                ]
            ).lower()
            if all(term in haystack for term in terms):
                results.append(component)
        if category:
            results = [component for component in results if component.category == category]
        # Stable sort keeps discovery order within each group.
        results.sort(key=lambda component: lowered not in component.name.lower())
        return results

    def find(self, name: str) -> Optional[ComponentDescriptor]:
        """Leniently read one component's descriptor, or None if unreadable."""
        if not NAME_PATTERN.fullmatch(name):
            return None
        descriptor_path = self._component_dir(name) / DESCRIPTOR_FILENAME
        if not descriptor_path.is_file():
            return None
        try:
            return load_descriptor(descriptor_path)
        except SchemaError:
            return None

    def update(self, name: str) -> UpdateOutcome:
        """Patch-bump a component, drop missing file entries, and sync the registry."""
        directory = self._require_component(name)
        descriptor_path = directory / DESCRIPTOR_FILENAME
        descriptor = load_descriptor(descriptor_path)
        previous = descriptor.version

        bumped = bump_patch(previous)
        if bumped is None:
            self.logger.warning("Version %s of %s is not semantic; leaving it unchanged", previous, name)
        else:
            descriptor.version = bumped

        removed = [file.path for file in descriptor.files if not (directory / file.path).exists()]
        if removed:
            for path in removed:
                self.logger.warning("Removing missing file %s from %s", path, name)
            descriptor.files = [file for file in descriptor.files if file.path not in removed]

        write_json(descriptor_path, descriptor.to_dict())
        synced = self._sync_registry(name, replacement=descriptor.to_dict())
        self.logger.info("Component %s updated to version %s", name, descriptor.version)
        return UpdateOutcome(
            descriptor=descriptor,
            previous_version=previous,
            removed_files=removed,
            registry_synced=synced,
        )

    def remove(self, name: str) -> RemovalOutcome:
        """Delete a component and strip it from any generated artifacts."""
        directory = self._require_component(name)
        outcome = RemovalOutcome(name=name)
        shutil.rmtree(directory)
        outcome.removed.append(directory)

        outcome.registry_synced = self._sync_registry(name, replacement=None)

        output = self.config.output_path
        copied = output / COMPONENTS_SUBDIR / name
        if copied.exists():
            shutil.rmtree(copied)
            outcome.removed.append(copied)
        page = output / DOCS_SUBDIR / f"{name}.html"
        if page.exists():
            page.unlink()
            outcome.removed.append(page)

        self.logger.info("Component %s removed", name)
        return outcome

    def validate(self, *, fix: bool = False, strict: bool | None = None) -> ValidationReport:
        """Validate every component, optionally repairing descriptors first."""
        report = ValidationReport()
        if fix:
            for entry in self.scanner.scan(self.config.components_path):
                try:
                    result = fix_descriptor(entry.descriptor_path)
                except SchemaError as exc:
                    self.logger.warning("Cannot fix %s: %s", entry.key, exc)
                    continue
                report.fixes.append(result)
                for change in result.changes:
                    self.logger.info("%s: %s", entry.key, change)

        inspection = self.builder.inspect(self.config, strict=strict)
        report.components = [candidate.descriptor.name for candidate in inspection.accepted]
        report.issues = list(inspection.issues)
        return report

    def _component_dir(self, name: str) -> Path:
        if not NAME_PATTERN.fullmatch(name):
            raise ComponentNotFoundError(f"Component {name} not found")
        return self.config.components_path / name

    def _require_component(self, name: str) -> Path:
        directory = self._component_dir(name)
        if not directory.is_dir():
            raise ComponentNotFoundError(f"Component {name} not found")
        return directory

    def _sync_registry(self, name: str, *, replacement: Optional[Dict[str, Any]]) -> bool:
        """Replace (or drop, when ``replacement`` is None) an entry in registry.json."""
        registry_path = self.config.output_path / REGISTRY_FILENAME
        if not registry_path.is_file():
            return False
        try:
            registry = json.loads(registry_path.read_text(encoding="utf-8"))
        except ValueError as exc:
            self.logger.warning("Failed to update registry: %s", exc)
            return False
        components = registry.get("components") if isinstance(registry, dict) else None
        if not isinstance(components, list):
            self.logger.warning("Failed to update registry: %s has no component list", registry_path)
            return False

        index = next(
            (
                position
                for position, entry in enumerate(components)
                if isinstance(entry, dict) and entry.get("name") == name
            ),
            None,
        )
        if index is None:
            return False
        if replacement is None:
            del components[index]
        else:
            components[index] = replacement
        registry["lastUpdated"] = format_timestamp(self.clock())
        write_json(registry_path, registry)
        return True


__all__ = [
    "ComponentLibrary",
    "ComponentNotFoundError",
    "RemovalOutcome",
    "UpdateOutcome",
    "ValidationReport",
]
