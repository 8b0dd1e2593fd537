"""Registry build pipeline: discover, validate, aggregate, emit."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import INVALID_POLICIES, ForgeConfig
from .discovery import ComponentScanner, DiscoveredComponent
from .docs import DocumentationGenerator
from .logging import get_logger
from .manifest import build_dependency_manifest, build_index
from .models import DESCRIPTOR_FILENAME, ComponentDescriptor, RegistryDocument
from .validators import (
    ComponentValidator,
    DependencyGraph,
    SchemaError,
    ValidationError,
    ValidationIssue,
    parse_descriptor,
    read_raw_descriptor,
)
from .validators.base import DUPLICATE

REGISTRY_FILENAME = "registry.json"
INDEX_FILENAME = "index.json"
DEPENDENCIES_FILENAME = "dependencies.json"
COMPONENTS_SUBDIR = "components"
DOCS_SUBDIR = "docs"


class BuildError(RuntimeError):
    """Raised when generated artifacts cannot be written."""


@dataclass
class AcceptedComponent:
    """A descriptor that passed every check, with where it came from."""

    source: DiscoveredComponent
    descriptor: ComponentDescriptor


@dataclass
class Inspection:
    """Validation outcome for a whole library, before anything is written."""

    discovered: List[DiscoveredComponent] = field(default_factory=list)
    accepted: List[AcceptedComponent] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    # Directory keys, whichever stage rejected the component.
    invalid: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass
class BuildResult:
    """What a build produced, or why it produced nothing."""

    ok: bool
    registry: Optional[RegistryDocument] = None
    components: List[ComponentDescriptor] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    written: List[Path] = field(default_factory=list)

    def raise_for_issues(self) -> None:
        if not self.ok:
            raise ValidationError(
                f"Build failed with {len(self.issues)} validation issue(s)",
                self.issues,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "components": [component.name for component in self.components],
            "issues": [issue.to_dict() for issue in self.issues],
            "excluded": list(self.excluded),
        }


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RegistryBuilder:
    """Coordinates the build stages for one component library."""

    def __init__(
        self,
        scanner: ComponentScanner | None = None,
        docs_generator: DocumentationGenerator | None = None,
        validator_factory: Callable[..., ComponentValidator] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.scanner = scanner or ComponentScanner()
        self.docs_generator = docs_generator or DocumentationGenerator()
        self.validator_factory = validator_factory or ComponentValidator
        self.clock = clock or _utc_now
        self.logger = get_logger("builder")

    def inspect(self, config: ForgeConfig, *, strict: bool | None = None) -> Inspection:
        """Discover and validate every component without writing anything."""
        strict = config.strict if strict is None else strict
        inspection = Inspection(discovered=self.scanner.scan(config.components_path))
        self.logger.debug("Found %d component descriptor(s)", len(inspection.discovered))

        loaded: List[AcceptedComponent] = []
        seen: Dict[str, str] = {}
        for entry in inspection.discovered:
            try:
                descriptor = parse_descriptor(
                    read_raw_descriptor(entry.descriptor_path),
                    source=f"{entry.key}/{DESCRIPTOR_FILENAME}",
                )
            except SchemaError as exc:
                inspection.issues.extend(exc.to_issues(entry.key))
                inspection.invalid.append(entry.key)
                continue

            first = seen.get(descriptor.name)
            if first is not None:
                inspection.issues.append(
                    ValidationIssue(
                        descriptor.name,
                        DUPLICATE,
                        f"Duplicate component name: {descriptor.name} (already defined in {first})",
                        f"{entry.key}/{DESCRIPTOR_FILENAME}",
                    )
                )
                inspection.invalid.append(entry.key)
                continue
            seen[descriptor.name] = entry.key
            loaded.append(AcceptedComponent(entry, descriptor))

        graph = self._dependency_graph(inspection.discovered, loaded)
        validator = self.validator_factory(strict=strict)
        for candidate in loaded:
            issues = validator.check(candidate.descriptor, candidate.source.directory, graph)
            if issues:
                inspection.issues.extend(issues)
                inspection.invalid.append(candidate.source.key)
                continue
            inspection.accepted.append(candidate)
            self.logger.debug("Accepted %s", candidate.descriptor.name)
        return inspection

    def build(
        self,
        config: ForgeConfig,
        *,
        strict: bool | None = None,
        on_invalid: str | None = None,
    ) -> BuildResult:
        """Run the full pipeline and write the registry artifacts."""
        policy = on_invalid or config.on_invalid
        if policy not in INVALID_POLICIES:
            raise ValueError(f"Unknown invalid-component policy: {policy}")

        self.logger.info("Building registry for %s", config.name)
        inspection = self.inspect(config, strict=strict)
        if not inspection.discovered:
            self.logger.warning("No components found. Add components with: forge add <component-name>")
            return BuildResult(ok=True)

        if inspection.issues and policy == "abort":
            self.logger.error(
                "Validation failed for %d component(s); nothing was written",
                len(inspection.invalid),
            )
            return BuildResult(ok=False, issues=inspection.issues, excluded=list(inspection.invalid))

        for name in inspection.invalid:
            self.logger.warning("Excluding invalid component %s", name)

        components = [candidate.descriptor for candidate in inspection.accepted]
        registry = self.assemble(config, components)
        written = self.emit(config, registry, inspection.accepted)
        self.logger.info(
            "Registry built with %d component(s) in %s",
            len(components),
            config.output_path,
        )
        return BuildResult(
            ok=True,
            registry=registry,
            components=components,
            issues=inspection.issues,
            excluded=list(inspection.invalid),
            written=written,
        )

    def assemble(self, config: ForgeConfig, components: Sequence[ComponentDescriptor]) -> RegistryDocument:
        categories: List[str] = []
        tags: List[str] = []
        for component in components:
            if component.category not in categories:
                categories.append(component.category)
            for tag in component.tags:
                if tag not in tags:
                    tags.append(tag)
        return RegistryDocument(
            name=config.name,
            description=config.description or "",
            version=config.version,
            author=config.author or "",
            license=config.license,
            repository=config.repository or "",
            homepage=config.homepage or "",
            components=list(components),
            categories=categories,
            tags=tags,
            last_updated=format_timestamp(self.clock()),
        )

    def emit(
        self,
        config: ForgeConfig,
        registry: RegistryDocument,
        accepted: Sequence[AcceptedComponent],
    ) -> List[Path]:
        """Write registry, component copies, docs and manifests under outputDir."""
        output = config.output_path
        written: List[Path] = []
        try:
            output.mkdir(parents=True, exist_ok=True)
            components_dir = output / COMPONENTS_SUBDIR
            docs_dir = output / DOCS_SUBDIR
            for managed in (components_dir, docs_dir):
                if managed.exists():
                    shutil.rmtree(managed)

            registry_path = output / REGISTRY_FILENAME
            write_json(registry_path, registry.to_dict())
            written.append(registry_path)

            for candidate in accepted:
                written.extend(self._copy_component(candidate, components_dir))

            written.extend(self.docs_generator.generate(registry, docs_dir))

            index_path = output / INDEX_FILENAME
            write_json(index_path, build_index(registry))
            written.append(index_path)

            dependencies_path = output / DEPENDENCIES_FILENAME
            write_json(
                dependencies_path,
                build_dependency_manifest(registry.components, registry.last_updated),
            )
            written.append(dependencies_path)
        except OSError as exc:
            raise BuildError(f"Failed to write build output to {output}: {exc}") from exc
        return written

    @staticmethod
    def _copy_component(candidate: AcceptedComponent, components_dir: Path) -> List[Path]:
        target = components_dir / candidate.descriptor.name
        target.mkdir(parents=True, exist_ok=True)
        copied: List[Path] = []
        for file in candidate.descriptor.files:
            destination = target / file.path
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(candidate.source.directory / file.path, destination)
            copied.append(destination)
        descriptor_copy = target / DESCRIPTOR_FILENAME
        shutil.copy2(candidate.source.descriptor_path, descriptor_copy)
        copied.append(descriptor_copy)
        return copied

    @staticmethod
    def _dependency_graph(
        discovered: Sequence[DiscoveredComponent],
        loaded: Sequence[AcceptedComponent],
    ) -> DependencyGraph:
        # Nodes are directory names so edges match sibling lookups on disk.
        dependencies: Dict[str, List[str]] = {entry.key: [] for entry in discovered}
        for candidate in loaded:
            dependencies[candidate.source.key] = list(candidate.descriptor.registry_dependencies)
        return DependencyGraph.from_dependencies(dependencies)


__all__ = [
    "AcceptedComponent",
    "BuildError",
    "BuildResult",
    "Inspection",
    "RegistryBuilder",
    "format_timestamp",
    "write_json",
]
