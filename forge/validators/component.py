"""Semantic checks for a schema-valid component descriptor."""

from __future__ import annotations

import json
from collections import deque
from pathlib import Path
from typing import Dict, List, Optional

from ..logging import get_logger
from ..models import DESCRIPTOR_FILENAME, ComponentDescriptor, ComponentFile
from ..semver import is_valid as is_valid_version
from .base import (
    CYCLE,
    EMPTY_FILE,
    MISSING_FILE,
    NESTING,
    PATH,
    PROP,
    STRICT,
    ValidationIssue,
)
from .graph import DependencyGraph, format_cycle

_EXTENSIONS_BY_TYPE: Dict[str, tuple[str, ...]] = {
    "component": (".tsx", ".jsx"),
    "type": (".ts", ".d.ts"),
}
_EXPORT_MARKER = "export"


class ComponentValidator:
    """Validates nesting, files, props and registry-dependency cycles.

    The default mode implements the baseline rules. ``strict=True`` adds
    extension, export-marker, version and directory-name checks.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict
        self.logger = get_logger("validators.component")

    def validate(
        self,
        descriptor: ComponentDescriptor,
        directory: Path,
        graph: Optional[DependencyGraph] = None,
    ) -> List[str]:
        """Return human-readable error messages; empty means valid."""
        return [issue.message for issue in self.check(descriptor, directory, graph)]

    def check(
        self,
        descriptor: ComponentDescriptor,
        directory: Path,
        graph: Optional[DependencyGraph] = None,
    ) -> List[ValidationIssue]:
        """Run every check in order and return the structured issues."""
        directory = Path(directory)
        issues: List[ValidationIssue] = []
        issues.extend(self._check_nesting(descriptor, directory))
        issues.extend(self._check_files(descriptor, directory))
        issues.extend(self._check_props(descriptor))
        issues.extend(self._check_cycles(descriptor, directory, graph))
        if self.strict:
            issues.extend(self._check_strict(descriptor, directory))
        self.logger.debug("%s: %d issue(s)", descriptor.name, len(issues))
        return issues

    def _check_nesting(self, descriptor: ComponentDescriptor, directory: Path) -> List[ValidationIssue]:
        nested = sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_dir() and (entry / DESCRIPTOR_FILENAME).is_file()
        )
        if not nested:
            return []
        return [
            ValidationIssue(
                component=descriptor.name,
                kind=NESTING,
                message=(
                    "Components cannot be nested. Each component should be in its own "
                    f"directory (found: {', '.join(nested)})"
                ),
            )
        ]

    def _check_files(self, descriptor: ComponentDescriptor, directory: Path) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        base = directory.resolve()
        for file in descriptor.files:
            target = (base / file.path).resolve()
            if not target.is_relative_to(base):
                issues.append(
                    ValidationIssue(
                        descriptor.name,
                        PATH,
                        f"File {file.path} resolves outside the component directory",
                        file.path,
                    )
                )
                continue
            try:
                size = target.stat().st_size
            except (FileNotFoundError, NotADirectoryError):
                issues.append(
                    ValidationIssue(descriptor.name, MISSING_FILE, f"File {file.path} does not exist", file.path)
                )
                continue
            if not target.is_file():
                issues.append(
                    ValidationIssue(descriptor.name, MISSING_FILE, f"File {file.path} is not a regular file", file.path)
                )
            elif size == 0:
                issues.append(ValidationIssue(descriptor.name, EMPTY_FILE, f"File {file.path} is empty", file.path))
        return issues

    def _check_props(self, descriptor: ComponentDescriptor) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for position, prop in enumerate(descriptor.props, start=1):
            if not prop.name.strip() or not prop.type.strip():
                issues.append(
                    ValidationIssue(
                        descriptor.name,
                        PROP,
                        f"Invalid prop definition at position {position}: name and type are required",
                    )
                )
            if prop.required and prop.has_default:
                issues.append(
                    ValidationIssue(
                        descriptor.name,
                        PROP,
                        f"Prop {prop.name} cannot be both required and have a default value",
                    )
                )
        return issues

    def _check_cycles(
        self,
        descriptor: ComponentDescriptor,
        directory: Path,
        graph: Optional[DependencyGraph],
    ) -> List[ValidationIssue]:
        if not descriptor.registry_dependencies:
            return []
        start = directory.name
        if graph is None or start not in graph:
            graph = sibling_graph(descriptor, directory)
        return [
            ValidationIssue(
                descriptor.name,
                CYCLE,
                f"Circular dependencies detected: {format_cycle(cycle)}",
            )
            for cycle in graph.cycles_through(start)
        ]

    def _check_strict(self, descriptor: ComponentDescriptor, directory: Path) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        if directory.name != descriptor.name:
            issues.append(
                ValidationIssue(
                    descriptor.name,
                    STRICT,
                    f"Directory {directory.name} does not match component name {descriptor.name}",
                )
            )
        if not is_valid_version(descriptor.version):
            issues.append(
                ValidationIssue(
                    descriptor.name,
                    STRICT,
                    f"Version {descriptor.version} is not a valid semantic version",
                )
            )
        for file in descriptor.files:
            issues.extend(self._check_file_conventions(descriptor.name, directory, file))
        return issues

    def _check_file_conventions(
        self, component: str, directory: Path, file: ComponentFile
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        allowed = _EXTENSIONS_BY_TYPE.get(file.type)
        if allowed and not file.path.endswith(allowed):
            issues.append(
                ValidationIssue(
                    component,
                    STRICT,
                    f"{file.type.capitalize()} file {file.path} should have {' or '.join(allowed)} extension",
                    file.path,
                )
            )
        if file.type == "component":
            target = directory / file.path
            if target.is_file() and target.stat().st_size > 0:
                content = target.read_text(encoding="utf-8", errors="replace")
                if _EXPORT_MARKER not in content:
                    issues.append(
                        ValidationIssue(
                            component,
                            STRICT,
                            f"Component file {file.path} should export the component",
                            file.path,
                        )
                    )
        return issues


def sibling_graph(descriptor: ComponentDescriptor, directory: Path) -> DependencyGraph:
    """Resolve the registry-dependency graph reachable from one component on disk.

    A dependency ``B`` of ``A`` becomes an edge only when ``<parent>/B`` holds
    a descriptor. Sibling descriptors are read leniently: one that fails to
    decode contributes a node without edges.
    """
    parent = directory.parent
    graph = DependencyGraph()
    graph.add_node(directory.name)
    pending = deque([(directory.name, list(descriptor.registry_dependencies))])
    expanded = {directory.name}
    while pending:
        source, targets = pending.popleft()
        for target in targets:
            descriptor_path = parent / target / DESCRIPTOR_FILENAME
            if not descriptor_path.is_file():
                continue
            graph.add_edge(source, target)
            if target in expanded:
                continue
            expanded.add(target)
            pending.append((target, _read_registry_dependencies(descriptor_path)))
    return graph


def _read_registry_dependencies(path: Path) -> List[str]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except ValueError:
        return []
    if not isinstance(raw, dict):
        return []
    values = raw.get("registryDependencies")
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, str)]


__all__ = ["ComponentValidator", "sibling_graph"]
