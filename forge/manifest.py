"""Secondary machine-readable summaries derived from a registry."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from .models import ComponentDescriptor, RegistryDocument
from .semver import LATEST, prefer_version


def build_index(registry: RegistryDocument) -> Dict[str, Any]:
    """Compact listing written to ``index.json``."""
    return {
        "components": [
            {
                "name": component.name,
                "displayName": component.display_name,
                "description": component.description,
                "category": component.category,
                "version": component.version,
                "tags": list(component.tags),
                "files": len(component.files),
            }
            for component in registry.components
        ],
        "categories": list(registry.categories),
        "totalComponents": len(registry.components),
        "lastUpdated": registry.last_updated,
    }


def build_dependency_manifest(
    components: Sequence[ComponentDescriptor], generated_at: str
) -> Dict[str, Any]:
    """Merged dependency maps written to ``dependencies.json``.

    Runtime ``dependencies`` exclude ``dev`` entries; every
    ``peerDependencies`` entry is kept. When two components declare the same
    package with different versions the highest version wins and the
    disagreement is listed under ``conflicts``.
    """
    dependencies, dependency_conflicts = _merge(
        (component.name, dep.name, dep.version or LATEST)
        for component in components
        for dep in component.dependencies
        if not dep.dev
    )
    peers, peer_conflicts = _merge(
        (component.name, dep.name, dep.version or LATEST)
        for component in components
        for dep in component.peer_dependencies
    )
    return {
        "dependencies": dependencies,
        "peerDependencies": peers,
        "conflicts": {
            "dependencies": dependency_conflicts,
            "peerDependencies": peer_conflicts,
        },
        "generatedAt": generated_at,
        "componentCount": len(components),
    }


def _merge(
    declarations: Iterable[tuple[str, str, str]]
) -> tuple[Dict[str, str], List[Dict[str, Any]]]:
    resolved: Dict[str, str] = {}
    declared: Dict[str, Dict[str, str]] = {}
    for component, package, version in declarations:
        declared.setdefault(package, {})[component] = version
        if package in resolved:
            resolved[package] = prefer_version(resolved[package], version)
        else:
            resolved[package] = version

    conflicts: List[Dict[str, Any]] = []
    for package in sorted(declared):
        versions = declared[package]
        if len(set(versions.values())) > 1:
            conflicts.append(
                {
                    "name": package,
                    "resolved": resolved[package],
                    "declared": dict(sorted(versions.items())),
                }
            )
    return dict(sorted(resolved.items())), conflicts


__all__ = ["build_dependency_manifest", "build_index"]
