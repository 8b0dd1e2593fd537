"""Narrow repair heuristics applied by ``forge validate --fix``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from ..models import NAME_PATTERN
from .schema import SchemaError, SchemaViolation, read_raw_descriptor

_MISSING_DEFAULTS: tuple[tuple[str, Any], ...] = (
    ("category", "ui"),
    ("version", "1.0.0"),
    ("license", "MIT"),
    ("props", []),
    ("dependencies", []),
    ("peerDependencies", []),
    ("files", []),
    ("examples", []),
    ("registryDependencies", []),
    ("tags", []),
)


@dataclass
class FixResult:
    """Changes applied to one descriptor file."""

    path: Path
    changes: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def fix_descriptor(path: Path) -> FixResult:
    """Insert missing defaults and drop references to files that are gone.

    The descriptor is rewritten in place only when something changed.
    """
    raw = read_raw_descriptor(path)
    if not isinstance(raw, dict):
        raise SchemaError([SchemaViolation("<root>", "Descriptor must be a JSON object")], source=path.name)

    result = FixResult(path=path)
    fixed = fix_mapping(raw, path.parent, result.changes)
    if result.changed:
        path.write_text(json.dumps(fixed, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return result


def fix_mapping(raw: Dict[str, Any], directory: Path, changes: List[str]) -> Dict[str, Any]:
    """Return a repaired copy of ``raw``; descriptions of edits go to ``changes``."""
    data = dict(raw)

    name = data.get("name")
    if not data.get("displayName") and isinstance(name, str) and NAME_PATTERN.match(name):
        data["displayName"] = display_name_for(name)
        changes.append(f"Added displayName {data['displayName']!r}")

    for key, default in _MISSING_DEFAULTS:
        if key not in data or data[key] is None or data[key] == "":
            data[key] = list(default) if isinstance(default, list) else default
            changes.append(f"Added missing {key}")

    files = data.get("files")
    if isinstance(files, list):
        kept: List[Any] = []
        for entry in files:
            relative = entry.get("path") if isinstance(entry, dict) else None
            if isinstance(relative, str) and not (directory / relative).exists():
                changes.append(f"Removed reference to missing file {relative}")
                continue
            kept.append(entry)
        data["files"] = kept

    return data


def display_name_for(name: str) -> str:
    """``date-picker`` -> ``Date Picker``."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-") if word)


__all__ = ["FixResult", "display_name_for", "fix_descriptor", "fix_mapping"]
