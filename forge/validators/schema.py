"""Structural validation of raw ``component.json`` records."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..models import ComponentDescriptor
from .base import PARSE, SCHEMA, ValidationIssue

_ROOT = "<root>"
_VALUE_ERROR_PREFIX = "Value error, "


@dataclass
class SchemaViolation:
    """One violated constraint, addressed by its dotted field path."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class SchemaError(RuntimeError):
    """Raised when a descriptor cannot be turned into a ``ComponentDescriptor``."""

    def __init__(
        self,
        violations: Sequence[SchemaViolation],
        *,
        source: str | None = None,
        kind: str = SCHEMA,
    ) -> None:
        self.violations = list(violations)
        self.source = source
        self.kind = kind
        prefix = f"{source}: " if source else ""
        super().__init__(prefix + "; ".join(str(violation) for violation in self.violations))

    def to_issues(self, component: str) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                component=component,
                kind=self.kind,
                message=f"Invalid {violation.field}: {violation.message}"
                if violation.field != _ROOT
                else violation.message,
                path=self.source,
            )
            for violation in self.violations
        ]


def parse_descriptor(raw: Any, *, source: str | None = None) -> ComponentDescriptor:
    """Validate an already-decoded record and apply every default."""
    if not isinstance(raw, Mapping):
        raise SchemaError(
            [SchemaViolation(_ROOT, "Descriptor must be a JSON object")],
            source=source,
        )
    try:
        return ComponentDescriptor.model_validate(dict(raw))
    except PydanticValidationError as exc:
        raise SchemaError(_violations_from(exc), source=source) from exc


def read_raw_descriptor(path: Path) -> Any:
    """Decode a descriptor file without validating its shape."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SchemaError(
            [SchemaViolation(_ROOT, f"Descriptor is not valid UTF-8: {exc.reason} at byte {exc.start}")],
            source=path.name,
            kind=PARSE,
        ) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError(
            [SchemaViolation(_ROOT, f"Invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})")],
            source=path.name,
            kind=PARSE,
        ) from exc


def load_descriptor(path: Path) -> ComponentDescriptor:
    """Read, decode and validate the descriptor stored at ``path``."""
    return parse_descriptor(read_raw_descriptor(path), source=path.name)


def _violations_from(exc: PydanticValidationError) -> List[SchemaViolation]:
    violations: List[SchemaViolation] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or _ROOT
        message = str(error.get("msg", "invalid value"))
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        violations.append(SchemaViolation(location, message))
    return violations


__all__ = [
    "SchemaError",
    "SchemaViolation",
    "load_descriptor",
    "parse_descriptor",
    "read_raw_descriptor",
]
