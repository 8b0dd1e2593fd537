"""Core validation data structures shared by the schema and component checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

SCHEMA = "schema"
PARSE = "parse"
NESTING = "nesting"
PATH = "path"
MISSING_FILE = "missing_file"
EMPTY_FILE = "empty_file"
PROP = "prop"
CYCLE = "cycle"
DUPLICATE = "duplicate"
STRICT = "strict"

ISSUE_KINDS = (SCHEMA, PARSE, NESTING, PATH, MISSING_FILE, EMPTY_FILE, PROP, CYCLE, DUPLICATE, STRICT)


@dataclass
class ValidationIssue:
    """A single problem found while validating one component."""

    component: str
    kind: str
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "component": self.component,
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
        }


class ValidationError(RuntimeError):
    """Raised when a caller demands a clean library and validation found issues."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)


def group_issues(issues: Sequence[ValidationIssue]) -> Dict[str, List[ValidationIssue]]:
    """Group issues by component, preserving first-seen order."""
    grouped: Dict[str, List[ValidationIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue.component, []).append(issue)
    return grouped


__all__ = [
    "CYCLE",
    "DUPLICATE",
    "EMPTY_FILE",
    "ISSUE_KINDS",
    "MISSING_FILE",
    "NESTING",
    "PARSE",
    "PATH",
    "PROP",
    "SCHEMA",
    "STRICT",
    "ValidationError",
    "ValidationIssue",
    "group_issues",
]
