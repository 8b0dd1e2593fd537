"""Validation package for component descriptors."""

from .base import ValidationError, ValidationIssue, group_issues
from .component import ComponentValidator, sibling_graph
from .fixes import FixResult, fix_descriptor
from .graph import DependencyGraph, find_cycles, format_cycle
from .schema import (
    SchemaError,
    SchemaViolation,
    load_descriptor,
    parse_descriptor,
    read_raw_descriptor,
)

__all__ = [
    "ComponentValidator",
    "DependencyGraph",
    "FixResult",
    "SchemaError",
    "SchemaViolation",
    "ValidationError",
    "ValidationIssue",
    "find_cycles",
    "fix_descriptor",
    "format_cycle",
    "group_issues",
    "load_descriptor",
    "parse_descriptor",
    "read_raw_descriptor",
    "sibling_graph",
]
