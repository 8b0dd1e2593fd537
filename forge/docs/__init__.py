"""HTML documentation generated from a registry document."""

from .generator import DocumentationGenerator

__all__ = ["DocumentationGenerator"]
