"""Forge: build, document and publish a local UI component registry."""

__version__ = "1.0.0"

__all__ = ["__version__"]
