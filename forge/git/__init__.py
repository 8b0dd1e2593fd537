"""Git integration helpers."""

from .publisher import PublishError, Publisher

__all__ = ["PublishError", "Publisher"]
