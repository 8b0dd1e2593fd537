"""Discovery of component directories under a library's components root."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .logging import get_logger
from .models import DESCRIPTOR_FILENAME

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".storybook",
    "dist",
}

logger = get_logger("discovery")


@dataclass(frozen=True)
class DiscoveredComponent:
    """A component directory holding a descriptor file."""

    directory: Path
    descriptor_path: Path

    @property
    def key(self) -> str:
        """Directory name; sibling references resolve against it."""
        return self.directory.name


class ComponentScanner:
    """Lists the flat, one-level set of component directories."""

    def scan(self, components_dir: Path) -> List[DiscoveredComponent]:
        """Return discovered components sorted by directory name."""
        root = Path(components_dir).expanduser().resolve()
        if not root.exists():
            raise FileNotFoundError(f"Components directory not found: {components_dir}")
        if not root.is_dir():
            raise NotADirectoryError(f"Components path is not a directory: {components_dir}")

        if (root / DESCRIPTOR_FILENAME).is_file():
            logger.warning(
                "Ignoring %s at the components root; each component needs its own directory",
                DESCRIPTOR_FILENAME,
            )

        discovered: List[DiscoveredComponent] = []
        for entry in sorted(root.iterdir(), key=lambda path: path.name):
            if not entry.is_dir():
                continue
            if entry.name in _EXCLUDED_DIRS or entry.name.startswith("."):
                continue
            descriptor = entry / DESCRIPTOR_FILENAME
            if descriptor.is_file():
                discovered.append(DiscoveredComponent(directory=entry, descriptor_path=descriptor))
            else:
                logger.debug("Skipping %s: no %s", entry.name, DESCRIPTOR_FILENAME)
        logger.debug("Discovered %d component(s) under %s", len(discovered), root)
        return discovered


__all__ = ["ComponentScanner", "DiscoveredComponent"]
