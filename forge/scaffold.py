"""Scaffolding for new libraries (``forge init``) and components (``forge add``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from .builder import write_json
from .config import CONFIG_FILENAMES, ForgeConfig, find_config_file, save_config
from .git.publisher import Publisher
from .logging import get_logger
from .models import DESCRIPTOR_FILENAME, NAME_PATTERN, NAME_RULE, ComponentDescriptor
from .validators import parse_descriptor
from .validators.fixes import display_name_for

TEMPLATES = ("basic", "button", "card", "hook", "utility")
_MANIFEST_FILENAME = "template.yml"


class ScaffoldError(RuntimeError):
    """Raised when a scaffold request cannot be satisfied."""


class ComponentExistsError(FileExistsError):
    """Raised when ``forge add`` targets a directory that already exists."""


@dataclass
class ScaffoldResult:
    directory: Path
    descriptor: ComponentDescriptor
    files: List[Path] = field(default_factory=list)


@dataclass
class InitResult:
    config: ForgeConfig
    config_path: Path
    git_initialized: bool = False
    starter: Optional[ScaffoldResult] = None


def pascal_case(name: str) -> str:
    return "".join(word[:1].upper() + word[1:] for word in name.split("-") if word)


def camel_case(name: str) -> str:
    pascal = pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


class Scaffolder:
    """Renders component templates and writes new library skeletons."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        publisher: Publisher | None = None,
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates") / "components"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.publisher = publisher or Publisher()
        self.logger = get_logger("scaffold")

    def available_templates(self) -> List[str]:
        return sorted(
            entry.name
            for entry in self.templates_dir.iterdir()
            if entry.is_dir() and (entry / _MANIFEST_FILENAME).is_file()
        )

    def init_library(
        self,
        root: Path,
        *,
        name: str | None = None,
        description: str | None = None,
        author: str | None = None,
        typescript: bool = True,
        tailwind: bool = True,
        git: bool = True,
        with_examples: bool = False,
    ) -> InitResult:
        """Write ``forge.config.yml`` and the components directory under ``root``."""
        root = root.expanduser().resolve()
        existing = find_config_file(root)
        if existing is not None:
            raise FileExistsError(f"{existing.name} already exists in {root}")

        root.mkdir(parents=True, exist_ok=True)
        config = ForgeConfig(
            root=root,
            name=name or root.name,
            description=description,
            author=author,
            typescript=typescript,
            tailwind=tailwind,
        )
        config_path = save_config(config, root / CONFIG_FILENAMES[0])
        config.components_path.mkdir(parents=True, exist_ok=True)
        self.logger.info("Initialized component library %s in %s", config.name, root)

        result = InitResult(config=config, config_path=config_path)
        if git and not (root / ".git").exists():
            result.git_initialized = self.publisher.init_repository(root)
            if not result.git_initialized:
                self.logger.warning("Failed to initialize git repository; run 'git init' manually if needed")

        if with_examples:
            result.starter = self.add_component(
                config,
                "button",
                template="button",
                description="A customizable button component",
            )
        return result

    def add_component(
        self,
        config: ForgeConfig,
        name: str,
        *,
        template: str = "basic",
        category: str | None = None,
        description: str | None = None,
        display_name: str | None = None,
        tags: Sequence[str] | None = None,
        typescript: bool | None = None,
    ) -> ScaffoldResult:
        """Create ``<componentsDir>/<name>`` from a template and write its descriptor."""
        name = name.strip().lower()
        if not NAME_PATTERN.match(name):
            raise ScaffoldError(NAME_RULE)
        manifest = self._load_manifest(template)

        directory = config.components_path / name
        if directory.exists():
            raise ComponentExistsError(f"Component {name} already exists")

        category = category or config.default_category
        if category not in config.categories:
            self.logger.warning("Category %s is not listed in the library configuration", category)

        use_typescript = config.typescript if typescript is None else typescript
        context = {
            "name": name,
            "pascal": pascal_case(name),
            "camel": camel_case(name),
            "typescript": use_typescript,
            "ext": "ts" if use_typescript else "js",
            "component_ext": "tsx" if use_typescript else "jsx",
        }

        rendered: List[tuple[Dict[str, str], str]] = []
        for template_file in manifest.get("files", []):
            if template_file.get("typescript_only") and not use_typescript:
                continue
            filename = template_file["filename"].format(**context)
            content = self._render(f"{template}/{template_file['source']}", context)
            rendered.append(
                (
                    {
                        "name": name if template_file.get("type", "component") != "type" else f"{name}-types",
                        "path": filename,
                        "type": template_file.get("type", "component"),
                    },
                    content,
                )
            )

        props: List[Dict[str, Any]] = list(manifest.get("props") or [])
        if manifest.get("props_typescript_only") and not use_typescript:
            props = []
        examples = [self.env.from_string(example).render(context) for example in manifest.get("examples") or []]

        raw: Dict[str, Any] = {
            "name": name,
            "displayName": display_name or display_name_for(name),
            "description": description or f"A {name} component",
            "category": category,
            "version": "1.0.0",
            "license": config.license,
            "props": props,
            "dependencies": [],
            "peerDependencies": [],
            "files": [entry for entry, _ in rendered],
            "examples": examples,
            "registryDependencies": [],
            "tags": list(tags) if tags is not None else list(manifest.get("tags") or []),
        }
        if config.author:
            raw["author"] = config.author
        descriptor = parse_descriptor(raw, source=f"{name}/{DESCRIPTOR_FILENAME}")

        directory.mkdir(parents=True)
        written: List[Path] = []
        for entry, content in rendered:
            target = directory / entry["path"]
            target.write_text(content, encoding="utf-8")
            written.append(target)
        descriptor_path = directory / DESCRIPTOR_FILENAME
        write_json(descriptor_path, descriptor.to_dict())
        written.append(descriptor_path)

        self.logger.info("Created %s component from the %s template", name, template)
        return ScaffoldResult(directory=directory, descriptor=descriptor, files=written)

    def _load_manifest(self, template: str) -> Dict[str, Any]:
        manifest_path = self.templates_dir / template / _MANIFEST_FILENAME
        if not manifest_path.is_file():
            choices = ", ".join(self.available_templates())
            raise ScaffoldError(f"Unknown template {template!r}. Choose one of: {choices}")
        loaded = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
        if not isinstance(loaded, dict):
            raise ScaffoldError(f"Template manifest {manifest_path} must contain a mapping")
        return loaded

    def _render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(context)
        except TemplateNotFound as exc:
            raise ScaffoldError(f"Template file not found: {template_name}") from exc


__all__ = [
    "ComponentExistsError",
    "InitResult",
    "ScaffoldError",
    "ScaffoldResult",
    "Scaffolder",
    "TEMPLATES",
    "camel_case",
    "pascal_case",
]
