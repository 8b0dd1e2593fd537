"""Typed records for component descriptors and the generated registry."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DESCRIPTOR_FILENAME = "component.json"
NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")
NAME_RULE = (
    "Component name must be lowercase, start with a letter, and contain only "
    "letters, numbers, and hyphens"
)

FileType = Literal["component", "hook", "utility", "type"]
FILE_TYPES: tuple[str, ...] = ("component", "hook", "utility", "type")


class _Record(BaseModel):
    """Base for camelCase JSON records; unknown keys are dropped on parse."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ComponentProp(_Record):
    name: str
    type: str
    required: bool = False
    default: Any = None
    description: Optional[str] = None

    @property
    def has_default(self) -> bool:
        """True when the descriptor declared ``default``, even as ``null``."""
        return "default" in self.model_fields_set


class ComponentDependency(_Record):
    name: str
    version: Optional[str] = None
    dev: bool = False


class ComponentFile(_Record):
    name: str
    path: str
    type: FileType = "component"


class TailwindSettings(_Record):
    config: Optional[Dict[str, Any]] = None
    css: List[str] = Field(default_factory=list)


class ComponentDescriptor(_Record):
    """Fully defaulted contents of a ``component.json`` file."""

    name: str
    display_name: str
    description: str
    category: str = "ui"
    version: str = "1.0.0"
    author: Optional[str] = None
    license: str = "MIT"

    props: List[ComponentProp] = Field(default_factory=list)
    dependencies: List[ComponentDependency] = Field(default_factory=list)
    peer_dependencies: List[ComponentDependency] = Field(default_factory=list)

    files: List[ComponentFile]

    examples: List[str] = Field(default_factory=list)
    docs: Optional[str] = None

    registry_dependencies: List[str] = Field(default_factory=list)
    tailwind: Optional[TailwindSettings] = None

    tags: List[str] = Field(default_factory=list)
    preview: Optional[str] = None

    private: bool = False
    deprecated: bool = False
    experimental: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError(NAME_RULE)
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with camelCase keys, omitting absent optional fields."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        for index, prop in enumerate(self.props):
            if prop.has_default and prop.default is None:
                data["props"][index]["default"] = None
        return data


class RegistryDocument(_Record):
    """Aggregate written to ``registry.json`` by a build."""

    name: str
    description: str = ""
    version: str = "1.0.0"
    author: str = ""
    license: str = "MIT"
    repository: str = ""
    homepage: str = ""
    components: List[ComponentDescriptor] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude={"components"})
        data["components"] = [component.to_dict() for component in self.components]
        ordered = {key: data[key] for key in _REGISTRY_KEY_ORDER}
        return ordered

    def components_by_category(self) -> Dict[str, List[ComponentDescriptor]]:
        grouped: Dict[str, List[ComponentDescriptor]] = {category: [] for category in self.categories}
        for component in self.components:
            grouped.setdefault(component.category, []).append(component)
        return grouped


_REGISTRY_KEY_ORDER = (
    "name",
    "description",
    "version",
    "author",
    "license",
    "repository",
    "homepage",
    "components",
    "categories",
    "tags",
    "lastUpdated",
)


__all__ = [
    "DESCRIPTOR_FILENAME",
    "FILE_TYPES",
    "NAME_PATTERN",
    "NAME_RULE",
    "ComponentDependency",
    "ComponentDescriptor",
    "ComponentFile",
    "ComponentProp",
    "FileType",
    "RegistryDocument",
    "TailwindSettings",
]
