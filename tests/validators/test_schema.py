"""Tests for descriptor schema validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from forge.validators import SchemaError, load_descriptor, parse_descriptor
from forge.validators.base import PARSE, SCHEMA


def _minimal(**overrides):
    data = {
        "name": "button",
        "displayName": "Button",
        "description": "A button",
        "files": [{"name": "button", "path": "button.tsx"}],
    }
    data.update(overrides)
    return data


def test_parse_descriptor_applies_defaults() -> None:
    descriptor = parse_descriptor(_minimal())

    assert descriptor.category == "ui"
    assert descriptor.version == "1.0.0"
    assert descriptor.license == "MIT"
    assert descriptor.props == []
    assert descriptor.dependencies == []
    assert descriptor.peer_dependencies == []
    assert descriptor.registry_dependencies == []
    assert descriptor.tags == []
    assert descriptor.files[0].type == "component"
    assert descriptor.private is False
    assert descriptor.deprecated is False


def test_parse_descriptor_reads_camel_case_fields() -> None:
    descriptor = parse_descriptor(
        _minimal(
            peerDependencies=[{"name": "react", "version": "^18.0.0"}],
            registryDependencies=["icon"],
            tailwind={"css": ["base.css"]},
            props=[{"name": "size", "type": "string", "default": None}],
        )
    )

    assert descriptor.peer_dependencies[0].name == "react"
    assert descriptor.registry_dependencies == ["icon"]
    assert descriptor.tailwind is not None and descriptor.tailwind.css == ["base.css"]
    assert descriptor.props[0].has_default is True


def test_to_dict_uses_camel_case_and_keeps_explicit_null_defaults() -> None:
    descriptor = parse_descriptor(
        _minimal(props=[{"name": "size", "type": "string", "default": None}, {"name": "x", "type": "number"}])
    )

    data = descriptor.to_dict()

    assert data["displayName"] == "Button"
    assert data["peerDependencies"] == []
    assert "author" not in data
    assert data["props"][0]["default"] is None
    assert "default" not in data["props"][1]


def test_missing_required_fields_are_reported() -> None:
    with pytest.raises(SchemaError) as excinfo:
        parse_descriptor({"name": "button"})

    fields = {violation.field for violation in excinfo.value.violations}
    assert {"displayName", "description", "files"} <= fields
    assert excinfo.value.kind == SCHEMA


def test_invalid_name_pattern_is_reported() -> None:
    with pytest.raises(SchemaError) as excinfo:
        parse_descriptor(_minimal(name="MyButton"))

    violation = excinfo.value.violations[0]
    assert violation.field == "name"
    assert "lowercase" in violation.message


def test_unknown_file_type_is_reported() -> None:
    with pytest.raises(SchemaError) as excinfo:
        parse_descriptor(_minimal(files=[{"name": "x", "path": "x.css", "type": "style"}]))

    assert excinfo.value.violations[0].field == "files.0.type"


def test_non_object_descriptor_is_rejected() -> None:
    with pytest.raises(SchemaError) as excinfo:
        parse_descriptor(["not", "an", "object"])

    issues = excinfo.value.to_issues("button")
    assert issues[0].message == "Descriptor must be a JSON object"


def test_load_descriptor_reports_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "component.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(SchemaError) as excinfo:
        load_descriptor(path)

    assert excinfo.value.kind == PARSE
    assert excinfo.value.to_issues("button")[0].kind == PARSE


def test_load_descriptor_reports_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "component.json"
    path.write_bytes(b'{"name": "caf\xe9"}')

    with pytest.raises(SchemaError) as excinfo:
        load_descriptor(path)

    assert excinfo.value.kind == PARSE
    assert "UTF-8" in excinfo.value.to_issues("cafe")[0].message
