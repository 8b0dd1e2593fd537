"""Tests for forge.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from forge.config import (
    ConfigError,
    ConfigNotFoundError,
    ForgeConfig,
    get_config_value,
    load_config,
    parse_config_value,
    save_config,
    update_config,
)


def test_load_config_requires_a_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFoundError) as excinfo:
        load_config(tmp_path)

    assert "forge init" in str(excinfo.value)


def test_load_config_applies_defaults(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text("name: my-ui\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert isinstance(config, ForgeConfig)
    assert config.root == tmp_path.resolve()
    assert config.name == "my-ui"
    assert config.components_dir == "src/components"
    assert config.output_dir == "public"
    assert config.license == "MIT"
    assert config.version == "1.0.0"
    assert config.categories == ["ui", "forms", "layout", "navigation"]
    assert config.default_category == "ui"
    assert config.typescript is True
    assert config.tailwind is True
    assert config.strict is False
    assert config.on_invalid == "abort"
    assert config.components_path == (tmp_path / "src" / "components").resolve()
    assert config.output_path == (tmp_path / "public").resolve()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text(
        """
name: acme-ui
description: Acme components
author: Acme
repository: https://example.com/acme-ui
componentsDir: components
outputDir: dist
typescript: false
tailwind: "no"
categories: [ui, charts]
defaultCategory: charts
strict: true
onInvalid: exclude
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.description == "Acme components"
    assert config.author == "Acme"
    assert config.repository == "https://example.com/acme-ui"
    assert config.components_dir == "components"
    assert config.output_dir == "dist"
    assert config.typescript is False
    assert config.tailwind is False
    assert config.categories == ["ui", "charts"]
    assert config.default_category == "charts"
    assert config.strict is True
    assert config.on_invalid == "exclude"


def test_load_config_accepts_json_files(tmp_path: Path) -> None:
    (tmp_path / "forge.config.json").write_text(
        json.dumps({"name": "legacy", "componentsDir": "src/ui"}), encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.name == "legacy"
    assert config.components_dir == "src/ui"
    assert config.config_path == tmp_path.resolve() / "forge.config.json"


def test_load_config_collects_type_errors(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text(
        "componentsDir: [a, b]\ntypescript: maybe\nonInvalid: ignore\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    message = str(excinfo.value)
    assert "componentsDir" in message
    assert "typescript" in message
    assert "name: required" in message
    assert "onInvalid" in message


def test_load_config_rejects_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text("name: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_save_config_round_trips_through_yaml(tmp_path: Path) -> None:
    config = ForgeConfig(root=tmp_path, name="saved", author="Ada")

    path = save_config(config)

    assert path == tmp_path / "forge.config.yml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["name"] == "saved"
    assert data["componentsDir"] == "src/components"
    assert "description" not in data
    assert load_config(tmp_path).author == "Ada"


def test_update_config_validates_and_persists(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text("name: before\n", encoding="utf-8")
    config = load_config(tmp_path)

    updated = update_config(config, {"outputDir": "site", "strict": True})

    assert updated.output_dir == "site"
    assert updated.strict is True
    reloaded = load_config(tmp_path)
    assert reloaded.output_dir == "site"
    assert reloaded.strict is True


def test_update_config_rejects_unknown_keys(tmp_path: Path) -> None:
    (tmp_path / "forge.config.yml").write_text("name: before\n", encoding="utf-8")
    config = load_config(tmp_path)

    with pytest.raises(ConfigError):
        update_config(config, {"colour": "blue"})

    with pytest.raises(ConfigError):
        update_config(config, {"typescript": [1, 2]})


def test_get_config_value_accepts_both_spellings(tmp_path: Path) -> None:
    config = ForgeConfig(root=tmp_path, name="lib")

    assert get_config_value(config, "componentsDir") == "src/components"
    assert get_config_value(config, "components_dir") == "src/components"
    with pytest.raises(KeyError):
        get_config_value(config, "missing")


def test_parse_config_value_prefers_json() -> None:
    assert parse_config_value("true") is True
    assert parse_config_value("[\"a\", \"b\"]") == ["a", "b"]
    assert parse_config_value("dist") == "dist"
