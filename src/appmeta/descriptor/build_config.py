# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and loader for local build descriptors (``build.config.*``).

Build descriptors are written by hand, so unlike the serialized descriptor
their schema is strict: unknown keys are rejected.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, JsonValue, ValidationError

from appmeta.errors import ErrorKind, MetadataError
from appmeta.utils.documents import DuplicateKeyError, load_json, load_yaml

# ###############
# Public Interface
# ###############

BUILD_CONFIG_BASE_NAME = "build.config"

# Supported extensions in order of priority.
BUILD_CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, strict=True)


class ReferenceConfig(_Strict):
    """Long form of a reference to an interface."""

    name: str
    qualifier: str | None = None
    all: bool | None = None


class ProvidesConfig(_Strict):
    """Long form of a provided interface."""

    name: str
    qualifier: str | None = None


class UiConfig(_Strict):
    references: list[str | ReferenceConfig] | None = None


class ServiceConfig(_Strict):
    """A service entry. Interfaces may be given by name only."""

    provides: str | list[str | ProvidesConfig] | None = None
    references: dict[str, str | ReferenceConfig] | None = None


class PropertyMetaConfig(_Strict):
    required: bool | None = None


class ServiceOverridesConfig(_Strict):
    enabled: bool | None = None


class PackageOverridesConfig(_Strict):
    services: dict[str, ServiceOverridesConfig] | None = None


class ValidationOptions(_Strict):
    require_license: bool | None = Field(default=None, alias="requireLicense")
    require_readme: bool | None = Field(default=None, alias="requireReadme")
    require_changelog: bool | None = Field(default=None, alias="requireChangelog")


class PublishConfig(_Strict):
    assets: str | list[str] | None = None
    types: bool | None = None
    source_maps: bool | None = Field(default=None, alias="sourceMaps")
    strict: bool | None = None
    validation: ValidationOptions | None = None


class BuildConfig(_Strict):
    """The contents of a package's build descriptor."""

    entry_points: str | list[str] | None = Field(default=None, alias="entryPoints")
    styles: str | None = None
    i18n: list[str] | None = None
    services: dict[str, ServiceConfig] | None = None
    services_module: str | None = Field(default=None, alias="servicesModule")
    ui: UiConfig | None = None
    properties: dict[str, JsonValue] | None = None
    properties_meta: dict[str, PropertyMetaConfig] | None = Field(default=None, alias="propertiesMeta")
    overrides: dict[str, PackageOverridesConfig] | None = None
    publish_config: PublishConfig | None = Field(default=None, alias="publishConfig")


def verify_build_config(value: object, source_label: str = "<build config>") -> BuildConfig:
    """Ensure that *value* is a valid build descriptor.

    ``None`` (an empty document) is treated as an empty descriptor.

    Raises:
        MetadataError: With kind ``VALIDATION_ERROR`` if the value does not match the schema.
    """
    if value is None:
        value = {}
    try:
        return BuildConfig.model_validate(value)
    except ValidationError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Validation error in {source_label}: {exc}") from exc


def load_build_config(path: Path) -> BuildConfig:
    """Load and validate the build descriptor at *path*.

    YAML and JSON files are supported, selected by the file extension.

    Args:
        path: Path to the ``build.config.*`` file.

    Returns:
        The validated BuildConfig.

    Raises:
        MetadataError: If the file does not exist (``MISSING_FILE``), cannot be
            read or parsed, or does not match the schema (``VALIDATION_ERROR``).
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MetadataError(ErrorKind.MISSING_FILE, f"The configuration file at {path} does not exist") from None
    except OSError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Cannot read configuration file {path}: {exc}") from exc

    return verify_build_config(_parse_document(text, path), source_label=f"configuration file at {path}")


def is_build_config_name(file_name: str) -> bool:
    """Return True if *file_name* is one of the supported build descriptor names."""
    return file_name in _BUILD_CONFIG_NAMES


def resolve_build_config_path(
    package_dir: Path,
    add_watch_file: Callable[[str], None] | None = None,
) -> Path | None:
    """Return the build descriptor of *package_dir*, if any.

    Candidates are checked in the order of :data:`BUILD_CONFIG_EXTENSIONS`.
    Every candidate up to the match is registered with *add_watch_file*, even if
    it does not exist, so that creating a descriptor later is noticed.
    """
    for file_name in _BUILD_CONFIG_NAMES:
        config_path = package_dir / file_name
        if add_watch_file is not None:
            add_watch_file(str(config_path))
        if config_path.is_file():
            return config_path
    return None


# ################
# Implementation
# ################

_BUILD_CONFIG_NAMES = tuple(BUILD_CONFIG_BASE_NAME + ext for ext in BUILD_CONFIG_EXTENSIONS)


def _parse_document(text: str, path: Path) -> object:
    try:
        if path.suffix == ".json":
            return load_json(text)
        return load_yaml(text)
    except DuplicateKeyError as exc:
        raise MetadataError(ErrorKind.DUPLICATE_DEFINITION, f"Invalid configuration file at {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Invalid JSON in {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Invalid YAML in {path}: {exc}") from exc
