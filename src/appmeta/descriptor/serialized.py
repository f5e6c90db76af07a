# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Version 1.x of the serialized package descriptor.

Published packages carry their framework metadata as a JSON object in their
``package.json`` (under :data:`PACKAGE_JSON_KEY`). After the initial release
only compatible changes can be made to this format:

* **Backwards compatibility** (reader newer than writer): metadata written by
  an older toolchain must stay loadable. New properties need sensible defaults.
  If that cannot be maintained, a new *major* format version is required.
* **Forwards compatibility** (writer newer than reader): metadata written by a
  newer patch release of the toolchain must be loadable by an older one.
  If that cannot be maintained, a new *minor* format version is required.

For the same reason the models below ignore unknown fields instead of
rejecting them.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, JsonValue, ValidationError

from appmeta.descriptor.compatibility import is_reader_compatible
from appmeta.descriptor.runtime import check_runtime_version
from appmeta.errors import ErrorKind, MetadataError
from appmeta.model.config import PackageConfig

# ###############
# Public Interface
# ###############

CURRENT_VERSION = "1.0.0"

PACKAGE_JSON_KEY = "frameworkMetadata"

VERSION_FIELD = "packageFormatVersion"


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, strict=True)


class SerializedProvides(_Lenient):
    """An interface provided by a service."""

    interface_name: str = Field(alias="interfaceName")
    qualifier: str | None = None


class SerializedReference(_Lenient):
    """A reference required by a service."""

    type: Literal["all", "unique"]
    reference_name: str = Field(alias="referenceName")
    interface_name: str = Field(alias="interfaceName")
    qualifier: str | None = None


class SerializedUiReference(_Lenient):
    """A reference required by UI components."""

    type: Literal["all", "unique"]
    interface_name: str = Field(alias="interfaceName")
    qualifier: str | None = None


class SerializedService(_Lenient):
    """A service of the package."""

    service_name: str = Field(alias="serviceName")
    provides: list[SerializedProvides] | None = None
    references: list[SerializedReference] | None = None


class SerializedI18n(_Lenient):
    languages: list[str] | None = None


class SerializedUi(_Lenient):
    references: list[SerializedUiReference] | None = None


class SerializedProperty(_Lenient):
    """A package property with its default value."""

    property_name: str = Field(alias="propertyName")
    value: JsonValue = None
    required: bool | None = None


class SerializedPackageMetadata(_Lenient):
    """Framework metadata of a published package (format version 1.x)."""

    package_format_version: str = Field(alias=VERSION_FIELD)
    services: list[SerializedService] | None = None
    services_module: str | None = Field(default=None, alias="servicesModule")
    styles: str | None = None
    i18n: SerializedI18n | None = None
    ui: SerializedUi | None = None
    properties: list[SerializedProperty] | None = None
    runtime_version: str | None = Field(default=None, alias="runtimeVersion")


def parse_package_metadata(json_value: object, source_label: str = "<metadata>") -> SerializedPackageMetadata:
    """Validate a raw serialized descriptor.

    The format version is checked before anything else so that metadata from an
    incompatible toolchain is reported as such instead of as a schema mismatch.

    Args:
        json_value: The raw value found in ``package.json``.
        source_label: Human-readable label used in error messages.

    Returns:
        The validated descriptor.

    Raises:
        MetadataError: With kind ``VALIDATION_ERROR`` if the value does not
            match the schema, ``UNSUPPORTED_FORMAT_VERSION`` if the format
            version cannot be read by this version, or
            ``UNSUPPORTED_RUNTIME_VERSION`` if the required runtime is not
            supported.
    """
    if not isinstance(json_value, dict) or not isinstance(json_value.get(VERSION_FIELD), str):
        raise MetadataError(
            ErrorKind.VALIDATION_ERROR,
            f"{source_label}: expected a JSON object with a valid value for '{VERSION_FIELD}'",
        )

    version = json_value[VERSION_FIELD]
    try:
        compatible = is_reader_compatible(CURRENT_VERSION, version)
    except ValueError as exc:
        raise MetadataError(
            ErrorKind.UNSUPPORTED_FORMAT_VERSION,
            f"{source_label}: cannot determine support status of metadata version '{version}': {exc}",
        ) from exc
    if not compatible:
        raise MetadataError(
            ErrorKind.UNSUPPORTED_FORMAT_VERSION,
            f"{source_label}: this version ({CURRENT_VERSION}) cannot read package metadata of version '{version}'",
        )

    try:
        metadata = SerializedPackageMetadata.model_validate(json_value)
    except ValidationError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"{source_label}: metadata validation failed: {exc}") from exc

    if metadata.runtime_version:
        check_runtime_version(metadata.runtime_version, source_label)
    return metadata


def serialize_package_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Return the JSON representation of *metadata*, stamped with the current format version.

    Args:
        metadata: Raw descriptor fields. ``packageFormatVersion`` may be omitted.

    Returns:
        A plain JSON-compatible dict.

    Raises:
        ValueError: If a different format version is given or the result would
            not pass validation.
    """
    version = metadata.get(VERSION_FIELD)
    if version is not None and version != CURRENT_VERSION:
        raise ValueError(
            f"Invalid package metadata version '{version}': "
            "version should either be omitted or be equal to the current version"
        )

    data = json.loads(json.dumps({**metadata, VERSION_FIELD: CURRENT_VERSION}))
    try:
        SerializedPackageMetadata.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Failed to validate package metadata before writing: {exc}") from exc
    return data


def create_package_metadata_from_config(
    config: PackageConfig,
    *,
    services_module: str | None = None,
    styles: str | None = None,
) -> dict[str, Any]:
    """Produce the serialized descriptor for publishing a package.

    Args:
        config: The package's normalized configuration.
        services_module: Module id of the published services entry point.
            Defaults to the configured services module.
        styles: Module id of the published style sheet. Defaults to the
            configured styles.

    Returns:
        A validated serialized descriptor.
    """
    data: dict[str, Any] = {
        "services": [
            {
                "serviceName": service.service_name,
                "provides": [
                    {"interfaceName": p.interface_name, "qualifier": p.qualifier} for p in service.provides
                ],
                "references": [
                    {
                        "type": ref.type,
                        "referenceName": ref.reference_name,
                        "interfaceName": ref.interface_name,
                        "qualifier": ref.qualifier,
                    }
                    for ref in service.references.values()
                ],
            }
            for service in config.services.values()
        ],
        "servicesModule": services_module if services_module is not None else config.services_module,
        "styles": styles if styles is not None else config.styles,
        "i18n": {"languages": sorted(config.languages)},
        "ui": {
            "references": [
                {"type": ref.type, "interfaceName": ref.interface_name, "qualifier": ref.qualifier}
                for ref in config.ui_references
            ]
        },
        "properties": [
            {"propertyName": p.property_name, "value": p.default_value, "required": p.required}
            for p in config.properties.values()
        ],
        "runtimeVersion": config.runtime_version,
    }
    return serialize_package_metadata(data)
