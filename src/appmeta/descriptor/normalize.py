# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of build descriptors and serialized descriptors into a PackageConfig.

Both entry points produce the same canonical shape. Duplicate service,
reference, property, language or override names are rejected.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import JsonValue

from appmeta.descriptor.build_config import (
    BuildConfig,
    PackageOverridesConfig,
    PropertyMetaConfig,
    ProvidesConfig,
    ReferenceConfig,
    ServiceConfig,
)
from appmeta.descriptor.runtime import CURRENT_RUNTIME_VERSION
from appmeta.descriptor.serialized import (
    SerializedPackageMetadata,
    SerializedProperty,
    SerializedProvides,
    SerializedReference,
    SerializedService,
    SerializedUi,
)
from appmeta.errors import ErrorKind, MetadataError
from appmeta.model.config import (
    PackageConfig,
    PackageOverrides,
    Property,
    ProvidedInterface,
    Reference,
    ReferenceType,
    Service,
    ServiceOverrides,
    UiReference,
)

# ###############
# Public Interface
# ###############

DEFAULT_SERVICES_MODULE = "./services"


def create_package_config_from_build_config(build_config: BuildConfig) -> PackageConfig:
    """Normalize a local build descriptor.

    Raises:
        MetadataError: With kind ``DUPLICATE_DEFINITION`` on repeated names.
    """
    services: dict[str, Service] = {}
    for service_name, service_config in (build_config.services or {}).items():
        _add(services, service_name, _normalize_service(service_name, service_config), "Service")

    ui_references: list[UiReference] = []
    if build_config.ui is not None and build_config.ui.references:
        for reference_config in build_config.ui.references:
            interface_name, qualifier, ref_type = _normalize_reference_common(reference_config)
            ui_references.append(UiReference(interface_name=interface_name, qualifier=qualifier, type=ref_type))

    services_module = build_config.services_module
    if services_module is None and services:
        services_module = DEFAULT_SERVICES_MODULE

    properties_meta = build_config.properties_meta or {}
    properties: dict[str, Property] = {}
    for property_name, value in (build_config.properties or {}).items():
        _add(
            properties,
            property_name,
            _normalize_property(property_name, value, properties_meta.get(property_name)),
            "Property",
        )

    overrides: dict[str, PackageOverrides] | None = None
    if build_config.overrides is not None:
        overrides = {}
        for package_name, package_overrides in build_config.overrides.items():
            _add(
                overrides,
                package_name,
                _normalize_package_overrides(package_name, package_overrides),
                "Overrides for package",
            )

    return PackageConfig(
        services=services,
        services_module=services_module,
        styles=build_config.styles,
        languages=_collect_languages(build_config.i18n),
        ui_references=ui_references,
        properties=properties,
        overrides=overrides,
        runtime_version=CURRENT_RUNTIME_VERSION,
    )


def create_package_config_from_package_metadata(metadata: SerializedPackageMetadata) -> PackageConfig:
    """Read the configuration of a published package from its serialized descriptor.

    Raises:
        MetadataError: With kind ``DUPLICATE_DEFINITION`` on repeated names.
    """
    services: dict[str, Service] = {}
    for service in metadata.services or []:
        _add(services, service.service_name, _read_service(service), "Service")

    properties: dict[str, Property] = {}
    for prop in metadata.properties or []:
        _add(properties, prop.property_name, _read_property(prop), "Property")

    languages = metadata.i18n.languages if metadata.i18n is not None else None
    return PackageConfig(
        services=services,
        services_module=metadata.services_module,
        styles=metadata.styles,
        languages=_collect_languages(languages),
        ui_references=_read_ui_references(metadata.ui),
        properties=properties,
        overrides=None,
        runtime_version=metadata.runtime_version or CURRENT_RUNTIME_VERSION,
    )


# ################
# Implementation
# ################

_T = TypeVar("_T")


def _add(target: dict[str, _T], name: str, value: _T, label: str) -> None:
    if name in target:
        raise MetadataError(ErrorKind.DUPLICATE_DEFINITION, f"{label} '{name}' is already defined.")
    target[name] = value


def _collect_languages(languages: list[str] | None) -> frozenset[str]:
    seen: dict[str, None] = {}
    for lang in languages or []:
        _add(seen, lang, None, "Language")
    return frozenset(seen)


def _normalize_service(service_name: str, config: ServiceConfig) -> Service:
    references: dict[str, Reference] = {}
    for reference_name, reference_config in (config.references or {}).items():
        interface_name, qualifier, ref_type = _normalize_reference_common(reference_config)
        reference = Reference(
            reference_name=reference_name,
            interface_name=interface_name,
            qualifier=qualifier,
            type=ref_type,
        )
        _add(references, reference_name, reference, "Reference")
    return Service(service_name=service_name, provides=_normalize_provides(config.provides), references=references)


def _normalize_reference_common(config: str | ReferenceConfig) -> tuple[str, str | None, ReferenceType]:
    """Expand the string shorthand of a reference into (interface, qualifier, type)."""
    if isinstance(config, str):
        return config, None, "unique"
    ref_type: ReferenceType = "all" if config.all else "unique"
    return config.name, config.qualifier or None, ref_type


def _normalize_provides(config: str | list[str | ProvidesConfig] | None) -> list[ProvidedInterface]:
    if not config:
        return []
    if isinstance(config, str):
        return [ProvidedInterface(interface_name=config)]

    provides: list[ProvidedInterface] = []
    for entry in config:
        if isinstance(entry, str):
            provides.append(ProvidedInterface(interface_name=entry))
        else:
            provides.append(ProvidedInterface(interface_name=entry.name, qualifier=entry.qualifier or None))
    return provides


def _normalize_property(property_name: str, value: JsonValue, meta: PropertyMetaConfig | None) -> Property:
    required = bool(meta is not None and meta.required)
    return Property(property_name=property_name, default_value=value, required=required)


def _normalize_package_overrides(package_name: str, config: PackageOverridesConfig) -> PackageOverrides:
    services: dict[str, ServiceOverrides] = {}
    for service_name, service_overrides in (config.services or {}).items():
        _add(
            services,
            service_name,
            ServiceOverrides(service_name=service_name, enabled=service_overrides.enabled),
            "Overrides for service",
        )
    return PackageOverrides(package_name=package_name, services=services)


def _read_service(service: SerializedService) -> Service:
    references: dict[str, Reference] = {}
    for reference in service.references or []:
        _add(references, reference.reference_name, _read_reference(reference), "Reference")
    return Service(
        service_name=service.service_name,
        provides=[_read_provides(p) for p in service.provides or []],
        references=references,
    )


def _read_provides(provides: SerializedProvides) -> ProvidedInterface:
    return ProvidedInterface(interface_name=provides.interface_name, qualifier=provides.qualifier)


def _read_reference(reference: SerializedReference) -> Reference:
    return Reference(
        reference_name=reference.reference_name,
        interface_name=reference.interface_name,
        qualifier=reference.qualifier,
        type=reference.type,
    )


def _read_ui_references(ui: SerializedUi | None) -> list[UiReference]:
    if ui is None or not ui.references:
        return []
    return [
        UiReference(interface_name=ref.interface_name, qualifier=ref.qualifier, type=ref.type)
        for ref in ui.references
    ]


def _read_property(prop: SerializedProperty) -> Property:
    return Property(property_name=prop.property_name, default_value=prop.value, required=bool(prop.required))
