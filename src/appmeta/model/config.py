# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Canonical, fully typed view of the capabilities declared by a package."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, JsonValue
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############

# "unique" requires exactly one implementation, "all" injects every implementation.
ReferenceType = Literal["unique", "all"]


class ProvidedInterface(BaseModel):
    """An interface implemented by a service."""

    model_config = ConfigDict(frozen=True)

    interface_name: str
    qualifier: str | None = None


class UiReference(BaseModel):
    """An interface required by the UI components of a package."""

    model_config = ConfigDict(frozen=True)

    interface_name: str
    qualifier: str | None = None
    type: ReferenceType = "unique"


class Reference(BaseModel):
    """An interface required by a service, injected under ``reference_name``.

    ``qualifier`` and ``type="all"`` are not meant to be combined.
    """

    model_config = ConfigDict(frozen=True)

    reference_name: str
    interface_name: str
    qualifier: str | None = None
    type: ReferenceType = "unique"


class Service(BaseModel):
    """A named implementation unit. Reference names are unique within a service."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    provides: list[ProvidedInterface] = _Field(default_factory=list)
    references: dict[str, Reference] = _Field(default_factory=dict)


class Property(BaseModel):
    """A configurable package property with its default value."""

    model_config = ConfigDict(frozen=True)

    property_name: str
    default_value: JsonValue = None
    required: bool = False


class ServiceOverrides(BaseModel):
    """Overrides applied by a consuming package to a single foreign service."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    enabled: bool | None = None


class PackageOverrides(BaseModel):
    """Overrides for the services of another package, indexed by service name."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    services: dict[str, ServiceOverrides] = _Field(default_factory=dict)


class PackageConfig(BaseModel):
    """Normalized configuration of a package.

    Attributes:
        services: Services of the package, indexed by service name.
        services_module: Module exporting the service implementations.
        styles: Style entry point, if any.
        languages: Locales the package ships messages for.
        ui_references: Interfaces used by the package's UI components.
        properties: Package properties, indexed by property name.
        overrides: Overrides for other packages, indexed by package name.
            ``None`` if the package does not use overrides at all.
        runtime_version: Runtime version the package was written against.
    """

    model_config = ConfigDict(frozen=True)

    services: dict[str, Service] = _Field(default_factory=dict)
    services_module: str | None = None
    styles: str | None = None
    languages: frozenset[str] = frozenset()
    ui_references: list[UiReference] = _Field(default_factory=list)
    properties: dict[str, Property] = _Field(default_factory=dict)
    overrides: dict[str, PackageOverrides] | None = None
    runtime_version: str
