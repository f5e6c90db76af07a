# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model for package configuration and application metadata."""

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
from appmeta.model.metadata import (
    AppMetadata,
    DeclaredPackageMetadata,
    PackageDependency,
    PackageMetadata,
    PlainPackageMetadata,
)

__all__ = [
    # Package configuration
    "PackageConfig",
    "PackageOverrides",
    "Property",
    "ProvidedInterface",
    "Reference",
    "ReferenceType",
    "Service",
    "ServiceOverrides",
    "UiReference",
    # Metadata
    "AppMetadata",
    "DeclaredPackageMetadata",
    "PackageDependency",
    "PackageMetadata",
    "PlainPackageMetadata",
]
