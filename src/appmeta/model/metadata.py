# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build-time metadata of packages and applications."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

from appmeta.model.config import PackageConfig

# ###############
# Public Interface
# ###############


class PackageDependency(BaseModel):
    """A dependency edge declared in a package's ``package.json``.

    Optional dependencies may be absent on disk without causing an error.
    """

    model_config = ConfigDict(frozen=True)

    package_name: str
    optional: bool = False


class PlainPackageMetadata(BaseModel):
    """A package without any framework metadata.

    Such packages are remembered so that the analysis does not repeat itself,
    but they do not contribute to the application.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    name: str
    version: str | None = None
    directory: str


class DeclaredPackageMetadata(BaseModel):
    """A package that declares services, styles, i18n or other framework features.

    Attributes:
        name: Package name from ``package.json``.
        version: Package version, if declared.
        directory: Absolute, normalized package directory.
        package_json_path: Path of the package's ``package.json``.
        services_module_path: Resolved services entry point (only if the package has services).
        css_file_path: Resolved style entry point (only if the package declares styles).
        i18n_paths: I18n file per supported locale.
        dependencies: Runtime, peer and optional dependencies.
        config: The normalized package configuration.
        runtime_version: The runtime version required by the package.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["declared"] = "declared"
    name: str
    version: str | None = None
    directory: str
    package_json_path: str
    services_module_path: str | None = None
    css_file_path: str | None = None
    i18n_paths: dict[str, str] = _Field(default_factory=dict)
    dependencies: list[PackageDependency] = _Field(default_factory=list)
    config: PackageConfig
    runtime_version: str

    @property
    def locales(self) -> list[str]:
        """Locales supported by this package (the keys of ``i18n_paths``)."""
        return list(self.i18n_paths)


# Metadata of any package encountered during dependency analysis.
PackageMetadata = Annotated[
    PlainPackageMetadata | DeclaredPackageMetadata,
    _Field(discriminator="kind"),
]


class AppMetadata(BaseModel):
    """Combined metadata of an application and all packages it uses.

    Attributes:
        name: Application (package) name.
        directory: Application directory on disk.
        package_json_path: Path to the application's ``package.json``.
        locales: Locales required by the application.
        app_package: Metadata of the application package itself.
        packages: Every declared package used by the application, including
            the application package. Names are unique.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    directory: str
    package_json_path: str
    locales: list[str] = _Field(default_factory=list)
    app_package: DeclaredPackageMetadata
    packages: list[DeclaredPackageMetadata] = _Field(default_factory=list)
