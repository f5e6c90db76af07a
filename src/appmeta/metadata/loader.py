# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of a single package's metadata.

Depending on its location, a package's configuration is read either from its
build descriptor (packages inside the source tree) or from the serialized
descriptor in its ``package.json`` (published packages).
"""

from __future__ import annotations

import asyncio
import json
import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from appmeta.descriptor.build_config import BUILD_CONFIG_BASE_NAME, load_build_config, resolve_build_config_path
from appmeta.descriptor.normalize import (
    DEFAULT_SERVICES_MODULE,
    create_package_config_from_build_config,
    create_package_config_from_package_metadata,
)
from appmeta.descriptor.serialized import PACKAGE_JSON_KEY, parse_package_metadata
from appmeta.errors import ErrorKind, MetadataError
from appmeta.metadata.context import MetadataContext
from appmeta.metadata.resolve import is_local_package
from appmeta.model.config import PackageConfig
from appmeta.model.metadata import DeclaredPackageMetadata, PackageDependency, PlainPackageMetadata
from appmeta.utils.paths import normalize_path

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

PACKAGE_JSON_NAME = "package.json"

I18N_DIRECTORY = "i18n"


@dataclass
class PackageJson:
    """The parts of a ``package.json`` file relevant for metadata resolution.

    Attributes:
        name: Package name.
        version: Package version, if any.
        dependencies: Merged runtime, peer and optional dependencies. A
            dependency is optional only if every declaration of it is optional.
        framework_metadata: The raw serialized descriptor, if present.
    """

    name: str
    version: str | None = None
    dependencies: list[PackageDependency] = field(default_factory=list)
    framework_metadata: object | None = None


async def read_package_json(path: Path) -> PackageJson:
    """Read and validate the ``package.json`` file at *path*.

    Raises:
        MetadataError: ``MISSING_FILE`` if the file does not exist,
            ``VALIDATION_ERROR`` if it cannot be parsed or has an invalid shape.
    """
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except FileNotFoundError:
        raise MetadataError(ErrorKind.MISSING_FILE, f"Expected a '{PACKAGE_JSON_NAME}' file at {path}") from None
    except OSError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Failed to read {path}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Invalid JSON in {path}: {exc}") from exc

    return _parse_package_json(data, str(path))


async def load_package_metadata(
    ctx: MetadataContext,
    package_dir: str,
    *,
    source_root: str,
    imported_from: str | None = None,
    allow_missing_build_config: bool = False,
) -> PlainPackageMetadata | DeclaredPackageMetadata:
    """Read the metadata of the package in *package_dir*.

    Args:
        ctx: Host capabilities. Every file read is registered as a watch file.
        package_dir: Absolute path of the package directory.
        source_root: Root of the source tree, used to tell local packages from
            published ones.
        imported_from: The ``package.json`` of the package that depends on this
            one, or None for the application itself.
        allow_missing_build_config: Treat a local package without any descriptor
            as a plain package instead of failing.

    Returns:
        A declared package, or a plain package if it carries no framework metadata.

    Raises:
        MetadataError: If the package is malformed or references missing files.
    """
    reader = _PackageMetadataReader(ctx, package_dir, source_root, imported_from, allow_missing_build_config)
    return await reader.read()


# ################
# Implementation
# ################

_Mode = Literal["local", "external"]


class _PackageMetadataReader:
    def __init__(
        self,
        ctx: MetadataContext,
        package_dir: str,
        source_root: str,
        imported_from: str | None,
        allow_missing_build_config: bool,
    ) -> None:
        self._ctx = ctx
        self._package_dir = normalize_path(package_dir)
        self._source_root = source_root
        self._package_json_path = normalize_path(Path(package_dir) / PACKAGE_JSON_NAME)
        self._imported_from = imported_from
        self._allow_missing_build_config = allow_missing_build_config

    async def read(self) -> PlainPackageMetadata | DeclaredPackageMetadata:
        ctx = self._ctx
        package_dir = self._package_dir
        mode: _Mode = "local" if is_local_package(package_dir, self._source_root) else "external"
        logger.debug("Visiting package directory %s in mode %s", package_dir, mode)

        # The package.json is always needed to detect the package's kind and dependencies.
        ctx.add_watch_file(self._package_json_path)
        package_json = await read_package_json(Path(self._package_json_path))

        config = await self._read_config(mode, package_json)
        if config is None:
            return PlainPackageMetadata(name=package_json.name, version=package_json.version, directory=package_dir)

        services_module_path = None
        if config.services:
            services_module_path = await self._resolve_services_module(mode, package_json.name, config)

        css_file_path = None
        if config.styles:
            css_file_path = await self._resolve_local_file(config.styles)
            if css_file_path is None:
                raise MetadataError(
                    ErrorKind.MISSING_FILE,
                    f"Failed to find css file '{config.styles}' of package '{package_json.name}' in {package_dir}",
                )

        i18n_paths = await self._collect_i18n_paths(package_json.name, config)

        return DeclaredPackageMetadata(
            name=package_json.name,
            version=package_json.version,
            directory=package_dir,
            package_json_path=self._package_json_path,
            services_module_path=services_module_path,
            css_file_path=css_file_path,
            i18n_paths=i18n_paths,
            dependencies=package_json.dependencies,
            config=config,
            runtime_version=config.runtime_version,
        )

    async def _read_config(self, mode: _Mode, package_json: PackageJson) -> PackageConfig | None:
        """Read the package configuration from the source appropriate for *mode*.

        Returns None for packages without framework metadata.
        """
        package_name = package_json.name
        framework_metadata = package_json.framework_metadata

        if mode == "external":
            if framework_metadata is None:
                return None
            return self._parse_config_from_metadata(package_name, framework_metadata)

        package_dir = self._package_dir
        build_config_path = await asyncio.to_thread(
            resolve_build_config_path, Path(package_dir), self._ctx.add_watch_file
        )
        if build_config_path is not None and framework_metadata is not None:
            raise MetadataError(
                ErrorKind.AMBIGUOUS_CONFIGURATION,
                f"Package '{package_name}' at {package_dir} contains both framework metadata in its "
                f"{PACKAGE_JSON_NAME} and a build descriptor ({build_config_path.name}). "
                f"Mixing both formats is not supported: metadata in {PACKAGE_JSON_NAME} files is only "
                "intended for published packages.",
            )

        if framework_metadata is not None:
            self._ctx.warn(
                f"Using framework metadata from {PACKAGE_JSON_NAME} instead of a build descriptor "
                f"in {package_dir}, make sure that this is intended."
            )
            return self._parse_config_from_metadata(package_name, framework_metadata)

        if build_config_path is None:
            if self._allow_missing_build_config:
                return None
            raise MetadataError(
                ErrorKind.MISSING_FILE,
                f"Expected a build descriptor ({BUILD_CONFIG_BASE_NAME}.yaml, .yml or .json) "
                f"for package '{package_name}' in {package_dir}",
            )

        build_config = await asyncio.to_thread(load_build_config, build_config_path)
        try:
            return create_package_config_from_build_config(build_config)
        except MetadataError as exc:
            raise MetadataError(exc.kind, f"Invalid build descriptor {build_config_path}: {exc}") from exc

    def _parse_config_from_metadata(self, package_name: str, framework_metadata: object) -> PackageConfig:
        label = f"package '{package_name}' in {self._package_dir}"
        try:
            metadata = parse_package_metadata(framework_metadata, source_label=label)
            return create_package_config_from_package_metadata(metadata)
        except MetadataError as exc:
            if exc.kind is ErrorKind.UNSUPPORTED_FORMAT_VERSION:
                raise MetadataError(
                    exc.kind, f"Package '{package_name}' uses an unsupported package metadata version. {exc}"
                ) from exc
            raise MetadataError(exc.kind, f"Failed to parse metadata of {label}: {exc}") from exc

    async def _resolve_services_module(self, mode: _Mode, package_name: str, config: PackageConfig) -> str:
        module_id = config.services_module or DEFAULT_SERVICES_MODULE
        if mode == "external" and self._imported_from is not None:
            # Imported by public name, e.g. "some-package/services".
            return posixpath.normpath(posixpath.join(package_name, module_id))

        resolved = await self._resolve_local_file(module_id)
        if resolved is None:
            raise MetadataError(
                ErrorKind.MISSING_FILE,
                f"Failed to resolve services entry point '{module_id}' of package '{package_name}' "
                f"in {self._package_dir}",
            )
        return resolved

    async def _resolve_local_file(self, module_id: str) -> str | None:
        if not module_id.startswith(("./", "../")):
            module_id = f"./{module_id}"
        return await self._ctx.resolve(module_id, self._package_json_path)

    async def _collect_i18n_paths(self, package_name: str, config: PackageConfig) -> dict[str, str]:
        """Compute the i18n file of every declared locale and require it to exist."""
        i18n_paths: dict[str, str] = {}
        for locale in sorted(config.languages):
            path = normalize_path(Path(self._package_dir) / I18N_DIRECTORY / f"{locale}.yaml")
            self._ctx.add_watch_file(path)
            if not await asyncio.to_thread(Path(path).is_file):
                raise MetadataError(
                    ErrorKind.MISSING_FILE,
                    f"I18n file of package '{package_name}' for locale '{locale}' does not exist: '{path}'",
                )
            i18n_paths[locale] = path
        return i18n_paths


def _parse_package_json(data: Any, source_label: str) -> PackageJson:
    if not isinstance(data, dict):
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"{source_label}: expected a JSON object")

    name = data.get("name")
    if not isinstance(name, str):
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Expected 'name' to be a string in {source_label}")

    version = data.get("version")
    if version is not None and not isinstance(version, str):
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Expected 'version' to be a string in {source_label}")

    dependencies = _require_mapping(data, "dependencies", source_label)
    peer_dependencies = _require_mapping(data, "peerDependencies", source_label)
    optional_dependencies = _require_mapping(data, "optionalDependencies", source_label)
    peer_meta = data.get("peerDependenciesMeta") or {}
    if not isinstance(peer_meta, dict):
        peer_meta = {}

    merged: dict[str, bool] = {}

    def add_dependency(dependency_name: str, optional: bool) -> None:
        merged[dependency_name] = merged.get(dependency_name, True) and optional

    for dependency_name in dependencies:
        add_dependency(dependency_name, False)
    for dependency_name in peer_dependencies:
        meta = peer_meta.get(dependency_name)
        add_dependency(dependency_name, isinstance(meta, dict) and meta.get("optional") is True)
    for dependency_name in optional_dependencies:
        add_dependency(dependency_name, True)

    return PackageJson(
        name=name,
        version=version,
        dependencies=[PackageDependency(package_name=n, optional=o) for n, o in merged.items()],
        framework_metadata=data.get(PACKAGE_JSON_KEY),
    )


def _require_mapping(data: dict[str, Any], key: str, source_label: str) -> dict[str, Any]:
    """Extract an optional mapping field, raising MetadataError if it has the wrong type."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Expected a valid '{key}' object in {source_label}")
    return value
