# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Cache-backed resolution of application metadata.

The repository walks an application's dependency graph, starting from the
application package, and collects the metadata of every package that declares
framework features. Package metadata and i18n files are read on demand and
kept until one of the files they were computed from changes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from appmeta.descriptor.build_config import is_build_config_name
from appmeta.descriptor.runtime import CURRENT_RUNTIME_VERSION, check_runtime_version
from appmeta.descriptor.serialized import PACKAGE_JSON_KEY
from appmeta.errors import ErrorKind, MetadataError
from appmeta.i18n.parser import I18nFile, load_i18n_file
from appmeta.metadata.context import MetadataContext
from appmeta.metadata.loader import PACKAGE_JSON_NAME, load_package_metadata
from appmeta.metadata.resolve import find_package_directory
from appmeta.model.metadata import AppMetadata, DeclaredPackageMetadata, PackageDependency, PlainPackageMetadata
from appmeta.utils.cache import Cache, CacheProvider
from appmeta.utils.paths import normalize_path

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class MetadataRepository:
    """Provides metadata about applications and their packages.

    One repository instance is meant to live as long as the host process (for
    example a development server). Call :meth:`on_file_changed` whenever a
    watched file changes and :meth:`reset` to start over from scratch.
    """

    def __init__(self, source_root: str | Path) -> None:
        """Initialize the repository.

        Args:
            source_root: Source directory of the workspace. Packages inside it
                (and not inside a dependency directory) are treated as local.
        """
        self._source_root = normalize_path(os.path.realpath(source_root))
        self._package_cache: Cache[str, _MetadataEntry] = Cache(_PackageMetadataProvider(self._source_root))
        self._i18n_cache: Cache[str, _I18nEntry] = Cache(_I18nProvider())
        self._runtime_version: str | None = None

    @property
    def source_root(self) -> str:
        return self._source_root

    def reset(self) -> None:
        """Discard all cached data."""
        self._package_cache = Cache(_PackageMetadataProvider(self._source_root))
        self._i18n_cache = Cache(_I18nProvider())
        self._runtime_version = None

    def on_file_changed(self, path: str) -> None:
        """Drop all cached data derived from the file at *path*."""
        file_name = Path(path).name
        if file_name == PACKAGE_JSON_NAME or is_build_config_name(file_name):
            self._package_cache.invalidate(str(Path(path).parent))
        self._i18n_cache.invalidate(path)

    async def get_app_metadata(self, ctx: MetadataContext, app_directory: str | Path) -> AppMetadata:
        """Return the combined metadata of the application in *app_directory*.

        Dependencies are visited recursively, starting from the application's
        ``package.json``. Sibling dependencies are loaded concurrently. A
        package that is already known by name is not visited again, so
        dependency cycles terminate.

        Returns:
            The application metadata. ``packages`` lists the application package
            first, followed by all other declared packages sorted by name.

        Raises:
            MetadataError: If any package of the application cannot be resolved.
                No partial result is returned.
        """
        logger.debug("Request for app metadata of %s", app_directory)
        app_dir = normalize_path(await asyncio.to_thread(os.path.realpath, app_directory))
        app_package = await self._get_package_metadata(
            ctx, app_dir, imported_from=None, allow_missing_build_config=False
        )
        if app_package is None:
            raise MetadataError(
                ErrorKind.MISSING_FILE,
                f"Failed to parse app metadata in {app_dir}. Ensure that the app is a valid local package.",
            )

        packages_by_name: dict[str, DeclaredPackageMetadata] = {app_package.name: app_package}

        async def visit_dependencies(dependencies: list[PackageDependency], imported_from: str) -> None:
            await asyncio.gather(*(visit_dependency(dependency, imported_from) for dependency in dependencies))

        async def visit_dependency(dependency: PackageDependency, imported_from: str) -> None:
            package_dir = await self._resolve_dependency(dependency, imported_from)
            if package_dir is None:
                return

            metadata = await self._get_package_metadata(
                ctx, package_dir, imported_from=imported_from, allow_missing_build_config=True
            )
            if metadata is None:
                return

            existing = packages_by_name.get(metadata.name)
            if existing is not None:
                if existing.directory != metadata.directory:
                    raise MetadataError(
                        ErrorKind.DUPLICATE_PACKAGE_LOCATION,
                        f"Encountered the package '{metadata.name}' at two different locations.\n"
                        f"Packages cannot be used more than once in the same application.\n"
                        f"All packages must use a common version of '{metadata.name}'.\n"
                        f"\n"
                        f"1. {_format_package(existing)}\n"
                        f"\n"
                        f"2. {_format_package(metadata)}",
                    )
                logger.debug("Skipping already visited package at %s", metadata.directory)
                return

            packages_by_name[metadata.name] = metadata
            await visit_dependencies(metadata.dependencies, metadata.package_json_path)

        await visit_dependencies(app_package.dependencies, app_package.package_json_path)

        dependencies = sorted(
            (package for name, package in packages_by_name.items() if name != app_package.name),
            key=lambda package: package.name,
        )
        return AppMetadata(
            name=app_package.name,
            directory=app_package.directory,
            package_json_path=app_package.package_json_path,
            locales=app_package.locales,
            app_package=app_package,
            packages=[app_package, *dependencies],
        )

    async def get_i18n_file(self, ctx: MetadataContext, path: str) -> I18nFile:
        """Return the parsed contents of the i18n file at *path*."""
        entry = await self._i18n_cache.get(path, ctx)
        _propagate_watch_files(entry.watch_files, ctx)
        return entry.i18n

    async def get_runtime_version(self) -> str:
        """Return the runtime version declared by the workspace's root package.

        The root ``package.json`` is expected in the parent directory of the
        source root. Without such a file, or without a declared runtime version,
        :data:`CURRENT_RUNTIME_VERSION` is returned.

        Raises:
            MetadataError: If the root package cannot be read or declares a
                runtime version that is not supported.
        """
        if self._runtime_version is None:
            self._runtime_version = await asyncio.to_thread(_read_root_runtime_version, self._source_root)
        return self._runtime_version

    async def _get_package_metadata(
        self,
        ctx: MetadataContext,
        package_dir: str,
        *,
        imported_from: str | None,
        allow_missing_build_config: bool,
    ) -> DeclaredPackageMetadata | None:
        """Load a package through the cache. Returns None for plain packages."""
        entry = await self._package_cache.get(package_dir, ctx, imported_from, allow_missing_build_config)
        _propagate_watch_files(entry.watch_files, ctx)

        if isinstance(entry.metadata, PlainPackageMetadata):
            logger.debug("Skipping plain package at %s", package_dir)
            return None
        return entry.metadata

    async def _resolve_dependency(self, dependency: PackageDependency, imported_from: str) -> str | None:
        package_name = dependency.package_name
        package_dir = await asyncio.to_thread(find_package_directory, package_name, imported_from)
        if package_dir is None:
            if dependency.optional:
                logger.debug("Optional package '%s' was not found", package_name)
                return None
            raise MetadataError(
                ErrorKind.MISSING_DEPENDENCY,
                f"Failed to find package '{package_name}' (from '{imported_from}'), "
                "is the dependency installed correctly?",
            )
        logger.debug("Found package '%s' at %s", package_name, package_dir)
        return package_dir


# ################
# Implementation
# ################


@dataclass(frozen=True)
class _MetadataEntry:
    """Package metadata together with the files it was computed from.

    The watch files are replayed to callers receiving a cached entry, so that
    their output depends on the same files.
    """

    metadata: PlainPackageMetadata | DeclaredPackageMetadata
    watch_files: frozenset[str]


@dataclass(frozen=True)
class _I18nEntry:
    i18n: I18nFile
    watch_files: frozenset[str]


class _TrackingContext:
    """Forwards to another context and records every watch file."""

    def __init__(self, ctx: MetadataContext) -> None:
        self._ctx = ctx
        self.watch_files: set[str] = set()

    def add_watch_file(self, path: str) -> None:
        self._ctx.add_watch_file(path)
        self.watch_files.add(path)

    async def resolve(self, module_id: str, importer: str) -> str | None:
        return await self._ctx.resolve(module_id, importer)

    def warn(self, message: str) -> None:
        self._ctx.warn(message)


class _PackageMetadataProvider(CacheProvider[str, _MetadataEntry]):
    def __init__(self, source_root: str) -> None:
        self._source_root = source_root

    def get_id(self, key: str) -> str:
        return normalize_path(key)

    async def get_value(
        self,
        key: str,
        ctx: MetadataContext,
        imported_from: str | None,
        allow_missing_build_config: bool,
    ) -> _MetadataEntry:
        logger.debug("Loading metadata for package at %s (imported from %s)", key, imported_from or "N/A")
        tracking_ctx = _TrackingContext(ctx)
        metadata = await load_package_metadata(
            tracking_ctx,
            key,
            source_root=self._source_root,
            imported_from=imported_from,
            allow_missing_build_config=allow_missing_build_config,
        )
        return _MetadataEntry(metadata=metadata, watch_files=frozenset(tracking_ctx.watch_files))

    def on_invalidate(self, key: str, old_value: _MetadataEntry) -> None:
        logger.debug("Removed cache entry for '%s'", old_value.metadata.name)

    def on_cached_return(self, key: str, value: _MetadataEntry) -> None:
        logger.debug("Returning cached metadata for '%s'", value.metadata.name)


class _I18nProvider(CacheProvider[str, _I18nEntry]):
    def get_id(self, key: str) -> str:
        return normalize_path(key)

    async def get_value(self, key: str, ctx: MetadataContext) -> _I18nEntry:
        logger.debug("Loading i18n file %s", key)
        # Watch before loading so that changes during the read are not missed.
        ctx.add_watch_file(key)
        i18n = await asyncio.to_thread(load_i18n_file, Path(key))
        return _I18nEntry(i18n=i18n, watch_files=frozenset([key]))

    def on_invalidate(self, key: str, old_value: _I18nEntry) -> None:
        logger.debug("Removed cache entry for i18n file %s", key)

    def on_cached_return(self, key: str, value: _I18nEntry) -> None:
        logger.debug("Returning cached entry for i18n file %s", key)


def _propagate_watch_files(watch_files: frozenset[str], ctx: MetadataContext) -> None:
    for path in watch_files:
        ctx.add_watch_file(path)


def _format_package(metadata: DeclaredPackageMetadata) -> str:
    version = metadata.version or "<unknown>"
    return f"{metadata.name}@{version} at {metadata.directory}"


def _read_root_runtime_version(source_root: str) -> str:
    package_json_path = Path(source_root).parent / PACKAGE_JSON_NAME
    if not package_json_path.is_file():
        logger.debug("No root package found next to %s, using runtime %s", source_root, CURRENT_RUNTIME_VERSION)
        return CURRENT_RUNTIME_VERSION

    try:
        data = json.loads(package_json_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Failed to read {package_json_path}: {exc}") from exc

    framework_metadata = data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
    runtime_version = framework_metadata.get("runtimeVersion") if isinstance(framework_metadata, dict) else None
    if runtime_version is None:
        return CURRENT_RUNTIME_VERSION
    if not isinstance(runtime_version, str):
        raise MetadataError(
            ErrorKind.UNSUPPORTED_RUNTIME_VERSION,
            f"Unsupported runtime version {runtime_version!r} in {package_json_path}",
        )

    check_runtime_version(runtime_version, str(package_json_path))
    logger.debug("Using runtime version %s from %s", runtime_version, package_json_path)
    return runtime_version
