# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discovery of all declared packages used inside a source tree."""

from __future__ import annotations

import asyncio
import logging
import os
import posixpath
from pathlib import Path

from appmeta.metadata.loader import PACKAGE_JSON_NAME, load_package_metadata
from appmeta.metadata.resolve import DEPENDENCY_DIRECTORY, find_package_directory
from appmeta.model.metadata import DeclaredPackageMetadata, PlainPackageMetadata
from appmeta.utils.paths import normalize_path

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


async def find_packages(source_root: str | Path) -> list[DeclaredPackageMetadata]:
    """Find every declared package in *source_root* and in its dependencies.

    All ``package.json`` files below *source_root* (outside of dependency
    directories) are visited, followed by the installed dependencies of every
    declared package found along the way. Local packages without a build
    descriptor are treated as plain packages and skipped.

    Entry points are not resolved against the file system: the returned
    ``services_module_path`` and ``css_file_path`` are the declared module ids
    joined to the package directory.

    Returns:
        The declared packages, sorted by name.

    Raises:
        MetadataError: If any visited package is malformed.
    """
    root = normalize_path(await asyncio.to_thread(os.path.realpath, source_root))
    ctx = _DiscoveryContext()

    seen: set[str] = set()
    work_queue: list[str] = []

    def visit(package_dir: str) -> None:
        if package_dir in seen:
            return
        seen.add(package_dir)
        work_queue.append(package_dir)

    for package_json in await asyncio.to_thread(_find_local_package_json_files, Path(root)):
        visit(normalize_path(package_json.parent))

    packages: list[DeclaredPackageMetadata] = []
    while work_queue:
        package_dir = work_queue.pop()
        metadata = await load_package_metadata(ctx, package_dir, source_root=root, allow_missing_build_config=True)
        if isinstance(metadata, PlainPackageMetadata):
            continue

        packages.append(metadata)
        for dependency in metadata.dependencies:
            dependency_dir = await asyncio.to_thread(
                find_package_directory, dependency.package_name, metadata.package_json_path
            )
            if dependency_dir is not None:
                visit(dependency_dir)

    packages.sort(key=lambda package: package.name)
    return packages


# ################
# Implementation
# ################


class _DiscoveryContext:
    """Context that does not watch files and resolves module ids without probing the file system."""

    def add_watch_file(self, path: str) -> None:
        pass

    async def resolve(self, module_id: str, importer: str) -> str | None:
        return posixpath.normpath(posixpath.join(posixpath.dirname(importer), module_id))

    def warn(self, message: str) -> None:
        logger.debug("Problem during package discovery: %s", message)


def _find_local_package_json_files(source_root: Path) -> list[Path]:
    return sorted(
        path
        for path in source_root.rglob(PACKAGE_JSON_NAME)
        if DEPENDENCY_DIRECTORY not in path.relative_to(source_root).parts
    )
