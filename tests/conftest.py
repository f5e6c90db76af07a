# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for building package trees on disk."""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# ###############
# Helpers
# ###############


def _write_package(
    directory: Path,
    name: str,
    *,
    version: str | None = "1.0.0",
    dependencies: list[str] | None = None,
    peer_dependencies: list[str] | None = None,
    optional_dependencies: list[str] | None = None,
    peer_dependencies_meta: dict[str, Any] | None = None,
    framework_metadata: dict[str, Any] | None = None,
    build_config: str | None = None,
    build_config_name: str = "build.config.yaml",
    i18n: dict[str, str] | None = None,
    files: dict[str, str] | None = None,
) -> Path:
    """Create a package directory with a package.json and optional extra files."""
    directory.mkdir(parents=True, exist_ok=True)
    package_json: dict[str, Any] = {"name": name}
    if version is not None:
        package_json["version"] = version
    if dependencies:
        package_json["dependencies"] = {dep: "*" for dep in dependencies}
    if peer_dependencies:
        package_json["peerDependencies"] = {dep: "*" for dep in peer_dependencies}
    if optional_dependencies:
        package_json["optionalDependencies"] = {dep: "*" for dep in optional_dependencies}
    if peer_dependencies_meta:
        package_json["peerDependenciesMeta"] = peer_dependencies_meta
    if framework_metadata is not None:
        package_json["frameworkMetadata"] = framework_metadata
    (directory / "package.json").write_text(json.dumps(package_json, indent=2), encoding="utf-8")

    if build_config is not None:
        (directory / build_config_name).write_text(build_config, encoding="utf-8")
    for locale, content in (i18n or {}).items():
        i18n_dir = directory / "i18n"
        i18n_dir.mkdir(exist_ok=True)
        (i18n_dir / f"{locale}.yaml").write_text(content, encoding="utf-8")
    for relative_path, content in (files or {}).items():
        file_path = directory / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    return directory


def _link_package(node_modules: Path, name: str, target: Path) -> Path:
    """Install *target* as dependency *name* by linking it into *node_modules*."""
    node_modules.mkdir(parents=True, exist_ok=True)
    link = node_modules / name
    os.symlink(target, link, target_is_directory=True)
    return link


# ###############
# Fixtures
# ###############


@pytest.fixture
def write_package() -> Callable[..., Path]:
    """Return a function creating a package directory (see ``_write_package``)."""
    return _write_package


@pytest.fixture
def link_package() -> Callable[[Path, str, Path], Path]:
    """Return a function linking a package directory into a ``node_modules`` directory."""
    return _link_package
