# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for locating installed packages and classifying package locations."""

from pathlib import Path

from appmeta.metadata.resolve import find_package_directory, is_local_package


def test_find_nearest_installation(tmp_path: Path, write_package) -> None:
    """The nearest dependency directory wins."""
    root = tmp_path.resolve()
    write_package(root / "node_modules" / "dep", "dep", version="1.0.0")
    nested = write_package(root / "app" / "node_modules" / "dep", "dep", version="2.0.0")
    importer = write_package(root / "app", "app") / "package.json"

    assert find_package_directory("dep", str(importer)) == nested.as_posix()


def test_find_in_ancestor(tmp_path: Path, write_package) -> None:
    """Ancestor directories are searched when the importer has no own installation."""
    root = tmp_path.resolve()
    dep = write_package(root / "node_modules" / "dep", "dep")
    importer = write_package(root / "a" / "b", "b") / "package.json"

    assert find_package_directory("dep", str(importer)) == dep.as_posix()


def test_find_follows_links(tmp_path: Path, write_package, link_package) -> None:
    """Linked packages resolve to their real location."""
    root = tmp_path.resolve()
    target = write_package(root / "packages" / "dep", "dep")
    link_package(root / "node_modules", "dep", target)
    importer = write_package(root / "app", "app") / "package.json"

    assert find_package_directory("dep", str(importer)) == target.as_posix()


def test_find_missing_package(tmp_path: Path, write_package) -> None:
    """None is returned for packages that are not installed."""
    importer = write_package(tmp_path / "app", "app") / "package.json"

    assert find_package_directory("missing", str(importer)) is None


def test_is_local_package(tmp_path: Path) -> None:
    """Only packages inside the source tree and outside dependency directories are local."""
    src = tmp_path / "src"

    assert is_local_package(str(src / "app"), str(src))
    assert is_local_package(str(src / "packages" / "a"), str(src))
    assert not is_local_package(str(src / "node_modules" / "a"), str(src))
    assert not is_local_package(str(tmp_path / "node_modules" / "a"), str(src))
    assert not is_local_package(str(src), str(src))
