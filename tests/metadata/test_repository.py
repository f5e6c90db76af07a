# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for resolving application metadata through the repository."""

import asyncio
import json
from pathlib import Path

import pytest

from appmeta.descriptor.runtime import CURRENT_RUNTIME_VERSION
from appmeta.errors import ErrorKind, MetadataError
from appmeta.metadata.context import FileSystemContext
from appmeta.metadata.repository import MetadataRepository

# ###############
# Helpers
# ###############


class _Workspace:
    """A source tree at ``<root>/src`` with dependencies linked into ``<root>/node_modules``."""

    def __init__(self, root: Path, write_package, link_package) -> None:
        self.root = root
        self.src = root / "src"
        self.node_modules = root / "node_modules"
        self._write_package = write_package
        self._link_package = link_package

    def app(self, name: str = "app", **kwargs) -> Path:
        kwargs.setdefault("build_config", "{}\n")
        return self._write_package(self.src / name, name, **kwargs)

    def local(self, name: str, **kwargs) -> Path:
        kwargs.setdefault("build_config", "{}\n")
        directory = self._write_package(self.src / "packages" / name, name, **kwargs)
        self._link_package(self.node_modules, name, directory)
        return directory

    def link(self, name: str, target: Path) -> None:
        self._link_package(self.node_modules, name, target)

    def external(self, name: str, **kwargs) -> Path:
        return self._write_package(self.node_modules / name, name, **kwargs)


@pytest.fixture
def workspace(tmp_path: Path, write_package, link_package) -> _Workspace:
    return _Workspace(tmp_path.resolve(), write_package, link_package)


def _names(app_metadata) -> list[str]:
    return [package.name for package in app_metadata.packages]


# ###############
# Dependency Graph
# ###############


def test_app_without_dependencies(workspace: _Workspace) -> None:
    """The application package is always part of the result."""
    app_dir = workspace.app(build_config="i18n: [de, en]\n", i18n={"de": "", "en": ""})
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert app_metadata.name == "app"
    assert app_metadata.directory == app_dir.as_posix()
    assert app_metadata.package_json_path == (app_dir / "package.json").as_posix()
    assert app_metadata.locales == ["de", "en"]
    assert app_metadata.app_package.name == "app"
    assert _names(app_metadata) == ["app"]


def test_transitive_dependencies(workspace: _Workspace) -> None:
    """Dependencies are visited recursively."""
    app_dir = workspace.app(dependencies=["a"])
    workspace.local("a", dependencies=["b"])
    workspace.local("b")
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert _names(app_metadata) == ["app", "a", "b"]


def test_diamond_dependency_is_returned_once(workspace: _Workspace) -> None:
    """A package shared by two dependencies appears exactly once."""
    app_dir = workspace.app(dependencies=["b", "a"])
    workspace.local("a", dependencies=["c"])
    workspace.local("b", dependencies=["c"])
    workspace.local("c")
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert _names(app_metadata) == ["app", "a", "b", "c"]


def test_dependency_cycle_terminates(workspace: _Workspace) -> None:
    """A true cycle A -> B -> A converges."""
    app_dir = workspace.app("A", dependencies=["B"])
    workspace.link("A", app_dir)
    workspace.local("B", dependencies=["A"])
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert _names(app_metadata) == ["A", "B"]


def test_duplicate_package_location(workspace: _Workspace, write_package) -> None:
    """The same package name at two directories is an error naming both."""
    app_dir = workspace.app(dependencies=["a", "c"])
    a_dir = workspace.local("a", dependencies=["c"])
    c_dir = workspace.local("c")
    nested_c = write_package(
        a_dir / "node_modules" / "c",
        "c",
        version="2.0.0",
        framework_metadata={"packageFormatVersion": "1.0.0"},
    )
    repository = MetadataRepository(workspace.src)

    with pytest.raises(MetadataError) as exc_info:
        asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert exc_info.value.kind is ErrorKind.DUPLICATE_PACKAGE_LOCATION
    message = str(exc_info.value)
    assert "'c'" in message
    assert c_dir.as_posix() in message
    assert nested_c.as_posix() in message


def test_missing_dependency(workspace: _Workspace) -> None:
    """A required dependency that is not installed is an error."""
    app_dir = workspace.app(dependencies=["not-installed"])
    repository = MetadataRepository(workspace.src)

    with pytest.raises(MetadataError) as exc_info:
        asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert exc_info.value.kind is ErrorKind.MISSING_DEPENDENCY
    assert "'not-installed'" in str(exc_info.value)


def test_missing_optional_dependency_is_skipped(workspace: _Workspace) -> None:
    """Optional dependencies may be absent."""
    app_dir = workspace.app(
        peer_dependencies=["maybe"],
        peer_dependencies_meta={"maybe": {"optional": True}},
        optional_dependencies=["other"],
    )
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert _names(app_metadata) == ["app"]


def test_plain_dependencies_are_excluded(workspace: _Workspace) -> None:
    """Dependencies without framework metadata do not contribute to the application."""
    app_dir = workspace.app(dependencies=["lodash", "ext"])
    workspace.external("lodash")
    workspace.external("ext", framework_metadata={"packageFormatVersion": "1.0.0"})
    repository = MetadataRepository(workspace.src)

    app_metadata = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert _names(app_metadata) == ["app", "ext"]


def test_app_without_descriptor_fails(workspace: _Workspace) -> None:
    """The application itself must be declared."""
    app_dir = workspace.app(build_config=None)
    repository = MetadataRepository(workspace.src)

    with pytest.raises(MetadataError) as exc_info:
        asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))
    assert exc_info.value.kind is ErrorKind.MISSING_FILE


def test_error_in_dependency_aborts_resolution(workspace: _Workspace) -> None:
    """A defect anywhere in the graph fails the whole resolution."""
    app_dir = workspace.app(dependencies=["a", "b"])
    workspace.local("a")
    workspace.local("b", build_config="unknown-key: true\n")
    repository = MetadataRepository(workspace.src)

    with pytest.raises(MetadataError) as exc_info:
        asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))
    assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR


# ###############
# Caching
# ###############


def test_cached_metadata_is_reused(workspace: _Workspace) -> None:
    """A second resolution reuses the cached package metadata and reports the same watch files."""
    app_dir = workspace.app(dependencies=["a"])
    workspace.local("a")
    repository = MetadataRepository(workspace.src)
    first_ctx = FileSystemContext()
    second_ctx = FileSystemContext()

    first = asyncio.run(repository.get_app_metadata(first_ctx, app_dir))
    second = asyncio.run(repository.get_app_metadata(second_ctx, app_dir))

    assert all(p1 is p2 for p1, p2 in zip(first.packages, second.packages))
    assert second_ctx.watch_files == first_ctx.watch_files
    assert (app_dir / "package.json").as_posix() in second_ctx.watch_files


def test_file_change_invalidates_package(workspace: _Workspace) -> None:
    """Changing a package's descriptor only reloads that package."""
    app_dir = workspace.app(dependencies=["a", "b"])
    a_dir = workspace.local("a")
    workspace.local("b")
    repository = MetadataRepository(workspace.src)
    ctx = FileSystemContext()

    first = asyncio.run(repository.get_app_metadata(ctx, app_dir))
    (a_dir / "build.config.yaml").write_text("i18n: [en]\n", encoding="utf-8")
    (a_dir / "i18n").mkdir()
    (a_dir / "i18n" / "en.yaml").write_text("", encoding="utf-8")
    repository.on_file_changed(str(a_dir / "build.config.yaml"))
    second = asyncio.run(repository.get_app_metadata(ctx, app_dir))

    first_by_name = {p.name: p for p in first.packages}
    second_by_name = {p.name: p for p in second.packages}
    assert second_by_name["a"] is not first_by_name["a"]
    assert second_by_name["a"].locales == ["en"]
    assert second_by_name["b"] is first_by_name["b"]


def test_reset_discards_everything(workspace: _Workspace) -> None:
    """After a reset, all packages are loaded again."""
    app_dir = workspace.app()
    repository = MetadataRepository(workspace.src)

    first = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))
    repository.reset()
    second = asyncio.run(repository.get_app_metadata(FileSystemContext(), app_dir))

    assert second.app_package is not first.app_package
    assert second.app_package == first.app_package


def test_i18n_files_are_cached(workspace: _Workspace) -> None:
    """I18n files are parsed once until they change."""
    app_dir = workspace.app(build_config="i18n: [en]\n", i18n={"en": "messages:\n  title: Hello\n"})
    path = (app_dir / "i18n" / "en.yaml").as_posix()
    repository = MetadataRepository(workspace.src)
    ctx = FileSystemContext()

    first = asyncio.run(repository.get_i18n_file(ctx, path))
    second = asyncio.run(repository.get_i18n_file(ctx, path))
    (app_dir / "i18n" / "en.yaml").write_text("messages:\n  title: Hi\n", encoding="utf-8")
    repository.on_file_changed(path)
    third = asyncio.run(repository.get_i18n_file(ctx, path))

    assert first is second
    assert first.messages == {"title": "Hello"}
    assert third.messages == {"title": "Hi"}
    assert path in ctx.watch_files


# ###############
# Runtime Version
# ###############


def test_runtime_version_defaults_to_current(workspace: _Workspace) -> None:
    """Without a root package, the current runtime version is used."""
    workspace.src.mkdir(parents=True)
    repository = MetadataRepository(workspace.src)

    assert asyncio.run(repository.get_runtime_version()) == CURRENT_RUNTIME_VERSION


def test_runtime_version_from_root_package(workspace: _Workspace) -> None:
    """The root package next to the source tree may declare the runtime version."""
    workspace.src.mkdir(parents=True)
    (workspace.root / "package.json").write_text(
        json.dumps({"name": "root", "frameworkMetadata": {"runtimeVersion": "1.0.0"}}), encoding="utf-8"
    )
    repository = MetadataRepository(workspace.src)

    assert asyncio.run(repository.get_runtime_version()) == "1.0.0"


def test_unsupported_runtime_version_in_root_package(workspace: _Workspace) -> None:
    """A root package requiring a newer runtime is rejected."""
    workspace.src.mkdir(parents=True)
    (workspace.root / "package.json").write_text(
        json.dumps({"name": "root", "frameworkMetadata": {"runtimeVersion": "2.0.0"}}), encoding="utf-8"
    )
    repository = MetadataRepository(workspace.src)

    with pytest.raises(MetadataError) as exc_info:
        asyncio.run(repository.get_runtime_version())
    assert exc_info.value.kind is ErrorKind.UNSUPPORTED_RUNTIME_VERSION
