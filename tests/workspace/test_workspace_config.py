# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the workspace configuration module."""

import asyncio
from pathlib import Path

import pytest

from appmeta.metadata.context import FileSystemContext
from appmeta.workspace import (
    WORKSPACE_CONFIG_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
    resolve_workspace_apps,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a workspace config file and return its path."""
    config_file = tmp_path / WORKSPACE_CONFIG_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_config_name_constant() -> None:
    """WORKSPACE_CONFIG_NAME has the expected value."""
    assert WORKSPACE_CONFIG_NAME == ".appmeta-workspace.yaml"


def test_minimal_config(tmp_path: Path) -> None:
    """A config with only source-root parses to a WorkspaceConfig without apps."""
    config = load_workspace_config(_write_config(tmp_path, "source-root: src\n"))

    assert isinstance(config, WorkspaceConfig)
    assert config.source_root == "src"
    assert config.apps == []


def test_config_with_apps(tmp_path: Path) -> None:
    """Application directories are read in order."""
    content = """\
source-root: src
apps:
  - src/apps/viewer
  - src/apps/editor
"""
    config = load_workspace_config(_write_config(tmp_path, content))

    assert config.apps == ["src/apps/viewer", "src/apps/editor"]


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    """A missing config file raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="not found"):
        load_workspace_config(tmp_path / WORKSPACE_CONFIG_NAME)


def test_invalid_yaml(tmp_path: Path) -> None:
    """Invalid YAML raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="Invalid YAML"):
        load_workspace_config(_write_config(tmp_path, "source-root: [unclosed\n"))


def test_not_a_mapping(tmp_path: Path) -> None:
    """A YAML list at the top level is rejected."""
    with pytest.raises(WorkspaceConfigError, match="must be a YAML mapping"):
        load_workspace_config(_write_config(tmp_path, "- src\n"))


def test_missing_source_root(tmp_path: Path) -> None:
    """source-root is required."""
    with pytest.raises(WorkspaceConfigError, match="missing required field 'source-root'"):
        load_workspace_config(_write_config(tmp_path, "apps: []\n"))


def test_source_root_must_be_string(tmp_path: Path) -> None:
    """source-root must be a string."""
    with pytest.raises(WorkspaceConfigError, match="'source-root' must be a string"):
        load_workspace_config(_write_config(tmp_path, "source-root: 42\n"))


def test_apps_must_be_list(tmp_path: Path) -> None:
    """apps must be a list."""
    with pytest.raises(WorkspaceConfigError, match="'apps' must be a list"):
        load_workspace_config(_write_config(tmp_path, "source-root: src\napps: src/app\n"))


def test_app_entries_must_be_strings(tmp_path: Path) -> None:
    """Every app entry must be a string."""
    with pytest.raises(WorkspaceConfigError, match=r"apps\[1\] must be a string"):
        load_workspace_config(_write_config(tmp_path, "source-root: src\napps: [src/a, {path: b}]\n"))


def test_unknown_field(tmp_path: Path) -> None:
    """Unknown fields are rejected."""
    with pytest.raises(WorkspaceConfigError, match="unknown field"):
        load_workspace_config(_write_config(tmp_path, "source-root: src\nbuild-directory: out\n"))


# ###############
# Application Resolution
# ###############


def test_resolve_workspace_apps(tmp_path: Path, write_package, link_package) -> None:
    """All configured apps are resolved with the workspace's source root."""
    root = tmp_path.resolve()
    lib = write_package(root / "src" / "packages" / "lib", "lib", build_config="{}\n")
    link_package(root / "node_modules", "lib", lib)
    write_package(root / "src" / "apps" / "viewer", "viewer", dependencies=["lib"], build_config="{}\n")
    write_package(root / "src" / "apps" / "editor", "editor", build_config="{}\n")
    config_path = _write_config(root, "source-root: src\napps:\n  - src/apps/viewer\n  - src/apps/editor\n")
    ctx = FileSystemContext()

    apps = asyncio.run(resolve_workspace_apps(config_path, ctx))

    assert list(apps) == ["src/apps/viewer", "src/apps/editor"]
    assert [p.name for p in apps["src/apps/viewer"].packages] == ["viewer", "lib"]
    assert [p.name for p in apps["src/apps/editor"].packages] == ["editor"]
    assert (lib / "package.json").as_posix() in ctx.watch_files
