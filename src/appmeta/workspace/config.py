# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the AppMeta workspace configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############

WORKSPACE_CONFIG_NAME = ".appmeta-workspace.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


@dataclass
class WorkspaceConfig:
    """The parsed configuration for an AppMeta workspace.

    Attributes:
        source_root: Relative path (from the workspace root) of the source tree.
            Packages inside it are treated as local packages.
        apps: Relative paths (from the workspace root) of the application
            directories to resolve.
    """

    source_root: str
    apps: list[str] = field(default_factory=list)


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and parse an AppMeta workspace configuration file.

    Args:
        path: Path to the `.appmeta-workspace.yaml` file.

    Returns:
        A WorkspaceConfig instance populated from the file.

    Raises:
        WorkspaceConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    return _parse_workspace_config(text, source_label=str(path))


# ################
# Implementation
# ################


def _parse_workspace_config(text: str, source_label: str = "<string>") -> WorkspaceConfig:
    """Parse workspace config YAML text into a WorkspaceConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        WorkspaceConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{source_label}: workspace config must be a YAML mapping")

    unknown = sorted(str(key) for key in data if key not in _KNOWN_KEYS)
    if unknown:
        raise WorkspaceConfigError(f"{source_label}: unknown field(s) {', '.join(repr(k) for k in unknown)}")

    source_root = _require_string(data, "source-root", source_label)

    apps: list[str] = []
    if "apps" in data:
        raw_apps = data["apps"]
        if not isinstance(raw_apps, list):
            raise WorkspaceConfigError(f"{source_label}: 'apps' must be a list")
        for index, entry in enumerate(raw_apps):
            if not isinstance(entry, str):
                raise WorkspaceConfigError(f"{source_label}: apps[{index}] must be a string")
            apps.append(entry)

    return WorkspaceConfig(source_root=source_root, apps=apps)


_KNOWN_KEYS = frozenset({"source-root", "apps"})


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising WorkspaceConfigError if missing."""
    if key not in mapping:
        raise WorkspaceConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise WorkspaceConfigError(f"{source_label}: '{key}' must be a string")
    return value
