# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for AppMeta."""

from appmeta.workspace.apps import resolve_workspace_apps
from appmeta.workspace.config import (
    WORKSPACE_CONFIG_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    load_workspace_config,
)

__all__ = [
    "WORKSPACE_CONFIG_NAME",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "load_workspace_config",
    "resolve_workspace_apps",
]
