# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of all applications configured in a workspace."""

from __future__ import annotations

import logging
from pathlib import Path

from appmeta.metadata.context import FileSystemContext, MetadataContext
from appmeta.metadata.repository import MetadataRepository
from appmeta.model.metadata import AppMetadata
from appmeta.workspace.config import load_workspace_config

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


async def resolve_workspace_apps(
    config_path: Path,
    ctx: MetadataContext | None = None,
    repository: MetadataRepository | None = None,
) -> dict[str, AppMetadata]:
    """Resolve the metadata of every application listed in a workspace configuration.

    Paths in the configuration are relative to the directory containing the
    configuration file.

    Args:
        config_path: Path to the `.appmeta-workspace.yaml` file.
        ctx: Host context; a :class:`FileSystemContext` is used if omitted.
        repository: Repository to resolve with. A new repository for the
            workspace's source root is created if omitted.

    Returns:
        Application metadata keyed by the application paths from the configuration.

    Raises:
        WorkspaceConfigError: If the configuration is invalid.
        MetadataError: If an application cannot be resolved.
    """
    config = load_workspace_config(config_path)
    workspace_root = config_path.parent
    if ctx is None:
        ctx = FileSystemContext()
    if repository is None:
        repository = MetadataRepository(workspace_root / config.source_root)

    apps: dict[str, AppMetadata] = {}
    for app in config.apps:
        logger.debug("Resolving app %s of workspace %s", app, workspace_root)
        apps[app] = await repository.get_app_metadata(ctx, workspace_root / app)
    return apps
