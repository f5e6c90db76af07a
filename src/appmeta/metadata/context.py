# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Capabilities supplied by the host build tool to the metadata loaders."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from appmeta.utils.paths import normalize_path

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class MetadataContext(Protocol):
    """Host services used while loading metadata.

    The host is responsible for triggering a rebuild (and calling
    ``MetadataRepository.on_file_changed``) when a watched file changes.
    """

    def add_watch_file(self, path: str) -> None:
        """Register *path* as an input of the current computation."""
        ...

    async def resolve(self, module_id: str, importer: str) -> str | None:
        """Resolve *module_id* as imported from the file *importer*; None if it does not exist."""
        ...

    def warn(self, message: str) -> None:
        """Report a non-fatal problem to the user."""
        ...


# Extensions probed, in order, when a module id has no matching file on its own.
RESOLVE_EXTENSIONS = (".ts", ".tsx", ".mts", ".js", ".jsx", ".mjs", ".css", ".scss")


class FileSystemContext:
    """A :class:`MetadataContext` backed by the local file system.

    Watch files and warnings are recorded so that callers (and tests) can
    inspect them after a resolution pass.

    Attributes:
        watch_files: All paths registered via :meth:`add_watch_file`.
        warnings: All messages reported via :meth:`warn`.
    """

    def __init__(self) -> None:
        self.watch_files: set[str] = set()
        self.warnings: list[str] = []

    def add_watch_file(self, path: str) -> None:
        self.watch_files.add(normalize_path(path))

    async def resolve(self, module_id: str, importer: str) -> str | None:
        """Resolve relative module ids against the directory of *importer*.

        Bare module ids (package imports) are not supported and yield None.
        """
        if not module_id.startswith(("./", "../", "/")):
            return None
        candidate = Path(importer).parent / module_id
        return await asyncio.to_thread(_probe_module, candidate)

    def warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)


# ################
# Implementation
# ################


def _probe_module(candidate: Path) -> str | None:
    """Return the first existing file among *candidate*, its extension variants and index files."""
    if candidate.is_file():
        return normalize_path(candidate)
    for ext in RESOLVE_EXTENSIONS:
        with_ext = candidate.with_name(candidate.name + ext)
        if with_ext.is_file():
            return normalize_path(with_ext)
    if candidate.is_dir():
        for ext in RESOLVE_EXTENSIONS:
            index = candidate / ("index" + ext)
            if index.is_file():
                return normalize_path(index)
    return None
