# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Location of installed packages on disk."""

from __future__ import annotations

import os
from pathlib import Path

from appmeta.utils.paths import is_in_directory, normalize_path

# ###############
# Public Interface
# ###############

DEPENDENCY_DIRECTORY = "node_modules"


def find_package_directory(package_name: str, importer: str) -> str | None:
    """Locate the installed package *package_name* as seen from the file *importer*.

    Every ancestor directory of *importer* is searched for
    ``node_modules/<package_name>/package.json``, nearest first. Symbolic links
    are resolved, so linked workspace packages map to their real location.

    Returns:
        The normalized package directory, or None if the package is not installed.
    """
    directory = Path(importer).parent
    for current in (directory, *directory.parents):
        if current.name == DEPENDENCY_DIRECTORY:
            continue
        package_json = current / DEPENDENCY_DIRECTORY / package_name / "package.json"
        if package_json.is_file():
            return normalize_path(os.path.realpath(package_json.parent))
    return None


def is_local_package(package_dir: str, source_root: str) -> bool:
    """Return True if *package_dir* is part of the source tree rooted at *source_root*.

    Packages installed into a dependency directory are never local, even if
    that directory lives below the source root.
    """
    if not is_in_directory(package_dir, source_root):
        return False
    relative = Path(normalize_path(package_dir)).relative_to(normalize_path(source_root))
    return DEPENDENCY_DIRECTORY not in relative.parts
