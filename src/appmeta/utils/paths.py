# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Path helpers shared by the metadata and i18n modules."""

from __future__ import annotations

import os
from pathlib import Path, PurePath

# ###############
# Public Interface
# ###############


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Return an absolute, normalized path with forward slashes.

    Symbolic links are not resolved; callers that need the physical location
    resolve the path first.
    """
    return Path(os.path.normpath(os.path.abspath(path))).as_posix()


def is_in_directory(candidate: str | os.PathLike[str], directory: str | os.PathLike[str]) -> bool:
    """Return True if *candidate* is located strictly below *directory*."""
    candidate_path = PurePath(normalize_path(candidate))
    directory_path = PurePath(normalize_path(directory))
    return candidate_path != directory_path and candidate_path.is_relative_to(directory_path)
