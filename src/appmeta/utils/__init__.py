# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shared utilities."""

from appmeta.utils.cache import Cache, CacheProvider
from appmeta.utils.paths import is_in_directory, normalize_path

__all__ = [
    "Cache",
    "CacheProvider",
    "is_in_directory",
    "normalize_path",
]
