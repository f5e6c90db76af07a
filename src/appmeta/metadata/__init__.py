# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Loading of package metadata and resolution of application dependency graphs."""

from appmeta.metadata.context import FileSystemContext, MetadataContext
from appmeta.metadata.discovery import find_packages
from appmeta.metadata.loader import PackageJson, load_package_metadata, read_package_json
from appmeta.metadata.repository import MetadataRepository
from appmeta.metadata.resolve import find_package_directory, is_local_package

__all__ = [
    "FileSystemContext",
    "MetadataContext",
    "MetadataRepository",
    "PackageJson",
    "find_package_directory",
    "find_packages",
    "is_local_package",
    "load_package_metadata",
    "read_package_json",
]
