# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Package descriptors: build descriptors, serialized descriptors and their normalization."""

from appmeta.descriptor.build_config import (
    BUILD_CONFIG_BASE_NAME,
    BUILD_CONFIG_EXTENSIONS,
    BuildConfig,
    is_build_config_name,
    load_build_config,
    resolve_build_config_path,
    verify_build_config,
)
from appmeta.descriptor.compatibility import is_reader_compatible
from appmeta.descriptor.normalize import (
    DEFAULT_SERVICES_MODULE,
    create_package_config_from_build_config,
    create_package_config_from_package_metadata,
)
from appmeta.descriptor.runtime import CURRENT_RUNTIME_VERSION, check_runtime_version
from appmeta.descriptor.serialized import (
    CURRENT_VERSION,
    PACKAGE_JSON_KEY,
    SerializedPackageMetadata,
    create_package_metadata_from_config,
    parse_package_metadata,
    serialize_package_metadata,
)

__all__ = [
    "BUILD_CONFIG_BASE_NAME",
    "BUILD_CONFIG_EXTENSIONS",
    "BuildConfig",
    "CURRENT_RUNTIME_VERSION",
    "CURRENT_VERSION",
    "DEFAULT_SERVICES_MODULE",
    "PACKAGE_JSON_KEY",
    "SerializedPackageMetadata",
    "check_runtime_version",
    "create_package_config_from_build_config",
    "create_package_config_from_package_metadata",
    "create_package_metadata_from_config",
    "is_build_config_name",
    "is_reader_compatible",
    "load_build_config",
    "parse_package_metadata",
    "resolve_build_config_path",
    "serialize_package_metadata",
    "verify_build_config",
]
