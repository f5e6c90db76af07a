# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runtime version support."""

from __future__ import annotations

from appmeta.descriptor.compatibility import is_reader_compatible
from appmeta.errors import ErrorKind, MetadataError

# ###############
# Public Interface
# ###############

# Version of the runtime targeted by packages built from a local build descriptor.
CURRENT_RUNTIME_VERSION = "1.1.0"


def check_runtime_version(runtime_version: str, owner: str) -> None:
    """Ensure that the current runtime can support *runtime_version*.

    Args:
        runtime_version: The runtime version required by *owner*.
        owner: Human-readable label of the package or file requiring the version.

    Raises:
        MetadataError: With kind ``UNSUPPORTED_RUNTIME_VERSION`` if the version
            is invalid or not supported.
    """
    try:
        compatible = is_reader_compatible(CURRENT_RUNTIME_VERSION, runtime_version)
    except ValueError as exc:
        raise MetadataError(
            ErrorKind.UNSUPPORTED_RUNTIME_VERSION,
            f"Cannot determine support status of runtime version '{runtime_version}' required by {owner}: {exc}",
        ) from exc
    if not compatible:
        raise MetadataError(
            ErrorKind.UNSUPPORTED_RUNTIME_VERSION,
            f"The current runtime ({CURRENT_RUNTIME_VERSION}) cannot support version "
            f"'{runtime_version}' required by {owner}.",
        )
