# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error kinds reported while resolving package metadata."""

from __future__ import annotations

from enum import Enum

# ###############
# Public Interface
# ###############


class ErrorKind(Enum):
    """Categories of fatal problems detected during a resolution pass."""

    UNSUPPORTED_FORMAT_VERSION = "unsupported-format-version"
    UNSUPPORTED_RUNTIME_VERSION = "unsupported-runtime-version"
    VALIDATION_ERROR = "validation-error"
    DUPLICATE_DEFINITION = "duplicate-definition"
    DUPLICATE_PACKAGE_LOCATION = "duplicate-package-location"
    MISSING_DEPENDENCY = "missing-dependency"
    MISSING_FILE = "missing-file"
    AMBIGUOUS_CONFIGURATION = "ambiguous-configuration"
    LOCALE_COVERAGE_ERROR = "locale-coverage-error"


class MetadataError(Exception):
    """Raised when package or application metadata cannot be resolved.

    Every instance is terminal for the current resolution pass. The message is
    meant to be shown to the user as-is and names the package, directory or
    file involved.

    Attributes:
        kind: The category of the problem.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
