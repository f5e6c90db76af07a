# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reader/writer compatibility rule for versioned metadata.

A reader at version ``x.y.z`` accepts data written by

* any version ``x.w._`` with ``w <= y`` as long as it is not newer than the
  reader (backwards compatibility), and
* any version ``x.y.v`` with ``v >= z`` (forwards compatibility for patch
  releases).

Everything else, i.e. a different major version or a newer minor version, may
rely on features the reader does not know about and is rejected.
"""

from __future__ import annotations

import semver

# ###############
# Public Interface
# ###############


def is_reader_compatible(current_version: str, other_version: str) -> bool:
    """Return True if a reader at *current_version* can consume data of *other_version*.

    Args:
        current_version: The version of the reading side. Comes from a constant
            and is expected to always be valid.
        other_version: The version found in untrusted input.

    Returns:
        Whether the data can be read safely.

    Raises:
        ValueError: If either version is not a valid semantic version.
    """
    try:
        current = semver.Version.parse(current_version)
    except (TypeError, ValueError):
        raise ValueError("Internal error: invalid current version") from None

    try:
        other = semver.Version.parse(_clean(other_version))
    except (TypeError, ValueError, AttributeError):
        raise ValueError(f"Serialized metadata version is invalid: '{other_version}'. Expected a valid semver.") from None

    if current.major == other.major and current >= other:
        return True
    return _in_tilde_range(current, other)


# ################
# Implementation
# ################


def _clean(version: str) -> str:
    """Strip surrounding whitespace and a single leading ``v``, as npm version strings allow."""
    return version.strip().removeprefix("v")


def _in_tilde_range(current: semver.Version, other: semver.Version) -> bool:
    """Return True if *other* satisfies ``~current`` (same minor line, not older)."""
    if other.prerelease is not None:
        # Pre-releases never satisfy a tilde range of a release version.
        return False
    return other.major == current.major and other.minor == current.minor and other >= current
