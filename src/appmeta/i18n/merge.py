# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Merging and validation of the messages of all packages in an application.

For every locale supported by the application, the messages of all packages
are combined into a single ``{package name: {message id: template}}``
mapping. The application can supply or replace messages of other packages
through the ``overrides`` block of its own message files.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from appmeta.errors import ErrorKind, MetadataError
from appmeta.i18n.parser import I18nFile
from appmeta.metadata.context import MetadataContext
from appmeta.model.metadata import AppMetadata, DeclaredPackageMetadata

if TYPE_CHECKING:
    from appmeta.metadata.repository import MetadataRepository

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

# Maximum number of packages listed in a locale coverage error.
MAX_REPORTED_PACKAGES = 3


class I18nPackage(Protocol):
    """The parts of a package needed to merge its messages."""

    @property
    def name(self) -> str: ...

    @property
    def i18n_paths(self) -> Mapping[str, str]: ...


LoadI18n = Callable[[str], Awaitable[I18nFile]]


async def merge_messages(
    locale: str,
    app_name: str,
    packages: Sequence[I18nPackage],
    load_i18n: LoadI18n,
) -> dict[str, dict[str, str]]:
    """Combine the messages of all *packages* for *locale*.

    Args:
        locale: The locale to merge.
        app_name: Name of the application package. Only its files may contain
            an ``overrides`` block.
        packages: All packages of the application, including the application.
        load_i18n: Loads the message file at the given path.

    Returns:
        Messages keyed by package name, then by message id. Overrides from the
        application replace individual messages of the target package.

    Raises:
        MetadataError: ``VALIDATION_ERROR`` for an ``overrides`` block outside
            of the application, ``LOCALE_COVERAGE_ERROR`` if a package with
            i18n support ends up without messages for *locale*. The application
            itself is not checked.
    """
    needs_messages = [package for package in packages if package.i18n_paths and package.name != app_name]
    with_file = [package for package in packages if locale in package.i18n_paths]
    files = await asyncio.gather(*(load_i18n(package.i18n_paths[locale]) for package in with_file))

    package_messages: dict[str, dict[str, str]] = {}
    app_overrides: dict[str, dict[str, str]] | None = None
    for package, i18n_file in zip(with_file, files):
        if i18n_file.overrides:
            if package.name != app_name:
                raise MetadataError(
                    ErrorKind.VALIDATION_ERROR,
                    f"Unexpected 'overrides' block in '{package.i18n_paths[locale]}'. "
                    "Overrides are only supported in the app.",
                )
            app_overrides = i18n_file.overrides
        package_messages[package.name] = dict(i18n_file.messages)

    for package_name, overrides in (app_overrides or {}).items():
        logger.debug("Applying %d message overrides for package '%s' (%s)", len(overrides), package_name, locale)
        package_messages.setdefault(package_name, {}).update(overrides)

    for package in needs_messages:
        if package.name not in package_messages:
            supported = ", ".join(sorted(package.i18n_paths))
            raise MetadataError(
                ErrorKind.LOCALE_COVERAGE_ERROR,
                f"Package '{package.name}' requires messages for locale '{locale}' but only supports "
                f"the locales {supported}. Either update the package or add messages from the app "
                "via 'overrides'.",
            )

    return package_messages


async def validate_i18n_config(
    ctx: MetadataContext, repository: MetadataRepository, app_metadata: AppMetadata
) -> None:
    """Check the i18n setup of an application as a whole.

    Every package's message file for an application locale must exist, and
    every package with i18n support must share at least one locale with the
    application unless the application overrides the package's messages.

    Raises:
        MetadataError: ``MISSING_FILE`` for a missing message file,
            ``LOCALE_COVERAGE_ERROR`` for packages without a common locale.
    """
    for package in app_metadata.packages:
        await _check_package_i18n_files(ctx, package, app_metadata.locales)
    await _check_locale_coverage(ctx, repository, app_metadata)


async def resolve_app_messages(
    ctx: MetadataContext, repository: MetadataRepository, app_metadata: AppMetadata
) -> dict[str, dict[str, dict[str, str]]]:
    """Validate the application's i18n setup and merge the messages for all of its locales.

    Returns:
        Merged messages keyed by locale (see :func:`merge_messages`).
    """
    await validate_i18n_config(ctx, repository, app_metadata)

    async def load_i18n(path: str) -> I18nFile:
        return await repository.get_i18n_file(ctx, path)

    messages: dict[str, dict[str, dict[str, str]]] = {}
    for locale in app_metadata.locales:
        messages[locale] = await merge_messages(locale, app_metadata.name, app_metadata.packages, load_i18n)
    return messages


# ################
# Implementation
# ################


async def _check_package_i18n_files(
    ctx: MetadataContext, package: DeclaredPackageMetadata, locales: list[str]
) -> None:
    for locale in locales:
        path = package.i18n_paths.get(locale)
        if path is None:
            # The app may still provide the messages through overrides.
            logger.debug("Package '%s' does not support locale '%s'", package.name, locale)
            continue

        ctx.add_watch_file(path)
        if not await asyncio.to_thread(Path(path).is_file):
            raise MetadataError(
                ErrorKind.MISSING_FILE,
                f"I18n file in package '{package.name}' for locale '{locale}' does not exist: '{path}'.",
            )


async def _check_locale_coverage(
    ctx: MetadataContext, repository: MetadataRepository, app_metadata: AppMetadata
) -> None:
    app_package = app_metadata.app_package
    app_locales = set(app_metadata.locales)
    app_files = await asyncio.gather(
        *(repository.get_i18n_file(ctx, app_package.i18n_paths[locale]) for locale in app_metadata.locales)
    )

    errors: list[DeclaredPackageMetadata] = []
    for package in app_metadata.packages:
        if not package.locales:
            continue
        if app_locales.intersection(package.locales):
            continue
        if any(i18n_file.overrides and package.name in i18n_file.overrides for i18n_file in app_files):
            continue
        errors.append(package)

    if not errors:
        return

    errors.sort(key=lambda package: package.name)
    reported = ", ".join(
        f"'{package.name}' ({', '.join(sorted(package.locales))})" for package in errors[:MAX_REPORTED_PACKAGES]
    )
    remaining = len(errors) - MAX_REPORTED_PACKAGES
    if remaining > 0:
        reported += f" (and {remaining} more)"

    formatted_app_locales = ", ".join(app_metadata.locales) or "none"
    raise MetadataError(
        ErrorKind.LOCALE_COVERAGE_ERROR,
        f"Invalid i18n configuration in application at {app_metadata.directory}:\n"
        f"There is no match between the locales supported by the application ({formatted_app_locales}) "
        f"and the locales supported by the packages {reported}.",
    )
