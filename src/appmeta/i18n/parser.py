# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for locale message files (``i18n/<locale>.yaml``).

A message file has two optional top-level blocks:

* ``messages``: the package's own messages, arbitrarily nested.
* ``overrides``: messages for other packages, keyed by package name
  (only allowed in the application's files).

Nested keys are flattened with ``.`` as separator, so ``{a: {b: "x"}}`` and
``{"a.b": "x"}`` describe the same message. Defining the same flattened key
twice in one file is an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from appmeta.errors import ErrorKind, MetadataError
from appmeta.utils.documents import DuplicateKeyError, load_yaml

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class I18nFile:
    """The parsed contents of a message file.

    Attributes:
        messages: Message templates of the owning package, keyed by flattened message id.
        overrides: Messages for other packages, keyed by package name. None if
            the file has no ``overrides`` block.
    """

    messages: dict[str, str]
    overrides: dict[str, dict[str, str]] | None = None


def load_i18n_file(path: Path) -> I18nFile:
    """Load and parse the message file at *path*.

    Raises:
        MetadataError: ``MISSING_FILE`` if the file does not exist, otherwise
            the error raised by :func:`parse_i18n_yaml`.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise MetadataError(ErrorKind.MISSING_FILE, f"I18n file not found: {path}") from None
    except OSError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Failed to read {path}: {exc}") from exc

    return parse_i18n_yaml(text, source_label=str(path))


def parse_i18n_yaml(text: str, source_label: str = "<string>") -> I18nFile:
    """Parse the YAML text of a message file.

    Raises:
        MetadataError: ``VALIDATION_ERROR`` for invalid YAML or an invalid
            document shape, ``DUPLICATE_DEFINITION`` for repeated message ids.
    """
    try:
        data = load_yaml(text)
    except DuplicateKeyError as exc:
        raise MetadataError(ErrorKind.DUPLICATE_DEFINITION, f"{source_label}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Invalid YAML in {source_label}: {exc}") from exc
    return parse_i18n_file(data, source_label=source_label)


def parse_i18n_file(data: object, source_label: str = "<object>") -> I18nFile:
    """Parse an already decoded message document.

    ``None`` (an empty document) is a valid, empty file.
    """
    if data is None:
        return I18nFile(messages={})

    try:
        raw = _RawI18nFile.model_validate(data)
    except ValidationError as exc:
        raise MetadataError(ErrorKind.VALIDATION_ERROR, f"Invalid i18n file {source_label}: {exc}") from exc

    messages = flatten_messages(raw.messages, source_label=f"{source_label}: messages")
    overrides = None
    # An empty 'overrides:' block still counts as present.
    if "overrides" in data:  # type: ignore[operator]
        overrides = {
            package_name: flatten_messages(package_messages, source_label=f"{source_label}: overrides.{package_name}")
            for package_name, package_messages in (raw.overrides or {}).items()
        }
    return I18nFile(messages=messages, overrides=overrides)


def flatten_messages(data: dict[str, Any] | None, source_label: str = "<messages>") -> dict[str, str]:
    """Flatten a nested message mapping into ``{"a.b.c": template}`` form.

    Empty groups (``None`` values) are skipped.

    Raises:
        MetadataError: ``VALIDATION_ERROR`` for leaves that are neither strings
            nor mappings, ``DUPLICATE_DEFINITION`` for repeated message ids.
    """
    messages: dict[str, str] = {}
    if data:
        _visit(data, [], messages, source_label)
    return messages


# ################
# Implementation
# ################


class _RawI18nFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    messages: dict[str, Any] | None = None
    overrides: dict[str, dict[str, Any] | None] | None = None


def _visit(record: dict[Any, Any], prefix: list[str], messages: dict[str, str], source_label: str) -> None:
    for key, value in record.items():
        if not isinstance(key, str):
            raise MetadataError(
                ErrorKind.VALIDATION_ERROR, f"{source_label}: message keys must be strings, got {key!r}"
            )
        if value is None:
            continue
        if isinstance(value, str):
            message_id = ".".join([*prefix, key])
            if message_id in messages:
                raise MetadataError(
                    ErrorKind.DUPLICATE_DEFINITION, f"{source_label}: message '{message_id}' was already defined"
                )
            messages[message_id] = value
        elif isinstance(value, dict):
            _visit(value, [*prefix, key], messages, source_label)
        else:
            location = ".".join([*prefix, key])
            raise MetadataError(
                ErrorKind.VALIDATION_ERROR,
                f"{source_label}: expected a string or a nested mapping of messages at '{location}', "
                f"got {type(value).__name__}",
            )
