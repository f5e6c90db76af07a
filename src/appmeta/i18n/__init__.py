# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Locale message files: parsing, merging and validation."""

from appmeta.i18n.parser import I18nFile, flatten_messages, load_i18n_file, parse_i18n_file, parse_i18n_yaml
from appmeta.i18n.merge import merge_messages, resolve_app_messages, validate_i18n_config

__all__ = [
    "I18nFile",
    "flatten_messages",
    "load_i18n_file",
    "merge_messages",
    "parse_i18n_file",
    "parse_i18n_yaml",
    "resolve_app_messages",
    "validate_i18n_config",
]
