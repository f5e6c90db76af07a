# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML and JSON decoding that rejects repeated mapping keys.

PyYAML and :mod:`json` both keep the last value of a repeated key. Descriptor
and message files must not define the same key twice, so the readers here
raise :class:`DuplicateKeyError` instead.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

# ###############
# Public Interface
# ###############


class DuplicateKeyError(ValueError):
    """Raised when a mapping in a decoded document contains the same key twice.

    Attributes:
        key: The repeated key.
        line: One-based line of the repetition, if known.
    """

    def __init__(self, key: object, line: int | None = None) -> None:
        self.key = key
        self.line = line
        location = f" (line {line})" if line is not None else ""
        super().__init__(f"duplicate key '{key}'{location}")


def load_yaml(text: str) -> Any:
    """Decode a single YAML document with the safe loader.

    Raises:
        DuplicateKeyError: If a mapping repeats a key.
        yaml.YAMLError: If the text is not valid YAML.
    """
    return yaml.load(text, Loader=_UniqueKeyLoader)


def load_json(text: str) -> Any:
    """Decode a JSON document.

    Raises:
        DuplicateKeyError: If an object repeats a key.
        json.JSONDecodeError: If the text is not valid JSON.
    """
    return json.loads(text, object_pairs_hook=_unique_object)


# ################
# Implementation
# ################

_MERGE_TAG = "tag:yaml.org,2002:merge"


class _UniqueKeyLoader(yaml.SafeLoader):
    def construct_mapping(self, node: yaml.Node, deep: bool = False) -> dict[Any, Any]:
        if isinstance(node, yaml.MappingNode):
            seen: set[Any] = set()
            # Keys pulled in through '<<' merges may be redefined locally.
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    is_repeated = key in seen
                except TypeError:
                    # Unhashable keys are reported by the base implementation.
                    continue
                if is_repeated:
                    raise DuplicateKeyError(key, key_node.start_mark.line + 1)
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _unique_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise DuplicateKeyError(key)
        result[key] = value
    return result
