# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""A read-through cache that deduplicates concurrent computations.

The :class:`CacheProvider` passed to the cache computes the actual values.
At most one computation per id runs at a time; results are kept until they
are invalidated. Failed computations are never cached.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable
from typing import Any, Generic, TypeVar

# ###############
# Public Interface
# ###############

K = TypeVar("K")
V = TypeVar("V")


class CacheProvider(Generic[K, V]):
    """Computes the values stored in a :class:`Cache`.

    Subclasses must implement :meth:`get_id` and :meth:`get_value`. The hooks
    do nothing by default.
    """

    def get_id(self, key: K) -> Hashable:
        """Map *key* to a unique id. Keys with the same id are treated as equivalent."""
        raise NotImplementedError

    async def get_value(self, key: K, *context: Any) -> V:
        """Compute the value for *key*. Receives the context passed to :meth:`Cache.get`."""
        raise NotImplementedError

    def on_invalidate(self, key: K, old_value: V) -> None:
        """Called after a cached value was removed."""

    def on_cached_return(self, key: K, value: V) -> None:
        """Called whenever a cached value is returned without recomputation."""


class Cache(Generic[K, V]):
    """Caches the values computed by a :class:`CacheProvider`."""

    def __init__(self, provider: CacheProvider[K, V]) -> None:
        self._provider = provider
        self._values: dict[Hashable, V] = {}
        self._jobs: dict[Hashable, asyncio.Task[V]] = {}

    async def get(self, key: K, *context: Any) -> V:
        """Return the value associated with *key*.

        A cached value is returned if present. If a computation for the same id
        is already running, its result is awaited instead of starting a new one.
        Otherwise the provider is called with *key* and *context*.

        Raises:
            Exception: Whatever the provider raises. Errors are not cached.
        """
        provider = self._provider
        id_ = provider.get_id(key)

        if id_ in self._values:
            value = self._values[id_]
            provider.on_cached_return(key, value)
            return value

        existing_job = self._jobs.get(id_)
        if existing_job is not None:
            return await existing_job

        job = asyncio.create_task(provider.get_value(key, *context))
        self._jobs[id_] = job
        try:
            value = await job
            # The entry may have been invalidated while the job was running.
            if self._jobs.get(id_) is job:
                self._values[id_] = value
            return value
        finally:
            if self._jobs.get(id_) is job:
                del self._jobs[id_]

    def invalidate(self, key: K) -> None:
        """Remove the cached value and any running computation for *key*."""
        id_ = self._provider.get_id(key)
        self._jobs.pop(id_, None)
        if id_ in self._values:
            old_value = self._values.pop(id_)
            self._provider.on_invalidate(key, old_value)

    def __len__(self) -> int:
        return len(self._values)
