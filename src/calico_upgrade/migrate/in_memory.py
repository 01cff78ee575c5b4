"""
In-memory datastore implementations.

Hold legacy and v3 data in dictionaries. Suitable for:

- Unit and scenario testing
- Dry runs against an exported copy of the legacy data

Both classes support failure injection so that every orchestrator path
can be exercised without a real cluster.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from calico_upgrade.migrate.datastore import LegacyDatastore, ModernDatastore
from calico_upgrade.migrate.exceptions import (
    DatastoreAccessError,
    PauseError,
    ResumeError,
    WriteError,
)
from calico_upgrade.resources.legacy import LegacyResource
from calico_upgrade.resources.modern import ModernResource, ResourceIdentity

logger = logging.getLogger(__name__)


class InMemoryLegacyDatastore(LegacyDatastore):
    """
    In-memory legacy datastore.

    Example:
        >>> legacy = InMemoryLegacyDatastore([pool, policy])
        >>> await legacy.pause_networking()
        >>> legacy.paused
        True

    Attributes:
        fail_list: Raise DatastoreAccessError from list_all().
        fail_pause: Raise PauseError from pause_networking().
        fail_resume: Raise ResumeError from resume_networking().
        pause_count: Number of successful pause_networking() calls.
        resume_count: Number of successful resume_networking() calls.
    """

    def __init__(
        self,
        resources: Iterable[LegacyResource] = (),
        *,
        fail_list: bool = False,
        fail_pause: bool = False,
        fail_resume: bool = False,
    ) -> None:
        self._resources: list[LegacyResource] = list(resources)
        self._paused = False
        self._lock = asyncio.Lock()
        self.fail_list = fail_list
        self.fail_pause = fail_pause
        self.fail_resume = fail_resume
        self.pause_count = 0
        self.resume_count = 0

    @property
    def paused(self) -> bool:
        """Check if networking is currently paused."""
        return self._paused

    @property
    def resources(self) -> list[LegacyResource]:
        return list(self._resources)

    def put(self, resource: LegacyResource) -> None:
        """Add a resource, replacing any with the same legacy identity."""
        self._resources = [
            existing for existing in self._resources if existing.identity != resource.identity
        ]
        self._resources.append(resource)

    async def list_all(self) -> list[LegacyResource]:
        if self.fail_list:
            raise DatastoreAccessError("list_legacy", cause=ConnectionError("injected failure"))
        return list(self._resources)

    async def pause_networking(self) -> None:
        async with self._lock:
            if self.fail_pause:
                raise PauseError(cause=ConnectionError("injected failure"))
            if self._paused:
                logger.debug("Networking already paused")
            self._paused = True
            self.pause_count += 1

    async def resume_networking(self) -> None:
        async with self._lock:
            if self.fail_resume:
                raise ResumeError(cause=ConnectionError("injected failure"))
            if not self._paused:
                logger.debug("Networking not paused, resume is a no-op")
            self._paused = False
            self.resume_count += 1


class InMemoryModernDatastore(ModernDatastore):
    """
    In-memory v3 datastore with upsert-by-identity writes.

    Example:
        >>> modern = InMemoryModernDatastore()
        >>> await modern.write(pool)
        >>> modern.get(pool.identity) == pool
        True

    Attributes:
        fail_list: Raise DatastoreAccessError from list_all().
        fail_write_after: Number of writes to accept before every further
            write raises WriteError, or None to never fail.
        write_count: Number of successful writes.
    """

    def __init__(
        self,
        resources: Iterable[ModernResource] = (),
        *,
        fail_list: bool = False,
        fail_write_after: int | None = None,
    ) -> None:
        self._resources: dict[ResourceIdentity, ModernResource] = {
            resource.identity: resource for resource in resources
        }
        self._lock = asyncio.Lock()
        self.fail_list = fail_list
        self.fail_write_after = fail_write_after
        self.write_count = 0

    @property
    def resources(self) -> dict[ResourceIdentity, ModernResource]:
        return dict(self._resources)

    def get(self, identity: ResourceIdentity) -> ModernResource | None:
        return self._resources.get(identity)

    async def list_all(self) -> list[ResourceIdentity]:
        if self.fail_list:
            raise DatastoreAccessError("list_v3", cause=ConnectionError("injected failure"))
        return list(self._resources)

    async def write(self, resource: ModernResource) -> None:
        async with self._lock:
            if self.fail_write_after is not None and self.write_count >= self.fail_write_after:
                raise WriteError(resource.identity, cause=ConnectionError("injected failure"))
            self._resources[resource.identity] = resource
            self.write_count += 1


__all__ = [
    "InMemoryLegacyDatastore",
    "InMemoryModernDatastore",
]
