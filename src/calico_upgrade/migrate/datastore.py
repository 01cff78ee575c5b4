"""
Datastore access interfaces.

The orchestrator never talks to etcd or the Kubernetes API directly. It
is handed two clients implementing these interfaces:

- LegacyDatastore: reads v1 data and pauses/resumes Calico networking
- ModernDatastore: lists existing v3 identities and writes v3 resources

Implementations must raise the error types documented on each method and
nothing else for expected failures. Any other exception escaping write()
is treated like a WriteError.

Concrete implementations:
- InMemoryLegacyDatastore / InMemoryModernDatastore: testing and dry runs
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from calico_upgrade.resources.legacy import LegacyResource
from calico_upgrade.resources.modern import ModernResource, ResourceIdentity


class LegacyDatastore(ABC):
    """
    Access to the legacy v1 datastore.

    Example:
        >>> resources = await legacy.list_all()
        >>> await legacy.pause_networking()
        >>> try:
        ...     ...
        ... finally:
        ...     await legacy.resume_networking()
    """

    @abstractmethod
    async def list_all(self) -> list[LegacyResource]:
        """
        Read every legacy resource, of every kind.

        Returns:
            All legacy resources. Order within a kind is preserved in the
            report.

        Raises:
            DatastoreAccessError: If the datastore cannot be read.
        """
        pass

    @abstractmethod
    async def pause_networking(self) -> None:
        """
        Stop Calico components from acting on datastore changes.

        Idempotent: pausing an already paused cluster succeeds.

        Raises:
            PauseError: If the pause could not be applied.
        """
        pass

    @abstractmethod
    async def resume_networking(self) -> None:
        """
        Let Calico components act on datastore changes again.

        Idempotent, and safe to call without a completed pause.

        Raises:
            ResumeError: If the resume could not be confirmed.
        """
        pass


class ModernDatastore(ABC):
    """Access to the v3 datastore."""

    @abstractmethod
    async def list_all(self) -> list[ResourceIdentity]:
        """
        List the identities of every v3 resource already present.

        Raises:
            DatastoreAccessError: If the datastore cannot be read.
        """
        pass

    @abstractmethod
    async def write(self, resource: ModernResource) -> None:
        """
        Create or replace a v3 resource.

        Writing a resource whose identity already exists overwrites it;
        writing the same resource twice leaves the datastore unchanged.

        Raises:
            WriteError: If the write failed.
        """
        pass


__all__ = [
    "LegacyDatastore",
    "ModernDatastore",
]
