"""Interfaces the poller and manifest lifecycle need from an API client."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kubeconverge.models.resources import ResourceIdentity


class ResourceNotFoundError(LookupError):
    """The requested object does not exist (HTTP 404)."""

    def __init__(self, identity: ResourceIdentity) -> None:
        super().__init__(f"{identity} not found")
        self.identity = identity


@runtime_checkable
class ResourceFetcher(Protocol):
    """Minimal interface the convergence poller needs: read one object."""

    async def get(self, identity: ResourceIdentity) -> dict[str, object]:
        """Return the object tree.

        Raises:
            ResourceNotFoundError: if the object does not exist.
        """
        ...


@runtime_checkable
class ResourceClient(ResourceFetcher, Protocol):
    """Full CRUD interface used by the manifest lifecycle."""

    async def create(self, manifest: dict[str, object], *, dry_run: bool = False) -> dict[str, object]: ...

    async def update(self, manifest: dict[str, object], *, dry_run: bool = False) -> dict[str, object]: ...

    async def delete(self, identity: ResourceIdentity, *, dry_run: bool = False) -> None: ...

    async def list(self, api_version: str, kind: str, namespace: str = "") -> list[dict[str, object]]: ...
