"""Manifest lifecycle: mutate an object, then wait for it to converge.

Create and update poll until the object is ready; delete polls until the
object is gone. Dry runs return the server's response without polling,
since nothing was persisted for a controller to act on.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping

from kubeconverge.client.base import ResourceClient, ResourceNotFoundError
from kubeconverge.models.config import PollConfig
from kubeconverge.models.poll import PollOutcome, PollResult
from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.observability.logging import get_logger
from kubeconverge.poller.convergence import ConvergencePoller


class ConvergenceError(RuntimeError):
    """A mutation was applied but the object did not converge."""

    def __init__(self, result: PollResult) -> None:
        super().__init__(result.message or f"{result.identity} {result.outcome}")
        self.result = result


class ConvergenceAbortedError(ConvergenceError):
    """The poll was aborted by its deadline or a cancel signal."""


class ManifestLifecycle:
    """Create, read, update, delete and list manifests through a ResourceClient."""

    def __init__(
        self,
        client: ResourceClient,
        poller: ConvergencePoller | None = None,
        config: PollConfig | None = None,
    ) -> None:
        self._client = client
        self._poller = poller or ConvergencePoller(client)
        self._config = config or PollConfig()
        self._log = get_logger("manifest")

    async def read(self, manifest: Mapping[str, object]) -> dict[str, object]:
        """Fetch the live object named by ``manifest``.

        Raises:
            ResourceNotFoundError: if it does not exist.
        """
        return await self._client.get(ResourceIdentity.from_manifest(manifest))

    async def list(self, api_version: str, kind: str, namespace: str = "") -> list[dict[str, object]]:
        return await self._client.list(api_version, kind, namespace)

    async def create(
        self,
        manifest: Mapping[str, object],
        *,
        dry_run: bool = False,
        config: PollConfig | None = None,
    ) -> dict[str, object]:
        """Create the object and wait until it is ready."""
        body = copy.deepcopy(dict(manifest))
        created = await self._client.create(body, dry_run=dry_run)
        if dry_run:
            return created
        return await self._wait(ResourceIdentity.from_manifest(body), is_deletion=False, config=config)

    async def update(
        self,
        manifest: Mapping[str, object],
        old_manifest: Mapping[str, object] | None = None,
        *,
        dry_run: bool = False,
        config: PollConfig | None = None,
    ) -> dict[str, object]:
        """Replace the object and wait until it is ready.

        ``metadata.resourceVersion`` is carried over from ``old_manifest``
        when it has one, so the replace is an optimistic-concurrency write
        against the version last read.
        """
        body = copy.deepcopy(dict(manifest))
        resource_version = _resource_version(old_manifest)
        if resource_version:
            metadata = body.setdefault("metadata", {})
            if isinstance(metadata, dict):
                metadata["resourceVersion"] = resource_version

        updated = await self._client.update(body, dry_run=dry_run)
        if dry_run:
            return updated
        return await self._wait(ResourceIdentity.from_manifest(body), is_deletion=False, config=config)

    async def apply(
        self,
        manifest: Mapping[str, object],
        *,
        dry_run: bool = False,
        config: PollConfig | None = None,
    ) -> dict[str, object]:
        """Create the object, or update it when it already exists."""
        try:
            existing = await self.read(manifest)
        except ResourceNotFoundError:
            return await self.create(manifest, dry_run=dry_run, config=config)
        return await self.update(manifest, existing, dry_run=dry_run, config=config)

    async def delete(
        self,
        manifest: Mapping[str, object],
        *,
        dry_run: bool = False,
        config: PollConfig | None = None,
    ) -> None:
        """Delete the object and wait until it is gone.

        An object that is already absent is treated as deleted.
        """
        identity = ResourceIdentity.from_manifest(manifest)
        try:
            await self._client.get(identity)
        except ResourceNotFoundError:
            self._log.info("delete_already_absent", resource=str(identity))
            return

        await self._client.delete(identity, dry_run=dry_run)
        if dry_run:
            return
        await self._wait(identity, is_deletion=True, config=config)

    async def _wait(
        self,
        identity: ResourceIdentity,
        *,
        is_deletion: bool,
        config: PollConfig | None,
    ) -> dict[str, object]:
        result = await self._poller.poll_until_converged(
            identity, is_deletion=is_deletion, config=config or self._config
        )
        if result.outcome == PollOutcome.ABORTED:
            raise ConvergenceAbortedError(result)
        if result.outcome == PollOutcome.FAILED:
            raise ConvergenceError(result)
        return result.snapshot or {}


def _resource_version(manifest: Mapping[str, object] | None) -> str:
    if manifest is None:
        return ""
    metadata = manifest.get("metadata")
    if not isinstance(metadata, Mapping):
        return ""
    value = metadata.get("resourceVersion")
    return value if isinstance(value, str) else ""
