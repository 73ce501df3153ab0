"""kubernetes_asyncio dynamic-client adapter.

Implements :class:`~kubeconverge.client.base.ResourceClient` on top of
``kubernetes_asyncio.dynamic.DynamicClient``. Kind to REST resource
mapping uses the dynamic client's discovery; namespaced kinds are
addressed with the object's namespace, cluster-scoped kinds without.
"""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio.client import ApiClient
from kubernetes_asyncio.client.exceptions import ApiException
from kubernetes_asyncio.dynamic import DynamicClient

from kubeconverge.client.base import ResourceNotFoundError
from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.observability.logging import get_logger

_DRY_RUN_ALL = "All"


class KubernetesResourceClient:
    """Async CRUD client for arbitrary Kubernetes objects.

    Lifecycle::

        client = await KubernetesResourceClient.from_config(context="kind-dev")
        try:
            obj = await client.get(identity)
        finally:
            await client.close()
    """

    def __init__(self, api_client: ApiClient, dynamic: DynamicClient) -> None:
        self._api_client = api_client
        self._dynamic = dynamic
        self._log = get_logger("kubernetes_client")

    @classmethod
    async def from_config(cls, context: str = "") -> KubernetesResourceClient:
        """Configure from the in-cluster service account, else from kubeconfig."""
        import kubernetes_asyncio.config as k8s_config

        log = get_logger("kubernetes_client")
        if context:
            await k8s_config.load_kube_config(context=context)
            log.info("k8s client configured from kubeconfig", context=context)
        else:
            try:
                # load_incluster_config() is synchronous in kubernetes-asyncio
                k8s_config.load_incluster_config()  # type: ignore[no-untyped-call]
                log.info("k8s client configured from in-cluster service account")
            except k8s_config.ConfigException:
                # load_kube_config() is async in kubernetes-asyncio
                await k8s_config.load_kube_config()
                log.info("k8s client configured from kubeconfig", context="current")

        api_client = ApiClient()
        dynamic = await DynamicClient(api_client)
        return cls(api_client, dynamic)

    async def close(self) -> None:
        await self._api_client.close()

    async def __aenter__(self) -> KubernetesResourceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # ResourceClient interface
    # ------------------------------------------------------------------

    async def get(self, identity: ResourceIdentity) -> dict[str, object]:
        resource = await self._resource(identity.api_version, identity.kind)
        try:
            instance = await self._dynamic.get(
                resource, name=identity.name, namespace=self._namespace(resource, identity)
            )
        except ApiException as exc:
            raise self._translate(exc, identity) from exc
        return _to_dict(instance)

    async def create(self, manifest: dict[str, object], *, dry_run: bool = False) -> dict[str, object]:
        identity = ResourceIdentity.from_manifest(manifest)
        resource = await self._resource(identity.api_version, identity.kind)
        kwargs = _dry_run_kwargs(dry_run)
        try:
            instance = await self._dynamic.create(
                resource, body=manifest, namespace=self._namespace(resource, identity), **kwargs
            )
        except ApiException as exc:
            raise self._translate(exc, identity) from exc
        self._log.info("resource_created", resource=str(identity), dry_run=dry_run)
        return _to_dict(instance)

    async def update(self, manifest: dict[str, object], *, dry_run: bool = False) -> dict[str, object]:
        identity = ResourceIdentity.from_manifest(manifest)
        resource = await self._resource(identity.api_version, identity.kind)
        kwargs = _dry_run_kwargs(dry_run)
        try:
            instance = await self._dynamic.replace(
                resource,
                body=manifest,
                name=identity.name,
                namespace=self._namespace(resource, identity),
                **kwargs,
            )
        except ApiException as exc:
            raise self._translate(exc, identity) from exc
        self._log.info("resource_updated", resource=str(identity), dry_run=dry_run)
        return _to_dict(instance)

    async def delete(self, identity: ResourceIdentity, *, dry_run: bool = False) -> None:
        resource = await self._resource(identity.api_version, identity.kind)
        kwargs = _dry_run_kwargs(dry_run)
        try:
            await self._dynamic.delete(
                resource, name=identity.name, namespace=self._namespace(resource, identity), **kwargs
            )
        except ApiException as exc:
            raise self._translate(exc, identity) from exc
        self._log.info("resource_deleted", resource=str(identity), dry_run=dry_run)

    async def list(self, api_version: str, kind: str, namespace: str = "") -> list[dict[str, object]]:
        resource = await self._resource(api_version, kind)
        namespace_arg = namespace if namespace and resource.namespaced else None
        result = await self._dynamic.get(resource, namespace=namespace_arg)
        items = _to_dict(result).get("items")
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _resource(self, api_version: str, kind: str) -> Any:
        return await self._dynamic.resources.get(api_version=api_version, kind=kind)

    @staticmethod
    def _namespace(resource: Any, identity: ResourceIdentity) -> str | None:
        if getattr(resource, "namespaced", False):
            return identity.namespace or None
        return None

    def _translate(self, exc: ApiException, identity: ResourceIdentity) -> Exception:
        if exc.status == 404:
            return ResourceNotFoundError(identity)
        self._log.error(
            "kubernetes_api_error",
            resource=str(identity),
            status=exc.status,
            reason=exc.reason,
        )
        return exc


def _dry_run_kwargs(dry_run: bool) -> dict[str, str]:
    return {"dry_run": _DRY_RUN_ALL} if dry_run else {}


def _to_dict(instance: Any) -> dict[str, object]:
    if isinstance(instance, dict):
        return instance
    to_dict = getattr(instance, "to_dict", None)
    if callable(to_dict):
        data = to_dict()
        if isinstance(data, dict):
            return data
    raise TypeError(f"unexpected response type {type(instance).__name__}")
