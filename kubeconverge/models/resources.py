"""Resource identity derived from a manifest or fetched snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceIdentity:
    """(group, version, kind, namespace, name) of one Kubernetes object.

    ``group`` is empty for the core API group. ``namespace`` is empty for
    cluster-scoped kinds.
    """

    group: str
    version: str
    kind: str
    namespace: str
    name: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def group_kind(self) -> str:
        return f"{self.group}/{self.kind}" if self.group else self.kind

    @property
    def namespaced_name(self) -> str:
        return f"{self.namespace}/{self.name}" if self.namespace else self.name

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind} {self.namespaced_name}"

    @classmethod
    def from_manifest(cls, obj: Mapping[str, object]) -> ResourceIdentity:
        """Build an identity from a manifest dict.

        Raises:
            ValueError: if ``apiVersion``, ``kind`` or ``metadata.name`` is missing.
        """
        api_version = obj.get("apiVersion")
        kind = obj.get("kind")
        raw_meta = obj.get("metadata")
        metadata: Mapping[str, object] = raw_meta if isinstance(raw_meta, Mapping) else {}
        name = metadata.get("name")
        namespace = metadata.get("namespace") or ""

        if not isinstance(api_version, str) or not api_version:
            raise ValueError("manifest has no apiVersion")
        if not isinstance(kind, str) or not kind:
            raise ValueError("manifest has no kind")
        if not isinstance(name, str) or not name:
            raise ValueError(f"{kind} manifest has no metadata.name")

        group, version = split_api_version(api_version)
        return cls(group=group, version=version, kind=kind, namespace=str(namespace), name=name)


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts; core ``v1`` has an empty group."""
    if "/" in api_version:
        group, _, version = api_version.partition("/")
        return group, version
    return "", api_version
