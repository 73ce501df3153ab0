"""API client interfaces and the Kubernetes implementation."""

from kubeconverge.client.base import ResourceClient, ResourceFetcher, ResourceNotFoundError

__all__ = ["ResourceClient", "ResourceFetcher", "ResourceNotFoundError"]
