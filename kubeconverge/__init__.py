"""kubeconverge - Kubernetes resource status classification and convergence polling."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("kubeconverge")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
