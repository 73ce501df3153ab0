"""Convergence polling of mutated resources."""

from kubeconverge.poller.convergence import ConvergencePoller, ResourceFailedError

__all__ = ["ConvergencePoller", "ResourceFailedError"]
