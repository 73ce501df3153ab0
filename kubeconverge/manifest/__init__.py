"""Manifest create/read/update/delete with convergence waiting."""

from kubeconverge.manifest.lifecycle import ConvergenceAbortedError, ConvergenceError, ManifestLifecycle

__all__ = ["ConvergenceAbortedError", "ConvergenceError", "ManifestLifecycle"]
