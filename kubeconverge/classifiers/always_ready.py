"""Kinds that are ready as soon as they exist."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, ready


class AlwaysReadyClassifier(KindClassifier):
    """Secrets, ConfigMaps and CronJobs have no convergence to wait for."""

    classifier_id = "always_ready"
    group_kinds = ("Secret", "ConfigMap", "batch/CronJob")

    def classify(self, obj: Mapping[str, object]) -> Result:
        return ready("ready")
