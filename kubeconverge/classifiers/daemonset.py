"""DaemonSet classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, in_progress, ready
from kubeconverge.status.fields import get_int_field
from kubeconverge.status.generic import check_generation_set


class DaemonSetClassifier(KindClassifier):
    """Compares desiredNumberScheduled against the scheduled counters.

    The generic generation check is lenient about unset fields. The
    daemonset controller always sets both once it has acted, so an unset
    field here means the controller has not caught up yet.
    """

    classifier_id = "daemonset"
    group_kinds = ("apps/DaemonSet", "extensions/DaemonSet")

    def classify(self, obj: Mapping[str, object]) -> Result:
        result = check_generation_set(obj)
        if result is not None:
            return result

        desired = get_int_field(obj, ".status.desiredNumberScheduled", -1)
        current = get_int_field(obj, ".status.currentNumberScheduled", 0)
        updated = get_int_field(obj, ".status.updatedNumberScheduled", 0)
        available = get_int_field(obj, ".status.numberAvailable", 0)
        number_ready = get_int_field(obj, ".status.numberReady", 0)

        if desired == -1:
            return in_progress("Missing .status.desiredNumberScheduled")

        if desired > current:
            return in_progress(f"Current: {current}/{desired}")

        if desired > updated:
            return in_progress(f"Updated: {updated}/{desired}")

        if desired > available:
            return in_progress(f"Available: {available}/{desired}")

        if desired > number_ready:
            return in_progress(f"Ready: {number_ready}/{desired}")

        return ready(f"All replicas scheduled as expected. Replicas: {desired}")
