"""ReplicaSet classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import ConditionStatus, Result, in_progress, ready
from kubeconverge.status.conditions import get_conditions, has_condition_with_status
from kubeconverge.status.fields import get_int_field


class ReplicaSetClassifier(KindClassifier):
    classifier_id = "replicaset"
    group_kinds = ("apps/ReplicaSet", "extensions/ReplicaSet")

    def classify(self, obj: Mapping[str, object]) -> Result:
        conditions = get_conditions(obj)
        if has_condition_with_status(conditions, "ReplicaFailure", ConditionStatus.TRUE):
            return in_progress("Replica Failure condition. Check Pods")

        spec_replicas = get_int_field(obj, ".spec.replicas", 1)
        status_replicas = get_int_field(obj, ".status.replicas", 0)
        ready_replicas = get_int_field(obj, ".status.readyReplicas", 0)
        available_replicas = get_int_field(obj, ".status.availableReplicas", 0)
        labelled_replicas = get_int_field(obj, ".status.fullyLabeledReplicas", 0)

        if spec_replicas > labelled_replicas:
            return in_progress(f"Labelled: {labelled_replicas}/{spec_replicas}")

        if spec_replicas > available_replicas:
            return in_progress(f"Available: {available_replicas}/{spec_replicas}")

        if spec_replicas > ready_replicas:
            return in_progress(f"Ready: {ready_replicas}/{spec_replicas}")

        if status_replicas > spec_replicas:
            return in_progress(f"Pending termination: {status_replicas - spec_replicas}")

        return ready(f"ReplicaSet is available. Replicas: {status_replicas}")
