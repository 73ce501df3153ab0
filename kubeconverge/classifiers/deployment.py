"""Deployment classifier.

Combines ``.status.conditions`` with the replica counters. The only
terminal failure is an exceeded progress deadline.
"""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import ConditionStatus, Result, failed, in_progress, ready
from kubeconverge.status.conditions import get_conditions
from kubeconverge.status.fields import get_int_field

# The deployment controller treats an unset progressDeadlineSeconds as
# MaxInt32 and never sets the Progressing condition in that case.
_PROGRESS_DEADLINE_UNSET = 2**31 - 1


class DeploymentClassifier(KindClassifier):
    classifier_id = "deployment"
    group_kinds = ("apps/Deployment", "extensions/Deployment")

    def classify(self, obj: Mapping[str, object]) -> Result:
        progress_deadline = get_int_field(obj, ".spec.progressDeadlineSeconds", _PROGRESS_DEADLINE_UNSET)
        progressing = progress_deadline == _PROGRESS_DEADLINE_UNSET
        available = False

        for condition in get_conditions(obj):
            if condition.type == "Progressing":
                if condition.reason == "ProgressDeadlineExceeded":
                    return failed(condition.message)
                if condition.status == ConditionStatus.TRUE and condition.reason == "NewReplicaSetAvailable":
                    progressing = True
            elif condition.type == "Available" and condition.status == ConditionStatus.TRUE:
                available = True

        spec_replicas = get_int_field(obj, ".spec.replicas", 1)
        status_replicas = get_int_field(obj, ".status.replicas", 0)
        updated_replicas = get_int_field(obj, ".status.updatedReplicas", 0)
        ready_replicas = get_int_field(obj, ".status.readyReplicas", 0)
        available_replicas = get_int_field(obj, ".status.availableReplicas", 0)

        if spec_replicas > status_replicas:
            return in_progress(f"Replicas: {status_replicas}/{spec_replicas}")

        if spec_replicas > updated_replicas:
            return in_progress(f"Updated: {updated_replicas}/{spec_replicas}")

        if status_replicas > spec_replicas:
            return in_progress(f"Pending termination: {status_replicas - spec_replicas}")

        if updated_replicas > available_replicas:
            return in_progress(f"Available: {available_replicas}/{updated_replicas}")

        if spec_replicas > ready_replicas:
            return in_progress(f"Ready: {ready_replicas}/{spec_replicas}")

        if not progressing:
            return in_progress("ReplicaSet not Available")
        if not available:
            return in_progress("Deployment not Available")

        return ready(f"Deployment is available. Replicas: {status_replicas}")
