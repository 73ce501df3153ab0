"""StatefulSet classifier.

The StatefulSet controller defines ``.status.conditions`` but never sets
any, so convergence is computed from replica counts and revisions only.
There is no signal for a failed reconcile.
"""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, in_progress, ready, user_managed
from kubeconverge.status.fields import get_int_field, get_string_field

_ON_DELETE_UPDATE_STRATEGY = "OnDelete"


class StatefulSetClassifier(KindClassifier):
    classifier_id = "statefulset"
    group_kinds = ("apps/StatefulSet",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        # OnDelete rollouts are driven by the user deleting pods.
        if get_string_field(obj, ".spec.updateStrategy.type", "") == _ON_DELETE_UPDATE_STRATEGY:
            return user_managed()

        spec_replicas = get_int_field(obj, ".spec.replicas", 1)
        ready_replicas = get_int_field(obj, ".status.readyReplicas", 0)
        current_replicas = get_int_field(obj, ".status.currentReplicas", 0)
        updated_replicas = get_int_field(obj, ".status.updatedReplicas", 0)
        status_replicas = get_int_field(obj, ".status.replicas", 0)
        partition = get_int_field(obj, ".spec.updateStrategy.rollingUpdate.partition", -1)

        if spec_replicas > status_replicas:
            return in_progress(f"Replicas: {status_replicas}/{spec_replicas}")

        if spec_replicas > ready_replicas:
            return in_progress(f"Ready: {ready_replicas}/{spec_replicas}")

        if status_replicas > spec_replicas:
            return in_progress(f"Pending termination: {status_replicas - spec_replicas}")

        # Only ordinals >= partition are rolled out.
        if partition != -1:
            if updated_replicas < spec_replicas - partition:
                return in_progress(f"updated: {updated_replicas}/{spec_replicas - partition}")
            return ready(f"Partition rollout complete. updated: {updated_replicas}")

        if spec_replicas > current_replicas:
            return in_progress(f"current: {current_replicas}/{spec_replicas}")

        current_revision = get_string_field(obj, ".status.currentRevision", "")
        update_revision = get_string_field(obj, ".status.updateRevision", "")
        if current_revision != update_revision:
            return in_progress("Waiting for updated revision to match current")

        return ready(f"All replicas scheduled as expected. Replicas: {status_replicas}")
