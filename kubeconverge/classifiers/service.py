"""Service classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, in_progress, ready
from kubeconverge.status.fields import get_string_field


class ServiceClassifier(KindClassifier):
    """LoadBalancer Services wait for a cluster IP; every other type is ready."""

    classifier_id = "service"
    group_kinds = ("Service",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        spec_type = get_string_field(obj, ".spec.type", "ClusterIP")
        cluster_ip = get_string_field(obj, ".spec.clusterIP", "")

        if spec_type == "LoadBalancer" and cluster_ip == "":
            return in_progress("ClusterIP not set. Service type: LoadBalancer")
        return ready("service ready")
