"""CustomResourceDefinition classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import ConditionStatus, Result, failed, in_progress, ready
from kubeconverge.status.conditions import get_conditions


class CustomResourceDefinitionClassifier(KindClassifier):
    """Ready when Established; Failed on rejected names or a failed install."""

    classifier_id = "custom_resource_definition"
    group_kinds = ("apiextensions.k8s.io/CustomResourceDefinition",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        for condition in get_conditions(obj):
            if condition.type == "NamesAccepted" and condition.status == ConditionStatus.FALSE:
                return failed(condition.message)
            if condition.type == "Established":
                if condition.status == ConditionStatus.FALSE and condition.reason != "Installing":
                    return failed(condition.message)
                if condition.status == ConditionStatus.TRUE:
                    return ready("CRD established")
        return in_progress("installing")
