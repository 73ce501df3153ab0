"""Job classifier.

A Job is InProgress until it completes, Ready once the Complete condition
is set and Failed once the Failed condition is set.
"""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import ConditionStatus, Result, failed, in_progress, ready
from kubeconverge.status.conditions import get_conditions
from kubeconverge.status.fields import get_int_field, get_string_field


class JobClassifier(KindClassifier):
    classifier_id = "job"
    group_kinds = ("batch/Job",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        parallelism = get_int_field(obj, ".spec.parallelism", 1)
        completions = get_int_field(obj, ".spec.completions", parallelism)
        succeeded = get_int_field(obj, ".status.succeeded", 0)
        active = get_int_field(obj, ".status.active", 0)
        pod_failed = get_int_field(obj, ".status.failed", 0)
        start_time = get_string_field(obj, ".status.startTime", "")

        for condition in get_conditions(obj):
            if condition.status != ConditionStatus.TRUE:
                continue
            if condition.type == "Complete":
                return ready(f"Job Completed. succeeded: {succeeded}/{completions}")
            if condition.type == "Failed":
                return failed(f"Job Failed. failed: {pod_failed}/{completions}")

        if start_time == "":
            return in_progress("Job not started")
        return in_progress(f"Job in progress. success:{succeeded}, active: {active}, failed: {pod_failed}")
