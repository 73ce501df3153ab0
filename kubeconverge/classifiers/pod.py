"""Pod classifier, dispatching on ``status.phase``."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import ConditionStatus, Result, failed, in_progress, ready
from kubeconverge.status.conditions import get_condition_with_status, get_conditions, has_condition_with_status
from kubeconverge.status.fields import ClassificationError, get_string_field

# How long a pod may stay unschedulable before it is reported as Failed.
SCHEDULE_WINDOW = timedelta(seconds=15)

_CRASH_LOOP_REASON = "CrashLoopBackOff"


def _now() -> datetime:
    return datetime.now(UTC)


def _creation_timestamp(obj: Mapping[str, object]) -> datetime | None:
    raw = get_string_field(obj, ".metadata.creationTimestamp", "")
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def get_crash_looping_containers(obj: Mapping[str, object]) -> list[str]:
    """Return names of containers waiting in CrashLoopBackOff.

    Raises:
        ClassificationError: if ``status.containerStatuses`` is malformed.
    """
    raw_status = obj.get("status")
    status: Mapping[str, object] = raw_status if isinstance(raw_status, Mapping) else {}
    statuses = status.get("containerStatuses")
    if statuses is None:
        return []
    if not isinstance(statuses, list):
        raise ClassificationError(
            f"status.containerStatuses is of the type {type(statuses).__name__}, expected list"
        )

    names: list[str] = []
    for item in statuses:
        if not isinstance(item, Mapping):
            raise ClassificationError("status.containerStatuses entry is not a map")
        name = item.get("name")
        state = item.get("state")
        if not isinstance(name, str) or state is None:
            continue
        if not isinstance(state, Mapping):
            raise ClassificationError(f"state of container {name} is not a map")
        waiting = state.get("waiting")
        if waiting is None:
            continue
        if not isinstance(waiting, Mapping):
            raise ClassificationError(f"waiting state of container {name} is not a map")
        if waiting.get("reason") == _CRASH_LOOP_REASON:
            names.append(name)
    return names


class PodClassifier(KindClassifier):
    classifier_id = "pod"
    group_kinds = ("Pod",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        conditions = get_conditions(obj)
        phase = get_string_field(obj, ".status.phase", "")

        if phase == "Succeeded":
            return ready("Pod completed")

        if phase == "Failed":
            return failed("Pod failed")

        if phase == "Running":
            if has_condition_with_status(conditions, "Ready", ConditionStatus.TRUE):
                return ready("Pod ready")
            crash_looping = get_crash_looping_containers(obj)
            if crash_looping:
                return failed(f"Containers in CrashLoop state: {','.join(crash_looping)}")
            return in_progress("Pod is running but is not Ready")

        if phase == "Pending":
            condition = get_condition_with_status(conditions, "PodScheduled", ConditionStatus.FALSE)
            if condition is not None and condition.reason == "Unschedulable":
                created = _creation_timestamp(obj)
                if created is not None and _now() - SCHEDULE_WINDOW < created:
                    return in_progress("Pod has not been scheduled")
                return failed("Pod could not be scheduled")
            return in_progress("Pod is in the Pending phase")

        # No phase yet means the kubelet has not observed the pod.
        if phase == "":
            return in_progress("Pod phase not available")
        raise ClassificationError(f"unknown phase {phase}")
