"""Tests for the kind-specific classifiers, exercised through compute()."""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta

import pytest

from kubeconverge.classifiers import pod as pod_module
from kubeconverge.models.status import ConditionStatus, Reason, Result
from kubeconverge.status.core import compute
from kubeconverge.status.fields import ClassificationError


def _make_obj(
    api_version: str, kind: str, *, spec: dict | None = None, status: dict | None = None, **meta: object
) -> dict:
    metadata: dict[str, object] = {"name": "obj", "namespace": "default"}
    metadata.update(meta)
    obj: dict[str, object] = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    if spec is not None:
        obj["spec"] = spec
    if status is not None:
        obj["status"] = status
    return obj


def _timestamp(delta: timedelta) -> str:
    return (datetime.now(UTC) + delta).strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# Facade behaviour
# ---------------------------------------------------------------------------


class TestCompute:
    def test_configmap_is_ready(self) -> None:
        obj = _make_obj("v1", "ConfigMap")
        obj["data"] = {"key": "value", "other": "x"}
        assert compute(obj) == Result(ConditionStatus.TRUE, Reason.READY, "ready")

    def test_configmap_with_null_status_is_ready(self) -> None:
        obj = _make_obj("v1", "ConfigMap", generation=1)
        obj["status"] = None
        assert compute(obj) == Result(ConditionStatus.TRUE, Reason.READY, "ready")

    def test_secret_and_cronjob_are_ready(self) -> None:
        assert compute(_make_obj("v1", "Secret")).reason == Reason.READY
        assert compute(_make_obj("batch/v1", "CronJob", spec={"schedule": "* * * * *"})).reason == Reason.READY

    def test_unknown_kind_is_no_status_info(self) -> None:
        result = compute(_make_obj("example.com/v1", "Widget", spec={"size": 3}))
        assert result == Result(ConditionStatus.TRUE, Reason.NO_STATUS_INFO, "")

    def test_core_kind_in_other_group_is_not_matched(self) -> None:
        result = compute(_make_obj("example.com/v1", "Pod", status={"phase": "Failed"}))
        assert result.reason == Reason.NO_STATUS_INFO

    @pytest.mark.parametrize(
        ("api_version", "kind"),
        [
            ("v1", "ConfigMap"),
            ("apps/v1", "Deployment"),
            ("v1", "Pod"),
            ("example.com/v1", "Widget"),
        ],
    )
    def test_deletion_timestamp_is_terminating_for_any_kind(self, api_version: str, kind: str) -> None:
        obj = _make_obj(api_version, kind, deletionTimestamp="2024-05-01T10:00:00Z")
        result = compute(obj)
        assert result.reason == Reason.TERMINATING
        assert result.status == ConditionStatus.FALSE

    def test_generation_mismatch_beats_kind_rules(self) -> None:
        obj = _make_obj("v1", "ConfigMap", generation=4)
        obj["status"] = {"observedGeneration": 3}
        result = compute(obj)
        assert result.reason == Reason.IN_PROGRESS
        assert "generation is 4" in result.message

    def test_is_idempotent(self) -> None:
        obj = _ready_deployment()
        before = copy.deepcopy(obj)
        assert compute(obj) == compute(obj)
        assert obj == before

    def test_malformed_conditions_raise_for_unknown_kind(self) -> None:
        with pytest.raises(ClassificationError):
            compute(_make_obj("example.com/v1", "Widget", status={"conditions": "nope"}))


# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------


def _ready_deployment() -> dict:
    return _make_obj(
        "apps/v1",
        "Deployment",
        generation=1,
        spec={"replicas": 1},
        status={
            "observedGeneration": 1,
            "replicas": 1,
            "updatedReplicas": 1,
            "readyReplicas": 1,
            "availableReplicas": 1,
            "conditions": [
                {"type": "Progressing", "status": "True", "reason": "NewReplicaSetAvailable"},
                {"type": "Available", "status": "True", "reason": "MinimumReplicasAvailable"},
            ],
        },
    )


class TestDeployment:
    def test_ready(self) -> None:
        assert compute(_ready_deployment()) == Result(
            ConditionStatus.TRUE, Reason.READY, "Deployment is available. Replicas: 1"
        )

    def test_progress_deadline_exceeded_is_failed(self) -> None:
        obj = _ready_deployment()
        obj["status"]["conditions"][0] = {
            "type": "Progressing",
            "status": "False",
            "reason": "ProgressDeadlineExceeded",
            "message": 'ReplicaSet "web-5d8" has timed out progressing.',
        }
        result = compute(obj)
        assert result.reason == Reason.FAILED
        assert "timed out progressing" in result.message

    def test_scaling_up(self) -> None:
        obj = _ready_deployment()
        obj["spec"]["replicas"] = 3
        assert compute(obj).message == "Replicas: 1/3"

    def test_updated_replicas_lagging(self) -> None:
        obj = _ready_deployment()
        obj["status"]["updatedReplicas"] = 0
        assert compute(obj).message == "Updated: 0/1"

    def test_pending_termination(self) -> None:
        obj = _ready_deployment()
        obj["status"]["replicas"] = 2
        obj["status"]["updatedReplicas"] = 1
        assert compute(obj).message == "Pending termination: 1"

    def test_not_ready(self) -> None:
        obj = _ready_deployment()
        obj["status"]["readyReplicas"] = 0
        assert compute(obj).message == "Ready: 0/1"

    def test_without_new_replicaset_available(self) -> None:
        obj = _ready_deployment()
        obj["spec"]["progressDeadlineSeconds"] = 600
        obj["status"]["conditions"][0]["reason"] = "ReplicaSetUpdated"
        assert compute(obj).message == "ReplicaSet not Available"

    def test_unset_progress_deadline_skips_progressing_check(self) -> None:
        obj = _ready_deployment()
        obj["status"]["conditions"] = [{"type": "Available", "status": "True"}]
        assert compute(obj).reason == Reason.READY

    def test_not_available(self) -> None:
        obj = _ready_deployment()
        obj["status"]["conditions"][1]["status"] = "False"
        assert compute(obj).message == "Deployment not Available"


# ---------------------------------------------------------------------------
# StatefulSet
# ---------------------------------------------------------------------------


def _statefulset(**status: object) -> dict:
    base: dict[str, object] = {
        "replicas": 3,
        "readyReplicas": 3,
        "currentReplicas": 3,
        "updatedReplicas": 3,
        "currentRevision": "web-1",
        "updateRevision": "web-1",
    }
    base.update(status)
    return _make_obj("apps/v1", "StatefulSet", spec={"replicas": 3}, status=base)


class TestStatefulSet:
    def test_ready(self) -> None:
        result = compute(_statefulset())
        assert result.reason == Reason.READY
        assert result.message == "All replicas scheduled as expected. Replicas: 3"

    def test_on_delete_is_user_managed(self) -> None:
        obj = _statefulset(readyReplicas=0)
        obj["spec"]["updateStrategy"] = {"type": "OnDelete"}
        result = compute(obj)
        assert result.reason == Reason.USER_MANAGED
        assert result.status == ConditionStatus.TRUE

    def test_revision_mismatch(self) -> None:
        result = compute(_statefulset(updateRevision="web-2"))
        assert result.message == "Waiting for updated revision to match current"

    def test_partition_in_progress(self) -> None:
        obj = _statefulset(updatedReplicas=0)
        obj["spec"]["updateStrategy"] = {"type": "RollingUpdate", "rollingUpdate": {"partition": 1}}
        assert compute(obj).message == "updated: 0/2"

    def test_partition_complete(self) -> None:
        obj = _statefulset(updatedReplicas=2, updateRevision="web-2")
        obj["spec"]["updateStrategy"] = {"type": "RollingUpdate", "rollingUpdate": {"partition": 1}}
        result = compute(obj)
        assert result.reason == Reason.READY
        assert result.message == "Partition rollout complete. updated: 2"

    def test_ready_replicas_lagging(self) -> None:
        assert compute(_statefulset(readyReplicas=1)).message == "Ready: 1/3"


# ---------------------------------------------------------------------------
# DaemonSet / ReplicaSet
# ---------------------------------------------------------------------------


def _daemonset(**status: object) -> dict:
    base: dict[str, object] = {
        "observedGeneration": 1,
        "desiredNumberScheduled": 2,
        "currentNumberScheduled": 2,
        "updatedNumberScheduled": 2,
        "numberAvailable": 2,
        "numberReady": 2,
    }
    base.update(status)
    return _make_obj("apps/v1", "DaemonSet", generation=1, status=base)


class TestDaemonSet:
    def test_ready(self) -> None:
        assert compute(_daemonset()).message == "All replicas scheduled as expected. Replicas: 2"

    def test_missing_observed_generation(self) -> None:
        obj = _daemonset()
        del obj["status"]["observedGeneration"]
        assert compute(obj).message == "DaemonSet status.observedGeneration not found"

    def test_null_status_is_in_progress(self) -> None:
        obj = _daemonset()
        obj["status"] = None
        result = compute(obj)
        assert result.reason == Reason.IN_PROGRESS
        assert result.message == "DaemonSet status.observedGeneration not found"

    def test_missing_desired(self) -> None:
        obj = _daemonset()
        del obj["status"]["desiredNumberScheduled"]
        assert compute(obj).message == "Missing .status.desiredNumberScheduled"

    def test_unavailable(self) -> None:
        assert compute(_daemonset(numberAvailable=1)).message == "Available: 1/2"


def _replicaset(**status: object) -> dict:
    base: dict[str, object] = {"replicas": 2, "readyReplicas": 2, "availableReplicas": 2, "fullyLabeledReplicas": 2}
    base.update(status)
    return _make_obj("apps/v1", "ReplicaSet", spec={"replicas": 2}, status=base)


class TestReplicaSet:
    def test_ready(self) -> None:
        assert compute(_replicaset()).message == "ReplicaSet is available. Replicas: 2"

    def test_replica_failure(self) -> None:
        obj = _replicaset(conditions=[{"type": "ReplicaFailure", "status": "True"}])
        result = compute(obj)
        assert result.reason == Reason.IN_PROGRESS
        assert result.message == "Replica Failure condition. Check Pods"

    def test_labelled_lagging(self) -> None:
        assert compute(_replicaset(fullyLabeledReplicas=1)).message == "Labelled: 1/2"


# ---------------------------------------------------------------------------
# Job / CRD
# ---------------------------------------------------------------------------


class TestJob:
    def test_complete(self) -> None:
        obj = _make_obj(
            "batch/v1",
            "Job",
            spec={"completions": 1},
            status={"succeeded": 1, "conditions": [{"type": "Complete", "status": "True"}]},
        )
        assert compute(obj) == Result(ConditionStatus.TRUE, Reason.READY, "Job Completed. succeeded: 1/1")

    def test_failed(self) -> None:
        obj = _make_obj("batch/v1", "Job", status={"failed": 4, "conditions": [{"type": "Failed", "status": "True"}]})
        result = compute(obj)
        assert result.reason == Reason.FAILED
        assert result.message == "Job Failed. failed: 4/1"

    def test_not_started(self) -> None:
        assert compute(_make_obj("batch/v1", "Job", status={})).message == "Job not started"

    def test_running(self) -> None:
        obj = _make_obj("batch/v1", "Job", status={"startTime": "2024-05-01T10:00:00Z", "active": 1})
        assert compute(obj).message == "Job in progress. success:0, active: 1, failed: 0"


def _crd(*conditions: dict[str, str]) -> dict:
    return _make_obj(
        "apiextensions.k8s.io/v1",
        "CustomResourceDefinition",
        status={"conditions": list(conditions)},
    )


class TestCustomResourceDefinition:
    def test_established(self) -> None:
        result = compute(_crd({"type": "NamesAccepted", "status": "True"}, {"type": "Established", "status": "True"}))
        assert result == Result(ConditionStatus.TRUE, Reason.READY, "CRD established")

    def test_names_rejected(self) -> None:
        result = compute(_crd({"type": "NamesAccepted", "status": "False", "message": "plural conflicts"}))
        assert result.reason == Reason.FAILED
        assert result.message == "plural conflicts"

    def test_installing(self) -> None:
        result = compute(_crd({"type": "Established", "status": "False", "reason": "Installing"}))
        assert result == Result(ConditionStatus.FALSE, Reason.IN_PROGRESS, "installing")

    def test_not_established_is_failed(self) -> None:
        result = compute(_crd({"type": "Established", "status": "False", "reason": "Broken", "message": "bad"}))
        assert result.reason == Reason.FAILED


# ---------------------------------------------------------------------------
# Service / PVC / PDB
# ---------------------------------------------------------------------------


class TestSimpleKinds:
    def test_load_balancer_without_cluster_ip(self) -> None:
        result = compute(_make_obj("v1", "Service", spec={"type": "LoadBalancer"}))
        assert result.message == "ClusterIP not set. Service type: LoadBalancer"

    def test_cluster_ip_service_is_ready(self) -> None:
        assert compute(_make_obj("v1", "Service", spec={})).message == "service ready"

    def test_pvc_pending(self) -> None:
        result = compute(_make_obj("v1", "PersistentVolumeClaim", status={"phase": "Pending"}))
        assert result.message == "PVC is not Bound. phase: Pending"

    def test_pvc_without_phase(self) -> None:
        assert compute(_make_obj("v1", "PersistentVolumeClaim")).message == "PVC is not Bound. phase: unknown"

    def test_pvc_bound(self) -> None:
        assert compute(_make_obj("v1", "PersistentVolumeClaim", status={"phase": "Bound"})).reason == Reason.READY

    def test_pdb(self) -> None:
        obj = _make_obj("policy/v1", "PodDisruptionBudget", generation=1, status={"observedGeneration": 1})
        assert compute(obj).message == "AllowedDisruptions has been computed."


# ---------------------------------------------------------------------------
# Pod
# ---------------------------------------------------------------------------


def _unschedulable_pod(created: timedelta | None) -> dict:
    meta: dict[str, object] = {}
    if created is not None:
        meta["creationTimestamp"] = _timestamp(created)
    return _make_obj(
        "v1",
        "Pod",
        status={
            "phase": "Pending",
            "conditions": [
                {"type": "PodScheduled", "status": "False", "reason": "Unschedulable", "message": "0/3 nodes"}
            ],
        },
        **meta,
    )


class TestPod:
    def test_unschedulable_past_window_is_failed(self) -> None:
        result = compute(_unschedulable_pod(timedelta(seconds=-60)))
        assert result == Result(ConditionStatus.FALSE, Reason.FAILED, "Pod could not be scheduled")

    def test_unschedulable_within_window_is_in_progress(self) -> None:
        result = compute(_unschedulable_pod(timedelta(seconds=-2)))
        assert result == Result(ConditionStatus.FALSE, Reason.IN_PROGRESS, "Pod has not been scheduled")

    def test_unschedulable_without_creation_timestamp_is_failed(self) -> None:
        assert compute(_unschedulable_pod(None)).reason == Reason.FAILED

    def test_schedule_window_uses_clock(self, monkeypatch: pytest.MonkeyPatch) -> None:
        obj = _unschedulable_pod(None)
        obj["metadata"]["creationTimestamp"] = "2024-05-01T10:00:00Z"
        created = datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)

        monkeypatch.setattr(pod_module, "_now", lambda: created + timedelta(seconds=14))
        assert compute(obj).reason == Reason.IN_PROGRESS

        monkeypatch.setattr(pod_module, "_now", lambda: created + timedelta(seconds=16))
        assert compute(obj).reason == Reason.FAILED

    def test_pending(self) -> None:
        obj = _make_obj("v1", "Pod", status={"phase": "Pending"})
        assert compute(obj).message == "Pod is in the Pending phase"

    def test_succeeded_and_failed_phases(self) -> None:
        assert compute(_make_obj("v1", "Pod", status={"phase": "Succeeded"})).message == "Pod completed"
        assert compute(_make_obj("v1", "Pod", status={"phase": "Failed"})).reason == Reason.FAILED

    def test_running_and_ready(self) -> None:
        obj = _make_obj("v1", "Pod", status={"phase": "Running", "conditions": [{"type": "Ready", "status": "True"}]})
        assert compute(obj).reason == Reason.READY

    def test_crash_looping_containers_fail(self) -> None:
        obj = _make_obj(
            "v1",
            "Pod",
            status={
                "phase": "Running",
                "containerStatuses": [
                    {"name": "app", "state": {"waiting": {"reason": "CrashLoopBackOff"}}},
                    {"name": "sidecar", "state": {"running": {}}},
                    {"name": "init", "state": {"waiting": {"reason": "CrashLoopBackOff"}}},
                ],
            },
        )
        result = compute(obj)
        assert result.reason == Reason.FAILED
        assert result.message == "Containers in CrashLoop state: app,init"

    def test_running_not_ready(self) -> None:
        obj = _make_obj("v1", "Pod", status={"phase": "Running", "containerStatuses": []})
        assert compute(obj).message == "Pod is running but is not Ready"

    def test_no_phase(self) -> None:
        assert compute(_make_obj("v1", "Pod", status={})).message == "Pod phase not available"

    def test_unknown_phase_raises(self) -> None:
        with pytest.raises(ClassificationError, match="unknown phase Exploded"):
            compute(_make_obj("v1", "Pod", status={"phase": "Exploded"}))
