"""PersistentVolumeClaim classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, in_progress, ready
from kubeconverge.status.fields import get_string_field

_PHASE_BOUND = "Bound"


class PersistentVolumeClaimClassifier(KindClassifier):
    """Ready once the claim is Bound."""

    classifier_id = "persistent_volume_claim"
    group_kinds = ("PersistentVolumeClaim",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        phase = get_string_field(obj, ".status.phase", "unknown")
        if phase != _PHASE_BOUND:
            return in_progress(f"PVC is not Bound. phase: {phase}")
        return ready("PVC is bound")
