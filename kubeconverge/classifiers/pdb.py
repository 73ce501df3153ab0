"""PodDisruptionBudget classifier."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers.base import KindClassifier
from kubeconverge.models.status import Result, ready


class PodDisruptionBudgetClassifier(KindClassifier):
    """A PDB is current once the disruption controller has observed it.

    PDBs carry ``status.observedGeneration``, so by the time the generic
    generation check lets a PDB through, the controller has already
    computed the allowed disruptions. The controller sets no condition
    when that computation fails, so there is nothing further to inspect.
    """

    classifier_id = "pod_disruption_budget"
    group_kinds = ("policy/PodDisruptionBudget",)

    def classify(self, obj: Mapping[str, object]) -> Result:
        return ready("AllowedDisruptions has been computed.")
