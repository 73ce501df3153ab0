"""Convention-based rules that apply to every resource kind.

Evaluated before any kind-specific classifier; the first rule that
produces a verdict wins:

1. ``metadata.deletionTimestamp`` set -> Terminating
2. ``metadata.generation`` != ``status.observedGeneration`` -> InProgress
3. a ``Ready`` condition -> Ready or InProgress from its status
"""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.models.status import (
    CONDITION_TYPE_READY,
    ConditionStatus,
    Result,
    in_progress,
    ready,
    terminating,
)
from kubeconverge.status.conditions import get_conditions
from kubeconverge.status.fields import nested_int, nested_string


def _kind(obj: Mapping[str, object]) -> str:
    kind = obj.get("kind")
    return kind if isinstance(kind, str) else ""


def check_generic_properties(obj: Mapping[str, object]) -> Result | None:
    """Return a verdict from the generic rules, or None to defer to the kind."""
    deletion_timestamp, found = nested_string(obj, "metadata", "deletionTimestamp")
    if found and deletion_timestamp != "":
        return terminating()

    result = check_generation(obj)
    if result is not None:
        return result

    for condition in get_conditions(obj):
        if condition.type == CONDITION_TYPE_READY:
            if condition.status == ConditionStatus.TRUE:
                return ready(condition.message)
            return in_progress(condition.message)
    return None


def check_generation(obj: Mapping[str, object]) -> Result | None:
    """InProgress when the controller has not observed the latest generation.

    Skipped when either field is absent.
    """
    generation, found = nested_int(obj, "metadata", "generation")
    if not found:
        return None
    observed_generation, found = nested_int(obj, "status", "observedGeneration")
    if found and observed_generation != generation:
        return in_progress(
            f"{_kind(obj)} generation is {generation}, but latest observed generation is {observed_generation}"
        )
    return None


def check_generation_set(obj: Mapping[str, object]) -> Result | None:
    """InProgress when ``metadata.generation`` or ``status.observedGeneration`` is unset.

    Stricter than :func:`check_generation`, for kinds whose controller
    always populates both fields once it has acted on the resource.
    """
    _, found = nested_int(obj, "metadata", "generation")
    if not found:
        return in_progress(f"{_kind(obj)} metadata.generation not found")
    _, found = nested_int(obj, "status", "observedGeneration")
    if not found:
        return in_progress(f"{_kind(obj)} status.observedGeneration not found")
    return None
