"""Extraction of ``status.conditions`` into typed :class:`Condition` records."""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.models.status import Condition
from kubeconverge.status.fields import ClassificationError

_STRING_KEYS: tuple[str, ...] = ("type", "status", "reason", "message", "lastTransitionTime")


def get_conditions(obj: Mapping[str, object]) -> list[Condition]:
    """Decode ``status.conditions`` preserving order.

    A missing status or conditions list yields an empty list. Shapes that
    cannot be decoded at all (non-mapping status, non-list conditions,
    non-string condition fields) raise :class:`ClassificationError`.
    """
    status = obj.get("status")
    if status is None:
        return []
    if not isinstance(status, Mapping):
        raise ClassificationError(f"status is of the type {type(status).__name__}, expected map")

    raw_conditions = status.get("conditions")
    if raw_conditions is None:
        return []
    if not isinstance(raw_conditions, list):
        raise ClassificationError(
            f"status.conditions is of the type {type(raw_conditions).__name__}, expected list"
        )

    conditions: list[Condition] = []
    for index, item in enumerate(raw_conditions):
        if not isinstance(item, Mapping):
            raise ClassificationError(f"status.conditions[{index}] is of the type {type(item).__name__}, expected map")
        conditions.append(_decode_condition(item, index))
    return conditions


def _decode_condition(item: Mapping[str, object], index: int) -> Condition:
    values: dict[str, str] = {}
    for key in _STRING_KEYS:
        value = item.get(key)
        if value is None:
            values[key] = ""
            continue
        if not isinstance(value, str):
            raise ClassificationError(
                f"status.conditions[{index}].{key} is of the type {type(value).__name__}, expected string"
            )
        values[key] = value

    observed = item.get("observedGeneration")
    if observed is not None and (not isinstance(observed, int) or isinstance(observed, bool)):
        raise ClassificationError(
            f"status.conditions[{index}].observedGeneration is of the type {type(observed).__name__}, expected int64"
        )

    return Condition(
        type=values["type"],
        status=values["status"],
        reason=values["reason"],
        message=values["message"],
        observed_generation=observed,
        last_transition_time=values["lastTransitionTime"],
    )


def get_condition_with_status(conditions: list[Condition], condition_type: str, status: str) -> Condition | None:
    """Return the first condition matching both type and status, or None."""
    for condition in conditions:
        if condition.type == condition_type and condition.status == status:
            return condition
    return None


def has_condition_with_status(conditions: list[Condition], condition_type: str, status: str) -> bool:
    return get_condition_with_status(conditions, condition_type, status) is not None
