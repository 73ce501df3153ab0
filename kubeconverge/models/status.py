"""Normalized status verdicts and conditions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Reason(StrEnum):
    """Closed set of reasons a verdict can carry."""

    READY = "Ready"
    TERMINATING = "Terminating"
    IN_PROGRESS = "InProgress"
    NO_STATUS_INFO = "NoStatusInfo"
    USER_MANAGED = "UserManaged"
    FAILED = "Failed"


class ConditionStatus(StrEnum):
    """Kubernetes condition status values."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


# Reasons that imply a True verdict status. Everything else is False.
_TRUE_REASONS: frozenset[Reason] = frozenset({Reason.READY, Reason.NO_STATUS_INFO, Reason.USER_MANAGED})

# Standard condition type used by the generic readiness shortcut.
CONDITION_TYPE_READY = "Ready"


@dataclass(frozen=True)
class Condition:
    """One entry of ``status.conditions``.

    ``status`` is kept as the raw string published by the controller and
    compares equal to ``ConditionStatus`` members.
    """

    type: str
    status: str
    reason: str = ""
    message: str = ""
    observed_generation: int | None = None
    last_transition_time: str = ""


@dataclass(frozen=True)
class Result:
    """Classifier verdict: status, reason code and human-readable message."""

    status: ConditionStatus
    reason: Reason
    message: str = ""

    def __post_init__(self) -> None:
        expected = ConditionStatus.TRUE if self.reason in _TRUE_REASONS else ConditionStatus.FALSE
        if self.status != expected:
            raise ValueError(f"verdict status {self.status} is inconsistent with reason {self.reason}")

    @property
    def is_true(self) -> bool:
        return self.status == ConditionStatus.TRUE

    def to_dict(self) -> dict[str, str]:
        return {"status": str(self.status), "reason": str(self.reason), "message": self.message}


def ready(message: str) -> Result:
    return Result(ConditionStatus.TRUE, Reason.READY, message)


def no_status_info() -> Result:
    return Result(ConditionStatus.TRUE, Reason.NO_STATUS_INFO)


def user_managed() -> Result:
    return Result(ConditionStatus.TRUE, Reason.USER_MANAGED)


def in_progress(message: str) -> Result:
    return Result(ConditionStatus.FALSE, Reason.IN_PROGRESS, message)


def terminating() -> Result:
    return Result(ConditionStatus.FALSE, Reason.TERMINATING)


def failed(message: str) -> Result:
    return Result(ConditionStatus.FALSE, Reason.FAILED, message)
