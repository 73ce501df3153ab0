"""Convergence poll outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.models.status import Result


class PollOutcome(StrEnum):
    """Terminal state of one convergence poll."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass
class PollResult:
    """What a convergence poll ended with.

    Attributes:
        identity:  The polled resource.
        outcome:   Terminal state.
        snapshot:  Last fetched object, or None (deleted, never visible).
        verdict:   Last classifier verdict, if any snapshot was classified.
        message:   Human-readable summary of why the poll ended.
        error:     Last transient or terminal error recorded by the poll.
        attempts:  Number of fetch attempts made.
    """

    identity: ResourceIdentity
    outcome: PollOutcome
    snapshot: dict[str, object] | None = None
    verdict: Result | None = None
    message: str = ""
    error: Exception | None = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome == PollOutcome.SUCCEEDED
