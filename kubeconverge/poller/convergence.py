"""Convergence poller.

After a create, update or delete lands, the remote controller converges
the object asynchronously. The poller re-fetches the object with
exponential back-off and feeds every snapshot to the status classifier
until a terminal verdict is reached:

- settle: sleep ``initial_get_delay`` so the first read does not see the
  status from before the mutation
- attempt ``n`` (0-based, ``n < max_retries``): fetch and classify, then
  sleep ``initial_delay * backoff_factor ** n`` unless the attempt was
  terminal
- budget exhausted: Failed, reporting the last recorded error

Fetch errors, not-found while not deleting and classification errors are
transient. A Failed verdict stops immediately. The deadline
(``PollConfig.timeout``) and an optional ``asyncio.Event`` abort the poll
between attempts and during sleeps with an ``aborted`` outcome.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Coroutine, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from kubeconverge.client.base import ResourceFetcher, ResourceNotFoundError
from kubeconverge.models.config import PollConfig
from kubeconverge.models.poll import PollOutcome, PollResult
from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.models.status import Reason, Result
from kubeconverge.observability.logging import get_logger
from kubeconverge.observability.metrics import (
    poll_attempts_total,
    poll_backoff_seconds,
    poll_duration_seconds,
    poll_outcomes_total,
)
from kubeconverge.status.core import compute
from kubeconverge.status.fields import ClassificationError

Classifier = Callable[[Mapping[str, object]], Result]
Sleeper = Callable[[float], Coroutine[Any, Any, None]]

# NoStatusInfo is accepted only once fewer than this many attempts remain.
_NO_STATUS_INFO_GRACE = 2


class ResourceFailedError(RuntimeError):
    """The classifier reported a terminal Failed verdict."""

    def __init__(self, identity: ResourceIdentity, message: str) -> None:
        super().__init__(f"failed: {message}")
        self.identity = identity


@dataclass
class _Step:
    """Outcome of a single fetch+classify attempt."""

    done: bool
    outcome: PollOutcome = PollOutcome.FAILED
    snapshot: dict[str, object] | None = None
    verdict: Result | None = None
    error: Exception | None = None
    message: str = ""


class ConvergencePoller:
    """Polls one resource at a time until it converges.

    The poller holds no per-poll state; every call to
    :meth:`poll_until_converged` owns its attempt counter, so one poller
    can serve concurrent polls.
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        classify: Classifier = compute,
        *,
        sleep: Sleeper = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._classify = classify
        self._sleep = sleep
        self._clock = clock
        self._log = get_logger("poller")

    async def poll_until_converged(
        self,
        identity: ResourceIdentity,
        *,
        is_deletion: bool = False,
        config: PollConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PollResult:
        """Poll ``identity`` until it converges, fails, or the budget runs out.

        Args:
            identity: The object to watch.
            is_deletion: True when validating a delete; not-found is then success.
            config: Retry parameters; defaults to ``PollConfig()``.
            cancel_event: Setting this event aborts the poll.

        Returns:
            PollResult with outcome succeeded, failed or aborted.
        """
        config = config or PollConfig()
        started = self._clock()
        deadline = started + config.timeout if config.timeout is not None else None

        snapshot: dict[str, object] | None = None
        verdict: Result | None = None
        last_error: Exception | None = None

        abort_reason = await self._wait(config.initial_get_delay, deadline, cancel_event)
        if abort_reason:
            return self._finish(identity, PollOutcome.ABORTED, started, message=abort_reason)

        for attempt in range(config.max_retries):
            abort_reason = self._abort_reason(deadline, cancel_event)
            if abort_reason:
                return self._finish(
                    identity,
                    PollOutcome.ABORTED,
                    started,
                    snapshot=snapshot,
                    verdict=verdict,
                    error=last_error,
                    message=abort_reason,
                    attempts=attempt,
                )

            poll_attempts_total.labels(kind=identity.kind).inc()
            step = await self._attempt(identity, is_deletion, attempt, config)

            if step.snapshot is not None:
                snapshot = step.snapshot
            if step.verdict is not None:
                verdict = step.verdict
            if step.error is not None:
                last_error = step.error

            if step.done:
                return self._finish(
                    identity,
                    step.outcome,
                    started,
                    snapshot=step.snapshot,
                    verdict=step.verdict,
                    error=step.error,
                    message=step.message,
                    attempts=attempt + 1,
                )

            backoff = config.backoff(attempt)
            self._log.info(
                "poll_retry",
                resource=str(identity),
                attempt=f"{attempt + 1}/{config.max_retries}",
                backoff_s=backoff,
            )
            poll_backoff_seconds.labels(kind=identity.kind).observe(backoff)

            abort_reason = await self._wait(backoff, deadline, cancel_event)
            if abort_reason:
                return self._finish(
                    identity,
                    PollOutcome.ABORTED,
                    started,
                    snapshot=snapshot,
                    verdict=verdict,
                    error=last_error,
                    message=abort_reason,
                    attempts=attempt + 1,
                )

        message = f"{identity} did not converge after {config.max_retries} retries"
        if last_error is not None:
            message = f"{message}: {last_error}"
        return self._finish(
            identity,
            PollOutcome.FAILED,
            started,
            snapshot=snapshot,
            verdict=verdict,
            error=last_error,
            message=message,
            attempts=config.max_retries,
        )

    async def poll_many(
        self,
        identities: Iterable[ResourceIdentity],
        *,
        is_deletion: bool = False,
        config: PollConfig | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[PollResult]:
        """Poll several resources concurrently; results keep input order."""
        return list(
            await asyncio.gather(
                *(
                    self.poll_until_converged(
                        identity, is_deletion=is_deletion, config=config, cancel_event=cancel_event
                    )
                    for identity in identities
                )
            )
        )

    # ------------------------------------------------------------------
    # One attempt
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        identity: ResourceIdentity,
        is_deletion: bool,
        attempt: int,
        config: PollConfig,
    ) -> _Step:
        try:
            obj = await self._fetcher.get(identity)
        except ResourceNotFoundError:
            if is_deletion:
                return _Step(done=True, outcome=PollOutcome.SUCCEEDED, message=f"{identity} deleted")
            # Not visible yet.
            self._log.debug("poll_not_found", resource=str(identity), attempt=attempt + 1)
            return _Step(done=False)
        except Exception as exc:
            self._log.error("poll_fetch_error", resource=str(identity), attempt=attempt + 1, error=str(exc))
            return _Step(done=False, error=exc)

        try:
            verdict = self._classify(obj)
        except ClassificationError as exc:
            self._log.error("poll_classification_error", resource=str(identity), attempt=attempt + 1, error=str(exc))
            return _Step(done=False, snapshot=obj, error=exc)

        self._log.debug(
            "poll_attempt",
            resource=str(identity),
            attempt=attempt + 1,
            status=str(verdict.status),
            reason=str(verdict.reason),
            message=verdict.message,
        )

        if not verdict.is_true:
            if verdict.reason == Reason.FAILED:
                error = ResourceFailedError(identity, verdict.message)
                return _Step(
                    done=True,
                    outcome=PollOutcome.FAILED,
                    snapshot=obj,
                    verdict=verdict,
                    error=error,
                    message=str(error),
                )
            return _Step(done=False, snapshot=obj, verdict=verdict)

        # Status may simply not have been published yet.
        if verdict.reason == Reason.NO_STATUS_INFO and attempt < config.max_retries - _NO_STATUS_INFO_GRACE:
            return _Step(done=False, snapshot=obj, verdict=verdict)

        return _Step(
            done=True,
            outcome=PollOutcome.SUCCEEDED,
            snapshot=obj,
            verdict=verdict,
            message=verdict.message,
        )

    # ------------------------------------------------------------------
    # Sleeping and cancellation
    # ------------------------------------------------------------------

    def _abort_reason(self, deadline: float | None, cancel_event: asyncio.Event | None) -> str:
        if cancel_event is not None and cancel_event.is_set():
            return "aborted: cancelled"
        if deadline is not None and self._clock() >= deadline:
            return "aborted: deadline exceeded"
        return ""

    async def _wait(self, delay: float, deadline: float | None, cancel_event: asyncio.Event | None) -> str:
        """Sleep ``delay`` seconds; return an abort reason, or "" to continue.

        The sleep is cut short at the deadline or when ``cancel_event`` is set.
        """
        abort_reason = self._abort_reason(deadline, cancel_event)
        if abort_reason:
            return abort_reason
        if deadline is not None:
            delay = min(delay, max(0.0, deadline - self._clock()))

        if cancel_event is None:
            await self._sleep(delay)
        else:
            sleeper = asyncio.create_task(self._sleep(delay))
            waiter = asyncio.create_task(cancel_event.wait())
            try:
                await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in (sleeper, waiter):
                    task.cancel()
                await asyncio.gather(sleeper, waiter, return_exceptions=True)
            error = None if sleeper.cancelled() else sleeper.exception()
            if error is not None:
                raise error

        return self._abort_reason(deadline, cancel_event)

    def _finish(
        self,
        identity: ResourceIdentity,
        outcome: PollOutcome,
        started: float,
        *,
        snapshot: dict[str, object] | None = None,
        verdict: Result | None = None,
        error: Exception | None = None,
        message: str = "",
        attempts: int = 0,
    ) -> PollResult:
        duration = self._clock() - started
        poll_outcomes_total.labels(kind=identity.kind, outcome=str(outcome)).inc()
        poll_duration_seconds.labels(kind=identity.kind, outcome=str(outcome)).observe(max(0.0, duration))

        log_method = self._log.info if outcome == PollOutcome.SUCCEEDED else self._log.warning
        log_method(
            "poll_finished",
            resource=str(identity),
            outcome=str(outcome),
            attempts=attempts,
            duration_s=round(duration, 3),
            message=message,
        )
        return PollResult(
            identity=identity,
            outcome=outcome,
            snapshot=snapshot,
            verdict=verdict,
            message=message,
            error=error,
            attempts=attempts,
        )
