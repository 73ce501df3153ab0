"""Prometheus metrics for kubeconverge."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# Classification metrics
classifications_total = Counter(
    "kubeconverge_classifications_total",
    "Total status classifications by resulting reason",
    ["kind", "reason"],
)

classification_errors_total = Counter(
    "kubeconverge_classification_errors_total",
    "Total classifications that failed on malformed status",
    ["kind"],
)

# Poller metrics
poll_attempts_total = Counter(
    "kubeconverge_poll_attempts_total",
    "Total fetch+classify attempts made by the convergence poller",
    ["kind"],
)

poll_outcomes_total = Counter(
    "kubeconverge_poll_outcomes_total",
    "Total convergence polls by final outcome",
    ["kind", "outcome"],
)

poll_backoff_seconds = Histogram(
    "kubeconverge_poll_backoff_seconds",
    "Backoff delay between convergence poll attempts in seconds",
    ["kind"],
    buckets=(0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 64.0),
)

poll_duration_seconds = Histogram(
    "kubeconverge_poll_duration_seconds",
    "Wall-clock duration of a convergence poll in seconds",
    ["kind", "outcome"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)
