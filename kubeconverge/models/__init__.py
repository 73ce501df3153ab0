"""Core data structures for kubeconverge."""

from kubeconverge.models.config import KubeConvergeConfig, LogConfig, PollConfig
from kubeconverge.models.poll import PollOutcome, PollResult
from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.models.status import Condition, ConditionStatus, Reason, Result

__all__ = [
    "Condition",
    "ConditionStatus",
    "KubeConvergeConfig",
    "LogConfig",
    "PollConfig",
    "PollOutcome",
    "PollResult",
    "Reason",
    "ResourceIdentity",
    "Result",
]
