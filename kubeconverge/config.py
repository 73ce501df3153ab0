"""Environment-variable configuration loading.

Every setting is read from a ``KUBECONVERGE_*`` variable. Numeric values
are clamped to their bounds rather than rejected; malformed numbers and
unknown log levels raise ``ValueError``.
"""

from __future__ import annotations

import os

from kubeconverge.models.config import KubeConvergeConfig, LogConfig, PollConfig

_PREFIX = "KUBECONVERGE_"

_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSY: frozenset[str] = frozenset({"0", "false", "no", "off"})


def _env(name: str) -> str | None:
    value = os.environ.get(_PREFIX + name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {_PREFIX}{name}: {raw!r}")


def _env_int(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid integer for {_PREFIX}{name}: {raw!r}") from exc
    return max(minimum, min(maximum, value))


def _env_float(name: str, default: float, minimum: float, maximum: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid number for {_PREFIX}{name}: {raw!r}") from exc
    return max(minimum, min(maximum, value))


def load_config() -> KubeConvergeConfig:
    """Build a :class:`KubeConvergeConfig` from the environment."""
    log = LogConfig(
        level=_env("LOG_LEVEL") or "info",
        json_output=_env_bool("LOG_JSON", True),
    )
    poll = PollConfig(
        max_retries=_env_int("POLL_MAX_RETRIES", 5, 1, 50),
        initial_delay=_env_float("POLL_INITIAL_DELAY", 1.0, 0.0, 60.0),
        backoff_factor=_env_float("POLL_BACKOFF_FACTOR", 2.0, 1.0, 10.0),
        initial_get_delay=_env_float("POLL_INITIAL_GET_DELAY", 0.5, 0.0, 60.0),
        timeout=_env_float("POLL_TIMEOUT", 300.0, 1.0, 3600.0),
    )
    return KubeConvergeConfig(
        log=log,
        poll=poll,
        kube_context=_env("KUBE_CONTEXT") or "",
    )
