"""Default-tolerant field access on loosely-typed resource trees.

Paths are dotted (``.status.readyReplicas``); a leading separator is
ignored. ``get_string_field`` and ``get_int_field`` never raise: a
missing key, a non-mapping intermediate or a value of the wrong type
all yield the caller's default.

The ``nested_*`` helpers are the strict variants used by the generic
rules: absence is reported as ``found=False`` but a value of the wrong
type raises :class:`ClassificationError`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

_MISSING = object()


class ClassificationError(ValueError):
    """A resource's status could not be interpreted."""


def _split_path(field_path: str) -> list[str]:
    fields = field_path.split(".")
    if fields and fields[0] == "":
        fields = fields[1:]
    return fields


def _walk(obj: Mapping[str, object], fields: Sequence[str]) -> object:
    """Return the value at ``fields`` or ``_MISSING``.

    A null intermediate value counts as absent.

    Raises:
        ClassificationError: if an intermediate value is not a mapping.
    """
    current: object = obj
    for i, name in enumerate(fields):
        if current is None:
            return _MISSING
        if not isinstance(current, Mapping):
            path = ".".join(fields[:i])
            raise ClassificationError(f"{path} is of the type {type(current).__name__}, expected map")
        if name not in current:
            return _MISSING
        current = current[name]
    return current


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def get_string_field(obj: Mapping[str, object], field_path: str, default: str) -> str:
    """Return the string at ``field_path``, or ``default``."""
    try:
        value = _walk(obj, _split_path(field_path))
    except ClassificationError:
        return default
    if isinstance(value, str):
        return value
    return default


def get_int_field(obj: Mapping[str, object], field_path: str, default: int) -> int:
    """Return the integer at ``field_path``, or ``default``."""
    try:
        value = _walk(obj, _split_path(field_path))
    except ClassificationError:
        return default
    if _is_int(value):
        return int(value)  # type: ignore[call-overload]
    return default


def nested_string(obj: Mapping[str, object], *fields: str) -> tuple[str, bool]:
    """Strict string lookup returning ``(value, found)``."""
    value = _walk(obj, fields)
    if value is _MISSING or value is None:
        return "", False
    if not isinstance(value, str):
        raise ClassificationError(
            f"{'.'.join(fields)} accessor error: {value!r} is of the type {type(value).__name__}, expected string"
        )
    return value, True


def nested_int(obj: Mapping[str, object], *fields: str) -> tuple[int, bool]:
    """Strict integer lookup returning ``(value, found)``."""
    value = _walk(obj, fields)
    if value is _MISSING or value is None:
        return 0, False
    if not _is_int(value):
        raise ClassificationError(
            f"{'.'.join(fields)} accessor error: {value!r} is of the type {type(value).__name__}, expected int64"
        )
    return int(value), True  # type: ignore[call-overload]
