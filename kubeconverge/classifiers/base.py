"""Kind classifier base class and registry.

Every kind-specific classifier inherits from KindClassifier. The
ClassifierRegistry maps ``group/kind`` keys (bare ``kind`` for the core
API group) to a classifier instance and is populated once at start-up.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

from kubeconverge.models.status import Result


def registry_key(group: str, kind: str) -> str:
    """Return the lookup key for a group and kind."""
    if group == "":
        return kind
    return f"{group}/{kind}"


def group_of(obj: Mapping[str, object]) -> str:
    """Return the API group from an object's ``apiVersion``."""
    api_version = obj.get("apiVersion")
    if not isinstance(api_version, str) or "/" not in api_version:
        return ""
    return api_version.split("/", 1)[0]


def kind_of(obj: Mapping[str, object]) -> str:
    kind = obj.get("kind")
    return kind if isinstance(kind, str) else ""


class KindClassifier(ABC):
    """Abstract base class for per-kind status classifiers.

    Subclasses MUST define class-level attributes:
        classifier_id -- e.g. "deployment"
        group_kinds   -- registry keys served, e.g. ("apps/Deployment",)

    ``classify`` receives the full object tree and MUST be pure. It raises
    ClassificationError when the status cannot be interpreted; it never
    returns None.
    """

    classifier_id: str
    group_kinds: tuple[str, ...]

    @abstractmethod
    def classify(self, obj: Mapping[str, object]) -> Result:
        """Compute the verdict for one resource snapshot."""


class ClassifierRegistry:
    """Lookup table from ``group/kind`` to a KindClassifier."""

    def __init__(self) -> None:
        self._classifiers: dict[str, KindClassifier] = {}

    def register(self, classifier: KindClassifier) -> None:
        """Register a classifier under each of its group_kinds.

        Raises:
            ValueError: if a key is already taken by another classifier.
        """
        for key in classifier.group_kinds:
            existing = self._classifiers.get(key)
            if existing is not None and existing is not classifier:
                raise ValueError(
                    f"{key} is already served by {existing.classifier_id}, cannot register {classifier.classifier_id}"
                )
            self._classifiers[key] = classifier

    def lookup(self, group: str, kind: str) -> KindClassifier | None:
        return self._classifiers.get(registry_key(group, kind))

    def lookup_object(self, obj: Mapping[str, object]) -> KindClassifier | None:
        return self.lookup(group_of(obj), kind_of(obj))

    def keys(self) -> list[str]:
        return sorted(self._classifiers)

    def __contains__(self, key: object) -> bool:
        return key in self._classifiers

    def __len__(self) -> int:
        return len(self._classifiers)
