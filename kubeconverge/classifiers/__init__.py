"""Classifier auto-registration and public API for kind-specific classifiers.

Auto-discovers all KindClassifier subclasses from the modules of this
package. The registry is built once at start-up and then only read.

Usage::

    from kubeconverge.classifiers import default_registry

    classifier = default_registry().lookup("apps", "Deployment")

Or for manual control::

    from kubeconverge.classifiers import build_registry
    from kubeconverge.classifiers.base import KindClassifier

    registry = build_registry(extra=[MyWidgetClassifier()])
"""

from __future__ import annotations

import functools
import importlib
import inspect
import pkgutil
from collections.abc import Iterable
from pathlib import Path

from kubeconverge.classifiers.base import ClassifierRegistry, KindClassifier, registry_key
from kubeconverge.observability.logging import get_logger

__all__ = [
    "ClassifierRegistry",
    "KindClassifier",
    "build_registry",
    "default_registry",
    "discover_classifiers",
    "registry_key",
]

_logger = get_logger("classifier_registry")

_SKIP_MODULES: frozenset[str] = frozenset({"base"})


def discover_classifiers() -> list[type[KindClassifier]]:
    """Discover all KindClassifier subclasses in this package.

    Modules are imported lexicographically by filename so the result is
    deterministic. Returns classes, not instances.
    """
    package_path = Path(__file__).parent
    classifier_classes: list[type[KindClassifier]] = []
    seen: set[str] = set()

    for module_info in sorted(pkgutil.iter_modules([str(package_path)]), key=lambda m: m.name):
        if module_info.name in _SKIP_MODULES or module_info.name.startswith("_"):
            continue
        module = importlib.import_module(f"kubeconverge.classifiers.{module_info.name}")

        for _, obj in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(obj, KindClassifier)
                and obj is not KindClassifier
                and not inspect.isabstract(obj)
                and obj.__module__ == module.__name__
                and obj.classifier_id not in seen
            ):
                classifier_classes.append(obj)
                seen.add(obj.classifier_id)

    _logger.debug(
        "classifier_discovery_complete",
        total=len(classifier_classes),
        classifier_ids=[cls.classifier_id for cls in classifier_classes],
    )
    return classifier_classes


def build_registry(extra: Iterable[KindClassifier] = ()) -> ClassifierRegistry:
    """Construct a registry holding every built-in classifier plus ``extra``.

    Raises:
        ValueError: if two classifiers claim the same group/kind.
    """
    registry = ClassifierRegistry()
    for classifier_cls in discover_classifiers():
        registry.register(classifier_cls())
    for classifier in extra:
        registry.register(classifier)

    _logger.debug("classifier_registry_built", keys=registry.keys())
    return registry


@functools.cache
def default_registry() -> ClassifierRegistry:
    """Return the process-wide registry of built-in classifiers."""
    return build_registry()
