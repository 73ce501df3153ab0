"""Status classifier facade.

``compute()`` runs the generic rules first and falls back to the
kind-specific classifier registered for the object's group/kind. Kinds
with no classifier get an optimistic NoStatusInfo verdict so that
resources whose controller never publishes status do not block callers.
"""

from __future__ import annotations

from collections.abc import Mapping

from kubeconverge.classifiers import default_registry
from kubeconverge.classifiers.base import ClassifierRegistry, kind_of
from kubeconverge.models.status import Result, no_status_info
from kubeconverge.observability.logging import get_logger
from kubeconverge.observability.metrics import classification_errors_total, classifications_total
from kubeconverge.status.fields import ClassificationError
from kubeconverge.status.generic import check_generic_properties

_logger = get_logger("status")


def compute(obj: Mapping[str, object], registry: ClassifierRegistry | None = None) -> Result:
    """Classify one resource snapshot.

    Args:
        obj: The full object tree as returned by the API server.
        registry: Classifier registry; defaults to the built-in one.

    Raises:
        ClassificationError: if the status cannot be interpreted.
    """
    kind = kind_of(obj)
    try:
        result = _compute(obj, registry if registry is not None else default_registry())
    except ClassificationError as exc:
        classification_errors_total.labels(kind=kind).inc()
        _logger.warning("classification_error", kind=kind, error=str(exc))
        raise

    classifications_total.labels(kind=kind, reason=str(result.reason)).inc()
    return result


def _compute(obj: Mapping[str, object], registry: ClassifierRegistry) -> Result:
    result = check_generic_properties(obj)
    if result is not None:
        return result

    classifier = registry.lookup_object(obj)
    if classifier is not None:
        return classifier.classify(obj)

    return no_status_info()
