"""Status classification of Kubernetes resource snapshots."""

from kubeconverge.status.core import compute
from kubeconverge.status.fields import ClassificationError, get_int_field, get_string_field

__all__ = [
    "ClassificationError",
    "compute",
    "get_int_field",
    "get_string_field",
]
