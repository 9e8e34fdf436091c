"""Layer assignment, violation detection and layer inference."""

from .inference import DEFAULT_ALLOWED_DEPENDENCIES, infer_layers, resolve_layers
from .layers import LayerResolver, detect_layer_violations, group_violations_by_file
from .models import LayerDefinition, Violation, ViolationSeverity

__all__ = [
    "DEFAULT_ALLOWED_DEPENDENCIES",
    "LayerDefinition",
    "LayerResolver",
    "Violation",
    "ViolationSeverity",
    "detect_layer_violations",
    "group_violations_by_file",
    "infer_layers",
    "resolve_layers",
]
