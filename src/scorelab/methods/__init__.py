from .base import AnalysisMethod, MethodComputation, MethodId, series_to_list
from .registry import (
    METHOD_REGISTRY,
    create_default_config,
    ensure,
    get_available_methods,
    get_method,
    list_methods,
    require_method,
    to_method_id,
    validate,
)

__all__ = [
    "METHOD_REGISTRY",
    "AnalysisMethod",
    "MethodComputation",
    "MethodId",
    "create_default_config",
    "ensure",
    "get_available_methods",
    "get_method",
    "list_methods",
    "require_method",
    "series_to_list",
    "to_method_id",
    "validate",
]
