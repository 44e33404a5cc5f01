from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

from ..columns import ColumnDescriptor
from ..configs import MethodConfig, ValidationResult
from ..exceptions import UnsupportedMethodError
from .base import AnalysisMethod, MethodId
from .bell_curve import BellCurveDistance
from .conditional import ConditionalFlag
from .distribution import DistributionDensity
from .one_sided import OneSidedDistance
from .scaling import ZeroToOneScaling
from .significance import SignificanceFlag

logger = logging.getLogger(__name__)

METHOD_REGISTRY: Dict[MethodId, AnalysisMethod] = {
    MethodId.BELL_CURVE_DISTANCE: BellCurveDistance(),
    MethodId.CONDITIONAL_FLAG: ConditionalFlag(),
    MethodId.ONE_SIDED_DISTANCE: OneSidedDistance(),
    MethodId.ZERO_TO_ONE_SCALING: ZeroToOneScaling(),
    MethodId.DISTRIBUTION_DENSITY: DistributionDensity(),
    MethodId.SIGNIFICANCE_FLAG: SignificanceFlag(),
}

_missing = set(MethodId) - set(METHOD_REGISTRY)
if _missing:
    raise RuntimeError(f"Analysis methods without an implementation: {sorted(m.value for m in _missing)}")
for _method_id, _method in METHOD_REGISTRY.items():
    if _method.method_id is not _method_id:
        raise RuntimeError(f"{_method!r} registered under '{_method_id.value}'")


def to_method_id(method_id: Union[MethodId, str]) -> Optional[MethodId]:
    """Coerce a stored identifier into a MethodId, None when it is unknown."""
    if isinstance(method_id, MethodId):
        return method_id
    try:
        return MethodId(method_id)
    except ValueError:
        return None


def get_method(method_id: Union[MethodId, str]) -> Optional[AnalysisMethod]:
    resolved = to_method_id(method_id)
    return METHOD_REGISTRY.get(resolved) if resolved is not None else None


def require_method(method_id: Union[MethodId, str]) -> AnalysisMethod:
    method = get_method(method_id)
    if method is None:
        raise UnsupportedMethodError(method_id, get_available_methods())
    return method


def get_available_methods() -> List[str]:
    return [method_id.value for method_id in METHOD_REGISTRY]


def list_methods() -> List[Dict[str, str]]:
    """Method id, name and descriptions for every registered method."""
    return [method.describe() for method in METHOD_REGISTRY.values()]


def create_default_config(
    method_id: Union[MethodId, str], column: Optional[ColumnDescriptor]
) -> Optional[MethodConfig]:
    method = get_method(method_id)
    return method.default_config(column) if method is not None else None


def validate(
    method_id: Union[MethodId, str],
    column: Optional[ColumnDescriptor],
    config: Optional[MethodConfig],
) -> ValidationResult:
    """Check a step configuration before the step may join a chain."""
    method = get_method(method_id)
    if method is None:
        return ValidationResult.fail(f"Unknown analysis method '{method_id}'.")
    return method.validate_config(column, config)


def ensure(
    method_id: Union[MethodId, str],
    column: Optional[ColumnDescriptor],
    config: Optional[MethodConfig],
) -> Optional[MethodConfig]:
    """Best-effort repair of a configuration re-attached to a column. Never raises."""
    method = get_method(method_id)
    if method is None:
        logger.warning(f"Cannot repair configuration for unknown method '{method_id}'")
        return config
    return method.ensure_config(column, config)
