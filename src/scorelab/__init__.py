"""Score Lab

This package derives new per-row score columns from tabular datasets:
- Value extraction from locale-formatted text cells
- A library of statistical scoring methods with per-step configuration
- Chains of weighted steps folded together with arithmetic operators
- Composable row filters
- Treatments that materialise chain results and filters on DataFrames
"""

from .chain import AnalysisChain, AnalysisStep, EvaluationResult, build_step, combine, evaluate
from .columns import ColumnDescriptor, index_columns
from .configs import (
    ConditionalFlagConfig,
    DistributionConfig,
    OneSidedConfig,
    SignificanceConfig,
    ValidationResult,
    ZeroToOneConfig,
    describe_config,
)
from .exceptions import ConfigurationError, ScoreLabError, UnsupportedMethodError
from .extraction import ColumnCache, extract_column, extract_raw_column, parse_numeric
from .filters import FilterDefinition, apply_filters, available_operators, filter_mask
from .methods import (
    METHOD_REGISTRY,
    MethodId,
    create_default_config,
    ensure,
    get_method,
    list_methods,
    validate,
)
from .treatments import TreatmentAnalysisChain, TreatmentFilter, apply_treatments

__all__ = [
    "METHOD_REGISTRY",
    "AnalysisChain",
    "AnalysisStep",
    "ColumnCache",
    "ColumnDescriptor",
    "ConditionalFlagConfig",
    "ConfigurationError",
    "DistributionConfig",
    "EvaluationResult",
    "FilterDefinition",
    "MethodId",
    "OneSidedConfig",
    "ScoreLabError",
    "SignificanceConfig",
    "TreatmentAnalysisChain",
    "TreatmentFilter",
    "UnsupportedMethodError",
    "ValidationResult",
    "ZeroToOneConfig",
    "apply_filters",
    "apply_treatments",
    "available_operators",
    "build_step",
    "combine",
    "create_default_config",
    "describe_config",
    "ensure",
    "evaluate",
    "extract_column",
    "extract_raw_column",
    "filter_mask",
    "get_method",
    "index_columns",
    "list_methods",
    "parse_numeric",
    "validate",
]
