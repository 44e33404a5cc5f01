"""Per-method step configuration.

Each configurable analysis method owns exactly one frozen dataclass below. The
`kind` tag mirrors the persisted preset payloads and lets loaders tell the
variants apart without inspecting fields.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Literal, Optional, Union

from .exceptions import ConfigurationError

ConditionalMode = Literal["boolean", "binary", "min", "max", "range"]
BaselineMode = Literal["average", "median", "custom"]
Side = Literal["left", "right"]
ScalingCurve = Literal["linear", "quadratic", "exponential", "logarithmic"]
RewardMode = Literal["least", "most"]
SignificanceMode = Literal["one-sided", "two-sided"]
Tail = Literal["lower", "upper"]

CONDITIONAL_MODES = ("boolean", "binary", "min", "max", "range")
BASELINE_MODES = ("average", "median", "custom")
SIDES = ("left", "right")
REWARD_MODES = ("least", "most")
SIGNIFICANCE_MODES = ("one-sided", "two-sided")
TAILS = ("lower", "upper")


def is_finite_number(value) -> bool:
    """True for real, finite numbers. Booleans are not numbers here."""
    if isinstance(value, bool) or value is None:
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


@dataclass(frozen=True)
class ConditionalFlagConfig:
    kind: ClassVar[str] = "conditional-flag"

    mode: ConditionalMode = "binary"
    true_value: Optional[str] = None
    threshold: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None


@dataclass(frozen=True)
class OneSidedConfig:
    kind: ClassVar[str] = "one-sided"

    baseline_mode: BaselineMode = "average"
    baseline_value: float = 0.0
    side: Side = "right"
    scaling: ScalingCurve = "linear"
    slope: float = 1.0


@dataclass(frozen=True)
class ZeroToOneConfig:
    kind: ClassVar[str] = "zero-to-one"

    scaling: ScalingCurve = "linear"
    slope: float = 1.0


@dataclass(frozen=True)
class DistributionConfig:
    kind: ClassVar[str] = "distribution"

    buckets: int = 5
    scaling: ScalingCurve = "linear"
    slope: float = 1.0
    reward: RewardMode = "least"


@dataclass(frozen=True)
class SignificanceConfig:
    kind: ClassVar[str] = "significance"

    significance_level: float = 95.0
    mode: SignificanceMode = "two-sided"
    tail: Tail = "upper"
    flag_significant: bool = True


MethodConfig = Union[
    ConditionalFlagConfig,
    OneSidedConfig,
    ZeroToOneConfig,
    DistributionConfig,
    SignificanceConfig,
]

CONFIG_TYPES = {
    cls.kind: cls
    for cls in (
        ConditionalFlagConfig,
        OneSidedConfig,
        ZeroToOneConfig,
        DistributionConfig,
        SignificanceConfig,
    )
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a step configuration.

    `config` is set when `valid` is True; `error` holds a message for the
    analyst otherwise.
    """

    valid: bool
    config: Optional[MethodConfig] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, config: Optional[MethodConfig]) -> "ValidationResult":
        return cls(valid=True, config=config)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)

    def unwrap(self) -> Optional[MethodConfig]:
        if not self.valid:
            raise ConfigurationError(self.error or "Invalid configuration.")
        return self.config


def _fmt(value) -> str:
    if is_finite_number(value) and float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}" if is_finite_number(value) else str(value)


def describe_config(config: Optional[MethodConfig]) -> str:
    """Short human-readable summary of a step configuration."""
    if config is None:
        return ""
    if isinstance(config, ConditionalFlagConfig):
        if config.mode == "boolean":
            return "Cell reads true"
        if config.mode == "binary":
            return f"Value equals “{config.true_value}”"
        if config.mode == "min":
            return f"Value ≥ {_fmt(config.threshold)}"
        if config.mode == "max":
            return f"Value ≤ {_fmt(config.threshold)}"
        lower = min(config.min_value, config.max_value)
        upper = max(config.min_value, config.max_value)
        return f"Value between {_fmt(lower)} and {_fmt(upper)}"
    if isinstance(config, OneSidedConfig):
        direction = "above" if config.side == "right" else "below"
        source = "custom value" if config.baseline_mode == "custom" else config.baseline_mode
        return (
            f"Rewards values {direction} the {source} ({_fmt(config.baseline_value)}), "
            f"{config.scaling} ramp"
        )
    if isinstance(config, ZeroToOneConfig):
        return f"Min-max scaled, {config.scaling} curve"
    if isinstance(config, DistributionConfig):
        return f"{config.buckets} buckets, rewards the {config.reward} populated, {config.scaling} curve"
    if isinstance(config, SignificanceConfig):
        target = "significant" if config.flag_significant else "non-significant"
        return f"Flags {target} values at the {_fmt(config.significance_level)} level"
    raise TypeError(f"Unsupported configuration type {type(config).__name__}")


__all__ = [
    "BASELINE_MODES",
    "CONDITIONAL_MODES",
    "CONFIG_TYPES",
    "ConditionalFlagConfig",
    "DistributionConfig",
    "MethodConfig",
    "OneSidedConfig",
    "REWARD_MODES",
    "SIDES",
    "SIGNIFICANCE_MODES",
    "SignificanceConfig",
    "TAILS",
    "ValidationResult",
    "ZeroToOneConfig",
    "describe_config",
    "is_finite_number",
]
