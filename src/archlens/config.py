"""Configuration loading and management for ArchLens.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in the dataclasses below)
    2. Project config (./archlens.toml)
    3. Explicit config file
    4. Environment variables (ARCHLENS_* prefix)
    5. Keyword overrides

Example:
    >>> config = load_config(coupling_formula="fan_blend")
    >>> config.coupling_formula
    <CouplingFormula.FAN_BLEND: 'fan_blend'>
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .architecture.models import LayerDefinition
from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError
from .graph.models import CouplingFormula

ENV_PREFIX = "ARCHLENS_"
PROJECT_CONFIG_NAME = "archlens.toml"


@dataclass(frozen=True)
class VelocityWeights:
    """Weights of the four velocity sub-scores.

    Expected to sum to 1.0. A sum that drifts from 1.0 is not rejected;
    ``normalized()`` rescales it, and the velocity calculator always
    works on the normalized copy.
    """

    complexity_weight: float = 0.4
    arch_impact_weight: float = 0.3
    review_weight: float = 0.15
    refactoring_weight: float = 0.15

    # Allowed distance of the weight sum from 1.0 before rescaling
    tolerance: float = 0.01

    def __post_init__(self) -> None:
        for name in ("complexity_weight", "arch_impact_weight", "review_weight", "refactoring_weight"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.total <= 0:
            raise ValueError("velocity weights must not all be zero")

    @property
    def total(self) -> float:
        return (
            self.complexity_weight
            + self.arch_impact_weight
            + self.review_weight
            + self.refactoring_weight
        )

    def normalized(self) -> VelocityWeights:
        """Return weights summing to 1.0 (self when already within tolerance)."""
        total = self.total
        if abs(total - 1.0) <= self.tolerance:
            return self
        return VelocityWeights(
            complexity_weight=self.complexity_weight / total,
            arch_impact_weight=self.arch_impact_weight / total,
            review_weight=self.review_weight / total,
            refactoring_weight=self.refactoring_weight / total,
            tolerance=self.tolerance,
        )


@dataclass(frozen=True)
class ScoringConfig:
    """Effort, impact and trend constants.

    Attributes:
        Effort:
            effort_reference: Weighted effort that maps to ``effort_reference_score``
            effort_reference_score: Provisional score of the reference effort

        Impact:
            impact_reference: Raw impact that maps to ``impact_reference_score``
            impact_reference_score: Provisional score of the reference impact
            core_coupling_threshold: Coupling above this makes a file "core"
            core_fan_in_threshold: Importer count at or above this makes a file "core"
            boundary_weight / core_weight / peripheral_weight: raw impact weights

        Trend:
            trend_window: Number of prior scores averaged
            trend_threshold: Delta (strict) needed to leave "stable"
            min_trend_history: Prior scores required before a trend is reported
    """

    effort_reference: float = 750.0
    effort_reference_score: float = 50.0

    impact_reference: float = 50.0
    impact_reference_score: float = 100.0
    core_coupling_threshold: float = 0.3
    core_fan_in_threshold: int = 5
    boundary_weight: float = 3.0
    core_weight: float = 2.0
    peripheral_weight: float = 0.5

    trend_window: int = 3
    trend_threshold: float = 10.0
    min_trend_history: int = 2

    def __post_init__(self) -> None:
        if self.effort_reference < 0 or self.impact_reference < 0:
            raise ValueError("normalization references must be non-negative")
        if not 0.0 <= self.core_coupling_threshold <= 1.0:
            raise ValueError("core_coupling_threshold must be between 0.0 and 1.0")
        if self.trend_window < 1:
            raise ValueError("trend_window must be at least 1")
        if self.min_trend_history < 1:
            raise ValueError("min_trend_history must be at least 1")
        if self.trend_threshold < 0:
            raise ValueError("trend_threshold must be non-negative")


@dataclass(frozen=True)
class BlockerThresholds:
    """Thresholds for development blocker detection."""

    stale_pr_days: int = 3
    long_branch_days: int = 7
    review_bottleneck_threshold: int = 3
    high_violation_rate: float = 0.5

    def __post_init__(self) -> None:
        if self.stale_pr_days < 1 or self.long_branch_days < 1:
            raise ValueError("day thresholds must be at least 1")
        if self.review_bottleneck_threshold < 1:
            raise ValueError("review_bottleneck_threshold must be at least 1")
        if not 0.0 <= self.high_violation_rate <= 1.0:
            raise ValueError("high_violation_rate must be between 0.0 and 1.0")


@dataclass(frozen=True)
class DriftThresholds:
    """Drift event triggers and drift score weights.

    These constants need product-level calibration; they are exposed here
    instead of being buried in the detector. Every weight is non-negative,
    which keeps the drift score non-decreasing in violation and cycle counts.
    """

    # Decisions
    decision_lost_high_confidence: float = 0.7
    decision_weakened_drop: float = 0.15
    decision_weakened_high_drop: float = 0.3

    # Circular dependencies: more than this many new groups is "high"
    new_cycles_high: int = 2

    # Average coupling / instability increases
    coupling_increase: float = 0.1
    coupling_increase_high: float = 0.2
    instability_increase: float = 0.1
    instability_increase_high: float = 0.2

    # Violation spike: absolute and relative increase over the previous count
    violation_spike_min_increase: int = 1
    violation_spike_ratio: float = 0.2
    violation_spike_high: int = 5
    violation_spike_medium: int = 2

    # Drift score
    high_severity_weight: float = 15.0
    medium_severity_weight: float = 8.0
    low_severity_weight: float = 3.0
    lost_decision_penalty: float = 30.0
    violation_weight: float = 0.5
    cycle_weight: float = 2.0
    max_score: float = 100.0

    def __post_init__(self) -> None:
        weights = (
            "high_severity_weight",
            "medium_severity_weight",
            "low_severity_weight",
            "lost_decision_penalty",
            "violation_weight",
            "cycle_weight",
        )
        for name in weights:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.max_score <= 0:
            raise ValueError("max_score must be positive")
        if self.violation_spike_min_increase < 1:
            raise ValueError("violation_spike_min_increase must be at least 1")
        if self.violation_spike_ratio < 0:
            raise ValueError("violation_spike_ratio must be non-negative")


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis run.

    Attributes:
        layers: Declared layers, in match order. Empty = infer from paths.
        coupling_formula: How per-file coupling scores are computed.
        velocity: Velocity sub-score weights.
        scoring: Effort/impact/trend constants.
        blockers: Blocker detection thresholds.
        drift: Drift event thresholds and score weights.
    """

    layers: tuple[LayerDefinition, ...] = ()
    coupling_formula: CouplingFormula = CouplingFormula.FAN_IN_RELATIVE
    velocity: VelocityWeights = field(default_factory=VelocityWeights)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    blockers: BlockerThresholds = field(default_factory=BlockerThresholds)
    drift: DriftThresholds = field(default_factory=DriftThresholds)

    def __post_init__(self) -> None:
        names = [layer.name for layer in self.layers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate layer names: {', '.join(duplicates)}")


DEFAULT_CONFIG = AnalysisConfig()

_SECTIONS: dict[str, type] = {
    "velocity": VelocityWeights,
    "scoring": ScoringConfig,
    "blockers": BlockerThresholds,
    "drift": DriftThresholds,
}


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides. Section overrides are dicts
            (``velocity={"review_weight": 0.2}``) or section instances.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unparsable
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())
    _merge(merged, overrides)

    return _build_config(merged)


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge ``source`` into ``target``; section dicts merge key by key."""
    for key, value in source.items():
        if key in _SECTIONS and isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _build_config(merged: dict[str, Any]) -> AnalysisConfig:
    kwargs: dict[str, Any] = {}

    for key, value in merged.items():
        if key in _SECTIONS:
            kwargs[key] = _build_section(key, value)
        elif key == "layers":
            kwargs[key] = _build_layers(value)
        elif key == "coupling_formula":
            try:
                kwargs[key] = CouplingFormula(value)
            except ValueError:
                allowed = ", ".join(f.value for f in CouplingFormula)
                raise InvalidConfigError(key, value, f"expected one of: {allowed}")
        else:
            raise InvalidConfigError(key, value, "unknown configuration key")

    try:
        return AnalysisConfig(**kwargs)
    except ValueError as e:
        raise InvalidConfigError("layers", kwargs.get("layers"), str(e))


def _build_section(name: str, value: Any) -> Any:
    section_type = _SECTIONS[name]
    if isinstance(value, section_type):
        return value
    if not isinstance(value, dict):
        raise InvalidConfigError(name, value, "expected a table")
    try:
        return section_type(**value)
    except TypeError as e:
        raise ConfigurationError(f"Invalid [{name}] config: {e}")
    except ValueError as e:
        raise InvalidConfigError(name, value, str(e))


def _build_layers(value: Any) -> tuple[LayerDefinition, ...]:
    if not isinstance(value, (list, tuple)):
        raise InvalidConfigError("layers", value, "expected an array of tables")

    layers: list[LayerDefinition] = []
    for entry in value:
        if isinstance(entry, LayerDefinition):
            layers.append(entry)
            continue
        if not isinstance(entry, dict) or "name" not in entry:
            raise InvalidConfigError("layers", entry, "each layer needs at least a name")
        layers.append(
            LayerDefinition(
                name=str(entry["name"]),
                patterns=tuple(entry.get("patterns", ())),
                allowed_dependencies=frozenset(entry.get("allowed_dependencies", ())),
            )
        )
    return tuple(layers)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ARCHLENS_* environment variables.

    Section fields use the section name as infix, e.g.
    ``ARCHLENS_VELOCITY_REVIEW_WEIGHT=0.2`` or ``ARCHLENS_DRIFT_CYCLE_WEIGHT=3``.
    ``ARCHLENS_COUPLING_FORMULA`` selects the coupling formula.

    Returns:
        Nested dict of parsed values for any ARCHLENS_* vars found.
    """
    result: dict[str, Any] = {}

    formula = os.environ.get(f"{ENV_PREFIX}COUPLING_FORMULA")
    if formula is not None:
        result["coupling_formula"] = formula

    for section, section_type in _SECTIONS.items():
        for f in fields(section_type):
            env_key = f"{ENV_PREFIX}{section.upper()}_{f.name.upper()}"
            env_value = os.environ.get(env_key)
            if env_value is None:
                continue
            try:
                parsed = _parse_env_value(env_value, f.type)
            except ValueError as e:
                raise InvalidConfigError(env_key, env_value, str(e))
            result.setdefault(section, {})[f.name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's scalar type.

    Field annotations are strings here (``from __future__ import annotations``).
    """
    hint = type_hint if isinstance(type_hint, str) else getattr(type_hint, "__name__", "")

    if hint == "bool":
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")
    if hint == "int":
        return int(value)
    if hint == "float":
        return float(value)
    return value


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigFileError(path, str(e))
    except OSError as e:
        raise ConfigFileError(path, str(e))
