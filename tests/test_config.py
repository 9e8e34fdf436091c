"""Tests for configuration loading and merging."""

import pytest

from archlens.architecture import LayerDefinition
from archlens.config import (
    DEFAULT_CONFIG,
    AnalysisConfig,
    BlockerThresholds,
    DriftThresholds,
    ScoringConfig,
    VelocityWeights,
    load_config,
)
from archlens.exceptions import ConfigFileError, ConfigurationError, InvalidConfigError
from archlens.graph import CouplingFormula

PROJECT_TOML = """
coupling_formula = "fan_blend"

[[layers]]
name = "ui"
patterns = ["ui/**", "pages/**"]
allowed_dependencies = ["domain"]

[[layers]]
name = "domain"
patterns = ["domain/**"]

[velocity]
review_weight = 0.2

[drift]
cycle_weight = 4.0
"""


class TestDefaults:
    def test_defaults(self, isolated_config):
        config = load_config()
        assert config == DEFAULT_CONFIG
        assert config.layers == ()
        assert config.coupling_formula is CouplingFormula.FAN_IN_RELATIVE
        assert config.velocity == VelocityWeights()
        assert config.scoring.effort_reference == 750.0
        assert config.blockers.stale_pr_days == 3
        assert config.drift.max_score == 100.0


class TestProjectFile:
    def test_discovered_in_working_directory(self, isolated_config):
        (isolated_config / "archlens.toml").write_text(PROJECT_TOML)
        config = load_config()

        assert config.coupling_formula is CouplingFormula.FAN_BLEND
        assert config.layers == (
            LayerDefinition("ui", ("ui/**", "pages/**"), frozenset({"domain"})),
            LayerDefinition("domain", ("domain/**",), frozenset()),
        )
        assert config.velocity.review_weight == 0.2
        assert config.velocity.complexity_weight == 0.4
        assert config.drift.cycle_weight == 4.0

    def test_explicit_file_overrides_project_file(self, isolated_config, tmp_path):
        (isolated_config / "archlens.toml").write_text(PROJECT_TOML)
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("[velocity]\ncomplexity_weight = 0.35\n")

        config = load_config(explicit)
        assert config.velocity.complexity_weight == 0.35
        assert config.velocity.review_weight == 0.2

    def test_missing_explicit_file(self, isolated_config, tmp_path):
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "nope.toml")

    def test_unparsable_file(self, isolated_config, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("coupling_formula = \n")
        with pytest.raises(ConfigFileError) as excinfo:
            load_config(bad)
        assert excinfo.value.path == bad


class TestEnvironment:
    def test_section_values(self, isolated_config, monkeypatch):
        monkeypatch.setenv("ARCHLENS_VELOCITY_REVIEW_WEIGHT", "0.25")
        monkeypatch.setenv("ARCHLENS_SCORING_TREND_WINDOW", "5")
        monkeypatch.setenv("ARCHLENS_BLOCKERS_STALE_PR_DAYS", "10")
        config = load_config()
        assert config.velocity.review_weight == 0.25
        assert config.scoring.trend_window == 5
        assert config.blockers.stale_pr_days == 10

    def test_coupling_formula(self, isolated_config, monkeypatch):
        monkeypatch.setenv("ARCHLENS_COUPLING_FORMULA", "fan_blend")
        assert load_config().coupling_formula is CouplingFormula.FAN_BLEND

    def test_env_beats_project_file(self, isolated_config, monkeypatch):
        (isolated_config / "archlens.toml").write_text(PROJECT_TOML)
        monkeypatch.setenv("ARCHLENS_DRIFT_CYCLE_WEIGHT", "1.5")
        config = load_config()
        assert config.drift.cycle_weight == 1.5
        assert config.velocity.review_weight == 0.2

    def test_unparsable_value(self, isolated_config, monkeypatch):
        monkeypatch.setenv("ARCHLENS_SCORING_TREND_WINDOW", "many")
        with pytest.raises(InvalidConfigError) as excinfo:
            load_config()
        assert excinfo.value.key == "ARCHLENS_SCORING_TREND_WINDOW"


class TestOverrides:
    def test_keyword_overrides_win(self, isolated_config, monkeypatch):
        monkeypatch.setenv("ARCHLENS_VELOCITY_REVIEW_WEIGHT", "0.25")
        config = load_config(velocity={"review_weight": 0.1})
        assert config.velocity.review_weight == 0.1

    def test_section_instances_are_accepted(self, isolated_config):
        scoring = ScoringConfig(trend_window=6)
        assert load_config(scoring=scoring).scoring is scoring

    def test_layer_instances_are_accepted(self, isolated_config):
        layer = LayerDefinition("core", ("core/**",))
        assert load_config(layers=[layer]).layers == (layer,)


class TestValidation:
    def test_unknown_coupling_formula(self, isolated_config):
        with pytest.raises(InvalidConfigError) as excinfo:
            load_config(coupling_formula="random")
        assert "fan_in_relative" in excinfo.value.reason

    def test_unknown_top_level_key(self, isolated_config):
        with pytest.raises(InvalidConfigError):
            load_config(colour="blue")

    def test_unknown_section_field(self, isolated_config):
        with pytest.raises(ConfigurationError):
            load_config(velocity={"speed_weight": 0.5})

    def test_negative_weight(self, isolated_config):
        with pytest.raises(InvalidConfigError):
            load_config(velocity={"review_weight": -1})

    def test_section_must_be_a_table(self, isolated_config):
        with pytest.raises(InvalidConfigError):
            load_config(drift=3)

    def test_layer_needs_a_name(self, isolated_config):
        with pytest.raises(InvalidConfigError):
            load_config(layers=[{"patterns": ["x/**"]}])

    def test_duplicate_layer_names(self, isolated_config):
        with pytest.raises(InvalidConfigError):
            load_config(layers=[{"name": "ui"}, {"name": "ui"}])


class TestSectionValidation:
    def test_scoring_bounds(self):
        with pytest.raises(ValueError):
            ScoringConfig(core_coupling_threshold=1.5)
        with pytest.raises(ValueError):
            ScoringConfig(trend_window=0)

    def test_blocker_bounds(self):
        with pytest.raises(ValueError):
            BlockerThresholds(stale_pr_days=0)
        with pytest.raises(ValueError):
            BlockerThresholds(high_violation_rate=2.0)

    def test_drift_weights_non_negative(self):
        with pytest.raises(ValueError):
            DriftThresholds(violation_weight=-0.5)

    def test_all_zero_weights_rejected(self):
        with pytest.raises(ValueError):
            VelocityWeights(0, 0, 0, 0)

    def test_analysis_config_rejects_duplicate_layers(self):
        with pytest.raises(ValueError):
            AnalysisConfig(layers=(LayerDefinition("a", ()), LayerDefinition("a", ())))
