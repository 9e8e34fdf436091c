"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from archlens.exceptions import (
    AnalysisError,
    ArchLensError,
    ConfigFileError,
    ConfigurationError,
    InputContractError,
    InvalidConfigError,
    require_sequence,
)


class TestArchLensError:
    def test_message_only(self):
        err = ArchLensError("boom")
        assert str(err) == "boom"
        assert err.details == {}

    def test_details_are_rendered(self):
        err = ArchLensError("boom", details={"file": "a.ts", "line": "3"})
        assert str(err) == "boom (file=a.ts, line=3)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "err,parent",
        [
            (InputContractError("files", "missing"), AnalysisError),
            (InvalidConfigError("drift", 3, "expected a table"), ConfigurationError),
            (ConfigFileError(Path("x.toml"), "file not found"), ConfigurationError),
        ],
    )
    def test_all_derive_from_base(self, err, parent):
        assert isinstance(err, parent)
        assert isinstance(err, ArchLensError)


class TestInputContractError:
    def test_fields(self):
        err = InputContractError("prs", "expected a sequence, got a string", "abc")
        assert err.argument == "prs"
        assert err.reason == "expected a sequence, got a string"
        assert err.details["type"] == "str"
        assert str(err).startswith("Invalid input for 'prs'")


class TestConfigErrors:
    def test_invalid_config_fields(self):
        err = InvalidConfigError("coupling_formula", "random", "expected one of: a, b")
        assert (err.key, err.value, err.reason) == ("coupling_formula", "random", "expected one of: a, b")
        assert "reason=expected one of: a, b" in str(err)

    def test_config_file_fields(self):
        err = ConfigFileError(Path("archlens.toml"), "file not found")
        assert err.path == Path("archlens.toml")
        assert err.details == {"path": "archlens.toml", "reason": "file not found"}


class TestRequireSequence:
    def test_none_raises(self):
        with pytest.raises(InputContractError) as excinfo:
            require_sequence(None, "git_metrics")
        assert excinfo.value.argument == "git_metrics"

    @pytest.mark.parametrize("value", ["abc", b"abc"])
    def test_strings_raise(self, value):
        with pytest.raises(InputContractError):
            require_sequence(value, "files")

    @pytest.mark.parametrize("value", [[], (), [1, 2], {"a": 1}])
    def test_collections_pass(self, value):
        require_sequence(value, "files")
