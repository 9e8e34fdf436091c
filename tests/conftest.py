"""Shared test fixtures for ArchLens tests."""

from datetime import datetime, timezone

import pytest

from archlens.architecture.models import LayerDefinition
from archlens.graph.models import ParsedFile


@pytest.fixture
def now():
    """Fixed clock for time-dependent detectors."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def three_layers():
    """presentation -> application -> domain, domain depends on nothing."""
    return (
        LayerDefinition("presentation", ("presentation/**",), frozenset({"application"})),
        LayerDefinition("application", ("application/**",), frozenset({"domain"})),
        LayerDefinition("domain", ("domain/**",), frozenset()),
    )


@pytest.fixture
def layered_files():
    """A small codebase where the page skips the application layer."""
    return [
        ParsedFile("presentation/page.ts", ("application/service.ts", "domain/user.ts")),
        ParsedFile("application/service.ts", ("domain/user.ts",)),
        ParsedFile("domain/user.ts"),
    ]


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    """Run config loading without a project file or ARCHLENS_* variables."""
    import os

    for key in list(os.environ):
        if key.startswith("ARCHLENS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path
