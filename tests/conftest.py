"""
Shared pytest fixtures and configuration for execspec tests.

This module provides:
- Settings cache and logging-context cleanup for test isolation
- Sample Workflow resources (bare, parameterized, status-bearing)
- Paths to on-disk fixture documents (nested loops, completed run)

Usage:
    Fixtures are auto-discovered by pytest; request them by name.

    def test_something(parameterized_resource):
        ...
"""

import os
import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure execspec package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from execspec.core.logging import clear_context
from execspec.core.settings import clear_settings_cache
from execspec.execution.models import (
    Arguments,
    ObjectMeta,
    Parameter,
    WorkflowResource,
    WorkflowSpec,
    WorkflowStatus,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "execution"


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings, EXECSPEC_* env vars and logging config around each test."""
    for key in [k for k in os.environ if k.startswith("EXECSPEC_")]:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Sample Resources
# =============================================================================


@pytest.fixture
def named_resource() -> WorkflowResource:
    """Minimal resource with just a name."""
    return WorkflowResource(metadata=ObjectMeta(name="WORKFLOW_NAME"))


@pytest.fixture
def parameterized_resource() -> WorkflowResource:
    """Resource declaring PARAM1, PARAM2, PARAM3, PARAM5."""
    return WorkflowResource(
        metadata=ObjectMeta(name="WORKFLOW_NAME"),
        spec=WorkflowSpec(
            arguments=Arguments(
                parameters=[
                    Parameter(name="PARAM1", value="NEW_VALUE1"),
                    Parameter(name="PARAM2", value="VALUE2"),
                    Parameter(name="PARAM3", value="NEW_VALUE3"),
                    Parameter(name="PARAM5", value=""),
                ]
            )
        ),
    )


@pytest.fixture
def labelled_resource() -> WorkflowResource:
    """Typed resource with type meta, a label, a parameter and a status message."""
    return WorkflowResource(
        api_version="argoproj.io/v1alpha1",
        kind="Workflow",
        metadata=ObjectMeta(name="WORKFLOW_NAME", labels={"key": "value"}),
        spec=WorkflowSpec(arguments=Arguments(parameters=[Parameter(name="PARAM", value="VALUE")])),
        status=WorkflowStatus(message="I AM A MESSAGE"),
    )


@pytest.fixture
def nested_loops_yaml() -> bytes:
    """Compiled pipeline with nested withParam/jsonpath loops and an owned manifest."""
    return (FIXTURES_DIR / "pipeline_with_nested_loops.yaml").read_bytes()


@pytest.fixture
def completed_run_json() -> bytes:
    """Engine-returned status of a finished scheduled run."""
    return (FIXTURES_DIR / "completed_run_status.json").read_bytes()
