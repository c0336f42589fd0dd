"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before every testpath (tests/, airlock/domains/,
airlock/adapters/), making its fixtures available to centralized tests AND
colocated domain and adapter tests.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any airlock module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("AIRLOCK_ENVIRONMENT", "test")
os.environ.setdefault("AIRLOCK_LOG_LEVEL", "DEBUG")


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def capability_registry():
    """Empty CapabilityRegistry; tests register the types they need."""
    from airlock.domains.serialization.registry import CapabilityRegistry

    return CapabilityRegistry()


@pytest.fixture
def engine_config():
    """EngineConfig with every toggle at its documented default."""
    from airlock.core.config import AbsentRelationPolicy
    from airlock.domains.serialization.options import EngineConfig

    return EngineConfig(
        force_load_invisible_relations=False,
        skip_unsaved_records=False,
        absent_relation_policy=AbsentRelationPolicy.OMIT,
        emit_diagnostics=True,
    )
