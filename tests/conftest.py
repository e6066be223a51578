# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

No test needs a Spark cluster or a Kafka broker: lifecycle tests run against
FakeStreamingRuntime (tests/helpers/fake_runtime.py), and Spark runtime
tests drive mocked SparkSession objects.
"""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from sparkbinding.core.config import JobConfiguration, resolve

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Filesystem timing varies on CI
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Job properties
# =============================================================================


@pytest.fixture
def checkpoint_root(tmp_path: Path) -> Path:
    """Stand-in for the default filesystem home directory."""
    root = tmp_path / "home"
    root.mkdir()
    return root


@pytest.fixture
def properties(checkpoint_root: Path) -> dict[str, str]:
    """Complete, valid Kafka job properties rooted in a temp directory."""
    return {
        "topic": "orders,payments",
        "maxWaitTime": "5000",
        "metadataBrokerList": "broker1:9092,broker2:9092",
        "auto.offset.reset": "earliest",
        "sdc.id": "job1",
        "cluster.pipeline.name": "p1",
        "cluster.source.name": "kafka",
        "fs.defaultFS": str(checkpoint_root),
    }


@pytest.fixture
def job_config(properties: dict[str, str]) -> JobConfiguration:
    """Resolved JobConfiguration for the default properties."""
    return resolve(properties).unwrap()
