"""
Test configuration and fixtures for PromptMaster tests

This module provides:
- Deterministic fake AI backends from fixtures/ (no real AI service is called)
- Pre-built optimizer components with the bundled configuration

Usage:
    def test_optimize(engine):
        result = asyncio.run(engine.optimize("Write something."))

    from tests.fixtures import SlowBackend
    registry = TechniqueRegistry(SlowBackend(), timeout=0.05)
"""

import pytest

from promptmaster_server.core.optimizer import (
    OptimizationContext,
    OptimizationEngine,
    QualityAggregator,
    TechniqueRegistry,
    load_optimizer_config,
)
from tests.fixtures import FakeBackend


@pytest.fixture
def optimizer_config():
    return load_optimizer_config()


@pytest.fixture
def aggregator(optimizer_config):
    return QualityAggregator(optimizer_config)


@pytest.fixture
def default_context():
    return OptimizationContext()


@pytest.fixture
def engine(optimizer_config):
    return OptimizationEngine(optimizer_config, TechniqueRegistry())


@pytest.fixture
def fake_backend():
    return FakeBackend()
