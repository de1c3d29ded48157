"""Shared fixtures."""

import pytest

from edge_offload.evaluation.scenarios import ScenarioConfig, grid_edge_nodes


@pytest.fixture
def tiny_scenario():
    """Small scenario that runs in milliseconds."""
    return ScenarioConfig(
        name="tiny",
        description="2x2 grid, 10 devices",
        edge_nodes=grid_edge_nodes(2, 2, 40.0, capacity_ghz=8.0, coverage_radius=15.0),
        n_devices=10,
        area_size=40.0,
        arrival_rate=0.5,
        remote_capacity_ghz=50.0,
        remote_access_latency_ms=30.0,
        n_cycles=5,
    )
