"""Scenario definitions for evaluation benchmarks.

Defines four deployment scenarios:
1. Urban Dense - overlapping edge cells, moderate load
2. Sparse Rural - coverage gaps, remote tier does the heavy lifting
3. Edge Overload - small edge hosts, heavy arrivals
4. Strict Latency - XR and vehicle-control dominated traffic
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from edge_offload.environment.devices import Device, PoissonTaskGenerator
from edge_offload.environment.nodes import EdgeNode, RemoteNode
from edge_offload.environment.tasks import (
    DEFAULT_CATEGORY_PROFILES,
    CategoryProfile,
    TaskCategory,
)
from edge_offload.orchestration.orchestrator import Orchestrator, OrchestratorConfig
from edge_offload.placement.policies import BasePlacementPolicy
from edge_offload.topology.geometry import Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeNodeSpec:
    """Placement and sizing of one edge host."""

    node_id: str
    x: float
    y: float
    capacity_ghz: float
    coverage_radius: float

    def build(self) -> EdgeNode:
        return EdgeNode(
            node_id=self.node_id,
            capacity_ghz=self.capacity_ghz,
            location=Location(self.x, self.y),
            coverage_radius=self.coverage_radius,
        )


def grid_edge_nodes(
    rows: int,
    cols: int,
    area_size: float,
    capacity_ghz: float,
    coverage_radius: float,
    prefix: str = "edge",
) -> list[EdgeNodeSpec]:
    """Edge hosts at the centres of a rows x cols grid over a square area."""
    cell_w = area_size / cols
    cell_h = area_size / rows
    return [
        EdgeNodeSpec(
            node_id=f"{prefix}-{r:02d}{c:02d}",
            x=(c + 0.5) * cell_w,
            y=(r + 0.5) * cell_h,
            capacity_ghz=capacity_ghz,
            coverage_radius=coverage_radius,
        )
        for r in range(rows)
        for c in range(cols)
    ]


@dataclass
class ScenarioConfig:
    """Configuration for a benchmark scenario.

    Device locations are drawn uniformly over the square area from the
    run seed, so the same seed always yields the same topology.
    """

    name: str
    description: str
    edge_nodes: list[EdgeNodeSpec]
    n_devices: int = 50
    area_size: float = 100.0
    arrival_rate: float = 0.5  # Mean tasks per device per cycle
    category_weights: dict[TaskCategory, float] | None = None
    profiles: dict[TaskCategory, CategoryProfile] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_PROFILES)
    )
    # Remote tier; None disables it
    remote_capacity_ghz: float | None = 200.0
    remote_access_latency_ms: float = 60.0
    orchestrator_config: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    n_cycles: int = 100

    def __post_init__(self):
        if self.n_devices <= 0:
            raise ValueError(f"n_devices must be positive, got {self.n_devices}")
        if self.area_size <= 0:
            raise ValueError(f"area_size must be positive, got {self.area_size}")
        if self.n_cycles < 0:
            raise ValueError(f"n_cycles must be non-negative, got {self.n_cycles}")

    def build_orchestrator(
        self,
        policy: BasePlacementPolicy | None = None,
        seed: int | None = None,
    ) -> Orchestrator:
        """Create a fully registered orchestrator for this scenario."""
        return create_scenario_orchestrator(self, policy=policy, seed=seed)


def create_scenario_orchestrator(
    scenario: ScenarioConfig,
    policy: BasePlacementPolicy | None = None,
    seed: int | None = None,
) -> Orchestrator:
    """Create an orchestrator with the scenario's nodes and devices registered.

    Args:
        scenario: Scenario configuration.
        policy: Placement policy (NearestEdgePolicy if None).
        seed: Random seed for topology and task generation.

    Returns:
        Configured Orchestrator instance.
    """
    layout_rng = np.random.default_rng(seed)
    generator = PoissonTaskGenerator(
        arrival_rate=scenario.arrival_rate,
        profiles=scenario.profiles,
        category_weights=scenario.category_weights,
    )
    orchestrator = Orchestrator(
        config=scenario.orchestrator_config,
        policy=policy,
        task_generator=generator,
        seed=None if seed is None else seed + 1,
    )

    for spec in scenario.edge_nodes:
        orchestrator.register_node(spec.build())
    if scenario.remote_capacity_ghz is not None:
        orchestrator.register_node(
            RemoteNode(
                node_id="remote",
                capacity_ghz=scenario.remote_capacity_ghz,
                access_latency_ms=scenario.remote_access_latency_ms,
            )
        )

    coords = layout_rng.uniform(0.0, scenario.area_size, size=(scenario.n_devices, 2))
    for i, (x, y) in enumerate(coords):
        orchestrator.register_device(Device(f"dev-{i:03d}", Location(float(x), float(y))))

    logger.debug(
        "Built scenario %s: %d edge nodes, %d devices, remote=%s",
        scenario.name,
        len(scenario.edge_nodes),
        scenario.n_devices,
        scenario.remote_capacity_ghz is not None,
    )
    return orchestrator


def _create_urban_dense() -> ScenarioConfig:
    """Urban Dense scenario - overlapping cells, moderate load.

    A 4x4 grid of mid-size hosts whose coverage discs overlap, so most
    devices have several eligible edge nodes to choose from.
    """
    return ScenarioConfig(
        name="urban_dense",
        description="4x4 overlapping edge grid, moderate arrivals",
        edge_nodes=grid_edge_nodes(4, 4, 100.0, capacity_ghz=12.0, coverage_radius=20.0),
        n_devices=120,
        area_size=100.0,
        arrival_rate=0.3,
    )


def _create_sparse_rural() -> ScenarioConfig:
    """Sparse Rural scenario - coverage gaps.

    Four large hosts spread over a wide area; devices outside every cell
    can only reach the remote tier.
    """
    return ScenarioConfig(
        name="sparse_rural",
        description="2x2 edge grid over a wide area, coverage gaps",
        edge_nodes=grid_edge_nodes(2, 2, 300.0, capacity_ghz=20.0, coverage_radius=60.0),
        n_devices=60,
        area_size=300.0,
        arrival_rate=0.4,
        remote_access_latency_ms=80.0,
    )


def _create_edge_overload() -> ScenarioConfig:
    """Edge Overload scenario - undersized edge hosts.

    Small hosts under heavy arrivals; capacity, not coverage, is the
    binding constraint.
    """
    return ScenarioConfig(
        name="edge_overload",
        description="3x3 grid of 4 GHz hosts, heavy arrivals",
        edge_nodes=grid_edge_nodes(3, 3, 100.0, capacity_ghz=4.0, coverage_radius=25.0),
        n_devices=150,
        area_size=100.0,
        arrival_rate=0.5,
        remote_capacity_ghz=100.0,
    )


def _create_strict_latency() -> ScenarioConfig:
    """Strict Latency scenario - XR and vehicle control dominate.

    Most tasks cannot tolerate the remote tier's access latency, so the
    edge tier has to absorb them.
    """
    return ScenarioConfig(
        name="strict_latency",
        description="80% XR / vehicle-control traffic",
        edge_nodes=grid_edge_nodes(4, 4, 100.0, capacity_ghz=12.0, coverage_radius=20.0),
        n_devices=100,
        area_size=100.0,
        arrival_rate=0.3,
        category_weights={
            TaskCategory.INTERACTIVE_VIDEO: 0.1,
            TaskCategory.IMMERSIVE_XR: 0.4,
            TaskCategory.SENSOR_TELEMETRY: 0.1,
            TaskCategory.VEHICLE_CONTROL: 0.4,
        },
        remote_capacity_ghz=100.0,
    )


# Pre-defined scenarios for benchmarking
SCENARIOS: dict[str, ScenarioConfig] = {
    "urban_dense": _create_urban_dense(),
    "sparse_rural": _create_sparse_rural(),
    "edge_overload": _create_edge_overload(),
    "strict_latency": _create_strict_latency(),
}


def get_scenario(name: str) -> ScenarioConfig:
    """Get scenario by name.

    Raises:
        KeyError: If scenario not found.
    """
    if name not in SCENARIOS:
        available = ", ".join(SCENARIOS.keys())
        raise KeyError(f"Unknown scenario '{name}'. Available: {available}")
    return SCENARIOS[name]


def list_scenarios() -> list[str]:
    """List all available scenario names."""
    return list(SCENARIOS.keys())
