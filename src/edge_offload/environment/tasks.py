"""Task definitions for latency-sensitive offloaded workloads."""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class TaskCategory(IntEnum):
    """Workload categories generated by devices.

    Each category draws its size, demand and latency budget from its own
    CategoryProfile. Immersive XR and vehicle control carry the tightest
    latency budgets.
    """

    INTERACTIVE_VIDEO = 0  # Video conferencing, cloud gaming streams
    IMMERSIVE_XR = 1  # AR/VR frame rendering and pose updates
    SENSOR_TELEMETRY = 2  # Periodic IoT readings, tolerant of delay
    VEHICLE_CONTROL = 3  # Cooperative driving, collision avoidance


@dataclass(frozen=True)
class ValueRange:
    """Closed interval [low, high] of strictly positive values."""

    low: float
    high: float

    def __post_init__(self):
        if self.low <= 0:
            raise ValueError(f"low must be positive, got {self.low}")
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must be >= low ({self.low})")

    def sample(self, rng: np.random.Generator) -> float:
        """Draw a value uniformly from the range."""
        if self.high == self.low:
            return self.low
        return float(rng.uniform(self.low, self.high))

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class CategoryProfile:
    """Numeric ranges a task category is drawn from."""

    size_mb: ValueRange  # Input payload shipped to the executing node
    demand_ghz: ValueRange  # Processing demand (GHz-equivalent)
    latency_budget_ms: ValueRange  # Maximum tolerable delay


# Budgets follow the usual service classes:
# Vehicle control: 5-15 ms (V2X safety messages)
# Immersive XR: 10-20 ms (motion-to-photon)
# Interactive video: 50-150 ms (conversational)
# Telemetry: 100-500 ms (best effort)
DEFAULT_CATEGORY_PROFILES: dict[TaskCategory, CategoryProfile] = {
    TaskCategory.INTERACTIVE_VIDEO: CategoryProfile(
        size_mb=ValueRange(5.0, 20.0),
        demand_ghz=ValueRange(1.0, 3.0),
        latency_budget_ms=ValueRange(50.0, 150.0),
    ),
    TaskCategory.IMMERSIVE_XR: CategoryProfile(
        size_mb=ValueRange(10.0, 40.0),
        demand_ghz=ValueRange(2.0, 5.0),
        latency_budget_ms=ValueRange(10.0, 20.0),
    ),
    TaskCategory.SENSOR_TELEMETRY: CategoryProfile(
        size_mb=ValueRange(0.1, 1.0),
        demand_ghz=ValueRange(0.2, 1.0),
        latency_budget_ms=ValueRange(100.0, 500.0),
    ),
    TaskCategory.VEHICLE_CONTROL: CategoryProfile(
        size_mb=ValueRange(0.5, 2.0),
        demand_ghz=ValueRange(1.0, 2.5),
        latency_budget_ms=ValueRange(5.0, 15.0),
    ),
}


@dataclass(eq=False)
class Task:
    """A single offloadable unit of work.

    The demand descriptor (category, size, demand, budget, creation time and
    originating device) is fixed at creation. Two lifecycle fields are
    written exactly once each: the assigned node on admission and the
    completion time when the node processes the task.
    """

    task_id: str
    device_id: str  # Originating device
    category: TaskCategory
    size_mb: float
    demand_ghz: float
    latency_budget_ms: float
    created_at_ms: float

    completed_at_ms: float | None = None
    assigned_node: str | None = None
    network_latency_ms: float | None = None  # Estimated access latency at admission

    def __post_init__(self):
        if self.size_mb <= 0:
            raise ValueError(f"size_mb must be positive, got {self.size_mb}")
        if self.demand_ghz <= 0:
            raise ValueError(f"demand_ghz must be positive, got {self.demand_ghz}")
        if self.latency_budget_ms <= 0:
            raise ValueError(
                f"latency_budget_ms must be positive, got {self.latency_budget_ms}"
            )

    @property
    def is_assigned(self) -> bool:
        return self.assigned_node is not None

    @property
    def is_complete(self) -> bool:
        return self.completed_at_ms is not None

    def assign(self, node_id: str, network_latency_ms: float) -> None:
        """Bind the task to the node that admitted it."""
        if self.assigned_node is not None:
            raise RuntimeError(
                f"Task {self.task_id} already assigned to {self.assigned_node}"
            )
        self.assigned_node = node_id
        self.network_latency_ms = network_latency_ms

    def complete(self, at_ms: float) -> None:
        """Stamp the completion time. Only valid once, after assignment."""
        if self.assigned_node is None:
            raise RuntimeError(f"Task {self.task_id} completed before assignment")
        if self.completed_at_ms is not None:
            raise RuntimeError(f"Task {self.task_id} already completed")
        if at_ms < self.created_at_ms:
            raise ValueError(
                f"Completion time {at_ms} precedes creation time {self.created_at_ms}"
            )
        self.completed_at_ms = at_ms

    @property
    def latency_ms(self) -> float | None:
        """End-to-end latency from creation to completion."""
        if self.completed_at_ms is None:
            return None
        return self.completed_at_ms - self.created_at_ms

    @property
    def response_time_ms(self) -> float | None:
        """Network access latency plus end-to-end processing latency."""
        if self.completed_at_ms is None:
            return None
        return (self.network_latency_ms or 0.0) + self.latency_ms

    @property
    def deadline_met(self) -> bool:
        response = self.response_time_ms
        return response is not None and response <= self.latency_budget_ms
