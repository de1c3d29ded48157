"""Capacity-bounded compute nodes: edge hosts and the remote tier.

Both node kinds carry the same CapacityLedger; they differ only in how
eligibility is computed (coverage radius vs. fixed access latency), so they
are modelled as two plain dataclasses joined by a union type rather than a
class hierarchy.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from edge_offload.environment.tasks import Task
from edge_offload.topology.geometry import (
    LatencyEstimator,
    Location,
    euclidean_distance,
)


class Tier(str, Enum):
    EDGE = "edge"
    REMOTE = "remote"


@dataclass(eq=False)
class CapacityLedger:
    """Committed-load accounting shared by every node kind.

    All mutation happens under a per-node lock, so `admit` re-checks the
    capacity bound and mutates in one critical section: concurrent admissions
    can never observe or produce a load above capacity.
    """

    node_id: str
    capacity_ghz: float

    load_ghz: float = field(default=0.0, init=False)
    pending: list[Task] = field(default_factory=list, init=False, repr=False)
    completed: list[Task] = field(default_factory=list, init=False, repr=False)
    peak_load_ghz: float = field(default=0.0, init=False)
    processed_demand_ghz: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def __post_init__(self):
        if self.capacity_ghz <= 0:
            raise ValueError(
                f"capacity_ghz must be positive, got {self.capacity_ghz} "
                f"for node {self.node_id}"
            )

    def can_admit(self, task: Task) -> bool:
        """True iff the task's demand fits in the remaining capacity."""
        return self.load_ghz + task.demand_ghz <= self.capacity_ghz

    def admit(self, task: Task, network_latency_ms: float) -> bool:
        """Commit a task against this node's capacity.

        Returns False, leaving node and task untouched, if the demand does
        not fit.
        """
        with self._lock:
            if not self.can_admit(task):
                return False
            task.assign(self.node_id, network_latency_ms)
            self.pending.append(task)
            self.load_ghz += task.demand_ghz
            self.peak_load_ghz = max(self.peak_load_ghz, self.load_ghz)
            return True

    def advance(self, now_ms: float, processing_scale_ms: float = 10.0) -> list[Task]:
        """Process every pending task within this step.

        All pending tasks finish in the same advance call: each takes
        `demand / capacity * processing_scale_ms` after `now_ms`, with no
        queuing behind the other tasks on the node. This is the simulation's
        model, and reported latencies depend on it.

        Returns:
            Tasks completed by this call, in admission order.
        """
        with self._lock:
            finished = self.pending
            self.pending = []
            for task in finished:
                duration = task.demand_ghz / self.capacity_ghz * processing_scale_ms
                task.complete(max(now_ms, task.created_at_ms) + duration)
                self.load_ghz -= task.demand_ghz
                self.processed_demand_ghz += task.demand_ghz

            # Nothing is left pending; drop accumulated float drift
            self.load_ghz = 0.0
            self.completed.extend(finished)
            return finished

    def utilization(self) -> float:
        """Committed load as a percentage of capacity."""
        if self.capacity_ghz == 0:
            return 0.0
        return self.load_ghz / self.capacity_ghz * 100.0

    def peak_utilization(self) -> float:
        """Highest committed load seen so far, as a percentage of capacity."""
        return self.peak_load_ghz / self.capacity_ghz * 100.0


@dataclass(eq=False)
class EdgeNode:
    """Location-bound compute host serving devices within its radius."""

    node_id: str
    capacity_ghz: float
    location: Location
    coverage_radius: float
    ledger: CapacityLedger = field(init=False, repr=False)

    tier: ClassVar[Tier] = Tier.EDGE

    def __post_init__(self):
        if self.coverage_radius <= 0:
            raise ValueError(
                f"coverage_radius must be positive, got {self.coverage_radius} "
                f"for node {self.node_id}"
            )
        self.ledger = CapacityLedger(self.node_id, self.capacity_ghz)

    def covers(
        self, location: Location, distance: LatencyEstimator = euclidean_distance
    ) -> bool:
        return distance(location, self.location) <= self.coverage_radius


@dataclass(eq=False)
class RemoteNode:
    """Location-independent tier reachable from every device."""

    node_id: str
    capacity_ghz: float
    access_latency_ms: float
    ledger: CapacityLedger = field(init=False, repr=False)

    tier: ClassVar[Tier] = Tier.REMOTE

    def __post_init__(self):
        if self.access_latency_ms < 0:
            raise ValueError(
                f"access_latency_ms must be non-negative, got {self.access_latency_ms}"
            )
        self.ledger = CapacityLedger(self.node_id, self.capacity_ghz)


ComputeNode = EdgeNode | RemoteNode
