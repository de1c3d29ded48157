"""Typed placement outcomes returned to callers of the orchestrator."""

from dataclasses import dataclass
from enum import Enum

from edge_offload.environment.nodes import Tier


class RejectionReason(str, Enum):
    """Why no node could take a task."""

    NO_COVERAGE = "no_coverage"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    LATENCY_BUDGET_EXCEEDED = "latency_budget_exceeded"


@dataclass(frozen=True)
class Assigned:
    """The task was admitted by `node_id`."""

    node_id: str
    tier: Tier
    network_latency_ms: float

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """No eligible node; the task stays unassigned."""

    reason: RejectionReason

    @property
    def accepted(self) -> bool:
        return False


PlacementResult = Assigned | Rejected
