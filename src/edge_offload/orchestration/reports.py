"""Report records produced by the orchestrator."""

from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from edge_offload.environment.tasks import Task


@dataclass(frozen=True)
class CompletionRecord:
    """Record of a single task completion for latency analysis."""

    task_id: str
    device_id: str
    node_id: str
    tier: str  # Tier.value
    category: int  # TaskCategory.value
    created_at_ms: float
    completed_at_ms: float
    network_latency_ms: float
    latency_budget_ms: float

    @classmethod
    def from_task(cls, task: Task, tier: str) -> "CompletionRecord":
        return cls(
            task_id=task.task_id,
            device_id=task.device_id,
            node_id=task.assigned_node,
            tier=tier,
            category=int(task.category),
            created_at_ms=task.created_at_ms,
            completed_at_ms=task.completed_at_ms,
            network_latency_ms=task.network_latency_ms or 0.0,
            latency_budget_ms=task.latency_budget_ms,
        )

    @property
    def latency_ms(self) -> float:
        """Time from creation to completion."""
        return self.completed_at_ms - self.created_at_ms

    @property
    def response_time_ms(self) -> float:
        return self.network_latency_ms + self.latency_ms

    @property
    def deadline_met(self) -> bool:
        return self.response_time_ms <= self.latency_budget_ms


@dataclass(frozen=True)
class CycleReport:
    """Outcome of one generate -> place -> advance -> report round."""

    cycle: int
    clock_ms: float
    tasks_generated: int
    tasks_placed: int
    tasks_rejected: int
    rejections_by_reason: dict[str, int] = field(default_factory=dict)
    completed_by_tier: dict[str, int] = field(default_factory=dict)
    node_utilization: dict[str, float] = field(default_factory=dict)  # After placement
    mean_latency_ms: float = 0.0  # Tasks completed this cycle
    cumulative_mean_latency_ms: float = 0.0  # All tasks completed so far

    @property
    def tasks_completed(self) -> int:
        return sum(self.completed_by_tier.values())


@dataclass(frozen=True)
class AggregateReport:
    """Whole-run summary across every cycle so far."""

    cycles: int
    node_utilization: dict[str, float]
    completed_by_tier: dict[str, int]
    mean_latency_ms: float
    tasks_submitted: int = 0
    tasks_placed: int = 0
    tasks_rejected: int = 0
    tasks_dropped: int = 0  # Rejected with no retries left
    rejections_by_reason: dict[str, int] = field(default_factory=dict)
    mean_network_latency_ms: float = 0.0
    deadline_met_rate: float = 0.0
    latency_percentiles: dict[str, float] = field(default_factory=dict)
    node_peak_utilization: dict[str, float] = field(default_factory=dict)
    node_processed_demand_ghz: dict[str, float] = field(default_factory=dict)

    @property
    def tasks_completed(self) -> int:
        return sum(self.completed_by_tier.values())

    @property
    def acceptance_rate(self) -> float:
        """Fraction of submissions that were admitted."""
        if self.tasks_submitted == 0:
            return 0.0
        return self.tasks_placed / self.tasks_submitted

    @property
    def edge_share(self) -> float:
        """Fraction of completed tasks that ran on the edge tier."""
        total = self.tasks_completed
        if total == 0:
            return 0.0
        return self.completed_by_tier.get("edge", 0) / total

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["tasks_completed"] = self.tasks_completed
        data["acceptance_rate"] = self.acceptance_rate
        data["edge_share"] = self.edge_share
        return data


def latency_percentiles(records: list[CompletionRecord]) -> dict[str, float]:
    """Compute latency percentiles (P50, P95, P99)."""
    if not records:
        return {"p50": 0.0, "p95": 0.0, "p99": 0.0}
    latencies = [r.latency_ms for r in records]
    return {
        "p50": float(np.percentile(latencies, 50)),
        "p95": float(np.percentile(latencies, 95)),
        "p99": float(np.percentile(latencies, 99)),
    }
