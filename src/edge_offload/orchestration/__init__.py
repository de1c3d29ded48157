"""Orchestrator core: registries, cycle loop and reports."""

from edge_offload.orchestration.orchestrator import (
    Orchestrator,
    OrchestratorConfig,
    TaskOffer,
)
from edge_offload.orchestration.reports import (
    AggregateReport,
    CompletionRecord,
    CycleReport,
    latency_percentiles,
)

__all__ = [
    "Orchestrator",
    "OrchestratorConfig",
    "TaskOffer",
    "AggregateReport",
    "CompletionRecord",
    "CycleReport",
    "latency_percentiles",
]
