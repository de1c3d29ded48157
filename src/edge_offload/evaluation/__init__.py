"""Evaluation framework for edge task placement policies.

Provides multi-seed benchmarking across deployment scenarios, robust
aggregate metrics and plots.
"""

from edge_offload.evaluation.metrics import (
    PolicyMetrics,
    RunMetrics,
    ScenarioResult,
    compute_bootstrap_ci,
    compute_iqm,
    compute_jains_fairness,
)
from edge_offload.evaluation.scenarios import (
    SCENARIOS,
    EdgeNodeSpec,
    ScenarioConfig,
    create_scenario_orchestrator,
    get_scenario,
    grid_edge_nodes,
    list_scenarios,
)
from edge_offload.evaluation.runner import (
    BenchmarkConfig,
    BenchmarkRunner,
)
from edge_offload.evaluation.visualization import (
    create_summary_table,
    plot_latency_distribution,
    plot_node_utilization,
    plot_policy_comparison,
    plot_scenario_heatmap,
    plot_tier_split,
    save_all_plots,
)

__all__ = [
    # Metrics
    "RunMetrics",
    "PolicyMetrics",
    "ScenarioResult",
    "compute_iqm",
    "compute_bootstrap_ci",
    "compute_jains_fairness",
    # Scenarios
    "EdgeNodeSpec",
    "ScenarioConfig",
    "SCENARIOS",
    "create_scenario_orchestrator",
    "grid_edge_nodes",
    "get_scenario",
    "list_scenarios",
    # Runner
    "BenchmarkConfig",
    "BenchmarkRunner",
    # Visualization
    "plot_policy_comparison",
    "plot_scenario_heatmap",
    "plot_latency_distribution",
    "plot_node_utilization",
    "plot_tier_split",
    "create_summary_table",
    "save_all_plots",
]
