#!/usr/bin/env python3
"""Run a single scenario cycle by cycle and print the reports.

Usage:
    python scripts/simulate.py --scenario urban_dense --cycles 50
    python scripts/simulate.py --scenario edge_overload --policy least_loaded --plot util.png
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from edge_offload.evaluation.scenarios import get_scenario, list_scenarios
from edge_offload.logging_config import setup_logging
from edge_offload.orchestration.orchestrator import OrchestratorConfig
from edge_offload.placement.policies import (
    LeastLoadedEdgePolicy,
    NearestEdgePolicy,
    RandomEdgePolicy,
    RemoteFirstPolicy,
)

POLICIES = {
    "nearest": NearestEdgePolicy,
    "least_loaded": LeastLoadedEdgePolicy,
    "remote_first": RemoteFirstPolicy,
    "random": RandomEdgePolicy,
}


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate one offloading scenario")
    parser.add_argument("--scenario", default="urban_dense", choices=list_scenarios())
    parser.add_argument("--policy", default="nearest", choices=sorted(POLICIES))
    parser.add_argument("--cycles", type=int, default=None, help="Cycles to run")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--retries", type=int, default=0, help="Re-offers per rejected task")
    parser.add_argument("--workers", type=int, default=1, help="Threads advancing nodes")
    parser.add_argument("--plot", type=str, default=None, help="Save node utilization plot")
    parser.add_argument("--log-file", type=str, default=None)
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    base_scenario = get_scenario(args.scenario)
    base = base_scenario.orchestrator_config
    config = OrchestratorConfig(
        cycle_duration_ms=base.cycle_duration_ms,
        processing_scale_ms=base.processing_scale_ms,
        active_device_fraction=base.active_device_fraction,
        max_retries=args.retries,
        max_workers=args.workers,
    )
    scenario = replace(base_scenario, orchestrator_config=config)

    orchestrator = scenario.build_orchestrator(policy=POLICIES[args.policy](), seed=args.seed)
    n_cycles = scenario.n_cycles if args.cycles is None else args.cycles
    orchestrator.run(n_cycles)

    summary = orchestrator.summary()
    print("=" * 60)
    print(f"{scenario.name} | {orchestrator.policy.name} | {summary.cycles} cycles")
    print("=" * 60)
    print(f"Submitted: {summary.tasks_submitted}  Placed: {summary.tasks_placed}  "
          f"Rejected: {summary.tasks_rejected}  Dropped: {summary.tasks_dropped}")
    print(f"Completed by tier: {summary.completed_by_tier}")
    print(f"Rejections: {summary.rejections_by_reason}")
    print(f"Mean latency: {summary.mean_latency_ms:.2f} ms  "
          f"(network {summary.mean_network_latency_ms:.2f} ms)")
    print(f"Percentiles: {summary.latency_percentiles}")
    print(f"Deadline met: {summary.deadline_met_rate:.1%}")
    print("Node utilization (mean after placement / peak / processed):")
    for node_id, u in summary.node_utilization.items():
        peak = summary.node_peak_utilization.get(node_id, 0.0)
        processed = summary.node_processed_demand_ghz.get(node_id, 0.0)
        print(f"  {node_id}: {u:.1f}% / {peak:.1f}% / {processed:.1f} GHz")

    if args.plot:
        import matplotlib

        matplotlib.use("Agg")
        from edge_offload.evaluation.visualization import plot_node_utilization

        fig = plot_node_utilization(summary, title=f"{scenario.name}: node utilization")
        fig.savefig(args.plot, dpi=150, bbox_inches="tight")
        print(f"Saved plot to {args.plot}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
