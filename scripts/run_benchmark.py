#!/usr/bin/env python3
"""CLI entry point for placement-policy benchmarks.

Runs every baseline placement policy across the built-in scenarios over
several seeds and writes JSON results, plots and a markdown summary.

Usage:
    # Quick benchmark (CI/testing)
    python scripts/run_benchmark.py --quick --output results/bench_test

    # Full benchmark
    python scripts/run_benchmark.py --output results/bench --seeds 5 --runs 20
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from edge_offload.evaluation.runner import BenchmarkConfig, BenchmarkRunner
from edge_offload.evaluation.scenarios import list_scenarios
from edge_offload.evaluation.visualization import save_all_plots
from edge_offload.logging_config import setup_logging
from edge_offload.placement.policies import (
    LeastLoadedEdgePolicy,
    NearestEdgePolicy,
    RandomEdgePolicy,
    RemoteFirstPolicy,
)


def get_policies() -> list:
    """Get all placement policies under comparison."""
    return [
        NearestEdgePolicy(),
        LeastLoadedEdgePolicy(),
        RemoteFirstPolicy(),
        RandomEdgePolicy(seed=42),
    ]


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Benchmark edge task placement policies across scenarios"
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="results/benchmark",
        help="Output directory for results (default: results/benchmark)",
    )
    parser.add_argument(
        "--runs",
        "-r",
        type=int,
        default=10,
        help="Runs per seed (default: 10)",
    )
    parser.add_argument(
        "--seeds",
        "-s",
        type=int,
        default=3,
        help="Number of seeds for statistical validity (default: 3)",
    )
    parser.add_argument(
        "--base-seed",
        type=int,
        default=42,
        help="Base random seed (default: 42)",
    )
    parser.add_argument(
        "--scenarios",
        nargs="+",
        default=None,
        help=f"Scenarios to run (default: all). Available: {list_scenarios()}",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Quick run for CI/testing (2 runs, 1 seed)",
    )
    parser.add_argument(
        "--skip-plots",
        action="store_true",
        help="Skip generating plots",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.quick:
        args.runs = 2
        args.seeds = 1

    if args.scenarios:
        available = set(list_scenarios())
        invalid = set(args.scenarios) - available
        if invalid:
            print(f"Error: Unknown scenarios: {invalid}")
            print(f"Available: {list_scenarios()}")
            return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    config = BenchmarkConfig(
        n_runs=args.runs,
        n_seeds=args.seeds,
        base_seed=args.base_seed,
    )

    print("=" * 60)
    print("Edge Placement Benchmark")
    print("=" * 60)
    print(f"Runs per seed: {args.runs}")
    print(f"Seeds: {args.seeds}")
    print(f"Scenarios: {args.scenarios or 'all'}")
    print(f"Output: {output_dir}")
    print()

    policies = get_policies()
    print(f"Policies: {[p.name for p in policies]}")
    print()

    runner = BenchmarkRunner(config)
    start_time = time.time()

    print("Running benchmark...")
    results = runner.run_all_scenarios(policies=policies, scenarios=args.scenarios)

    elapsed = time.time() - start_time
    print(f"Benchmark completed in {elapsed:.1f}s")
    print()

    print("=" * 60)
    print("Results Summary")
    print("=" * 60)

    for scenario_name, result in results.items():
        print(f"\n{scenario_name} ({result.description}):")
        for i, (policy, value) in enumerate(result.get_ranking("latency_iqm"), 1):
            pm = result.policy_results[policy]
            ci_low, ci_high = pm.latency_ci
            print(
                f"  {i}. {policy}: {value:.2f} ms [{ci_low:.2f}, {ci_high:.2f}] "
                f"accepted {pm.acceptance_rate:.1%}, edge {pm.edge_share:.1%}"
            )

    print(f"\nSaving results to {output_dir}...")
    runner.save_results(output_dir, results)

    if not args.skip_plots:
        print("Generating plots...")
        save_all_plots(results, output_dir)

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
