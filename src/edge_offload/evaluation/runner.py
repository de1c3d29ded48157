"""Benchmark runner for systematic placement-policy evaluation.

Runs every policy on every scenario over several seeds and aggregates the
results with IQM and bootstrap confidence intervals.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from edge_offload.environment.nodes import EdgeNode
from edge_offload.evaluation.metrics import PolicyMetrics, RunMetrics, ScenarioResult
from edge_offload.evaluation.scenarios import SCENARIOS, ScenarioConfig
from edge_offload.placement.policies import BasePlacementPolicy

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkConfig:
    """Configuration for benchmark runs."""

    n_runs: int = 10  # Runs per seed
    n_seeds: int = 3  # Seeds for statistical validity
    base_seed: int = 42  # Starting seed for reproducibility

    def __post_init__(self):
        if self.n_runs < 1:
            raise ValueError(f"n_runs must be >= 1, got {self.n_runs}")
        if self.n_seeds < 1:
            raise ValueError(f"n_seeds must be >= 1, got {self.n_seeds}")


class BenchmarkRunner:
    """Orchestrates benchmark evaluation across scenarios and policies."""

    def __init__(self, config: BenchmarkConfig | None = None):
        self.config = config or BenchmarkConfig()
        self._results: dict[str, ScenarioResult] = {}

    def run_simulation(
        self,
        policy: BasePlacementPolicy,
        scenario: ScenarioConfig,
        seed: int,
        n_cycles: int | None = None,
    ) -> RunMetrics:
        """Run one seeded simulation of a scenario under a policy.

        Args:
            policy: Placement policy to evaluate.
            scenario: Scenario configuration.
            seed: Seed for topology and task generation.
            n_cycles: Cycles to run (default: scenario.n_cycles).

        Returns:
            Metrics from the run.
        """
        policy.reset()
        orchestrator = scenario.build_orchestrator(policy=policy, seed=seed)
        orchestrator.run(scenario.n_cycles if n_cycles is None else n_cycles)

        report = orchestrator.summary()
        edge_ids = {node.node_id for node in orchestrator.nodes if isinstance(node, EdgeNode)}
        return RunMetrics(
            seed=seed,
            report=report,
            records=orchestrator.records,
            edge_utilization={
                node_id: u for node_id, u in report.node_utilization.items() if node_id in edge_ids
            },
        )

    def _seeds(self, seeds: list[int] | None) -> list[int]:
        if seeds is not None:
            return seeds
        return [self.config.base_seed + i * 1000 for i in range(self.config.n_seeds)]

    def run_policy(
        self,
        policy: BasePlacementPolicy,
        scenario: ScenarioConfig,
        n_runs: int | None = None,
        seeds: list[int] | None = None,
    ) -> PolicyMetrics:
        """Evaluate a policy over several runs per seed."""
        n_runs = n_runs or self.config.n_runs
        policy_metrics = PolicyMetrics(policy_name=policy.name)

        for seed in self._seeds(seeds):
            for run in range(n_runs):
                policy_metrics.runs.append(
                    self.run_simulation(policy, scenario, seed + run)
                )

        logger.info(
            "%s on %s: latency IQM %.2f ms, acceptance %.1f%%",
            policy.name,
            scenario.name,
            policy_metrics.latency_iqm,
            policy_metrics.acceptance_rate * 100,
        )
        return policy_metrics

    def run_scenario(
        self,
        scenario: ScenarioConfig,
        policies: list[BasePlacementPolicy],
        n_runs: int | None = None,
        seeds: list[int] | None = None,
    ) -> ScenarioResult:
        """Evaluate all policies on a single scenario."""
        result = ScenarioResult(
            scenario_name=scenario.name,
            description=scenario.description,
        )
        for policy in policies:
            result.add_policy_result(self.run_policy(policy, scenario, n_runs, seeds))
        return result

    def run_all_scenarios(
        self,
        policies: list[BasePlacementPolicy],
        scenarios: list[str] | None = None,
        n_runs: int | None = None,
        seeds: list[int] | None = None,
    ) -> dict[str, ScenarioResult]:
        """Evaluate all policies across the named (default: all) scenarios."""
        if scenarios is None:
            scenarios = list(SCENARIOS.keys())

        results = {}
        for scenario_name in scenarios:
            logger.info("Running scenario %s", scenario_name)
            results[scenario_name] = self.run_scenario(
                SCENARIOS[scenario_name], policies, n_runs, seeds
            )

        self._results = results
        return results

    def save_results(
        self,
        output_dir: str | Path,
        results: dict[str, ScenarioResult] | None = None,
    ) -> None:
        """Write summary and per-run JSON files under output_dir."""
        results = results or self._results
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        data_dir = output_dir / "data"
        data_dir.mkdir(exist_ok=True)

        summary = {}
        for scenario_name, scenario_result in results.items():
            summary[scenario_name] = {
                "description": scenario_result.description,
                "policies": {
                    name: pm.summary()
                    for name, pm in scenario_result.policy_results.items()
                },
                "ranking": scenario_result.get_ranking(),
            }

        with open(output_dir / "benchmark_results.json", "w") as f:
            json.dump(summary, f, indent=2, default=_json_serializer)

        raw_data = {}
        for scenario_name, scenario_result in results.items():
            raw_data[scenario_name] = {
                policy_name: [_run_to_dict(run) for run in pm.runs]
                for policy_name, pm in scenario_result.policy_results.items()
            }

        with open(data_dir / "raw_runs.json", "w") as f:
            json.dump(raw_data, f, indent=2, default=_json_serializer)

        logger.info("Saved results to %s", output_dir)

    @staticmethod
    def load_results(input_dir: str | Path) -> dict[str, Any]:
        """Load the summary written by save_results."""
        input_dir = Path(input_dir)
        with open(input_dir / "benchmark_results.json") as f:
            return json.load(f)


def _json_serializer(obj: Any) -> Any:
    """JSON serializer for numpy types."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _run_to_dict(run: RunMetrics) -> dict[str, Any]:
    data = run.report.to_dict()
    data["seed"] = run.seed
    data["edge_utilization"] = run.edge_utilization
    data["n_records"] = len(run.records)
    return data
