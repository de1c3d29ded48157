"""Run and policy metrics for comparing placement policies.

Aggregates over seeded runs with robust statistics:
- IQM (interquartile mean) for robustness to outliers
- Bootstrap 95% CIs
- Jain's fairness over edge-node utilization
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from edge_offload.orchestration.reports import AggregateReport, CompletionRecord


def compute_iqm(values: list[float]) -> float:
    """Compute interquartile mean (IQM).

    Falls back to the plain mean with fewer than four values.

    Args:
        values: Metric values across runs.

    Returns:
        Interquartile mean, or 0.0 if there is no data.
    """
    if len(values) < 4:
        return float(np.mean(values)) if values else 0.0

    sorted_vals = np.sort(values)
    n = len(sorted_vals)
    q1_idx = n // 4
    q3_idx = 3 * n // 4
    return float(np.mean(sorted_vals[q1_idx:q3_idx]))


def compute_bootstrap_ci(
    values: list[float],
    confidence: float = 0.95,
    n_bootstrap: int = 2000,
    rng: np.random.Generator | None = None,
) -> tuple[float, float]:
    """Compute a bootstrap confidence interval of the IQM.

    Args:
        values: Metric values.
        confidence: Confidence level (default 0.95 for 95% CI).
        n_bootstrap: Number of bootstrap replications.
        rng: Random generator for reproducibility.

    Returns:
        (lower_bound, upper_bound) of confidence interval.
    """
    if len(values) < 2:
        val = values[0] if values else 0.0
        return (val, val)

    rng = rng or np.random.default_rng()
    arr = np.array(values)
    bootstrap_iqms = [
        compute_iqm(rng.choice(arr, size=len(arr), replace=True).tolist())
        for _ in range(n_bootstrap)
    ]

    alpha = 1 - confidence
    lower = float(np.percentile(bootstrap_iqms, 100 * alpha / 2))
    upper = float(np.percentile(bootstrap_iqms, 100 * (1 - alpha / 2)))
    return (lower, upper)


def compute_jains_fairness(values: list[float]) -> float:
    """Compute Jain's fairness index.

    J(x) = (sum(x_i))^2 / (n * sum(x_i^2)), ranging from 1/n (one node
    carries everything) to 1 (perfectly even load).

    Returns:
        Index in [0, 1]; 0.0 for empty or all-zero input.
    """
    if not values or all(v == 0 for v in values):
        return 0.0

    arr = np.array(values, dtype=np.float64)
    n = len(arr)
    sum_x = np.sum(arr)
    sum_x2 = np.sum(arr**2)
    return float(sum_x**2 / (n * sum_x2))


@dataclass
class RunMetrics:
    """Metrics from a single seeded simulation run."""

    seed: int
    report: AggregateReport
    records: list[CompletionRecord] = field(default_factory=list)
    edge_utilization: dict[str, float] = field(default_factory=dict)

    @property
    def mean_latency_ms(self) -> float:
        return self.report.mean_latency_ms

    @property
    def acceptance_rate(self) -> float:
        return self.report.acceptance_rate

    @property
    def deadline_met_rate(self) -> float:
        return self.report.deadline_met_rate

    @property
    def edge_share(self) -> float:
        return self.report.edge_share

    @property
    def utilization_fairness(self) -> float:
        return compute_jains_fairness(list(self.edge_utilization.values()))

    @property
    def mean_edge_utilization(self) -> float:
        if not self.edge_utilization:
            return 0.0
        return float(np.mean(list(self.edge_utilization.values())))

    @property
    def peak_edge_utilization(self) -> float:
        """Highest committed load any edge node reached, in percent."""
        peaks = [self.report.node_peak_utilization.get(n, 0.0) for n in self.edge_utilization]
        return max(peaks, default=0.0)

    def latencies(self) -> list[float]:
        return [r.latency_ms for r in self.records]

    def response_times(self) -> list[float]:
        return [r.response_time_ms for r in self.records]


@dataclass
class PolicyMetrics:
    """Aggregated metrics for one policy across many runs."""

    policy_name: str
    runs: list[RunMetrics] = field(default_factory=list)
    _bootstrap_rng_seed: int = 42

    # Cached statistics (computed lazily)
    _latency_iqm: float | None = field(default=None, repr=False)
    _latency_ci: tuple[float, float] | None = field(default=None, repr=False)

    def _latencies(self) -> list[float]:
        return [r.mean_latency_ms for r in self.runs]

    def _mean_of(self, values: list[float]) -> float:
        return float(np.mean(values)) if values else 0.0

    @property
    def n_runs(self) -> int:
        return len(self.runs)

    @property
    def latency_iqm(self) -> float:
        """Interquartile mean of per-run mean latency."""
        if self._latency_iqm is None:
            self._latency_iqm = compute_iqm(self._latencies())
        return self._latency_iqm

    @property
    def latency_ci(self) -> tuple[float, float]:
        """95% bootstrap CI for the latency IQM."""
        if self._latency_ci is None:
            rng = np.random.default_rng(self._bootstrap_rng_seed)
            self._latency_ci = compute_bootstrap_ci(self._latencies(), rng=rng)
        return self._latency_ci

    @property
    def mean_latency(self) -> float:
        return self._mean_of(self._latencies())

    @property
    def std_latency(self) -> float:
        if not self.runs:
            return 0.0
        return float(np.std(self._latencies()))

    @property
    def acceptance_rate(self) -> float:
        return self._mean_of([r.acceptance_rate for r in self.runs])

    @property
    def rejection_rate(self) -> float:
        if not self.runs:
            return 0.0
        return 1.0 - self.acceptance_rate

    @property
    def deadline_met_rate(self) -> float:
        return self._mean_of([r.deadline_met_rate for r in self.runs])

    @property
    def edge_share(self) -> float:
        return self._mean_of([r.edge_share for r in self.runs])

    @property
    def mean_completed(self) -> float:
        return self._mean_of([r.report.tasks_completed for r in self.runs])

    @property
    def mean_dropped(self) -> float:
        return self._mean_of([r.report.tasks_dropped for r in self.runs])

    @property
    def mean_edge_utilization(self) -> float:
        return self._mean_of([r.mean_edge_utilization for r in self.runs])

    @property
    def mean_peak_edge_utilization(self) -> float:
        return self._mean_of([r.peak_edge_utilization for r in self.runs])

    def utilization_fairness(self) -> float:
        """Jain's index over edge-node utilization, averaged per run."""
        scores = [r.utilization_fairness for r in self.runs if r.edge_utilization]
        return self._mean_of(scores)

    def latency_p95_iqm(self) -> float:
        """IQM of per-run P95 latencies."""
        return compute_iqm([r.report.latency_percentiles.get("p95", 0.0) for r in self.runs])

    def rejections_by_reason(self) -> dict[str, float]:
        """Mean rejection count per reason across runs."""
        if not self.runs:
            return {}
        totals: dict[str, float] = {}
        for run in self.runs:
            for reason, count in run.report.rejections_by_reason.items():
                totals[reason] = totals.get(reason, 0.0) + count
        return {reason: total / len(self.runs) for reason, total in totals.items()}

    def summary(self) -> dict[str, Any]:
        """Return comprehensive summary dictionary."""
        ci_low, ci_high = self.latency_ci
        return {
            "policy": self.policy_name,
            "n_runs": self.n_runs,
            # Latency metrics
            "latency_iqm": self.latency_iqm,
            "latency_ci_low": ci_low,
            "latency_ci_high": ci_high,
            "mean_latency": self.mean_latency,
            "std_latency": self.std_latency,
            "latency_p95_iqm": self.latency_p95_iqm(),
            # Placement metrics
            "acceptance_rate": self.acceptance_rate,
            "rejection_rate": self.rejection_rate,
            "deadline_met_rate": self.deadline_met_rate,
            "edge_share": self.edge_share,
            "mean_completed": self.mean_completed,
            "mean_dropped": self.mean_dropped,
            # Load metrics
            "mean_edge_utilization": self.mean_edge_utilization,
            "mean_peak_edge_utilization": self.mean_peak_edge_utilization,
            "utilization_fairness": self.utilization_fairness(),
            "rejections_by_reason": self.rejections_by_reason(),
        }


# Metrics where a smaller value ranks higher
_LOWER_IS_BETTER = ("latency", "rejection", "dropped")


@dataclass
class ScenarioResult:
    """Results from evaluating multiple policies on a single scenario."""

    scenario_name: str
    description: str
    policy_results: dict[str, PolicyMetrics] = field(default_factory=dict)

    def add_policy_result(self, metrics: PolicyMetrics) -> None:
        self.policy_results[metrics.policy_name] = metrics

    def get_ranking(self, metric: str = "latency_iqm") -> list[tuple[str, float]]:
        """Get policies ranked best-first by the given summary metric.

        Latency, rejection and drop metrics rank ascending; everything else
        descending.
        """
        rankings = []
        for name, pm in self.policy_results.items():
            rankings.append((name, pm.summary().get(metric, 0.0)))

        reverse = not any(key in metric.lower() for key in _LOWER_IS_BETTER)
        return sorted(rankings, key=lambda x: x[1], reverse=reverse)

    def summary_table(self) -> list[dict[str, Any]]:
        return [pm.summary() for pm in self.policy_results.values()]
