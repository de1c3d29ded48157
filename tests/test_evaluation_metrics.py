"""Tests for evaluation metrics."""

import numpy as np
import pytest

from edge_offload.evaluation.metrics import (
    PolicyMetrics,
    RunMetrics,
    ScenarioResult,
    compute_bootstrap_ci,
    compute_iqm,
    compute_jains_fairness,
)
from edge_offload.orchestration.reports import AggregateReport, CompletionRecord


def make_report(mean_latency=5.0, placed=8, submitted=10, edge=6, remote=2, dropped=2, p95=9.0):
    return AggregateReport(
        cycles=10,
        node_utilization={"E1": 50.0, "E2": 30.0, "remote": 10.0},
        completed_by_tier={"edge": edge, "remote": remote},
        mean_latency_ms=mean_latency,
        tasks_submitted=submitted,
        tasks_placed=placed,
        tasks_rejected=submitted - placed,
        tasks_dropped=dropped,
        rejections_by_reason={"capacity_exceeded": submitted - placed},
        deadline_met_rate=0.9,
        latency_percentiles={"p50": 4.0, "p95": p95, "p99": 12.0},
        node_peak_utilization={"E1": 90.0, "E2": 60.0, "remote": 95.0},
    )


def make_run(seed=0, mean_latency=5.0, edge_utilization=None, **kwargs) -> RunMetrics:
    records = [
        CompletionRecord(f"t{i}", "d", "E1", "edge", 0, 0.0, float(i + 1), 2.0, 50.0)
        for i in range(3)
    ]
    return RunMetrics(
        seed=seed,
        report=make_report(mean_latency=mean_latency, **kwargs),
        records=records,
        edge_utilization=edge_utilization if edge_utilization is not None else {"E1": 50.0, "E2": 30.0},
    )


class TestComputeIQM:
    """Tests for interquartile mean computation."""

    def test_empty(self):
        assert compute_iqm([]) == 0.0

    def test_small_sample_uses_mean(self):
        assert compute_iqm([1.0, 2.0, 6.0]) == pytest.approx(3.0)

    def test_trims_outliers(self):
        values = [1.0, 10.0, 10.0, 10.0, 10.0, 10.0, 10.0, 1000.0]
        assert compute_iqm(values) == pytest.approx(10.0)

    def test_constant(self):
        assert compute_iqm([7.0] * 12) == pytest.approx(7.0)


class TestBootstrapCI:
    """Tests for bootstrap confidence intervals."""

    def test_single_value(self):
        assert compute_bootstrap_ci([4.0]) == (4.0, 4.0)

    def test_empty(self):
        assert compute_bootstrap_ci([]) == (0.0, 0.0)

    def test_bounds_contain_iqm(self):
        rng = np.random.default_rng(0)
        values = rng.normal(50, 5, size=40).tolist()
        low, high = compute_bootstrap_ci(values, rng=np.random.default_rng(1))
        assert low <= compute_iqm(values) <= high

    def test_reproducible_with_rng(self):
        values = [1.0, 4.0, 2.0, 8.0, 5.0, 7.0]
        a = compute_bootstrap_ci(values, rng=np.random.default_rng(3))
        b = compute_bootstrap_ci(values, rng=np.random.default_rng(3))
        assert a == b


class TestJainsFairness:
    """Tests for Jain's fairness index."""

    def test_perfectly_fair(self):
        assert compute_jains_fairness([5.0, 5.0, 5.0]) == pytest.approx(1.0)

    def test_maximally_unfair(self):
        assert compute_jains_fairness([10.0, 0.0, 0.0, 0.0]) == pytest.approx(0.25)

    @pytest.mark.parametrize("values", [[], [0.0, 0.0]])
    def test_degenerate(self, values):
        assert compute_jains_fairness(values) == 0.0


class TestRunMetrics:
    """Tests for single-run metrics."""

    def test_delegates_to_report(self):
        run = make_run(mean_latency=6.5)
        assert run.mean_latency_ms == 6.5
        assert run.acceptance_rate == pytest.approx(0.8)
        assert run.edge_share == pytest.approx(0.75)
        assert run.deadline_met_rate == pytest.approx(0.9)

    def test_edge_utilization(self):
        run = make_run(edge_utilization={"E1": 50.0, "E2": 30.0})
        assert run.mean_edge_utilization == pytest.approx(40.0)
        assert 0.5 < run.utilization_fairness < 1.0

    def test_no_edge_nodes(self):
        run = make_run(edge_utilization={})
        assert run.mean_edge_utilization == 0.0
        assert run.utilization_fairness == 0.0
        assert run.peak_edge_utilization == 0.0

    def test_peak_edge_utilization_ignores_remote(self):
        run = make_run(edge_utilization={"E1": 50.0, "E2": 30.0})
        assert run.peak_edge_utilization == pytest.approx(90.0)

    def test_latency_lists(self):
        run = make_run()
        assert run.latencies() == [1.0, 2.0, 3.0]
        assert run.response_times() == [3.0, 4.0, 5.0]


class TestPolicyMetrics:
    """Tests for aggregated policy metrics."""

    @pytest.fixture
    def metrics(self):
        pm = PolicyMetrics(policy_name="NearestEdgePolicy")
        for i, latency in enumerate([4.0, 5.0, 6.0, 5.0, 100.0]):
            pm.runs.append(make_run(seed=i, mean_latency=latency))
        return pm

    def test_empty(self):
        pm = PolicyMetrics(policy_name="empty")
        assert pm.n_runs == 0
        assert pm.latency_iqm == 0.0
        assert pm.acceptance_rate == 0.0
        assert pm.rejection_rate == 0.0
        assert pm.rejections_by_reason() == {}

    def test_latency_iqm_robust(self, metrics):
        assert metrics.latency_iqm < metrics.mean_latency
        assert metrics.std_latency > 0

    def test_ci_cached(self, metrics):
        assert metrics.latency_ci is metrics.latency_ci

    def test_rates(self, metrics):
        assert metrics.acceptance_rate == pytest.approx(0.8)
        assert metrics.rejection_rate == pytest.approx(0.2)
        assert metrics.edge_share == pytest.approx(0.75)
        assert metrics.mean_completed == pytest.approx(8.0)
        assert metrics.mean_dropped == pytest.approx(2.0)
        assert metrics.mean_peak_edge_utilization == pytest.approx(90.0)

    def test_rejections_by_reason(self, metrics):
        assert metrics.rejections_by_reason() == {"capacity_exceeded": pytest.approx(2.0)}

    def test_summary_keys(self, metrics):
        summary = metrics.summary()
        for key in (
            "policy",
            "n_runs",
            "latency_iqm",
            "latency_ci_low",
            "latency_ci_high",
            "latency_p95_iqm",
            "acceptance_rate",
            "deadline_met_rate",
            "edge_share",
            "utilization_fairness",
            "mean_peak_edge_utilization",
            "rejections_by_reason",
        ):
            assert key in summary
        assert summary["policy"] == "NearestEdgePolicy"
        assert summary["n_runs"] == 5
        assert summary["latency_p95_iqm"] == pytest.approx(9.0)


class TestScenarioResult:
    """Tests for per-scenario ranking."""

    @pytest.fixture
    def result(self):
        result = ScenarioResult(scenario_name="s", description="d")
        fast = PolicyMetrics(policy_name="fast")
        slow = PolicyMetrics(policy_name="slow")
        for i in range(4):
            fast.runs.append(make_run(seed=i, mean_latency=3.0, placed=6))
            slow.runs.append(make_run(seed=i, mean_latency=9.0, placed=9))
        result.add_policy_result(fast)
        result.add_policy_result(slow)
        return result

    def test_latency_ranks_ascending(self, result):
        ranking = result.get_ranking("latency_iqm")
        assert [name for name, _ in ranking] == ["fast", "slow"]

    def test_acceptance_ranks_descending(self, result):
        ranking = result.get_ranking("acceptance_rate")
        assert [name for name, _ in ranking] == ["slow", "fast"]

    def test_rejection_ranks_ascending(self, result):
        ranking = result.get_ranking("rejection_rate")
        assert ranking[0][0] == "slow"

    def test_summary_table(self, result):
        assert len(result.summary_table()) == 2
