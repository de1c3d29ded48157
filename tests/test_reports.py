"""Tests for completion records and aggregate reports."""

import pytest

from edge_offload.environment.tasks import Task, TaskCategory
from edge_offload.orchestration.reports import (
    AggregateReport,
    CompletionRecord,
    CycleReport,
    latency_percentiles,
)


def make_record(latency, network=5.0, budget=50.0, tier="edge", task_id="t") -> CompletionRecord:
    return CompletionRecord(
        task_id=task_id,
        device_id="d",
        node_id="E1",
        tier=tier,
        category=0,
        created_at_ms=100.0,
        completed_at_ms=100.0 + latency,
        network_latency_ms=network,
        latency_budget_ms=budget,
    )


class TestCompletionRecord:
    """Tests for CompletionRecord."""

    def test_from_task(self):
        task = Task("d-0", "d", TaskCategory.IMMERSIVE_XR, 10.0, 2.0, 15.0, 200.0)
        task.assign("E1", 3.0)
        task.complete(206.0)

        record = CompletionRecord.from_task(task, "edge")
        assert record.node_id == "E1"
        assert record.category == int(TaskCategory.IMMERSIVE_XR)
        assert record.latency_ms == pytest.approx(6.0)
        assert record.response_time_ms == pytest.approx(9.0)
        assert record.deadline_met

    def test_deadline_missed(self):
        assert not make_record(latency=10.0, network=45.0, budget=50.0).deadline_met


class TestLatencyPercentiles:
    """Tests for latency_percentiles."""

    def test_empty(self):
        assert latency_percentiles([]) == {"p50": 0.0, "p95": 0.0, "p99": 0.0}

    def test_values(self):
        records = [make_record(float(i), task_id=str(i)) for i in range(1, 101)]
        pct = latency_percentiles(records)
        assert pct["p50"] == pytest.approx(50.5)
        assert pct["p50"] <= pct["p95"] <= pct["p99"] <= 100.0


class TestCycleReport:
    def test_tasks_completed(self):
        report = CycleReport(
            cycle=0,
            clock_ms=0.0,
            tasks_generated=5,
            tasks_placed=4,
            tasks_rejected=1,
            completed_by_tier={"edge": 3, "remote": 1},
        )
        assert report.tasks_completed == 4


class TestAggregateReport:
    """Tests for AggregateReport derived values."""

    @pytest.fixture
    def report(self):
        return AggregateReport(
            cycles=10,
            node_utilization={"E1": 40.0, "remote": 5.0},
            completed_by_tier={"edge": 30, "remote": 10},
            mean_latency_ms=4.2,
            tasks_submitted=50,
            tasks_placed=40,
            tasks_rejected=10,
            rejections_by_reason={"capacity_exceeded": 10},
        )

    def test_derived(self, report):
        assert report.tasks_completed == 40
        assert report.acceptance_rate == pytest.approx(0.8)
        assert report.edge_share == pytest.approx(0.75)

    def test_empty_rates(self):
        report = AggregateReport(
            cycles=0, node_utilization={}, completed_by_tier={}, mean_latency_ms=0.0
        )
        assert report.acceptance_rate == 0.0
        assert report.edge_share == 0.0

    def test_to_dict(self, report):
        data = report.to_dict()
        assert data["cycles"] == 10
        assert data["tasks_completed"] == 40
        assert data["acceptance_rate"] == pytest.approx(0.8)
        assert data["node_utilization"] == {"E1": 40.0, "remote": 5.0}
