"""Tests for task categories, value ranges and the task lifecycle."""

import numpy as np
import pytest

from edge_offload.environment.tasks import (
    DEFAULT_CATEGORY_PROFILES,
    Task,
    TaskCategory,
    ValueRange,
)


def make_task(**overrides) -> Task:
    params = dict(
        task_id="dev-0-0",
        device_id="dev-0",
        category=TaskCategory.INTERACTIVE_VIDEO,
        size_mb=5.0,
        demand_ghz=2.0,
        latency_budget_ms=50.0,
        created_at_ms=100.0,
    )
    params.update(overrides)
    return Task(**params)


class TestValueRange:
    """Tests for ValueRange validation and sampling."""

    def test_rejects_non_positive_low(self):
        with pytest.raises(ValueError, match="low must be positive"):
            ValueRange(0.0, 1.0)

    def test_rejects_inverted_range(self):
        with pytest.raises(ValueError, match="must be >= low"):
            ValueRange(2.0, 1.0)

    def test_sample_within_bounds(self):
        rng = np.random.default_rng(0)
        vr = ValueRange(1.0, 3.0)
        samples = [vr.sample(rng) for _ in range(200)]
        assert all(vr.contains(s) for s in samples)
        assert min(samples) < 1.5
        assert max(samples) > 2.5

    def test_degenerate_range(self):
        rng = np.random.default_rng(0)
        assert ValueRange(4.0, 4.0).sample(rng) == 4.0

    def test_contains(self):
        vr = ValueRange(1.0, 2.0)
        assert vr.contains(1.0)
        assert vr.contains(2.0)
        assert not vr.contains(2.1)


class TestCategoryProfiles:
    """Tests for the default category table."""

    def test_every_category_has_profile(self):
        assert set(DEFAULT_CATEGORY_PROFILES) == set(TaskCategory)

    def test_latency_critical_categories_have_tight_budgets(self):
        video = DEFAULT_CATEGORY_PROFILES[TaskCategory.INTERACTIVE_VIDEO]
        for critical in (TaskCategory.IMMERSIVE_XR, TaskCategory.VEHICLE_CONTROL):
            profile = DEFAULT_CATEGORY_PROFILES[critical]
            assert profile.latency_budget_ms.high < video.latency_budget_ms.low

    def test_telemetry_is_lightweight(self):
        telemetry = DEFAULT_CATEGORY_PROFILES[TaskCategory.SENSOR_TELEMETRY]
        assert telemetry.size_mb.high <= 1.0
        assert telemetry.demand_ghz.high <= 1.0


class TestTask:
    """Tests for Task validation and lifecycle."""

    @pytest.mark.parametrize("field_name", ["size_mb", "demand_ghz", "latency_budget_ms"])
    def test_rejects_non_positive_values(self, field_name):
        with pytest.raises(ValueError, match=field_name):
            make_task(**{field_name: 0.0})

    def test_initial_state(self):
        task = make_task()
        assert not task.is_assigned
        assert not task.is_complete
        assert task.latency_ms is None
        assert task.response_time_ms is None
        assert not task.deadline_met

    def test_assign_once(self):
        task = make_task()
        task.assign("edge-0000", 5.0)
        assert task.is_assigned
        assert task.assigned_node == "edge-0000"
        assert task.network_latency_ms == 5.0

        with pytest.raises(RuntimeError, match="already assigned"):
            task.assign("remote", 60.0)
        assert task.assigned_node == "edge-0000"

    def test_complete_requires_assignment(self):
        task = make_task()
        with pytest.raises(RuntimeError, match="before assignment"):
            task.complete(120.0)

    def test_complete_once(self):
        task = make_task()
        task.assign("edge-0000", 5.0)
        task.complete(110.0)
        with pytest.raises(RuntimeError, match="already completed"):
            task.complete(120.0)
        assert task.completed_at_ms == 110.0

    def test_completion_cannot_precede_creation(self):
        task = make_task(created_at_ms=100.0)
        task.assign("edge-0000", 5.0)
        with pytest.raises(ValueError, match="precedes creation"):
            task.complete(99.0)

    def test_latencies(self):
        task = make_task(created_at_ms=100.0, latency_budget_ms=50.0)
        task.assign("edge-0000", 5.0)
        task.complete(108.0)

        assert task.latency_ms == pytest.approx(8.0)
        assert task.response_time_ms == pytest.approx(13.0)
        assert task.deadline_met

    def test_deadline_missed(self):
        task = make_task(created_at_ms=0.0, latency_budget_ms=10.0)
        task.assign("remote", 60.0)
        task.complete(2.0)
        assert not task.deadline_met

    def test_identity_equality(self):
        a, b = make_task(), make_task()
        assert a != b
        assert a == a
