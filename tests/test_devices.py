"""Tests for devices and per-cycle task generation."""

import numpy as np
import pytest

from edge_offload.environment.devices import Device, PoissonTaskGenerator
from edge_offload.environment.tasks import DEFAULT_CATEGORY_PROFILES, TaskCategory
from edge_offload.topology.geometry import Location


@pytest.fixture
def device():
    return Device("dev-007", Location(10.0, 20.0))


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class TestDevice:
    """Tests for Device.generate_task."""

    def test_task_stamped_with_device_and_time(self, device, rng):
        task = device.generate_task(rng, now_ms=300.0)
        assert task.device_id == "dev-007"
        assert task.created_at_ms == 300.0
        assert task.task_id == "dev-007-0"
        assert not task.is_assigned

    def test_task_ids_are_sequential(self, device, rng):
        ids = [device.generate_task(rng, 0.0).task_id for _ in range(3)]
        assert ids == ["dev-007-0", "dev-007-1", "dev-007-2"]
        assert len(device.task_log) == 3

    def test_forced_category_within_profile(self, device, rng):
        task = device.generate_task(rng, 0.0, category=TaskCategory.VEHICLE_CONTROL)
        profile = DEFAULT_CATEGORY_PROFILES[TaskCategory.VEHICLE_CONTROL]
        assert task.category == TaskCategory.VEHICLE_CONTROL
        assert profile.size_mb.contains(task.size_mb)
        assert profile.demand_ghz.contains(task.demand_ghz)
        assert profile.latency_budget_ms.contains(task.latency_budget_ms)

    def test_category_weights(self, device, rng):
        weights = {TaskCategory.SENSOR_TELEMETRY: 1.0}
        tasks = [
            device.generate_task(rng, 0.0, category_weights=weights) for _ in range(20)
        ]
        assert all(t.category == TaskCategory.SENSOR_TELEMETRY for t in tasks)

    def test_uniform_draw_covers_categories(self, device, rng):
        categories = {device.generate_task(rng, 0.0).category for _ in range(200)}
        assert categories == set(TaskCategory)

    def test_all_zero_weights_raise_before_logging(self, device, rng):
        weights = {TaskCategory.SENSOR_TELEMETRY: 0.0, TaskCategory.IMMERSIVE_XR: 0.0}
        with pytest.raises(ValueError, match="all be zero"):
            device.generate_task(rng, 0.0, category_weights=weights)
        assert device.task_log == []

    def test_empty_profiles_not_replaced_by_defaults(self, device, rng):
        with pytest.raises(ValueError, match="at least one category"):
            device.generate_task(rng, 0.0, profiles={})
        assert device.task_log == []

    def test_custom_profiles_only(self, device, rng):
        profiles = {
            TaskCategory.IMMERSIVE_XR: DEFAULT_CATEGORY_PROFILES[TaskCategory.IMMERSIVE_XR]
        }
        tasks = [device.generate_task(rng, 0.0, profiles=profiles) for _ in range(10)]
        assert all(t.category == TaskCategory.IMMERSIVE_XR for t in tasks)


class TestPoissonTaskGenerator:
    """Tests for PoissonTaskGenerator."""

    def test_rejects_negative_rate(self):
        with pytest.raises(ValueError, match="arrival_rate"):
            PoissonTaskGenerator(arrival_rate=-0.1)

    def test_rejects_negative_weight(self):
        with pytest.raises(ValueError, match="non-negative"):
            PoissonTaskGenerator(category_weights={TaskCategory.IMMERSIVE_XR: -1.0})

    def test_rejects_all_zero_weights(self):
        with pytest.raises(ValueError, match="all be zero"):
            PoissonTaskGenerator(category_weights={TaskCategory.IMMERSIVE_XR: 0.0})

    def test_rejects_weights_without_profile(self):
        profiles = {
            TaskCategory.IMMERSIVE_XR: DEFAULT_CATEGORY_PROFILES[TaskCategory.IMMERSIVE_XR]
        }
        with pytest.raises(ValueError, match="without profiles"):
            PoissonTaskGenerator(
                profiles=profiles,
                category_weights={TaskCategory.VEHICLE_CONTROL: 1.0},
            )

    def test_rejects_empty_profiles(self):
        with pytest.raises(ValueError, match="at least one category"):
            PoissonTaskGenerator(profiles={})

    def test_zero_rate_generates_nothing(self, device, rng):
        generator = PoissonTaskGenerator(arrival_rate=0.0)
        assert generator(device, 0.0, rng) == []

    def test_mean_arrivals(self, device, rng):
        generator = PoissonTaskGenerator(arrival_rate=2.0)
        counts = [len(generator(device, 0.0, rng)) for _ in range(500)]
        assert np.mean(counts) == pytest.approx(2.0, abs=0.25)

    def test_seeded_generation_is_reproducible(self):
        generator = PoissonTaskGenerator(arrival_rate=1.5)

        def draw(seed):
            dev = Device("dev-000", Location(0.0, 0.0))
            rng = np.random.default_rng(seed)
            return [
                (t.category, t.demand_ghz)
                for _ in range(10)
                for t in generator(dev, 0.0, rng)
            ]

        assert draw(7) == draw(7)
