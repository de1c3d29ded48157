"""Task-generating devices and per-cycle task generators."""

from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

from edge_offload.environment.tasks import (
    DEFAULT_CATEGORY_PROFILES,
    CategoryProfile,
    Task,
    TaskCategory,
)
from edge_offload.topology.geometry import Location


@dataclass(eq=False)
class Device:
    """A task source pinned to a fixed location.

    The task log is kept for diagnostics only; placement never reads it.
    """

    device_id: str
    location: Location
    task_log: list[Task] = field(default_factory=list, repr=False)

    def generate_task(
        self,
        rng: np.random.Generator,
        now_ms: float,
        profiles: dict[TaskCategory, CategoryProfile] | None = None,
        category_weights: dict[TaskCategory, float] | None = None,
        category: TaskCategory | None = None,
    ) -> Task:
        """Create a task stamped with the current simulation time.

        Args:
            rng: Random generator for category and value draws.
            now_ms: Simulation clock used as the creation timestamp.
            profiles: Per-category numeric ranges (default table if None).
            category_weights: Relative category frequencies (uniform if None).
            category: Force a specific category instead of drawing one.

        Returns:
            The new task, already appended to this device's log.

        Raises:
            ValueError: If profiles is empty or category_weights cannot be
                normalised over it.
        """
        if profiles is None:
            profiles = DEFAULT_CATEGORY_PROFILES
        if category is None:
            validate_category_weights(profiles, category_weights)
            category = _draw_category(rng, profiles, category_weights)
        profile = profiles[category]

        task = Task(
            task_id=f"{self.device_id}-{len(self.task_log)}",
            device_id=self.device_id,
            category=category,
            size_mb=profile.size_mb.sample(rng),
            demand_ghz=profile.demand_ghz.sample(rng),
            latency_budget_ms=profile.latency_budget_ms.sample(rng),
            created_at_ms=now_ms,
        )
        self.task_log.append(task)
        return task


def validate_category_weights(
    profiles: dict[TaskCategory, CategoryProfile],
    weights: dict[TaskCategory, float] | None,
) -> None:
    """Reject a profile table or weight map that no category can be drawn from."""
    if not profiles:
        raise ValueError("profiles must contain at least one category")
    if weights is None:
        return
    unknown = set(weights) - set(profiles)
    if unknown:
        raise ValueError(f"Weights given for categories without profiles: {unknown}")
    if any(w < 0 for w in weights.values()):
        raise ValueError("category_weights must be non-negative")
    if sum(weights.values()) <= 0:
        raise ValueError("category_weights must not all be zero")


def _draw_category(
    rng: np.random.Generator,
    profiles: dict[TaskCategory, CategoryProfile],
    weights: dict[TaskCategory, float] | None,
) -> TaskCategory:
    categories = list(profiles.keys())
    if weights is None:
        return categories[int(rng.integers(0, len(categories)))]
    p = np.array([weights.get(c, 0.0) for c in categories], dtype=np.float64)
    p /= p.sum()
    return categories[int(rng.choice(len(categories), p=p))]


class TaskGenerator(Protocol):
    """Protocol for per-device, per-cycle task sources."""

    def __call__(
        self, device: Device, now_ms: float, rng: np.random.Generator
    ) -> list[Task]:
        """Return the tasks a device produces this cycle (possibly none)."""
        ...


@dataclass
class PoissonTaskGenerator:
    """Poisson task arrivals per device per cycle.

    Attributes:
        arrival_rate: Mean tasks per device per cycle.
        profiles: Per-category numeric ranges.
        category_weights: Relative category frequencies (uniform if None).
    """

    arrival_rate: float = 0.5
    profiles: dict[TaskCategory, CategoryProfile] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_PROFILES)
    )
    category_weights: dict[TaskCategory, float] | None = None

    def __post_init__(self):
        if self.arrival_rate < 0:
            raise ValueError(
                f"arrival_rate must be non-negative, got {self.arrival_rate}"
            )
        validate_category_weights(self.profiles, self.category_weights)

    def __call__(
        self, device: Device, now_ms: float, rng: np.random.Generator
    ) -> list[Task]:
        n_tasks = int(rng.poisson(self.arrival_rate))
        return [
            device.generate_task(
                rng,
                now_ms,
                profiles=self.profiles,
                category_weights=self.category_weights,
            )
            for _ in range(n_tasks)
        ]
