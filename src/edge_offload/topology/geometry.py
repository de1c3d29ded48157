"""Planar locations and the pluggable distance/latency estimator."""

from dataclasses import dataclass
from typing import Protocol

import numpy as np


# Floor applied to every distance-derived latency estimate (ms).
# Co-located device and node still pay one radio hop.
MIN_NETWORK_LATENCY_MS = 1.0


@dataclass(frozen=True)
class Location:
    """A fixed point on the simulation plane.

    Attributes:
        x: Horizontal coordinate (distance units, 1 unit ~ 1 ms of latency)
        y: Vertical coordinate
    """
    x: float
    y: float

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


class LatencyEstimator(Protocol):
    """Protocol for distance estimators used by coverage and latency checks.

    Any replacement must be monotonic in the sense the placement policy
    relies on: a smaller return value means a lower-latency path.
    """

    def __call__(self, a: Location, b: Location) -> float:
        """Return the distance (or latency proxy) between two locations."""
        ...


def euclidean_distance(a: Location, b: Location) -> float:
    """Straight-line distance between two locations."""
    return float(np.linalg.norm(a.as_array() - b.as_array()))


def network_latency(distance: float) -> float:
    """Estimated network latency (ms) for a device-to-node distance."""
    return max(MIN_NETWORK_LATENCY_MS, distance)
