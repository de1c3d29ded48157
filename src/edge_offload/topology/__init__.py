"""Device/node geometry and network latency estimation."""

from edge_offload.topology.geometry import (
    MIN_NETWORK_LATENCY_MS,
    LatencyEstimator,
    Location,
    euclidean_distance,
    network_latency,
)

__all__ = [
    "Location",
    "LatencyEstimator",
    "euclidean_distance",
    "network_latency",
    "MIN_NETWORK_LATENCY_MS",
]
