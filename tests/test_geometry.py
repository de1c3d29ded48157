"""Tests for locations and the latency estimator."""

import numpy as np
import pytest

from edge_offload.topology.geometry import (
    MIN_NETWORK_LATENCY_MS,
    Location,
    euclidean_distance,
    network_latency,
)


class TestLocation:
    """Tests for Location value type."""

    def test_as_array(self):
        loc = Location(3.0, 4.0)
        np.testing.assert_array_equal(loc.as_array(), np.array([3.0, 4.0]))

    def test_frozen(self):
        loc = Location(1.0, 2.0)
        with pytest.raises(AttributeError):
            loc.x = 5.0

    def test_equality(self):
        assert Location(1.0, 2.0) == Location(1.0, 2.0)
        assert Location(1.0, 2.0) != Location(2.0, 1.0)


class TestEuclideanDistance:
    """Tests for the default distance estimator."""

    def test_pythagorean_triple(self):
        assert euclidean_distance(Location(0, 0), Location(3, 4)) == pytest.approx(5.0)

    def test_symmetric(self):
        a, b = Location(-2.5, 7.0), Location(10.0, -1.0)
        assert euclidean_distance(a, b) == pytest.approx(euclidean_distance(b, a))

    def test_zero_for_same_point(self):
        assert euclidean_distance(Location(5, 5), Location(5, 5)) == 0.0

    def test_matches_array_norm(self):
        a, b = Location(1.5, -2.0), Location(-4.0, 6.5)
        expected = np.linalg.norm(a.as_array() - b.as_array())
        assert euclidean_distance(a, b) == pytest.approx(expected)
        assert isinstance(euclidean_distance(a, b), float)


class TestNetworkLatency:
    """Tests for distance-to-latency conversion."""

    @pytest.mark.parametrize("distance", [0.0, 0.3, 1.0])
    def test_floor(self, distance):
        assert network_latency(distance) == MIN_NETWORK_LATENCY_MS

    @pytest.mark.parametrize("distance", [1.5, 5.0, 42.0])
    def test_linear_above_floor(self, distance):
        assert network_latency(distance) == pytest.approx(distance)

    def test_monotonic(self):
        distances = np.linspace(0, 100, 50)
        latencies = [network_latency(d) for d in distances]
        assert all(a <= b for a, b in zip(latencies, latencies[1:]))
