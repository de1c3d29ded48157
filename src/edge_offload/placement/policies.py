"""Placement policies deciding which node executes a task.

The reference policy (NearestEdgePolicy / select_node) prefers the edge tier:
among edge nodes that cover the device, have spare capacity and meet the
task's latency budget it picks the lowest estimated latency, breaking ties on
node id. Only when no edge node qualifies does it fall back to the remote
tier. The other policies are baselines for comparison; all of them choose
among the same eligible candidates, so coverage, capacity and budget are
respected no matter which one runs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from edge_offload.environment.devices import Device
from edge_offload.environment.nodes import ComputeNode, EdgeNode, RemoteNode
from edge_offload.environment.tasks import Task
from edge_offload.placement.outcomes import RejectionReason
from edge_offload.topology.geometry import (
    LatencyEstimator,
    euclidean_distance,
    network_latency,
)


@dataclass(frozen=True)
class Candidate:
    """An eligible node together with its estimated access latency."""

    node: ComputeNode
    network_latency_ms: float

    @property
    def node_id(self) -> str:
        return self.node.node_id


def eligible_edge_candidates(
    device: Device,
    task: Task,
    edge_nodes: Iterable[EdgeNode],
    distance: LatencyEstimator = euclidean_distance,
) -> list[Candidate]:
    """Edge nodes that cover the device, fit the demand and meet the budget."""
    candidates = []
    for node in edge_nodes:
        d = distance(device.location, node.location)
        if d > node.coverage_radius:
            continue
        if not node.ledger.can_admit(task):
            continue
        latency = network_latency(d)
        if latency > task.latency_budget_ms:
            continue
        candidates.append(Candidate(node, latency))
    return candidates


def remote_candidate(task: Task, remote_node: RemoteNode | None) -> Candidate | None:
    """The remote tier as a candidate, if it meets budget and capacity."""
    if remote_node is None:
        return None
    if remote_node.access_latency_ms > task.latency_budget_ms:
        return None
    if not remote_node.ledger.can_admit(task):
        return None
    return Candidate(remote_node, remote_node.access_latency_ms)


def nearest(candidates: list[Candidate]) -> Candidate:
    """Minimum-latency candidate; ties go to the smallest node id."""
    return min(candidates, key=lambda c: (c.network_latency_ms, c.node_id))


def select_node(
    device: Device,
    task: Task,
    edge_nodes: Iterable[EdgeNode],
    remote_node: RemoteNode | None,
    distance: LatencyEstimator = euclidean_distance,
) -> ComputeNode | None:
    """Pick the node a task should run on, or None if it is unplaceable."""
    candidate = NearestEdgePolicy(distance).select(device, task, edge_nodes, remote_node)
    return candidate.node if candidate is not None else None


def check_eligibility(
    device: Device,
    task: Task,
    node: ComputeNode,
    distance: LatencyEstimator = euclidean_distance,
) -> RejectionReason | None:
    """Why `node` cannot take `task`, or None if it can."""
    if isinstance(node, EdgeNode):
        d = distance(device.location, node.location)
        if d > node.coverage_radius:
            return RejectionReason.NO_COVERAGE
        latency = network_latency(d)
    else:
        latency = node.access_latency_ms

    if latency > task.latency_budget_ms:
        return RejectionReason.LATENCY_BUDGET_EXCEEDED
    if not node.ledger.can_admit(task):
        return RejectionReason.CAPACITY_EXCEEDED
    return None


def diagnose_rejection(
    device: Device,
    task: Task,
    edge_nodes: Iterable[EdgeNode],
    remote_node: RemoteNode | None,
    distance: LatencyEstimator = euclidean_distance,
) -> RejectionReason:
    """Classify why no node accepted a task.

    NO_COVERAGE when nothing can reach the device at all. CAPACITY_EXCEEDED
    when some reachable node would meet the latency budget but is full.
    LATENCY_BUDGET_EXCEEDED otherwise.
    """
    reachable: list[ComputeNode] = [
        n for n in edge_nodes if distance(device.location, n.location) <= n.coverage_radius
    ]
    if remote_node is not None:
        reachable.append(remote_node)
    if not reachable:
        return RejectionReason.NO_COVERAGE

    reasons = [check_eligibility(device, task, n, distance) for n in reachable]
    if RejectionReason.CAPACITY_EXCEEDED in reasons:
        return RejectionReason.CAPACITY_EXCEEDED
    return RejectionReason.LATENCY_BUDGET_EXCEEDED


class BasePlacementPolicy(ABC):
    """Abstract base class for placement policies.

    Subclasses only decide which eligible edge candidate wins; eligibility
    itself is computed here so every policy honours coverage, capacity and
    latency budget identically.
    """

    def __init__(self, distance: LatencyEstimator | None = None):
        self.distance = distance or euclidean_distance

    @abstractmethod
    def choose_edge(self, task: Task, candidates: list[Candidate]) -> Candidate:
        """Pick one of a non-empty list of eligible edge candidates."""

    def select(
        self,
        device: Device,
        task: Task,
        edge_nodes: Iterable[EdgeNode],
        remote_node: RemoteNode | None,
    ) -> Candidate | None:
        """Return the chosen candidate, or None when nothing is eligible."""
        candidates = eligible_edge_candidates(device, task, edge_nodes, self.distance)
        if candidates:
            return self.choose_edge(task, candidates)
        return remote_candidate(task, remote_node)

    def reset(self) -> None:
        """Reset any internal state (e.g., random streams)."""

    @property
    def name(self) -> str:
        return self.__class__.__name__


class NearestEdgePolicy(BasePlacementPolicy):
    """Edge-first, minimum estimated latency, ties broken by node id."""

    def choose_edge(self, task: Task, candidates: list[Candidate]) -> Candidate:
        return nearest(candidates)


class LeastLoadedEdgePolicy(BasePlacementPolicy):
    """Edge-first, lowest post-admission utilization.

    Spreads load across overlapping cells instead of piling onto the closest
    host. Latency then node id break ties.
    """

    def choose_edge(self, task: Task, candidates: list[Candidate]) -> Candidate:
        def projected(c: Candidate) -> float:
            ledger = c.node.ledger
            return (ledger.load_ghz + task.demand_ghz) / ledger.capacity_ghz

        return min(candidates, key=lambda c: (projected(c), c.network_latency_ms, c.node_id))


class RandomEdgePolicy(BasePlacementPolicy):
    """Edge-first, uniform choice among eligible edge nodes.

    Lower bound for edge selection quality.
    """

    def __init__(self, distance: LatencyEstimator | None = None, seed: int | None = None):
        super().__init__(distance)
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    def reset(self) -> None:
        self._rng = np.random.default_rng(self._seed)

    def choose_edge(self, task: Task, candidates: list[Candidate]) -> Candidate:
        ordered = sorted(candidates, key=lambda c: c.node_id)
        return ordered[int(self._rng.integers(0, len(ordered)))]


class RemoteFirstPolicy(BasePlacementPolicy):
    """Remote tier whenever it meets the budget, nearest edge otherwise.

    Models a cloud-centric deployment that only uses edge hosts for tasks
    the remote tier cannot serve in time.
    """

    def choose_edge(self, task: Task, candidates: list[Candidate]) -> Candidate:
        return nearest(candidates)

    def select(
        self,
        device: Device,
        task: Task,
        edge_nodes: Iterable[EdgeNode],
        remote_node: RemoteNode | None,
    ) -> Candidate | None:
        remote = remote_candidate(task, remote_node)
        if remote is not None:
            return remote
        candidates = eligible_edge_candidates(device, task, edge_nodes, self.distance)
        return self.choose_edge(task, candidates) if candidates else None
