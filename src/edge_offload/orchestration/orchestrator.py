"""Cycle-driven orchestrator owning devices, nodes and run statistics."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from edge_offload.environment.devices import Device, PoissonTaskGenerator, TaskGenerator
from edge_offload.environment.nodes import ComputeNode, EdgeNode, RemoteNode, Tier
from edge_offload.environment.tasks import Task
from edge_offload.orchestration.reports import (
    AggregateReport,
    CompletionRecord,
    CycleReport,
    latency_percentiles,
)
from edge_offload.placement.outcomes import (
    Assigned,
    PlacementResult,
    Rejected,
    RejectionReason,
)
from edge_offload.placement.policies import (
    BasePlacementPolicy,
    NearestEdgePolicy,
    check_eligibility,
    diagnose_rejection,
)
from edge_offload.topology.geometry import (
    LatencyEstimator,
    euclidean_distance,
    network_latency,
)

logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Configuration for the simulation clock and cycle behaviour."""

    cycle_duration_ms: float = 100.0  # Simulated time per cycle
    processing_scale_ms: float = 10.0  # ms of processing per unit demand/capacity
    active_device_fraction: float = 1.0  # Share of devices generating each cycle
    max_retries: int = 0  # Re-offers for a rejected task before it is dropped
    max_workers: int = 1  # >1 advances nodes on a thread pool

    def __post_init__(self):
        if self.cycle_duration_ms <= 0:
            raise ValueError(
                f"cycle_duration_ms must be positive, got {self.cycle_duration_ms}"
            )
        if self.processing_scale_ms <= 0:
            raise ValueError(
                f"processing_scale_ms must be positive, got {self.processing_scale_ms}"
            )
        if not 0 < self.active_device_fraction <= 1:
            raise ValueError(
                "active_device_fraction must be in (0, 1], "
                f"got {self.active_device_fraction}"
            )
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass
class TaskOffer:
    """A task waiting to be placed, with the device it came from."""

    task: Task
    device: Device
    attempts: int = 0


class Orchestrator:
    """Places device tasks onto edge/remote nodes and drives the clock.

    Each cycle runs four ordered phases with no interleaving:
        Generate: active devices produce tasks (plus any retry backlog)
        Place:    the policy selects a node; the node admits under its lock
        Advance:  every node processes all of its pending tasks
        Report:   utilization, completions by tier, latency statistics

    Placement failures are returned as Rejected results and counted, never
    raised. The orchestrator owns its registries; nothing is shared between
    instances.
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        policy: BasePlacementPolicy | None = None,
        task_generator: TaskGenerator | None = None,
        distance: LatencyEstimator | None = None,
        seed: int | None = None,
    ):
        self.config = config or OrchestratorConfig()
        if policy is not None and distance is not None and policy.distance is not distance:
            raise ValueError(
                f"{policy.name} uses a different latency estimator than the "
                "orchestrator; pass the estimator to the policy instead"
            )
        if distance is None:
            distance = policy.distance if policy is not None else euclidean_distance
        self.distance = distance
        self.policy = policy or NearestEdgePolicy(distance)
        self.task_generator = task_generator or PoissonTaskGenerator()
        self._rng = np.random.default_rng(seed)

        # Registries
        self._devices: dict[str, Device] = {}
        self._edge_nodes: dict[str, EdgeNode] = {}
        self._remote_node: RemoteNode | None = None

        # Clock
        self._clock_ms: float = 0.0
        self._cycle: int = 0

        # Per-cycle counters (reset in complete_cycle)
        self._cycle_generated: int = 0
        self._cycle_placed: int = 0
        self._cycle_rejections: dict[str, int] = {}
        self._retry_queue: list[TaskOffer] = []

        # Cumulative statistics
        self._records: list[CompletionRecord] = []
        self._latency_sum: float = 0.0
        self._tasks_submitted: int = 0
        self._tasks_placed: int = 0
        self._tasks_rejected: int = 0
        self._tasks_dropped: int = 0
        self._rejections: dict[str, int] = {}
        self._utilization_history: dict[str, list[float]] = {}

    # ------------------------------------------------------------------
    # Registries

    def register_device(self, device: Device) -> None:
        if device.device_id in self._devices:
            raise ValueError(f"Device {device.device_id} already registered")
        self._devices[device.device_id] = device

    def register_node(self, node: ComputeNode) -> None:
        if not isinstance(node, (EdgeNode, RemoteNode)):
            raise TypeError(f"Unsupported node type: {type(node).__name__}")
        if node.node_id in self._edge_nodes or (
            self._remote_node is not None and self._remote_node.node_id == node.node_id
        ):
            raise ValueError(f"Node {node.node_id} already registered")

        if isinstance(node, EdgeNode):
            self._edge_nodes[node.node_id] = node
        else:
            if self._remote_node is not None:
                raise ValueError(
                    f"Remote tier already registered as {self._remote_node.node_id}"
                )
            self._remote_node = node
        self._utilization_history[node.node_id] = []

    @property
    def devices(self) -> list[Device]:
        return list(self._devices.values())

    @property
    def edge_nodes(self) -> list[EdgeNode]:
        return list(self._edge_nodes.values())

    @property
    def remote_node(self) -> RemoteNode | None:
        return self._remote_node

    @property
    def nodes(self) -> list[ComputeNode]:
        nodes: list[ComputeNode] = list(self._edge_nodes.values())
        if self._remote_node is not None:
            nodes.append(self._remote_node)
        return nodes

    def get_device(self, device_id: str) -> Device:
        if device_id not in self._devices:
            raise KeyError(f"Unknown device '{device_id}'")
        return self._devices[device_id]

    def get_node(self, node_id: str) -> ComputeNode:
        if node_id in self._edge_nodes:
            return self._edge_nodes[node_id]
        if self._remote_node is not None and self._remote_node.node_id == node_id:
            return self._remote_node
        available = ", ".join(n.node_id for n in self.nodes)
        raise KeyError(f"Unknown node '{node_id}'. Available: {available}")

    @property
    def clock_ms(self) -> float:
        return self._clock_ms

    @property
    def cycle(self) -> int:
        return self._cycle

    @property
    def records(self) -> list[CompletionRecord]:
        return list(self._records)

    # ------------------------------------------------------------------
    # Placement

    def submit_task(self, task: Task, device: Device) -> PlacementResult:
        """Place a task with the configured policy.

        The policy reads node state; the chosen node then re-checks capacity
        inside its own lock before committing, so a stale selection can only
        turn into a CAPACITY_EXCEEDED rejection, never an overflow.
        """
        self._validate_submission(task, device)
        candidate = self.policy.select(
            device, task, self._edge_nodes.values(), self._remote_node
        )
        if candidate is None:
            reason = diagnose_rejection(
                device, task, self._edge_nodes.values(), self._remote_node, self.distance
            )
            return self._reject(task, reason)
        return self._admit(task, candidate.node, candidate.network_latency_ms)

    def submit_task_to(self, task: Task, device: Device, node_id: str) -> PlacementResult:
        """Place a task on a specific node, enforcing the same eligibility rules."""
        self._validate_submission(task, device)
        node = self.get_node(node_id)
        reason = check_eligibility(device, task, node, self.distance)
        if reason is not None:
            return self._reject(task, reason)

        if isinstance(node, EdgeNode):
            latency = network_latency(self.distance(device.location, node.location))
        else:
            latency = node.access_latency_ms
        return self._admit(task, node, latency)

    def place_offer(self, offer: TaskOffer, node_id: str | None = None) -> PlacementResult:
        """Submit an offer and requeue or drop it on rejection."""
        if node_id is None:
            result = self.submit_task(offer.task, offer.device)
        else:
            result = self.submit_task_to(offer.task, offer.device, node_id)

        if not result.accepted:
            if offer.attempts < self.config.max_retries:
                self._retry_queue.append(
                    TaskOffer(offer.task, offer.device, offer.attempts + 1)
                )
            else:
                self._tasks_dropped += 1
        return result

    def _validate_submission(self, task: Task, device: Device) -> None:
        if task.is_assigned:
            raise ValueError(f"Task {task.task_id} is already assigned to {task.assigned_node}")
        if task.device_id != device.device_id:
            raise ValueError(
                f"Task {task.task_id} originates from {task.device_id}, "
                f"not {device.device_id}"
            )
        self._tasks_submitted += 1

    def _admit(self, task: Task, node: ComputeNode, latency_ms: float) -> PlacementResult:
        if not node.ledger.admit(task, latency_ms):
            return self._reject(task, RejectionReason.CAPACITY_EXCEEDED)

        self._tasks_placed += 1
        self._cycle_placed += 1
        logger.debug(
            "Placed %s on %s (%s, %.1f ms)", task.task_id, node.node_id, node.tier.value, latency_ms
        )
        return Assigned(node_id=node.node_id, tier=node.tier, network_latency_ms=latency_ms)

    def _reject(self, task: Task, reason: RejectionReason) -> Rejected:
        self._tasks_rejected += 1
        self._rejections[reason.value] = self._rejections.get(reason.value, 0) + 1
        self._cycle_rejections[reason.value] = self._cycle_rejections.get(reason.value, 0) + 1
        logger.debug("Rejected %s: %s", task.task_id, reason.value)
        return Rejected(reason)

    # ------------------------------------------------------------------
    # Cycle phases

    def generate_offers(self) -> list[TaskOffer]:
        """Generate phase: retry backlog first, then new tasks from active devices."""
        offers, self._retry_queue = self._retry_queue, []

        fraction = self.config.active_device_fraction
        for device in self._devices.values():
            if fraction < 1.0 and self._rng.random() >= fraction:
                continue
            for task in self.task_generator(device, self._clock_ms, self._rng):
                offers.append(TaskOffer(task, device))
                self._cycle_generated += 1
        return offers

    def complete_cycle(self) -> CycleReport:
        """Advance and Report phases, then tick the clock."""
        utilization = {}
        for node in self.nodes:
            u = node.ledger.utilization()
            utilization[node.node_id] = u
            self._utilization_history[node.node_id].append(u)

        completed = self._advance_nodes()

        cycle_latency = 0.0
        completed_by_tier = {tier.value: 0 for tier in Tier}
        for node, tasks in completed:
            for task in tasks:
                record = CompletionRecord.from_task(task, node.tier.value)
                self._records.append(record)
                self._latency_sum += record.latency_ms
                cycle_latency += record.latency_ms
                completed_by_tier[node.tier.value] += 1

        n_completed = sum(completed_by_tier.values())
        report = CycleReport(
            cycle=self._cycle,
            clock_ms=self._clock_ms,
            tasks_generated=self._cycle_generated,
            tasks_placed=self._cycle_placed,
            tasks_rejected=sum(self._cycle_rejections.values()),
            rejections_by_reason=dict(self._cycle_rejections),
            completed_by_tier=completed_by_tier,
            node_utilization=utilization,
            mean_latency_ms=cycle_latency / n_completed if n_completed else 0.0,
            cumulative_mean_latency_ms=self._mean_latency(),
        )
        logger.info(
            "Cycle %d: generated=%d placed=%d rejected=%d completed=%d mean_latency=%.2fms",
            report.cycle,
            report.tasks_generated,
            report.tasks_placed,
            report.tasks_rejected,
            n_completed,
            report.cumulative_mean_latency_ms,
        )

        self._clock_ms += self.config.cycle_duration_ms
        self._cycle += 1
        self._cycle_generated = 0
        self._cycle_placed = 0
        self._cycle_rejections = {}
        return report

    def _advance_nodes(self) -> list[tuple[ComputeNode, list[Task]]]:
        nodes = self.nodes
        now = self._clock_ms
        scale = self.config.processing_scale_ms

        if self.config.max_workers > 1 and len(nodes) > 1:
            # Each node's ledger serializes its own mutations
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                finished = list(pool.map(lambda n: n.ledger.advance(now, scale), nodes))
        else:
            finished = [n.ledger.advance(now, scale) for n in nodes]
        return list(zip(nodes, finished))

    def run_cycle(self) -> CycleReport:
        """Run one full Generate -> Place -> Advance -> Report cycle."""
        for offer in self.generate_offers():
            self.place_offer(offer)
        return self.complete_cycle()

    def run(self, n_cycles: int) -> list[CycleReport]:
        if n_cycles < 0:
            raise ValueError(f"n_cycles must be non-negative, got {n_cycles}")
        return [self.run_cycle() for _ in range(n_cycles)]

    # ------------------------------------------------------------------
    # Reporting

    def _mean_latency(self) -> float:
        if not self._records:
            return 0.0
        return self._latency_sum / len(self._records)

    def summary(self) -> AggregateReport:
        """Aggregate statistics over every completed task so far."""
        utilization = {}
        for node in self.nodes:
            history = self._utilization_history[node.node_id]
            utilization[node.node_id] = (
                float(np.mean(history)) if history else node.ledger.utilization()
            )

        completed_by_tier = {tier.value: 0 for tier in Tier}
        for record in self._records:
            completed_by_tier[record.tier] += 1

        if self._records:
            mean_network = float(np.mean([r.network_latency_ms for r in self._records]))
            deadline_rate = sum(r.deadline_met for r in self._records) / len(self._records)
        else:
            mean_network = 0.0
            deadline_rate = 0.0

        return AggregateReport(
            cycles=self._cycle,
            node_utilization=utilization,
            completed_by_tier=completed_by_tier,
            mean_latency_ms=self._mean_latency(),
            tasks_submitted=self._tasks_submitted,
            tasks_placed=self._tasks_placed,
            tasks_rejected=self._tasks_rejected,
            tasks_dropped=self._tasks_dropped,
            rejections_by_reason=dict(self._rejections),
            mean_network_latency_ms=mean_network,
            deadline_met_rate=deadline_rate,
            latency_percentiles=latency_percentiles(self._records),
            node_peak_utilization={
                node.node_id: node.ledger.peak_utilization() for node in self.nodes
            },
            node_processed_demand_ghz={
                node.node_id: node.ledger.processed_demand_ghz for node in self.nodes
            },
        )
