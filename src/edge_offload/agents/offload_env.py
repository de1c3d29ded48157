"""Gymnasium-compatible task placement environment."""

from typing import Any

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from edge_offload.evaluation.scenarios import (
    ScenarioConfig,
    create_scenario_orchestrator,
    get_scenario,
)
from edge_offload.orchestration.orchestrator import Orchestrator, TaskOffer
from edge_offload.placement.outcomes import PlacementResult
from edge_offload.placement.policies import check_eligibility
from edge_offload.topology.geometry import network_latency


class OffloadEnv(gym.Env):
    """Sequential placement of generated tasks onto a scenario's nodes.

    Each step offers one task; the agent picks the node that should run it.
    When every task of the current cycle has been offered, the orchestrator
    advances its nodes and generates the next cycle's tasks.

    Observation Space (3 * n_edge + 2 * has_remote + 1 dims):
        Per edge node:
        - utilization: Committed load / capacity [0, 1]
        - latency_ratio: Estimated latency / task budget, clipped [0, 1]
        - out_of_range: 1.0 if the device is outside the node's radius
        Remote tier (if any):
        - utilization [0, 1]
        - latency_ratio: Access latency / task budget, clipped [0, 1]
        Task:
        - demand: Demand / largest node capacity, clipped [0, 1]

    Action Space:
        Discrete(n_edge + has_remote): edge node index, then the remote tier.

    Reward:
        - Accepted: 1.0 plus up to 0.5 for unused latency budget
        - Rejected (ineligible node): -1.0
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 10}

    def __init__(
        self,
        scenario: ScenarioConfig | None = None,
        max_cycles: int | None = None,
        render_mode: str | None = None,
    ):
        super().__init__()

        self.scenario = scenario or get_scenario("urban_dense")
        self.max_cycles = self.scenario.n_cycles if max_cycles is None else max_cycles
        if self.max_cycles < 1:
            raise ValueError(f"max_cycles must be >= 1, got {self.max_cycles}")
        self.render_mode = render_mode

        self._n_edge = len(self.scenario.edge_nodes)
        self._has_remote = self.scenario.remote_capacity_ghz is not None
        self._node_ids = [spec.node_id for spec in self.scenario.edge_nodes]
        if self._has_remote:
            self._node_ids.append("remote")

        capacities = [spec.capacity_ghz for spec in self.scenario.edge_nodes]
        if self._has_remote:
            capacities.append(self.scenario.remote_capacity_ghz)
        self._max_capacity = max(capacities)

        obs_dim = 3 * self._n_edge + 2 * int(self._has_remote) + 1
        self.observation_space = spaces.Box(
            low=0.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )
        self.action_space = spaces.Discrete(len(self._node_ids))

        # State variables (initialized in reset)
        self._orchestrator: Orchestrator | None = None
        self._offers: list[TaskOffer] = []
        self._offer_index: int = 0
        self._cycle_open: bool = False
        self._episode_reward: float = 0.0
        self._last_result: PlacementResult | None = None

    @property
    def orchestrator(self) -> Orchestrator | None:
        return self._orchestrator

    @property
    def current_offer(self) -> TaskOffer | None:
        if self._offer_index < len(self._offers):
            return self._offers[self._offer_index]
        return None

    def _advance_to_next_offer(self) -> bool:
        """Run cycles until a task is waiting or the cycle limit is hit."""
        orchestrator = self._orchestrator
        while self._offer_index >= len(self._offers):
            if self._cycle_open:
                orchestrator.complete_cycle()
                self._cycle_open = False
            if orchestrator.cycle >= self.max_cycles:
                return False
            self._offers = orchestrator.generate_offers()
            self._offer_index = 0
            self._cycle_open = True
        return True

    def _get_obs(self) -> np.ndarray:
        offer = self.current_offer
        if offer is None:
            return np.zeros(self.observation_space.shape, dtype=np.float32)

        task, device = offer.task, offer.device
        orchestrator = self._orchestrator
        features: list[float] = []

        for node in orchestrator.edge_nodes:
            ledger = node.ledger
            d = orchestrator.distance(device.location, node.location)
            features.append(ledger.load_ghz / ledger.capacity_ghz)
            features.append(network_latency(d) / task.latency_budget_ms)
            features.append(0.0 if d <= node.coverage_radius else 1.0)

        remote = orchestrator.remote_node
        if remote is not None:
            features.append(remote.ledger.load_ghz / remote.ledger.capacity_ghz)
            features.append(remote.access_latency_ms / task.latency_budget_ms)

        features.append(task.demand_ghz / self._max_capacity)

        obs = np.array(features, dtype=np.float32)
        return np.clip(obs, 0.0, 1.0)

    def _get_info(self) -> dict[str, Any]:
        orchestrator = self._orchestrator
        info: dict[str, Any] = {
            "cycle": orchestrator.cycle,
            "clock_ms": orchestrator.clock_ms,
            "episode_reward": self._episode_reward,
            "pending_offers": len(self._offers) - self._offer_index,
        }
        if self._last_result is not None:
            info["accepted"] = self._last_result.accepted
        return info

    def action_mask(self) -> np.ndarray:
        """Boolean mask of nodes that can currently take the offered task."""
        mask = np.zeros(len(self._node_ids), dtype=bool)
        offer = self.current_offer
        if offer is None:
            return mask
        for i, node_id in enumerate(self._node_ids):
            node = self._orchestrator.get_node(node_id)
            reason = check_eligibility(
                offer.device, offer.task, node, self._orchestrator.distance
            )
            mask[i] = reason is None
        return mask

    def reset(
        self, seed: int | None = None, options: dict | None = None
    ) -> tuple[np.ndarray, dict]:
        """Build a fresh orchestrator and move to the first offered task."""
        super().reset(seed=seed)

        run_seed = int(self.np_random.integers(0, 2**31 - 1))
        self._orchestrator = create_scenario_orchestrator(self.scenario, seed=run_seed)
        self._offers = []
        self._offer_index = 0
        self._cycle_open = False
        self._episode_reward = 0.0
        self._last_result = None

        self._advance_to_next_offer()
        return self._get_obs(), self._get_info()

    def _reward(self, offer: TaskOffer, result: PlacementResult) -> float:
        if not result.accepted:
            return -1.0
        headroom = 1.0 - result.network_latency_ms / offer.task.latency_budget_ms
        return 1.0 + 0.5 * max(0.0, headroom)

    def step(self, action: int) -> tuple[np.ndarray, float, bool, bool, dict]:
        """Place the offered task on the chosen node.

        Args:
            action: Index into the edge nodes, with the remote tier last.

        Returns:
            (observation, reward, terminated, truncated, info)
        """
        if self._orchestrator is None:
            raise RuntimeError("Environment not reset. Call reset() first.")

        offer = self.current_offer
        if offer is None:
            # Cycle limit already reached
            return self._get_obs(), 0.0, False, True, self._get_info()

        node_id = self._node_ids[int(action)]
        result = self._orchestrator.place_offer(offer, node_id)
        reward = self._reward(offer, result)
        self._episode_reward += reward
        self._last_result = result
        self._offer_index += 1

        truncated = not self._advance_to_next_offer()
        obs = self._get_obs()
        info = self._get_info()
        if truncated:
            info["summary"] = self._orchestrator.summary().to_dict()

        if self.render_mode == "human":
            self.render()

        return obs, reward, False, truncated, info

    def render(self) -> str | None:
        """Render current state."""
        if self.render_mode not in ("ansi", "human") or self._orchestrator is None:
            return None

        orchestrator = self._orchestrator
        offer = self.current_offer
        lines = [
            f"=== Cycle {orchestrator.cycle} | Time: {orchestrator.clock_ms:.0f}ms ===",
            f"Offers left: {len(self._offers) - self._offer_index} | "
            f"Reward: {self._episode_reward:.1f}",
        ]
        if offer is not None:
            lines.append(
                f"Task {offer.task.task_id}: {offer.task.category.name} "
                f"{offer.task.demand_ghz:.2f} GHz, budget {offer.task.latency_budget_ms:.1f}ms"
            )
        lines.append(
            "Load: "
            + " ".join(f"{n.node_id}={n.ledger.utilization():.0f}%" for n in orchestrator.nodes)
        )
        output = "\n".join(lines)

        if self.render_mode == "human":
            print(output)
            return None
        return output

    def close(self) -> None:
        """Clean up resources."""
        self._orchestrator = None
