"""Learning-agent interface: task placement as a Gymnasium environment."""

from edge_offload.agents.offload_env import OffloadEnv

__all__ = ["OffloadEnv"]
