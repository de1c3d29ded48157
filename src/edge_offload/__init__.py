"""Tiered Edge Task-Offloading Orchestrator.

Places latency-sensitive tasks from located devices onto capacity-bounded
edge hosts or a remote tier, and simulates their lifecycle cycle by cycle.
"""

__version__ = "0.1.0"
