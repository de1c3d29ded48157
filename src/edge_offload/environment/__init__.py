"""Tasks, devices and compute nodes of the offloading simulation."""

from edge_offload.environment.devices import (
    Device,
    PoissonTaskGenerator,
    TaskGenerator,
    validate_category_weights,
)
from edge_offload.environment.nodes import (
    CapacityLedger,
    ComputeNode,
    EdgeNode,
    RemoteNode,
    Tier,
)
from edge_offload.environment.tasks import (
    DEFAULT_CATEGORY_PROFILES,
    CategoryProfile,
    Task,
    TaskCategory,
    ValueRange,
)

__all__ = [
    "Task",
    "TaskCategory",
    "CategoryProfile",
    "ValueRange",
    "DEFAULT_CATEGORY_PROFILES",
    "Device",
    "TaskGenerator",
    "PoissonTaskGenerator",
    "validate_category_weights",
    "CapacityLedger",
    "EdgeNode",
    "RemoteNode",
    "ComputeNode",
    "Tier",
]
