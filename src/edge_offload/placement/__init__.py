"""Placement policies and their typed outcomes."""

from edge_offload.placement.outcomes import (
    Assigned,
    PlacementResult,
    Rejected,
    RejectionReason,
)
from edge_offload.placement.policies import (
    BasePlacementPolicy,
    Candidate,
    LeastLoadedEdgePolicy,
    NearestEdgePolicy,
    RandomEdgePolicy,
    RemoteFirstPolicy,
    check_eligibility,
    diagnose_rejection,
    eligible_edge_candidates,
    remote_candidate,
    select_node,
)

__all__ = [
    "Assigned",
    "Rejected",
    "RejectionReason",
    "PlacementResult",
    "BasePlacementPolicy",
    "Candidate",
    "NearestEdgePolicy",
    "LeastLoadedEdgePolicy",
    "RandomEdgePolicy",
    "RemoteFirstPolicy",
    "select_node",
    "check_eligibility",
    "diagnose_rejection",
    "eligible_edge_candidates",
    "remote_candidate",
]
