"""Network policy compiler for NetPolGen."""

from .errors import MissingWorkloadKindError, NeighborhoodNotReadyError, PolicyGenerationError
from .generator import generate_network_policies, generate_network_policy, is_available
from .merge import merge_rules_by_ports
from .models import (
    Direction,
    GeneratedNetworkPolicy,
    GeneratedNetworkPolicyList,
    NetworkPolicy,
    PolicyRef,
)
from .rules import generate_rule

__all__ = [
    "Direction",
    "GeneratedNetworkPolicy",
    "GeneratedNetworkPolicyList",
    "MissingWorkloadKindError",
    "NeighborhoodNotReadyError",
    "NetworkPolicy",
    "PolicyGenerationError",
    "PolicyRef",
    "generate_network_policies",
    "generate_network_policy",
    "generate_rule",
    "is_available",
    "merge_rules_by_ports",
]
