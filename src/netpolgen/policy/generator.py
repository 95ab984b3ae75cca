"""
Network policy generation.

Compiles a NetworkNeighborhood into a GeneratedNetworkPolicy: collects the
neighbors of every container per direction, translates each into a rule,
drops duplicate rules and policy refs, merges IP-only rules by
port/protocol and assembles the final policy object.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..config import GeneratorConfig, PolicyTypesMode
from ..knownservers.finder import KnownServersResolver
from ..neighborhood.models import LabelSelector, LabelSelectorRequirement, NetworkNeighbor, NetworkNeighborhood
from .errors import MissingWorkloadKindError, NeighborhoodNotReadyError
from .merge import merge_rules_by_ports
from .models import (
    Direction,
    GeneratedNetworkPolicy,
    GeneratedNetworkPolicyList,
    NetworkPolicy,
    NetworkPolicyRule,
    NetworkPolicySpec,
    PolicyRef,
)
from .rules import generate_rule

logger = logging.getLogger(__name__)

STATUS_ANNOTATION = "kubescape.io/status"
STATUS_READY = "ready"
STATUS_COMPLETED = "completed"
KIND_LABEL = "kubescape.io/workload-kind"
NAME_LABEL = "kubescape.io/workload-name"
TEMPLATE_HASH_LABEL = "kubescape.io/instance-template-hash"


def is_available(nn: NetworkNeighborhood) -> bool:
    return nn.annotations.get(STATUS_ANNOTATION) in (STATUS_READY, STATUS_COMPLETED)


def list_network_neighbors(nn: NetworkNeighborhood, direction: Direction) -> list[NetworkNeighbor]:
    """Neighbors of regular, then init, then ephemeral containers."""
    neighbors: list[NetworkNeighbor] = []
    for group in nn.container_groups():
        for container in group:
            if direction is Direction.INGRESS:
                neighbors.extend(container.ingress)
            else:
                neighbors.extend(container.egress)
    return neighbors


def aggregate_rules(
    neighbors: list[NetworkNeighbor],
    known_servers: KnownServersResolver,
) -> tuple[list[NetworkPolicyRule], list[PolicyRef]]:
    """
    Translate neighbors into rules and refs, keeping only the first
    occurrence of each distinct rule and each distinct ref.
    """
    rules: list[NetworkPolicyRule] = []
    refs: list[PolicyRef] = []
    seen_rules: set[tuple] = set()
    seen_refs: set[tuple] = set()

    for neighbor in neighbors:
        rule, policy_refs = generate_rule(neighbor, known_servers)

        key = rule.canonical_key()
        if key not in seen_rules:
            seen_rules.add(key)
            rules.append(rule)

        for ref in policy_refs:
            ref_key = ref.canonical_key()
            if ref_key not in seen_refs:
                seen_refs.add(ref_key)
                refs.append(ref)

    return rules, refs


def generate_network_policy(
    nn: NetworkNeighborhood,
    known_servers: KnownServersResolver,
    timestamp: datetime,
    config: GeneratorConfig | None = None,
) -> GeneratedNetworkPolicy:
    """
    Generate the network policy for a workload.

    Raises NeighborhoodNotReadyError if the neighborhood is not ready or
    completed, and MissingWorkloadKindError if it has no workload-kind
    label. The neighborhood is not modified.
    """
    config = config or GeneratorConfig()

    if not is_available(nn):
        raise NeighborhoodNotReadyError(nn.namespace, nn.name)

    kind = nn.labels.get(KIND_LABEL)
    if kind is None:
        raise MissingWorkloadKindError(nn.namespace, nn.name)

    name = nn.labels.get(NAME_LABEL)
    if name is None:
        logger.debug(
            "nn %s/%s does not have a workload-name label, falling back to nn name",
            nn.namespace, nn.name,
        )
        name = nn.name

    labels = {k: v for k, v in nn.labels.items() if k != TEMPLATE_HASH_LABEL}

    spec = NetworkPolicySpec(
        pod_selector=LabelSelector(
            match_labels=dict(nn.match_labels),
            match_expressions=[
                LabelSelectorRequirement(e.key, e.operator, list(e.values))
                for e in nn.match_expressions
            ],
        ),
    )

    policies_ref: list[PolicyRef] = []
    for direction in (Direction.INGRESS, Direction.EGRESS):
        rules, refs = aggregate_rules(list_network_neighbors(nn, direction), known_servers)
        spec.rules(direction).extend(merge_rules_by_ports(rules))
        policies_ref.extend(refs)

    if config.policy_types is PolicyTypesMode.ALWAYS:
        spec.policy_types = [Direction.INGRESS, Direction.EGRESS]
    else:
        spec.policy_types = [d for d in (Direction.INGRESS, Direction.EGRESS) if spec.rules(d)]

    network_policy = NetworkPolicy(
        name=f"{kind.lower()}-{name}",
        namespace=nn.namespace,
        annotations={"generated-by": config.generated_by},
        labels=dict(labels),
        spec=spec,
    )

    logger.debug(
        "generated policy for %s/%s: %d ingress rules, %d egress rules, %d refs",
        nn.namespace, nn.name, len(spec.ingress), len(spec.egress), len(policies_ref),
    )

    return GeneratedNetworkPolicy(
        name=nn.name,
        namespace=nn.namespace,
        labels=labels,
        creation_timestamp=timestamp,
        spec=network_policy,
        policies_ref=policies_ref,
        api_version=config.api_version,
    )


def generate_network_policies(
    nns: list[NetworkNeighborhood],
    known_servers: KnownServersResolver,
    timestamp: datetime,
    config: GeneratorConfig | None = None,
) -> GeneratedNetworkPolicyList:
    """
    Generate the network policies for a set of neighborhoods.

    Neighborhoods that are not ready or completed yet are skipped; any
    other generation error is raised.
    """
    config = config or GeneratorConfig()
    policies = GeneratedNetworkPolicyList(api_version=config.api_version)
    for nn in nns:
        if not is_available(nn):
            logger.debug("skipping nn %s/%s, not available yet", nn.namespace, nn.name)
            continue
        policies.items.append(generate_network_policy(nn, known_servers, timestamp, config))
    return policies
