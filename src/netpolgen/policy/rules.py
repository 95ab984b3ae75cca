"""
Neighbor to rule translation.

Turns one observed network neighbor into one policy rule plus the
provenance records for any IP address it carries.
"""

from __future__ import annotations

import logging

from ..knownservers.finder import KnownServersResolver
from ..neighborhood.models import LabelSelector, NetworkNeighbor
from .labels import remove_labels
from .models import IPBlock, NetworkPolicyPeer, NetworkPolicyPort, NetworkPolicyRule, PolicyRef

logger = logging.getLogger(__name__)


def single_ip_block(ip_address: str) -> IPBlock:
    # /32 for every address family, IPv6 included, as in already deployed policies.
    return IPBlock(cidr=f"{ip_address}/32")


def _sanitized(selector: LabelSelector) -> LabelSelector:
    cleaned = selector.copy()
    cleaned.match_labels = remove_labels(cleaned.match_labels)
    return cleaned


def generate_rule(
    neighbor: NetworkNeighbor,
    known_servers: KnownServersResolver,
) -> tuple[NetworkPolicyRule, list[PolicyRef]]:
    """
    Translate a neighbor into a rule and its policy refs.

    Selector neighbors become a single selector peer. IP neighbors become
    one peer per matching known server block, or a /32 host block when the
    IP is not registered. The neighbor itself is left untouched.
    """
    rule = NetworkPolicyRule()
    refs: list[PolicyRef] = []

    if neighbor.pod_selector is not None:
        rule.peers.append(NetworkPolicyPeer(pod_selector=_sanitized(neighbor.pod_selector)))

    if neighbor.namespace_selector is not None:
        # namespace selector goes together with the pod selector
        if rule.peers:
            rule.peers[0].namespace_selector = neighbor.namespace_selector.copy()
        else:
            rule.peers.append(
                NetworkPolicyPeer(namespace_selector=neighbor.namespace_selector.copy())
            )

    if neighbor.ip_address:
        dns = neighbor.effective_dns
        entries, found = known_servers.contains(neighbor.ip_address)
        if found:
            for entry in entries:
                rule.peers.append(NetworkPolicyPeer(ip_block=IPBlock(cidr=entry.ip_block)))
                refs.append(PolicyRef(
                    ip_block=entry.ip_block,
                    original_ip=neighbor.ip_address,
                    dns=dns,
                    name=entry.name,
                    server=entry.server,
                ))
        else:
            logger.debug("%s is not a known server, using a host block", neighbor.ip_address)
            ip_block = single_ip_block(neighbor.ip_address)
            rule.peers.append(NetworkPolicyPeer(ip_block=ip_block))
            if dns:
                refs.append(PolicyRef(
                    ip_block=ip_block.cidr,
                    original_ip=neighbor.ip_address,
                    dns=dns,
                ))

    for network_port in neighbor.ports:
        rule.ports.append(NetworkPolicyPort(
            protocol=(network_port.protocol or "TCP").upper(),
            port=network_port.port,
        ))

    return rule, refs
