"""
Port/protocol merging of IP-only rules.

Rules whose peers are all IP blocks are regrouped so that each
(port, protocol) pair appears in exactly one rule carrying every IP block
observed on it. Selector rules are kept as they are.
"""

from __future__ import annotations

from typing import NamedTuple

from .models import NetworkPolicyPeer, NetworkPolicyPort, NetworkPolicyRule

DEFAULT_PROTOCOL = "TCP"


class PortProtocolKey(NamedTuple):
    port: int
    protocol: str

    @classmethod
    def from_port(cls, port: NetworkPolicyPort) -> PortProtocolKey:
        """Missing port is 0, missing protocol is TCP."""
        return cls(
            port=port.port if port.port is not None else 0,
            protocol=port.protocol if port.protocol is not None else DEFAULT_PROTOCOL,
        )


def sort_ip_peers(peers: list[NetworkPolicyPeer]) -> list[NetworkPolicyPeer]:
    """Sort IP block peers by CIDR string; other peers keep their position."""
    slots = [i for i, p in enumerate(peers) if p.ip_block is not None]
    ordered = sorted((peers[i] for i in slots), key=lambda p: p.ip_block.cidr)
    result = list(peers)
    for slot, peer in zip(slots, ordered):
        result[slot] = peer
    return result


def merge_rules_by_ports(rules: list[NetworkPolicyRule]) -> list[NetworkPolicyRule]:
    """
    Merge selector-free rules by (port, protocol).

    Output is the merged rules sorted by port then protocol, followed by
    the selector rules in their original order.
    """
    merged: dict[PortProtocolKey, list[NetworkPolicyPeer]] = {}
    non_merged: list[NetworkPolicyRule] = []

    for rule in rules:
        if rule.has_selector:
            non_merged.append(rule)
            continue

        for port in rule.ports:
            key = PortProtocolKey.from_port(port)
            peers = merged.setdefault(key, [])
            peers.extend(p for p in rule.peers if p.ip_block is not None)

    result: list[NetworkPolicyRule] = []
    for key in sorted(merged):
        result.append(NetworkPolicyRule(
            ports=[NetworkPolicyPort(protocol=key.protocol, port=key.port)],
            peers=sort_ip_peers(merged[key]),
        ))

    result.extend(non_merged)
    return result
