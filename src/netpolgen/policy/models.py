"""
Generated network policy data models.

Mirrors the Kubernetes NetworkPolicy shape. Ingress and egress rules share
one type; the direction only decides whether peers serialize as `from` or
`to`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..neighborhood.models import LabelSelector, LabelSelectorRequirement


class Direction(str, Enum):
    INGRESS = "Ingress"
    EGRESS = "Egress"

    @property
    def peers_field(self) -> str:
        return "from" if self is Direction.INGRESS else "to"


@dataclass
class IPBlock:
    cidr: str
    except_: list[str] = field(default_factory=list)

    def canonical_key(self) -> tuple:
        return (self.cidr, tuple(self.except_))

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"cidr": self.cidr}
        if self.except_:
            d["except"] = list(self.except_)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IPBlock:
        return cls(cidr=data["cidr"], except_=list(data.get("except") or []))


@dataclass
class NetworkPolicyPeer:
    """
    A rule peer. Pod and namespace selectors on the same peer mean
    "pods matching X in namespaces matching Y".
    """
    pod_selector: LabelSelector | None = None
    namespace_selector: LabelSelector | None = None
    ip_block: IPBlock | None = None

    @property
    def has_selector(self) -> bool:
        return self.pod_selector is not None or self.namespace_selector is not None

    def canonical_key(self) -> tuple:
        return (
            self.pod_selector.canonical_key() if self.pod_selector else None,
            self.namespace_selector.canonical_key() if self.namespace_selector else None,
            self.ip_block.canonical_key() if self.ip_block else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.pod_selector is not None:
            d["podSelector"] = self.pod_selector.to_dict()
        if self.namespace_selector is not None:
            d["namespaceSelector"] = self.namespace_selector.to_dict()
        if self.ip_block is not None:
            d["ipBlock"] = self.ip_block.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkPolicyPeer:
        ip_block = data.get("ipBlock")
        return cls(
            pod_selector=LabelSelector.from_dict(data.get("podSelector")),
            namespace_selector=LabelSelector.from_dict(data.get("namespaceSelector")),
            ip_block=IPBlock.from_dict(ip_block) if ip_block else None,
        )


@dataclass
class NetworkPolicyPort:
    protocol: str | None = "TCP"
    port: int | None = None
    end_port: int | None = None

    def canonical_key(self) -> tuple:
        return (self.protocol, self.port, self.end_port)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.protocol is not None:
            d["protocol"] = self.protocol
        if self.port is not None:
            d["port"] = self.port
        if self.end_port is not None:
            d["endPort"] = self.end_port
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkPolicyPort:
        return cls(
            protocol=data.get("protocol"),
            port=data.get("port"),
            end_port=data.get("endPort"),
        )


@dataclass
class NetworkPolicyRule:
    """An ingress or egress rule: traffic to/from `peers` on `ports`."""
    ports: list[NetworkPolicyPort] = field(default_factory=list)
    peers: list[NetworkPolicyPeer] = field(default_factory=list)

    @property
    def has_selector(self) -> bool:
        return any(p.has_selector for p in self.peers)

    def canonical_key(self) -> tuple:
        return (
            tuple(p.canonical_key() for p in self.ports),
            tuple(p.canonical_key() for p in self.peers),
        )

    def to_dict(self, direction: Direction) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.ports:
            d["ports"] = [p.to_dict() for p in self.ports]
        if self.peers:
            d[direction.peers_field] = [p.to_dict() for p in self.peers]
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any], direction: Direction) -> NetworkPolicyRule:
        return cls(
            ports=[NetworkPolicyPort.from_dict(p) for p in data.get("ports") or []],
            peers=[
                NetworkPolicyPeer.from_dict(p)
                for p in data.get(direction.peers_field) or []
            ],
        )


@dataclass
class NetworkPolicySpec:
    pod_selector: LabelSelector = field(default_factory=LabelSelector)
    policy_types: list[Direction] = field(default_factory=list)
    ingress: list[NetworkPolicyRule] = field(default_factory=list)
    egress: list[NetworkPolicyRule] = field(default_factory=list)

    def rules(self, direction: Direction) -> list[NetworkPolicyRule]:
        return self.ingress if direction is Direction.INGRESS else self.egress

    def to_dict(self) -> dict[str, Any]:
        return {
            "podSelector": self.pod_selector.to_dict(),
            "policyTypes": [t.value for t in self.policy_types],
            "ingress": [r.to_dict(Direction.INGRESS) for r in self.ingress],
            "egress": [r.to_dict(Direction.EGRESS) for r in self.egress],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkPolicySpec:
        return cls(
            pod_selector=LabelSelector.from_dict(data.get("podSelector") or {}),
            policy_types=[Direction(t) for t in data.get("policyTypes") or []],
            ingress=[
                NetworkPolicyRule.from_dict(r, Direction.INGRESS)
                for r in data.get("ingress") or []
            ],
            egress=[
                NetworkPolicyRule.from_dict(r, Direction.EGRESS)
                for r in data.get("egress") or []
            ],
        )


@dataclass
class NetworkPolicy:
    name: str
    namespace: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    spec: NetworkPolicySpec = field(default_factory=NetworkPolicySpec)
    kind: str = "NetworkPolicy"
    api_version: str = "networking.k8s.io/v1"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "annotations": dict(self.annotations),
                "labels": dict(self.labels),
            },
            "spec": self.spec.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkPolicy:
        meta = data.get("metadata") or {}
        return cls(
            name=meta["name"],
            namespace=meta.get("namespace", ""),
            annotations=dict(meta.get("annotations") or {}),
            labels=dict(meta.get("labels") or {}),
            spec=NetworkPolicySpec.from_dict(data.get("spec") or {}),
            kind=data.get("kind", "NetworkPolicy"),
            api_version=data.get("apiVersion", "networking.k8s.io/v1"),
        )


@dataclass
class PolicyRef:
    """Explains how an observed IP ended up represented in the policy."""
    ip_block: str
    original_ip: str
    dns: str = ""
    name: str = ""
    server: str = ""

    def canonical_key(self) -> tuple:
        return (self.ip_block, self.original_ip, self.dns, self.name, self.server)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ipBlock": self.ip_block,
            "originalIP": self.original_ip,
            "dns": self.dns,
            "name": self.name,
            "server": self.server,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PolicyRef:
        return cls(
            ip_block=data.get("ipBlock", ""),
            original_ip=data.get("originalIP", ""),
            dns=data.get("dns", ""),
            name=data.get("name", ""),
            server=data.get("server", ""),
        )


def format_timestamp(ts: datetime) -> str:
    """RFC 3339, second precision, UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass
class GeneratedNetworkPolicy:
    """A generated NetworkPolicy plus the provenance of its IP blocks."""
    name: str
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    creation_timestamp: datetime | None = None
    spec: NetworkPolicy | None = None
    policies_ref: list[PolicyRef] = field(default_factory=list)
    kind: str = "GeneratedNetworkPolicy"
    api_version: str = "spdx.softwarecomposition.kubescape.io/v1beta1"

    def to_dict(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
        }
        if self.creation_timestamp is not None:
            metadata["creationTimestamp"] = format_timestamp(self.creation_timestamp)
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "metadata": metadata,
            "spec": self.spec.to_dict() if self.spec else {},
            "policiesRef": [r.to_dict() for r in self.policies_ref],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GeneratedNetworkPolicy:
        meta = data.get("metadata") or {}
        ts = meta.get("creationTimestamp")
        spec = data.get("spec")
        return cls(
            name=meta["name"],
            namespace=meta.get("namespace", ""),
            labels=dict(meta.get("labels") or {}),
            creation_timestamp=parse_timestamp(ts) if ts else None,
            spec=NetworkPolicy.from_dict(spec) if spec else None,
            policies_ref=[PolicyRef.from_dict(r) for r in data.get("policiesRef") or []],
            kind=data.get("kind", "GeneratedNetworkPolicy"),
            api_version=data.get("apiVersion", "spdx.softwarecomposition.kubescape.io/v1beta1"),
        )


@dataclass
class GeneratedNetworkPolicyList:
    """Generated policies for a set of neighborhoods, e.g. one namespace."""
    items: list[GeneratedNetworkPolicy] = field(default_factory=list)
    kind: str = "GeneratedNetworkPolicyList"
    api_version: str = "spdx.softwarecomposition.kubescape.io/v1beta1"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "items": [p.to_dict() for p in self.items],
        }


__all__ = [
    "Direction",
    "GeneratedNetworkPolicy",
    "GeneratedNetworkPolicyList",
    "IPBlock",
    "LabelSelector",
    "LabelSelectorRequirement",
    "NetworkPolicy",
    "NetworkPolicyPeer",
    "NetworkPolicyPort",
    "NetworkPolicyRule",
    "NetworkPolicySpec",
    "PolicyRef",
]
