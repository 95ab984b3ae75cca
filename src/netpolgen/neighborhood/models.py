"""
Network neighborhood data models.

A NetworkNeighborhood is written by the runtime sensor, one per workload.
It lists, per container, the ingress and egress connections that were
actually observed. Field names follow the Kubernetes JSON shape so the
documents can be loaded straight from YAML or JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LabelSelectorRequirement:
    """A single matchExpressions entry."""
    key: str
    operator: str  # In, NotIn, Exists, DoesNotExist
    values: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"key": self.key, "operator": self.operator}
        if self.values:
            d["values"] = list(self.values)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LabelSelectorRequirement:
        return cls(
            key=data["key"],
            operator=data["operator"],
            values=list(data.get("values") or []),
        )


@dataclass
class LabelSelector:
    """Kubernetes label selector (matchLabels + matchExpressions)."""
    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: list[LabelSelectorRequirement] = field(default_factory=list)

    def copy(self) -> LabelSelector:
        return LabelSelector(
            match_labels=dict(self.match_labels),
            match_expressions=[
                LabelSelectorRequirement(e.key, e.operator, list(e.values))
                for e in self.match_expressions
            ],
        )

    def canonical_key(self) -> tuple:
        """Structural identity; label order does not matter, expression order does."""
        return (
            tuple(sorted(self.match_labels.items())),
            tuple((e.key, e.operator, tuple(e.values)) for e in self.match_expressions),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.match_labels:
            d["matchLabels"] = dict(self.match_labels)
        if self.match_expressions:
            d["matchExpressions"] = [e.to_dict() for e in self.match_expressions]
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LabelSelector | None:
        if data is None:
            return None
        return cls(
            match_labels=dict(data.get("matchLabels") or {}),
            match_expressions=[
                LabelSelectorRequirement.from_dict(e)
                for e in data.get("matchExpressions") or []
            ],
        )


@dataclass
class NetworkPort:
    """An observed port. Name is `{protocol}-{port}`, e.g. TCP-80."""
    name: str = ""
    protocol: str = "TCP"
    port: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "protocol": self.protocol, "port": self.port}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkPort:
        port = data.get("port")
        return cls(
            name=data.get("name") or "",
            protocol=data.get("protocol") or "TCP",
            port=int(port) if port is not None else None,
        )


@dataclass
class NetworkNeighbor:
    """
    One observed connection, in one direction, for one container.

    Selector-based neighbors describe in-cluster traffic, IP-based ones
    describe external traffic. DNS is advisory and only ever ends up in
    provenance records.
    """
    identifier: str = ""
    type: str = ""  # internal, external
    dns: str = ""
    dns_names: list[str] = field(default_factory=list)
    ports: list[NetworkPort] = field(default_factory=list)
    pod_selector: LabelSelector | None = None
    namespace_selector: LabelSelector | None = None
    ip_address: str = ""

    @property
    def effective_dns(self) -> str:
        """The legacy `dns` field wins; otherwise the first resolved name."""
        if self.dns:
            return self.dns
        return self.dns_names[0] if self.dns_names else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "type": self.type,
            "dns": self.dns,
            "dnsNames": list(self.dns_names),
            "ports": [p.to_dict() for p in self.ports],
            "podSelector": self.pod_selector.to_dict() if self.pod_selector else None,
            "namespaceSelector": (
                self.namespace_selector.to_dict() if self.namespace_selector else None
            ),
            "ipAddress": self.ip_address,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkNeighbor:
        return cls(
            identifier=data.get("identifier", ""),
            type=data.get("type", ""),
            dns=data.get("dns") or "",
            dns_names=list(data.get("dnsNames") or []),
            ports=[NetworkPort.from_dict(p) for p in data.get("ports") or []],
            pod_selector=LabelSelector.from_dict(data.get("podSelector")),
            namespace_selector=LabelSelector.from_dict(data.get("namespaceSelector")),
            ip_address=data.get("ipAddress") or "",
        )


@dataclass
class NetworkNeighborhoodContainer:
    """Observed ingress and egress neighbors of a single container."""
    name: str = ""
    ingress: list[NetworkNeighbor] = field(default_factory=list)
    egress: list[NetworkNeighbor] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "ingress": [n.to_dict() for n in self.ingress],
            "egress": [n.to_dict() for n in self.egress],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkNeighborhoodContainer:
        return cls(
            name=data.get("name", ""),
            ingress=[NetworkNeighbor.from_dict(n) for n in data.get("ingress") or []],
            egress=[NetworkNeighbor.from_dict(n) for n in data.get("egress") or []],
        )


@dataclass
class NetworkNeighborhood:
    """All observed neighbors of one workload, grouped by container."""
    name: str
    namespace: str = ""
    annotations: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: list[LabelSelectorRequirement] = field(default_factory=list)
    containers: list[NetworkNeighborhoodContainer] = field(default_factory=list)
    init_containers: list[NetworkNeighborhoodContainer] = field(default_factory=list)
    ephemeral_containers: list[NetworkNeighborhoodContainer] = field(default_factory=list)

    def container_groups(self) -> list[list[NetworkNeighborhoodContainer]]:
        """Regular, init and ephemeral containers, in that order."""
        return [self.containers, self.init_containers, self.ephemeral_containers]

    def to_dict(self) -> dict[str, Any]:
        spec: dict[str, Any] = {}
        if self.match_labels:
            spec["matchLabels"] = dict(self.match_labels)
        if self.match_expressions:
            spec["matchExpressions"] = [e.to_dict() for e in self.match_expressions]
        spec["containers"] = [c.to_dict() for c in self.containers]
        spec["initContainers"] = [c.to_dict() for c in self.init_containers]
        spec["ephemeralContainers"] = [c.to_dict() for c in self.ephemeral_containers]
        return {
            "kind": "NetworkNeighborhood",
            "metadata": {
                "name": self.name,
                "namespace": self.namespace,
                "annotations": dict(self.annotations),
                "labels": dict(self.labels),
            },
            "spec": spec,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkNeighborhood:
        meta = data.get("metadata") or {}
        spec = data.get("spec") or {}
        if "name" not in meta:
            raise ValueError("network neighborhood is missing metadata.name")

        def containers(key: str) -> list[NetworkNeighborhoodContainer]:
            return [NetworkNeighborhoodContainer.from_dict(c) for c in spec.get(key) or []]

        return cls(
            name=meta["name"],
            namespace=meta.get("namespace", ""),
            annotations=dict(meta.get("annotations") or {}),
            labels=dict(meta.get("labels") or {}),
            match_labels=dict(spec.get("matchLabels") or {}),
            match_expressions=[
                LabelSelectorRequirement.from_dict(e)
                for e in spec.get("matchExpressions") or []
            ],
            containers=containers("containers"),
            init_containers=containers("initContainers"),
            ephemeral_containers=containers("ephemeralContainers"),
        )


def network_neighborhoods_from_document(data: Any) -> list[NetworkNeighborhood]:
    """
    Accept a single NetworkNeighborhood, a NetworkNeighborhoodList (`items`),
    or a plain list of NetworkNeighborhood documents.
    """
    if isinstance(data, dict) and "items" in data:
        data = data["items"] or []
    elif isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"unsupported network neighborhood document: {type(data).__name__}")
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"unsupported network neighborhood item: {type(item).__name__}")
    return [NetworkNeighborhood.from_dict(d) for d in data]
