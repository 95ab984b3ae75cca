"""Known server registry models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class KnownServerEntry:
    """A registered CIDR block with a human name and a server identity."""
    ip_block: str
    server: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"ipBlock": self.ip_block, "server": self.server, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnownServerEntry:
        return cls(
            ip_block=data.get("ipBlock") or "",
            server=data.get("server") or "",
            name=data.get("name") or "",
        )


@dataclass
class KnownServer:
    """A named group of known server entries."""
    name: str = ""
    entries: list[KnownServerEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "KnownServer",
            "metadata": {"name": self.name},
            "spec": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnownServer:
        meta = data.get("metadata") or {}
        return cls(
            name=meta.get("name", ""),
            entries=[KnownServerEntry.from_dict(e) for e in data.get("spec") or []],
        )


def known_servers_from_document(data: Any) -> list[KnownServer]:
    """
    Accept a single KnownServer, a KnownServerList (`items`), or a plain
    list of KnownServer documents.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return [KnownServer.from_dict(d) for d in data]
    if isinstance(data, dict):
        if "items" in data:
            return [KnownServer.from_dict(d) for d in data["items"] or []]
        return [KnownServer.from_dict(data)]
    raise ValueError(f"unsupported known servers document: {type(data).__name__}")
