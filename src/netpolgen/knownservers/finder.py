"""
Known server lookup.

Answers "which registered CIDR blocks contain this IP?". The index keeps
network addresses and masks in numpy arrays per IP version so a lookup is
one vectorized comparison over the whole registry. IPv6 values are split
into two 64-bit halves.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Any, Protocol, Union

import numpy as np

from .models import KnownServer, KnownServerEntry

logger = logging.getLogger(__name__)

_MASK64 = (1 << 64) - 1

IPLike = Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address, None]


class KnownServersResolver(Protocol):
    """Anything that can map an IP to the known server entries containing it."""

    def contains(self, ip: IPLike) -> tuple[list[KnownServerEntry], bool]:
        ...


def _split(value: int) -> tuple[int, int]:
    return value >> 64, value & _MASK64


def parse_ip(ip: IPLike) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse an address, returning None for anything unparseable."""
    if ip is None:
        return None
    if isinstance(ip, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        addr = ip
    else:
        try:
            addr = ipaddress.ip_address(str(ip).strip())
        except ValueError:
            return None
    if addr.version == 6 and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    return addr


class _NetworkTable:
    """Registered networks of a single IP version."""

    def __init__(self):
        self.entries: list[KnownServerEntry] = []
        self.prefixlens: list[int] = []
        self._rows: list[tuple[int, int, int, int]] = []
        self.net_hi = np.zeros(0, dtype=np.uint64)
        self.net_lo = np.zeros(0, dtype=np.uint64)
        self.mask_hi = np.zeros(0, dtype=np.uint64)
        self.mask_lo = np.zeros(0, dtype=np.uint64)

    def add(self, entry: KnownServerEntry, network: ipaddress.IPv4Network | ipaddress.IPv6Network) -> None:
        net_hi, net_lo = _split(int(network.network_address))
        mask_hi, mask_lo = _split(int(network.netmask))
        self.entries.append(entry)
        self.prefixlens.append(network.prefixlen)
        self._rows.append((net_hi, net_lo, mask_hi, mask_lo))

    def freeze(self) -> None:
        if not self._rows:
            return
        columns = list(zip(*self._rows))
        self.net_hi = np.array(columns[0], dtype=np.uint64)
        self.net_lo = np.array(columns[1], dtype=np.uint64)
        self.mask_hi = np.array(columns[2], dtype=np.uint64)
        self.mask_lo = np.array(columns[3], dtype=np.uint64)
        self._rows = []

    def match(self, value: int) -> list[KnownServerEntry]:
        if not self.entries:
            return []
        hi, lo = _split(value)
        hits = (
            ((np.uint64(hi) & self.mask_hi) == self.net_hi)
            & ((np.uint64(lo) & self.mask_lo) == self.net_lo)
        )
        indices = [int(i) for i in np.flatnonzero(hits)]
        # Most specific prefix first, registry order breaks ties.
        indices.sort(key=lambda i: (-self.prefixlens[i], i))
        return [self.entries[i] for i in indices]


class KnownServersFinder:
    """Index of known server CIDR blocks."""

    def __init__(self, known_servers: list[KnownServer] | None = None):
        self.known_servers: list[KnownServer] = list(known_servers or [])
        self._tables: dict[int, _NetworkTable] = {4: _NetworkTable(), 6: _NetworkTable()}
        self.skipped: list[KnownServerEntry] = []

        for known_server in self.known_servers:
            for entry in known_server.entries:
                try:
                    network = ipaddress.ip_network(entry.ip_block.strip(), strict=False)
                except (AttributeError, TypeError, ValueError):
                    logger.warning(
                        "skipping known server entry with invalid CIDR %r (server=%s, name=%s)",
                        entry.ip_block, entry.server, entry.name,
                    )
                    self.skipped.append(entry)
                    continue
                self._tables[network.version].add(entry, network)

        for table in self._tables.values():
            table.freeze()

    def __len__(self) -> int:
        return sum(len(t.entries) for t in self._tables.values())

    def contains(self, ip: IPLike) -> tuple[list[KnownServerEntry], bool]:
        """
        Return every registered entry whose block contains `ip`.

        Unparseable addresses are reported as not found.
        """
        addr = parse_ip(ip)
        if addr is None:
            logger.debug("cannot parse IP %r, treating as unknown", ip)
            return [], False
        entries = self._tables[addr.version].match(int(addr))
        return entries, bool(entries)

    def entries(self) -> list[KnownServerEntry]:
        """All indexed entries, IPv4 first."""
        return list(self._tables[4].entries) + list(self._tables[6].entries)

    def summary(self) -> dict[str, Any]:
        return {
            "known_servers": len(self.known_servers),
            "indexed_entries": len(self),
            "ipv4_entries": len(self._tables[4].entries),
            "ipv6_entries": len(self._tables[6].entries),
            "skipped_entries": len(self.skipped),
        }
